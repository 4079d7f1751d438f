"""Tests for legacy installation detection."""

import json
from pathlib import Path

from pai_core.migration.detection import detect_source


def _make_install(root: Path) -> Path:
    (root / "hooks").mkdir(parents=True)
    for name in ("load-context.ts", "capture-session.js", "README.md"):
        (root / "hooks" / name).write_text("", encoding="utf-8")

    for skill in ("CORE", "Research", "MyCustomSkill"):
        (root / "skills" / skill).mkdir(parents=True)
    (root / "skills" / "notes.txt").write_text("", encoding="utf-8")

    (root / "agents").mkdir()
    (root / "agents" / "Engineer.md").write_text("# Engineer", encoding="utf-8")
    (root / "agents" / "draft.txt").write_text("", encoding="utf-8")
    return root


def test_detects_hooks_skills_and_agents(tmp_path: Path) -> None:
    root = _make_install(tmp_path / "claude")

    detection = detect_source(root)

    assert detection.path == str(root)
    assert detection.type == "pai-claudecode"
    assert detection.detected.hooks == ["capture-session.js", "load-context.ts"]
    assert detection.detected.skills == ["CORE", "MyCustomSkill", "Research"]
    assert detection.detected.agents == ["Engineer.md"]


def test_flags_custom_skills(tmp_path: Path) -> None:
    (tmp_path / "skills" / "CORE").mkdir(parents=True)
    (tmp_path / "skills" / "MyCustomSkill").mkdir(parents=True)

    detection = detect_source(tmp_path)

    assert detection.detected.customizations.custom_skills == ["MyCustomSkill"]


def test_reads_settings_customizations(tmp_path: Path) -> None:
    settings = {
        "DA": "Kai",
        "claudePermissions": {"allow": ["Bash"]},
        "mcpServers": {"github": {}, "browser": {}},
    }
    (tmp_path / "settings.json").write_text(json.dumps(settings), encoding="utf-8")

    customizations = detect_source(tmp_path).detected.customizations

    assert customizations.daidentity is True
    assert customizations.permissions is True
    assert customizations.mcp_servers == 2


def test_engineer_name_marks_identity(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text(json.dumps({"ENGINEER_NAME": "Sam", "mcpServers": []}), encoding="utf-8")

    customizations = detect_source(tmp_path).detected.customizations

    assert customizations.daidentity is True
    assert customizations.permissions is False
    assert customizations.mcp_servers == 0


def test_unparseable_settings_are_ignored(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text("{nope", encoding="utf-8")

    customizations = detect_source(tmp_path).detected.customizations

    assert customizations.daidentity is False
    assert customizations.mcp_servers == 0


def test_mcp_servers_list_is_counted(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text(json.dumps({"mcpServers": ["github", "browser"]}), encoding="utf-8")

    assert detect_source(tmp_path).detected.customizations.mcp_servers == 2


def test_undecodable_settings_bytes_do_not_raise(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_bytes(b'{"DA": "K\xffi", "mcpServers": {"github": {}}}')

    customizations = detect_source(tmp_path).detected.customizations

    assert customizations.daidentity is True
    assert customizations.mcp_servers == 1


def test_telos_classification(tmp_path: Path) -> None:
    telos = tmp_path / "TELOS.md"

    telos.write_text("# Mission\n[Your mission here]\n", encoding="utf-8")
    assert detect_source(tmp_path).detected.customizations.telos_customized is False

    telos.write_text("# Mission\nShip the migration tooling by March.\n", encoding="utf-8")
    assert detect_source(tmp_path).detected.customizations.telos_customized is True


def test_missing_source_yields_empty_detection(tmp_path: Path) -> None:
    detection = detect_source(tmp_path / "does-not-exist")

    assert detection.detected.hooks == []
    assert detection.detected.skills == []
    assert detection.detected.agents == []
    assert detection.detected.customizations.telos_customized is False


def test_detection_does_not_modify_source(tmp_path: Path) -> None:
    root = _make_install(tmp_path / "claude")
    before = sorted(p.relative_to(root) for p in root.rglob("*"))

    detect_source(root)

    assert sorted(p.relative_to(root) for p in root.rglob("*")) == before
