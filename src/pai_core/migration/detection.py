from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from pai_core.logging_utils import log_event
from pai_core.migration.schema import SourceDetection

STANDARD_SKILLS: frozenset[str] = frozenset(
    {
        "CORE",
        "Agents",
        "Browser",
        "Art",
        "Research",
        "Security",
        "THEALGORITHM",
        "SpecFirst",
        "System",
        "FirstPrinciples",
        "Council",
        "RedTeam",
        "BeCreative",
        "Fabric",
        "pdf",
    }
)
HOOK_SUFFIXES = (".ts", ".js")
TELOS_PLACEHOLDERS = ("[Your", "TODO", "PLACEHOLDER")


def _list_names(directory: Path, *, suffixes: tuple[str, ...] = (), dirs_only: bool = False) -> list[str]:
    if not directory.is_dir():
        return []
    names = []
    for entry in directory.iterdir():
        if dirs_only and not entry.is_dir():
            continue
        if suffixes and not entry.name.endswith(suffixes):
            continue
        names.append(entry.name)
    return sorted(names)


def _read_settings(settings_path: Path) -> dict[str, Any] | None:
    try:
        with open(settings_path, "r", encoding="utf-8", errors="replace") as f:
            content = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning(
            log_event("migration.settings.unreadable", path=str(settings_path), error=f"{type(exc).__name__}: {exc}")
        )
        return None
    return content if isinstance(content, dict) else None


def detect_source(source_path: str | Path) -> SourceDetection:
    """
    Inspect a legacy installation root without modifying it.

    Looks at `hooks/`, `skills/`, `agents/`, `settings.json` and `TELOS.md`;
    anything missing simply leaves the corresponding defaults in place.
    """
    root = Path(source_path)
    detection = SourceDetection(path=str(source_path))
    detected = detection.detected
    customizations = detected.customizations

    detected.hooks = _list_names(root / "hooks", suffixes=HOOK_SUFFIXES)

    detected.skills = _list_names(root / "skills", dirs_only=True)
    customizations.custom_skills = [skill for skill in detected.skills if skill not in STANDARD_SKILLS]

    detected.agents = _list_names(root / "agents", suffixes=(".md",))

    settings_path = root / "settings.json"
    if settings_path.is_file():
        settings = _read_settings(settings_path)
        if settings is not None:
            if settings.get("DA") or settings.get("ENGINEER_NAME"):
                customizations.daidentity = True
            if settings.get("claudePermissions"):
                customizations.permissions = True
            servers = settings.get("mcpServers")
            if servers:
                customizations.mcp_servers = len(servers) if isinstance(servers, (dict, list)) else 0

    telos_path = root / "TELOS.md"
    if telos_path.is_file():
        telos = telos_path.read_text(encoding="utf-8", errors="replace")
        customizations.telos_customized = not any(marker in telos for marker in TELOS_PLACEHOLDERS)

    logger.debug(
        log_event(
            "migration.source.detected",
            path=str(source_path),
            hooks=len(detected.hooks),
            skills=len(detected.skills),
            agents=len(detected.agents),
        )
    )
    return detection
