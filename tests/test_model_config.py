"""Tests for provider presets and opencode.json overrides."""

import json
from pathlib import Path

import pytest
from loguru import logger

from pai_core.models.model_config import (
    DEFAULT_PROVIDER,
    PROVIDER_PRESETS,
    get_agent_models,
    get_provider,
    get_provider_preset,
    read_opencode_config,
    requires_api_key,
    resolve_model,
    resolve_model_config,
)


@pytest.fixture
def warnings_log():
    messages: list[str] = []
    handler_id = logger.add(messages.append, level="WARNING", format="{message}")
    yield messages
    logger.remove(handler_id)


def _write_config(tmp_path: Path, pai: object) -> Path:
    path = tmp_path / "opencode.json"
    path.write_text(json.dumps({"$schema": "https://opencode.ai/config.json", "pai": pai}), encoding="utf-8")
    return path


def test_missing_file_uses_default_preset(tmp_path: Path) -> None:
    config = resolve_model_config(tmp_path / "opencode.json")

    assert config.provider == DEFAULT_PROVIDER
    assert config.models == PROVIDER_PRESETS[DEFAULT_PROVIDER]


def test_invalid_json_is_treated_as_absent(tmp_path: Path, warnings_log: list[str]) -> None:
    path = tmp_path / "opencode.json"
    path.write_text("{broken", encoding="utf-8")

    assert read_opencode_config(path) is None
    assert resolve_model_config(path).provider == DEFAULT_PROVIDER
    assert any("model_config.file.invalid" in m for m in warnings_log)


def test_anthropic_preset_without_overrides(tmp_path: Path) -> None:
    path = _write_config(tmp_path, {"model_provider": "anthropic"})

    config = resolve_model_config(path)

    assert config.provider == "anthropic"
    assert config.models.agents.reviewer == "anthropic/claude-opus-4-5"
    assert config.models.agents.intern == "anthropic/claude-haiku-4-5"
    assert config.models == PROVIDER_PRESETS["anthropic"]


def test_single_override_keeps_rest_of_preset(tmp_path: Path) -> None:
    path = _write_config(tmp_path, {"model_provider": "openai", "models": {"default": "openai/o3"}})

    models = resolve_model_config(path).models
    preset = PROVIDER_PRESETS["openai"]

    assert models.default == "openai/o3"
    assert models.validation == preset.validation
    assert models.agents == preset.agents


def test_empty_and_non_string_overrides_take_preset(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        {
            "model_provider": "anthropic",
            "models": {"validation": "", "agents": {"engineer": "anthropic/claude-opus-4-5", "intern": 5}},
        },
    )

    models = resolve_model_config(path).models

    assert models.validation == "anthropic/claude-sonnet-4-5"
    assert models.agents.engineer == "anthropic/claude-opus-4-5"
    assert models.agents.intern == "anthropic/claude-haiku-4-5"


def test_unknown_provider_falls_back_entirely(tmp_path: Path, warnings_log: list[str]) -> None:
    path = _write_config(tmp_path, {"model_provider": "mistral", "models": {"default": "mistral/large"}})

    config = resolve_model_config(path)

    assert config.provider == DEFAULT_PROVIDER
    assert config.models == PROVIDER_PRESETS[DEFAULT_PROVIDER]
    assert any("model_config.provider.invalid" in m for m in warnings_log)


def test_resolve_model_by_purpose(tmp_path: Path) -> None:
    path = _write_config(tmp_path, {"model_provider": "openai"})

    assert resolve_model("default", path) == "openai/gpt-4o"
    assert resolve_model("agents.intern", path) == "openai/gpt-4o-mini"
    assert resolve_model("agents.engineer", path) == "openai/gpt-4o"


def test_unknown_purpose_falls_back_to_default(tmp_path: Path, warnings_log: list[str]) -> None:
    path = _write_config(tmp_path, {"model_provider": "anthropic", "models": {"default": "anthropic/custom"}})

    assert resolve_model("summarizer", path) == "anthropic/custom"
    assert resolve_model("agents.janitor", path) == "anthropic/custom"
    assert sum("model_config.purpose.unknown" in m for m in warnings_log) == 2


def test_provider_queries(tmp_path: Path) -> None:
    anthropic = _write_config(tmp_path, {"model_provider": "anthropic"})
    missing = tmp_path / "absent.json"

    assert get_provider(anthropic) == "anthropic"
    assert requires_api_key(anthropic) is True
    assert get_provider(missing) == "sen"
    assert requires_api_key(missing) is False
    assert get_agent_models(anthropic)["reviewer"] == "anthropic/claude-opus-4-5"


def test_preset_copies_are_independent() -> None:
    preset = get_provider_preset("sen")

    assert preset == PROVIDER_PRESETS["sen"]
    assert preset is not PROVIDER_PRESETS["sen"]


def test_default_location_is_parent_of_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_config(tmp_path, {"model_provider": "openai"})
    opencode_dir = tmp_path / ".opencode"
    opencode_dir.mkdir()
    monkeypatch.chdir(opencode_dir)
    monkeypatch.delenv("PAI_OPENCODE_CONFIG", raising=False)

    assert get_provider() == "openai"


def test_environment_override_for_config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _write_config(tmp_path, {"model_provider": "anthropic"})
    monkeypatch.setenv("PAI_OPENCODE_CONFIG", str(path))

    assert resolve_model("agents.reviewer") == "anthropic/claude-opus-4-5"


def test_undecodable_bytes_do_not_raise(tmp_path: Path, warnings_log: list[str]) -> None:
    path = tmp_path / "opencode.json"

    path.write_bytes(b"\xff\xfe{broken")
    assert read_opencode_config(path) is None
    assert any("model_config.file.invalid" in m for m in warnings_log)

    path.write_bytes(b'{"pai": "\xff\xfe"}')
    assert resolve_model_config(path).provider == DEFAULT_PROVIDER

    path.write_bytes(b'{"note": "caf\xe9", "pai": {"model_provider": "anthropic"}}')
    assert get_provider(path) == "anthropic"


def test_bad_environment_still_finds_default_location(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, warnings_log: list[str]
) -> None:
    _write_config(tmp_path, {"model_provider": "openai"})
    opencode_dir = tmp_path / ".opencode"
    opencode_dir.mkdir()
    monkeypatch.chdir(opencode_dir)
    monkeypatch.delenv("PAI_OPENCODE_CONFIG", raising=False)
    monkeypatch.setenv("PAI_OBSERVABILITY_TIMEOUT_MS", "soon")

    assert get_provider() == "openai"
    assert any("config.invalid" in m for m in warnings_log)
