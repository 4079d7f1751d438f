"""Model selection: provider presets overlaid with `pai.models` from opencode.json."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal, get_args

from loguru import logger
from pydantic import BaseModel, ConfigDict

from pai_core.config import load_settings
from pai_core.logging_utils import log_event

Provider = Literal["sen", "anthropic", "openai"]
ModelPurpose = Literal[
    "default",
    "validation",
    "agents.intern",
    "agents.architect",
    "agents.engineer",
    "agents.explorer",
    "agents.reviewer",
]

PROVIDERS: tuple[str, ...] = get_args(Provider)
DEFAULT_PROVIDER: Provider = "sen"
AGENT_ROLES: tuple[str, ...] = ("intern", "architect", "engineer", "explorer", "reviewer")


class AgentModels(BaseModel):
    model_config = ConfigDict(frozen=True)

    intern: str
    architect: str
    engineer: str
    explorer: str
    reviewer: str


class ModelTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    default: str
    validation: str
    agents: AgentModels


class PaiModelConfig(BaseModel):
    """Effective model selection. Rebuilt on every query, never cached."""

    model_config = ConfigDict(frozen=True)

    provider: Provider
    models: ModelTable


def _uniform(model: str, **agents: str) -> ModelTable:
    roles = {role: agents.get(role, model) for role in AGENT_ROLES}
    return ModelTable(default=model, validation=model, agents=AgentModels(**roles))


PROVIDER_PRESETS: dict[str, ModelTable] = {
    "sen": _uniform("sen/grok-1"),
    "anthropic": _uniform(
        "anthropic/claude-sonnet-4-5",
        intern="anthropic/claude-haiku-4-5",
        reviewer="anthropic/claude-opus-4-5",
    ),
    "openai": _uniform("openai/gpt-4o", intern="openai/gpt-4o-mini"),
}


def get_provider_preset(provider: Provider) -> ModelTable:
    return PROVIDER_PRESETS[provider].model_copy(deep=True)


def _config_path(config_path: str | Path | None) -> Path:
    if config_path is not None:
        return Path(config_path)
    return load_settings().opencode_config_path


def read_opencode_config(config_path: str | Path | None = None) -> dict[str, Any] | None:
    """Return the parsed opencode.json, or None if it is missing or unusable."""
    path = _config_path(config_path)
    if not path.exists():
        logger.debug(log_event("model_config.file.missing", path=str(path)))
        return None

    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            content = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning(log_event("model_config.file.invalid", path=str(path), error=f"{type(exc).__name__}: {exc}"))
        return None

    if not isinstance(content, dict):
        logger.warning(log_event("model_config.file.invalid", path=str(path), error="top level is not an object"))
        return None

    logger.debug(log_event("model_config.file.loaded", path=str(path)))
    return content


def _pick(override: Any, preset: str) -> str:
    if isinstance(override, str) and override:
        return override
    return preset


def _overlay(preset: ModelTable, custom: Any) -> ModelTable:
    custom = custom if isinstance(custom, dict) else {}
    custom_agents = custom.get("agents")
    custom_agents = custom_agents if isinstance(custom_agents, dict) else {}
    return ModelTable(
        default=_pick(custom.get("default"), preset.default),
        validation=_pick(custom.get("validation"), preset.validation),
        agents=AgentModels(
            **{role: _pick(custom_agents.get(role), getattr(preset.agents, role)) for role in AGENT_ROLES}
        ),
    )


def _default_config() -> PaiModelConfig:
    return PaiModelConfig(provider=DEFAULT_PROVIDER, models=get_provider_preset(DEFAULT_PROVIDER))


def resolve_model_config(config_path: str | Path | None = None) -> PaiModelConfig:
    config = read_opencode_config(config_path)
    pai_config = config.get("pai") if config else None
    if not isinstance(pai_config, dict) or not pai_config.get("model_provider"):
        logger.info(log_event("model_config.defaults", provider=DEFAULT_PROVIDER))
        return _default_config()

    provider = pai_config["model_provider"]
    if provider not in PROVIDERS:
        logger.warning(log_event("model_config.provider.invalid", provider=provider, fallback=DEFAULT_PROVIDER))
        return _default_config()

    models = _overlay(PROVIDER_PRESETS[provider], pai_config.get("models"))
    logger.info(log_event("model_config.resolved", provider=provider, models=models.model_dump_json()))
    return PaiModelConfig(provider=provider, models=models)


def resolve_model(purpose: ModelPurpose | str, config_path: str | Path | None = None) -> str:
    """Look up one model by dotted purpose, e.g. `agents.engineer`."""
    models = resolve_model_config(config_path).models

    if purpose in ("default", "validation"):
        return getattr(models, purpose)

    section, _, role = purpose.partition(".")
    if section == "agents" and role in AGENT_ROLES:
        return getattr(models.agents, role)

    logger.warning(log_event("model_config.purpose.unknown", purpose=purpose, fallback="default"))
    return models.default


def get_agent_models(config_path: str | Path | None = None) -> dict[str, str]:
    return resolve_model_config(config_path).models.agents.model_dump()


def requires_api_key(config_path: str | Path | None = None) -> bool:
    """Every provider except the local default needs an external credential."""
    return resolve_model_config(config_path).provider != DEFAULT_PROVIDER


def get_provider(config_path: str | Path | None = None) -> Provider:
    return resolve_model_config(config_path).provider
