"""Provider presets and user overrides for model selection."""

from pai_core.models.model_config import (
    AGENT_ROLES,
    DEFAULT_PROVIDER,
    PROVIDER_PRESETS,
    PROVIDERS,
    AgentModels,
    ModelPurpose,
    ModelTable,
    PaiModelConfig,
    Provider,
    get_agent_models,
    get_provider,
    get_provider_preset,
    read_opencode_config,
    requires_api_key,
    resolve_model,
    resolve_model_config,
)

__all__ = [
    "AGENT_ROLES",
    "DEFAULT_PROVIDER",
    "PROVIDER_PRESETS",
    "PROVIDERS",
    "AgentModels",
    "ModelPurpose",
    "ModelTable",
    "PaiModelConfig",
    "Provider",
    "get_agent_models",
    "get_provider",
    "get_provider_preset",
    "read_opencode_config",
    "requires_api_key",
    "resolve_model",
    "resolve_model_config",
]
