"""Fire-and-forget lifecycle telemetry for the local observability server."""

from pai_core.observability.emitter import DeliveryPolicy, ObservabilityEmitter
from pai_core.observability.events import EVENT_TYPES, EventType, ObservabilityEvent
from pai_core.observability.inputs import HOOK_INPUTS, HookInput, coerce_input
from pai_core.observability.session import SessionScope, generate_session_id

__all__ = [
    "DeliveryPolicy",
    "ObservabilityEmitter",
    "EVENT_TYPES",
    "EventType",
    "ObservabilityEvent",
    "HOOK_INPUTS",
    "HookInput",
    "coerce_input",
    "SessionScope",
    "generate_session_id",
]
