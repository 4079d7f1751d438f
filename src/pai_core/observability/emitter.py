from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx
from loguru import logger

from pai_core.config import Settings, load_settings
from pai_core.logging_utils import log_event
from pai_core.observability.events import EventType, ObservabilityEvent
from pai_core.observability.inputs import (
    AgentCompleteInput,
    AgentSpawnInput,
    AssistantMessageInput,
    ContextLoadedInput,
    ExplicitRatingInput,
    HookInput,
    ImplicitSentimentInput,
    ISCValidatedInput,
    LearningCapturedInput,
    SecurityBlockInput,
    SecurityWarnInput,
    SessionEndInput,
    SessionStartInput,
    ToolExecuteInput,
    UserMessageInput,
    VoiceSentInput,
    coerce_input,
)
from pai_core.observability.session import SessionScope

T = TypeVar("T")
RawInput = HookInput | Mapping[str, Any] | None


@dataclass(frozen=True)
class DeliveryPolicy:
    """Hard deadline for one delivery attempt. Expiry is the only cancellation path."""

    timeout_seconds: float = 1.0

    async def run(self, operation: Awaitable[T]) -> T:
        return await asyncio.wait_for(operation, timeout=self.timeout_seconds)


class ObservabilityEmitter:
    """
    Fire-and-forget sender of lifecycle events to the local observability server.

    `emit` performs a single POST bounded by the delivery policy and swallows
    every failure; the server being down is the normal case, not an error.
    """

    def __init__(
        self,
        url: str,
        *,
        enabled: bool = True,
        policy: DeliveryPolicy | None = None,
        session: SessionScope | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._enabled = enabled
        self._policy = policy or DeliveryPolicy()
        self._session = session or SessionScope()
        self._transport = transport
        self._pending: set[asyncio.Task[None]] = set()

    @classmethod
    def from_settings(
        cls,
        config: Settings | None = None,
        *,
        session: SessionScope | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ObservabilityEmitter":
        config = config or load_settings()
        return cls(
            config.observability_url,
            enabled=config.observability_enabled,
            policy=DeliveryPolicy(timeout_seconds=config.observability_timeout_seconds),
            session=session,
            transport=transport,
        )

    @property
    def url(self) -> str:
        return self._url

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def policy(self) -> DeliveryPolicy:
        return self._policy

    @property
    def session(self) -> SessionScope:
        return self._session

    async def emit(self, event_type: EventType, data: Mapping[str, Any] | None = None) -> None:
        if not self._enabled:
            return

        try:
            event = ObservabilityEvent(
                session_id=self._session.session_id,
                event_type=event_type,
                data=dict(data or {}),
            )
            await self._policy.run(self._post(event))
        except Exception as exc:  # noqa: BLE001
            logger.debug(
                log_event(
                    "observability.emit.failed",
                    event_type=event_type,
                    error=f"{type(exc).__name__}: {exc}",
                )
            )
            return

        logger.debug(log_event("observability.emit.sent", event_type=event_type, url=self._url))

    async def _post(self, event: ObservabilityEvent) -> None:
        timeout = httpx.Timeout(self._policy.timeout_seconds)
        # Local server only; ignore proxy settings from the environment.
        async with httpx.AsyncClient(timeout=timeout, trust_env=False, transport=self._transport) as client:
            response = await client.post(
                self._url,
                content=event.to_json(),
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()

    def dispatch(self, event_type: EventType, data: Mapping[str, Any] | None = None) -> asyncio.Task[None] | None:
        """
        Schedule `emit` without waiting for it.

        Inside a running loop the task is returned and its result is meant to
        be ignored. Without a loop the emission runs to completion here, which
        is still bounded by the delivery policy.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.emit(event_type, data))
            return None

        task = loop.create_task(self.emit(event_type, data))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every dispatched emission still in flight."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    async def emit_input(self, record_cls: type[HookInput], raw: RawInput) -> None:
        record = coerce_input(record_cls, raw)
        if record is None:
            return
        await self.emit(record.event_type, record.to_payload())

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    async def emit_session_start(self, metadata: RawInput = None) -> None:
        if not self._session.is_active:
            self._session.start()
        await self.emit_input(SessionStartInput, metadata)

    async def emit_session_end(self, data: RawInput = None) -> None:
        try:
            await self.emit_input(SessionEndInput, data)
        finally:
            self._session.reset()

    async def emit_tool_execute(self, data: RawInput) -> None:
        await self.emit_input(ToolExecuteInput, data)

    async def emit_security_block(self, data: RawInput) -> None:
        await self.emit_input(SecurityBlockInput, data)

    async def emit_security_warn(self, data: RawInput) -> None:
        await self.emit_input(SecurityWarnInput, data)

    async def emit_user_message(self, data: RawInput) -> None:
        await self.emit_input(UserMessageInput, data)

    async def emit_assistant_message(self, data: RawInput) -> None:
        await self.emit_input(AssistantMessageInput, data)

    async def emit_explicit_rating(self, data: RawInput) -> None:
        await self.emit_input(ExplicitRatingInput, data)

    async def emit_implicit_sentiment(self, data: RawInput) -> None:
        await self.emit_input(ImplicitSentimentInput, data)

    async def emit_agent_spawn(self, data: RawInput) -> None:
        await self.emit_input(AgentSpawnInput, data)

    async def emit_agent_complete(self, data: RawInput) -> None:
        await self.emit_input(AgentCompleteInput, data)

    async def emit_voice_sent(self, data: RawInput) -> None:
        await self.emit_input(VoiceSentInput, data)

    async def emit_learning_captured(self, data: RawInput) -> None:
        await self.emit_input(LearningCapturedInput, data)

    async def emit_isc_validated(self, data: RawInput) -> None:
        await self.emit_input(ISCValidatedInput, data)

    async def emit_context_loaded(self, data: RawInput) -> None:
        await self.emit_input(ContextLoadedInput, data)
