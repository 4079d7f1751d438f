"""Typed input records for each lifecycle event.

Plugin hooks hand us loosely-shaped dicts whose field names drifted over
time (`agentType` vs `agent_type`, `criteriaCount` vs `criteria_count`).
Each record accepts every historical spelling through `AliasChoices`, and
`to_payload()` produces the normalized `data` map sent to the server.
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Mapping
from typing import Any, ClassVar, TypeVar

from loguru import logger
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from pai_core.logging_utils import log_event
from pai_core.observability.events import EventType

Number = int | float

_ARGS_PREVIEW_CHARS = 200
_COMMENT_PREVIEW_CHARS = 100
_MAX_REPORTED_WARNINGS = 5


def _compact(payload: dict[str, Any]) -> dict[str, Any]:
    """Drop unset members so they are omitted from the JSON body."""
    return {key: value for key, value in payload.items() if value is not None}


class HookInput(BaseModel):
    """Base record. Subclasses set `event_type` and implement `to_payload`."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    event_type: ClassVar[EventType]

    @field_validator("*", mode="wrap")
    @classmethod
    def _drop_invalid_field(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        # A malformed optional field is dropped; the event itself is still sent.
        try:
            return handler(value)
        except ValidationError:
            logger.debug(
                log_event("observability.input.field_dropped", event_type=cls.event_type, field=info.field_name)
            )
            return None

    def to_payload(self) -> dict[str, Any]:
        raise NotImplementedError


class SessionStartInput(HookInput):
    model_config = ConfigDict(extra="allow")

    event_type: ClassVar[EventType] = "session.start"

    def to_payload(self) -> dict[str, Any]:
        payload = dict(self.model_extra or {})
        payload["working_directory"] = os.getcwd()
        payload["platform"] = sys.platform
        return _compact(payload)


class SessionEndInput(HookInput):
    model_config = ConfigDict(extra="allow")

    event_type: ClassVar[EventType] = "session.end"

    duration_ms: Number | None = None

    def to_payload(self) -> dict[str, Any]:
        return _compact({"duration_ms": self.duration_ms, **(self.model_extra or {})})


class ToolExecuteInput(HookInput):
    event_type: ClassVar[EventType] = "tool.execute"

    tool: str | None = None
    args: Any = None
    duration_ms: Number | None = None
    success: bool | None = None
    result_length: int | None = None

    def _describe_args(self) -> tuple[list[str], str]:
        if self.args is None or self.args == "":
            return [], ""
        if isinstance(self.args, str):
            return ["serialized"], self.args[:_ARGS_PREVIEW_CHARS]
        if isinstance(self.args, Mapping):
            keys = [str(key) for key in self.args]
        elif isinstance(self.args, (list, tuple)):
            keys = [str(index) for index in range(len(self.args))]
        else:
            keys = []
        preview = json.dumps(self.args, default=str, separators=(",", ":"))
        return keys, preview[:_ARGS_PREVIEW_CHARS]

    def to_payload(self) -> dict[str, Any]:
        args_keys, args_preview = self._describe_args()
        return _compact(
            {
                "tool": self.tool,
                "args_keys": args_keys,
                "args_preview": args_preview,
                "duration_ms": self.duration_ms,
                "success": self.success,
                "result_length": self.result_length,
            }
        )


class SecurityBlockInput(HookInput):
    event_type: ClassVar[EventType] = "security.block"

    tool: str | None = None
    reason: str | None = None
    pattern: str | None = None
    args: Any = None

    def to_payload(self) -> dict[str, Any]:
        return _compact({"tool": self.tool, "reason": self.reason, "pattern": self.pattern, "args": self.args})


class SecurityWarnInput(HookInput):
    event_type: ClassVar[EventType] = "security.warn"

    tool: str | None = None
    reason: str | None = None
    args: Any = None

    def to_payload(self) -> dict[str, Any]:
        return _compact({"tool": self.tool, "reason": self.reason, "args": self.args})


class UserMessageInput(HookInput):
    event_type: ClassVar[EventType] = "message.user"

    content: str | None = None
    content_length: int | None = None
    has_rating: bool | None = None
    message_id: str | None = Field(default=None, validation_alias=AliasChoices("messageId", "message_id"))
    source: str | None = None

    def to_payload(self) -> dict[str, Any]:
        length = self.content_length
        if length is None:
            length = len(self.content) if self.content is not None else 0
        return _compact(
            {
                "content_length": length,
                "has_rating": bool(self.has_rating),
                "messageId": self.message_id,
                "source": self.source,
            }
        )


class AssistantMessageInput(HookInput):
    event_type: ClassVar[EventType] = "message.assistant"

    content: str | None = None
    content_length: int | None = None
    has_voice_line: bool | None = None
    has_isc: bool | None = None
    message_id: str | None = Field(default=None, validation_alias=AliasChoices("messageId", "message_id"))

    def to_payload(self) -> dict[str, Any]:
        length = self.content_length
        if length is None:
            length = len(self.content) if self.content is not None else 0
        return _compact(
            {
                "content_length": length,
                "has_voice_line": bool(self.has_voice_line),
                "has_isc": bool(self.has_isc),
                "messageId": self.message_id,
            }
        )


class ExplicitRatingInput(HookInput):
    event_type: ClassVar[EventType] = "rating.explicit"

    score: Number | None = None
    comment: str | None = None
    context: str | None = None
    message_id: str | None = Field(default=None, validation_alias=AliasChoices("messageId", "message_id"))
    source: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return _compact(
            {
                "score": self.score,
                "has_comment": bool(self.comment),
                "comment_preview": self.comment[:_COMMENT_PREVIEW_CHARS] if self.comment is not None else None,
                "context": self.context,
                "messageId": self.message_id,
                "source": self.source,
            }
        )


class ImplicitSentimentInput(HookInput):
    event_type: ClassVar[EventType] = "rating.implicit"

    score: Number | None = None
    sentiment: str | None = None
    confidence: Number | None = None
    indicators: list[str] | None = Field(default=None, validation_alias=AliasChoices("indicators", "triggers"))
    message_id: str | None = Field(default=None, validation_alias=AliasChoices("messageId", "message_id"))

    def to_payload(self) -> dict[str, Any]:
        return _compact(
            {
                "score": self.score,
                "sentiment": self.sentiment,
                "confidence": self.confidence,
                "indicators": list(self.indicators or []),
                "messageId": self.message_id,
            }
        )


class AgentSpawnInput(HookInput):
    event_type: ClassVar[EventType] = "agent.spawn"

    task_id: str | None = Field(default=None, validation_alias=AliasChoices("taskId", "task_id"))
    agent_type: str | None = Field(default=None, validation_alias=AliasChoices("agentType", "agent_type"))
    prompt_length: int | None = None

    def to_payload(self) -> dict[str, Any]:
        return _compact(
            {"task_id": self.task_id, "agent_type": self.agent_type, "prompt_length": self.prompt_length}
        )


class AgentCompleteInput(HookInput):
    event_type: ClassVar[EventType] = "agent.complete"

    task_id: str | None = Field(default=None, validation_alias=AliasChoices("taskId", "task_id"))
    agent_type: str | None = Field(default=None, validation_alias=AliasChoices("agentType", "agent_type"))
    result_length: int | None = None
    duration_ms: Number | None = None
    success: bool | None = None
    output_path: str | None = Field(default=None, validation_alias=AliasChoices("outputPath", "output_path"))
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return _compact(
            {
                "task_id": self.task_id,
                "agent_type": self.agent_type,
                "result_length": self.result_length,
                "duration_ms": self.duration_ms,
                "success": self.success,
                "output_path": self.output_path,
                "error": self.error,
            }
        )


class VoiceSentInput(HookInput):
    event_type: ClassVar[EventType] = "voice.sent"

    text: str | None = None
    message_length: int | None = None
    voice_id: str | None = None
    success: bool | None = None

    def to_payload(self) -> dict[str, Any]:
        length = self.message_length
        if length is None:
            length = len(self.text) if self.text is not None else 0
        return _compact({"message_length": length, "voice_id": self.voice_id, "success": self.success})


class LearningCapturedInput(HookInput):
    event_type: ClassVar[EventType] = "learning.captured"

    category: str | None = None
    filepath: str | None = None
    count: int | None = None
    learnings: list[str] | None = None

    def to_payload(self) -> dict[str, Any]:
        return _compact(
            {"category": self.category, "filepath": self.filepath, "count": self.count, "learnings": self.learnings}
        )


class ISCValidatedInput(HookInput):
    event_type: ClassVar[EventType] = "isc.validated"

    valid: bool | None = None
    all_passed: bool | None = None
    criteria_count: int | None = Field(default=None, validation_alias=AliasChoices("criteriaCount", "criteria_count"))
    warnings: list[str] | None = Field(default=None, validation_alias=AliasChoices("issues", "warnings"))
    message_id: str | None = Field(default=None, validation_alias=AliasChoices("messageId", "message_id"))

    def to_payload(self) -> dict[str, Any]:
        warnings = list(self.warnings or [])
        if self.all_passed is not None:
            all_passed = self.all_passed
        elif self.valid is not None:
            all_passed = self.valid
        else:
            all_passed = True
        return _compact(
            {
                "criteria_count": self.criteria_count or 0,
                "all_passed": all_passed,
                "warning_count": len(warnings),
                "warnings": warnings[:_MAX_REPORTED_WARNINGS],
                "messageId": self.message_id,
            }
        )


class ContextLoadedInput(HookInput):
    event_type: ClassVar[EventType] = "context.loaded"

    files_loaded: int | None = None
    total_size: int | None = Field(default=None, validation_alias=AliasChoices("total_size", "contextLength"))
    success: bool | None = None
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return _compact(
            {
                "files_loaded": self.files_loaded,
                "total_size": self.total_size,
                "success": self.success,
                "error": self.error,
            }
        )


HOOK_INPUTS: dict[str, type[HookInput]] = {
    record.event_type: record
    for record in (
        SessionStartInput,
        SessionEndInput,
        ToolExecuteInput,
        SecurityBlockInput,
        SecurityWarnInput,
        UserMessageInput,
        AssistantMessageInput,
        ExplicitRatingInput,
        ImplicitSentimentInput,
        AgentSpawnInput,
        AgentCompleteInput,
        VoiceSentInput,
        LearningCapturedInput,
        ISCValidatedInput,
        ContextLoadedInput,
    )
}

InputT = TypeVar("InputT", bound=HookInput)


def coerce_input(record_cls: type[InputT], raw: InputT | Mapping[str, Any] | None) -> InputT | None:
    """
    Adapt whatever a hook passed into a strict record.

    Returns None (after a debug log line) when the input cannot be read as
    `record_cls`; callers drop the event instead of raising into the host.
    """
    if isinstance(raw, record_cls):
        return raw
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        logger.debug(
            log_event("observability.input.rejected", event_type=record_cls.event_type, reason=type(raw).__name__)
        )
        return None
    try:
        return record_cls.model_validate(dict(raw))
    except ValidationError as exc:
        logger.debug(
            log_event("observability.input.rejected", event_type=record_cls.event_type, errors=exc.error_count())
        )
        return None
