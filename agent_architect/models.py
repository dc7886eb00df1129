"""Shared Pydantic data models for the Agent Architect pipeline."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class SubmissionKind(str, Enum):
    CONTACT = "contact"
    LEAD = "lead"
    INTAKE = "intake"
    CHAT_MESSAGE = "chat_message"


class ErrorCode(str, Enum):
    """Closed set of machine-readable error codes returned to clients."""

    INVALID_INPUT = "INVALID_INPUT"
    POTENTIAL_SPAM = "POTENTIAL_SPAM"
    RATE_LIMITED = "RATE_LIMITED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    SERVER_ERROR = "SERVER_ERROR"


class AuditEventType(str, Enum):
    REQUEST_RECEIVED = "request_received"
    OUTCOME_DETERMINED = "outcome_determined"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


# --- Provenance Models ---


class UTM(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str | None = None
    medium: str | None = None
    campaign: str | None = None
    term: str | None = None
    content: str | None = None


class ProvenanceMeta(BaseModel):
    """Request metadata sent alongside, never inside, the user payload."""

    model_config = ConfigDict(frozen=True)

    ip: str
    user_agent: str
    timestamp: str  # ISO8601
    page: str | None = None
    utm: UTM | None = None


# --- Abuse Guard Models ---


class SpamCheckInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_spam: bool
    reason: str | None = None


class RateLimitInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed: bool
    retry_in_ms: int | None = Field(default=None, ge=1)


# --- Response Models ---


class ApiResponse(BaseModel):
    """External response schema. Keys left as None are omitted on the wire."""

    ok: bool
    id: str | None = None
    message: str | None = None
    error: ErrorCode | None = None
    fields: dict[str, str] | None = None
    retry_in_ms: int | None = None
    session_id: str | None = None
    session: dict[str, Any] | None = None
    reply: str | None = None
    blocks: dict[str, Any] | None = None
    messages: list[dict[str, Any]] | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    kind: SubmissionKind
    source: str | None = None  # hashed client IP
    result: str  # "received" | "success" | error code value
    details: dict[str, object] | None = None
