"""Response shaping: internal outcomes to the fixed external schema."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from agent_architect.models import ApiResponse, ErrorCode, SubmissionKind

SUCCESS_MESSAGES: dict[SubmissionKind, str] = {
    SubmissionKind.CONTACT: "Your message has been received.",
    SubmissionKind.LEAD: "Your request has been received.",
    SubmissionKind.INTAKE: "Session created.",
    SubmissionKind.CHAT_MESSAGE: "Reply received.",
}

# --- Outcomes ---


@dataclass(frozen=True)
class ValidationFailed:
    fields: dict[str, str]


@dataclass(frozen=True)
class MalformedRequest:
    detail: str


@dataclass(frozen=True)
class SpamDetected:
    reason: str | None = None


@dataclass(frozen=True)
class RateLimited:
    retry_in_ms: int


@dataclass(frozen=True)
class UpstreamFailed:
    detail: str | None = None
    status_code: int | None = None


@dataclass(frozen=True)
class ServerFault:
    detail: str | None = None


@dataclass(frozen=True)
class Relayed:
    """Successful relay, already checked against the session contract."""

    kind: SubmissionKind
    upstream_id: str | None = None
    session: dict[str, Any] | None = None
    reply: str | None = None
    blocks: dict[str, Any] | None = None
    messages: list[dict[str, Any]] = field(default_factory=list)


Outcome = (
    ValidationFailed
    | MalformedRequest
    | SpamDetected
    | RateLimited
    | UpstreamFailed
    | ServerFault
    | Relayed
)


@dataclass(frozen=True)
class ShapedResponse:
    status_code: int
    body: dict[str, Any]

    @property
    def error(self) -> str | None:
        return self.body.get("error")


def generate_id() -> str:
    return uuid.uuid4().hex


def _error(status_code: int, code: ErrorCode, **extra: Any) -> ShapedResponse:
    return ShapedResponse(status_code, ApiResponse(ok=False, error=code, **extra).to_wire())


def _success(outcome: Relayed) -> ShapedResponse:
    message = SUCCESS_MESSAGES[outcome.kind]
    if outcome.kind in (SubmissionKind.CONTACT, SubmissionKind.LEAD):
        response = ApiResponse(ok=True, id=outcome.upstream_id or generate_id(), message=message)
    elif outcome.session is None:
        raise ValueError(f"{outcome.kind.value} success requires an upstream session")
    elif outcome.kind is SubmissionKind.INTAKE:
        response = ApiResponse(
            ok=True,
            message=message,
            session_id=outcome.session["id"],
            session=outcome.session,
            blocks=outcome.blocks,
        )
    else:
        response = ApiResponse(
            ok=True,
            reply=outcome.reply,
            blocks=outcome.blocks,
            session_id=outcome.session["id"],
            session=outcome.session,
            messages=outcome.messages,
        )
    return ShapedResponse(200, response.to_wire())


def shape(outcome: Outcome) -> ShapedResponse:
    """Map an outcome onto a status code and ``ApiResponse`` body."""
    if isinstance(outcome, ValidationFailed):
        return _error(400, ErrorCode.INVALID_INPUT, fields=dict(outcome.fields))
    if isinstance(outcome, MalformedRequest):
        return _error(415, ErrorCode.INVALID_INPUT)
    if isinstance(outcome, SpamDetected):
        return _error(422, ErrorCode.POTENTIAL_SPAM)
    if isinstance(outcome, RateLimited):
        return _error(429, ErrorCode.RATE_LIMITED, retry_in_ms=max(1, outcome.retry_in_ms))
    if isinstance(outcome, UpstreamFailed):
        return _error(502, ErrorCode.UPSTREAM_UNAVAILABLE)
    if isinstance(outcome, ServerFault):
        return _error(500, ErrorCode.SERVER_ERROR)
    if isinstance(outcome, Relayed):
        return _success(outcome)
    raise TypeError(f"unknown outcome: {outcome!r}")
