"""Tests for shared data models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from agent_architect.models import (
    ApiResponse,
    AuditEvent,
    AuditEventType,
    ErrorCode,
    RateLimitInfo,
    SubmissionKind,
)


def test_error_codes_are_closed() -> None:
    assert {code.value for code in ErrorCode} == {
        "INVALID_INPUT",
        "POTENTIAL_SPAM",
        "RATE_LIMITED",
        "UPSTREAM_UNAVAILABLE",
        "SERVER_ERROR",
    }


def test_api_response_omits_unset_keys() -> None:
    wire = ApiResponse(ok=False, error=ErrorCode.RATE_LIMITED, retry_in_ms=10).to_wire()
    assert wire == {"ok": False, "error": "RATE_LIMITED", "retry_in_ms": 10}


def test_api_response_rejects_unknown_error_code() -> None:
    with pytest.raises(ValidationError):
        ApiResponse(ok=False, error="TEAPOT")  # type: ignore[arg-type]


def test_rate_limit_retry_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        RateLimitInfo(allowed=False, retry_in_ms=0)


def test_audit_event_defaults_timestamp() -> None:
    event = AuditEvent(
        event_type=AuditEventType.REQUEST_RECEIVED,
        kind=SubmissionKind.INTAKE,
        result="received",
    )
    assert event.timestamp.endswith("+00:00")
