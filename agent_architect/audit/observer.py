"""Observation points for analytics collaborators.

The pipeline calls ``request_received`` once per request and
``outcome_determined`` once the response is shaped. Implementations must
not depend on request bodies beyond what is passed here.
"""

from __future__ import annotations

from typing import Protocol

from agent_architect.audit.logger import AuditLogger
from agent_architect.models import AuditEvent, AuditEventType, SubmissionKind
from agent_architect.provenance import RequestContext, hash_ip
from agent_architect.shaper import ShapedResponse


class PipelineObserver(Protocol):
    def request_received(self, kind: SubmissionKind, context: RequestContext) -> None: ...

    def outcome_determined(
        self,
        kind: SubmissionKind,
        context: RequestContext,
        response: ShapedResponse,
        duration_ms: int,
    ) -> None: ...


class NullObserver:
    def request_received(self, kind: SubmissionKind, context: RequestContext) -> None:
        return None

    def outcome_determined(
        self,
        kind: SubmissionKind,
        context: RequestContext,
        response: ShapedResponse,
        duration_ms: int,
    ) -> None:
        return None


class AuditObserver:
    """Records both observation points in the audit log."""

    def __init__(self, audit_logger: AuditLogger) -> None:
        self._audit = audit_logger

    def request_received(self, kind: SubmissionKind, context: RequestContext) -> None:
        details: dict[str, object] = {}
        if context.page:
            details["page"] = context.page
        if context.utm and context.utm.source:
            details["utm_source"] = context.utm.source
        self._audit.log(AuditEvent(
            event_type=AuditEventType.REQUEST_RECEIVED,
            kind=kind,
            source=hash_ip(context.ip),
            result="received",
            details=details or None,
        ))

    def outcome_determined(
        self,
        kind: SubmissionKind,
        context: RequestContext,
        response: ShapedResponse,
        duration_ms: int,
    ) -> None:
        self._audit.log(AuditEvent(
            event_type=AuditEventType.OUTCOME_DETERMINED,
            kind=kind,
            source=hash_ip(context.ip),
            result=response.error or "success",
            details={"status": response.status_code, "duration_ms": duration_ms},
        ))
