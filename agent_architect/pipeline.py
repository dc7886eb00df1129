"""Submission pipeline.

Orchestrates one inbound request end to end using direct function calls.

Pipeline stages:
1. Spam check (honeypot, content heuristics) on the raw body
2. Rate limit per (client IP, kind)
3. Validate into a typed payload
4. Enrich with provenance into a webhook envelope
5. Relay to the automation backend
6. Session contract check on the upstream body
7. Shape the response and notify observers
"""

from __future__ import annotations

import logging
import time
from typing import Any

from agent_architect.audit.observer import NullObserver, PipelineObserver
from agent_architect.audit.redact import sanitize_for_logging
from agent_architect.config import DEFAULT_HONEYPOT_FIELD
from agent_architect.guard.rate_limiter import FixedWindowRateLimiter
from agent_architect.guard.spam import check_spam
from agent_architect.intake.schemas import ChatMessageSubmission, IntakeSubmission
from agent_architect.intake.validator import validate
from agent_architect.models import SubmissionKind
from agent_architect.provenance import Clock, RequestContext, WebhookEnvelope, enrich, hash_ip, utc_now
from agent_architect.relay.client import RelayClient
from agent_architect.session import (
    MalformedUpstreamError,
    blocks_deviations,
    chat_turn,
    check_blocks,
    parse_agent_reply,
    session_from_intake,
)
from agent_architect.shaper import (
    MalformedRequest,
    Outcome,
    RateLimited,
    Relayed,
    ServerFault,
    ShapedResponse,
    SpamDetected,
    UpstreamFailed,
    ValidationFailed,
    shape,
)

logger = logging.getLogger(__name__)


class SubmissionPipeline:
    """Runs contact, lead, intake and chat submissions through the guards and relay."""

    def __init__(
        self,
        relay_client: RelayClient,
        rate_limiter: FixedWindowRateLimiter,
        honeypot_field: str = DEFAULT_HONEYPOT_FIELD,
        observer: PipelineObserver | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._relay = relay_client
        self._rate_limiter = rate_limiter
        self._honeypot_field = honeypot_field
        self._observer: PipelineObserver = observer or NullObserver()
        self._clock = clock

    async def handle(
        self, kind: SubmissionKind, raw: Any, context: RequestContext,
    ) -> ShapedResponse:
        """Process one submission. Never raises for bad input or upstream trouble."""
        started = time.monotonic()
        self._notify_received(kind, context)
        try:
            outcome = await self._process(kind, raw, context)
        except Exception:
            logger.exception("Unhandled error in %s pipeline", kind.value)
            outcome = ServerFault()
        return self._finish(kind, context, outcome, started, raw)

    async def handle_malformed(
        self, kind: SubmissionKind, context: RequestContext, detail: str,
    ) -> ShapedResponse:
        """Shape a request whose body could not be parsed as JSON."""
        started = time.monotonic()
        self._notify_received(kind, context)
        return self._finish(kind, context, MalformedRequest(detail), started, None)

    async def _process(
        self, kind: SubmissionKind, raw: Any, context: RequestContext,
    ) -> Outcome:
        # Stage 1: Spam check, before anything consumes a rate-limit slot
        spam = check_spam(raw, context.user_agent, self._honeypot_field)
        if spam.is_spam:
            return SpamDetected(reason=spam.reason)
        if spam.reason:
            logger.info("%s %s soft spam signal: %s", kind.value, hash_ip(context.ip), spam.reason)

        # Stage 2: Rate limit
        limit = self._rate_limiter.check(context.ip, kind)
        if not limit.allowed:
            return RateLimited(retry_in_ms=limit.retry_in_ms or 1)

        # Stage 3: Validate
        result = validate(kind, raw)
        if result.payload is None:
            return ValidationFailed(fields=result.fields)

        # Stage 4: Enrich
        envelope = enrich(result.payload, context, self._clock)

        # Stage 5: Relay
        relayed = await self._relay.relay(envelope)
        if not relayed.delivered:
            logger.error(
                "%s relay failed: %s (status=%s, body=%r)",
                kind.value, relayed.error, relayed.status_code, relayed.body,
            )
            return UpstreamFailed(detail=relayed.error, status_code=relayed.status_code)

        # Stage 6: Session contract
        try:
            return self._accept(envelope, relayed.body)
        except MalformedUpstreamError as exc:
            logger.error("%s upstream response rejected: %s", kind.value, exc.reason)
            return UpstreamFailed(detail=exc.reason, status_code=relayed.status_code)

    def _accept(self, envelope: WebhookEnvelope, body: Any) -> Relayed:
        kind = envelope.type
        payload = envelope.data
        now = self._clock()

        if isinstance(payload, IntakeSubmission):
            session = session_from_intake(body, payload, now)
            blocks = check_blocks(body["blocks"]) if "blocks" in body else None
            return Relayed(kind=kind, session=session.public_view(), blocks=blocks)

        if isinstance(payload, ChatMessageSubmission):
            reply = parse_agent_reply(body)
            deviations = blocks_deviations(reply.blocks)
            if deviations:
                logger.warning("Agent blocks for %s: %s", payload.session_id, "; ".join(deviations))
            return Relayed(
                kind=kind,
                session={"id": payload.session_id, "last_activity": now.isoformat()},
                reply=reply.reply,
                blocks=reply.blocks,
                messages=[
                    m.model_dump(mode="json") for m in chat_turn(payload.message, reply, now)
                ],
            )

        upstream_id = body.get("id") if isinstance(body, dict) else None
        if not isinstance(upstream_id, str) or not upstream_id.strip():
            upstream_id = None
        return Relayed(kind=kind, upstream_id=upstream_id)

    def _finish(
        self,
        kind: SubmissionKind,
        context: RequestContext,
        outcome: Outcome,
        started: float,
        raw: Any,
    ) -> ShapedResponse:
        response = shape(outcome)
        duration_ms = int((time.monotonic() - started) * 1000)

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(
            level,
            "%s %s %s %dms %d %s %s",
            kind.value,
            hash_ip(context.ip),
            context.user_agent,
            duration_ms,
            response.status_code,
            response.error or "ok",
            sanitize_for_logging(raw, self._honeypot_field),
        )

        self._notify_outcome(kind, context, response, duration_ms)
        return response

    def _notify_received(self, kind: SubmissionKind, context: RequestContext) -> None:
        try:
            self._observer.request_received(kind, context)
        except Exception:
            logger.exception("Observer failed on request_received")

    def _notify_outcome(
        self,
        kind: SubmissionKind,
        context: RequestContext,
        response: ShapedResponse,
        duration_ms: int,
    ) -> None:
        try:
            self._observer.outcome_determined(kind, context, response, duration_ms)
        except Exception:
            logger.exception("Observer failed on outcome_determined")
