"""FastAPI application exposing the submission endpoints."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from agent_architect.audit.logger import AuditLogger
from agent_architect.audit.observer import AuditObserver, PipelineObserver
from agent_architect.config import PipelineSettings, load_settings_from_env
from agent_architect.guard.rate_limiter import FixedWindowRateLimiter
from agent_architect.models import SubmissionKind
from agent_architect.pipeline import SubmissionPipeline
from agent_architect.provenance import build_context
from agent_architect.relay.client import RelayClient
from agent_architect.relay.passthrough import passthrough, preflight
from agent_architect.shaper import ServerFault, ShapedResponse, shape

logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}

# Closed route table: one submission kind per path.
SUBMISSION_ROUTES: dict[str, SubmissionKind] = {
    "/api/contact": SubmissionKind.CONTACT,
    "/api/lead": SubmissionKind.LEAD,
    "/api/agent/new": SubmissionKind.INTAKE,
    "/api/agent/message": SubmissionKind.CHAT_MESSAGE,
}


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = load_settings_from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    audit_logger = (
        AuditLogger.from_env(settings.audit_log_path) if settings.audit_log_path else None
    )
    return create_app(settings, audit_logger=audit_logger)


def create_app(
    settings: PipelineSettings,
    relay_client: RelayClient | None = None,
    rate_limiter: FixedWindowRateLimiter | None = None,
    audit_logger: AuditLogger | None = None,
    observer: PipelineObserver | None = None,
    passthrough_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create the submission API with its guards, relay and observers."""
    app = FastAPI(docs_url=None, redoc_url=None)
    started = time.monotonic()

    if relay_client is None:
        relay_client = RelayClient(
            settings.endpoints(),
            timeout=settings.timeout_seconds,
            secret=settings.webhook_secret,
        )
    if rate_limiter is None:
        rate_limiter = FixedWindowRateLimiter(
            max_requests=settings.rate_limit_max,
            window_seconds=settings.rate_limit_window_ms / 1000,
        )
    if observer is None and audit_logger is not None:
        observer = AuditObserver(audit_logger)

    pipeline = SubmissionPipeline(
        relay_client,
        rate_limiter,
        honeypot_field=settings.honeypot_field,
        observer=observer,
    )

    def _submission_endpoint(
        kind: SubmissionKind,
    ) -> Callable[[Request], Awaitable[Response]]:
        async def submit(request: Request) -> Response:
            try:
                body = await request.body()
                peer = request.client.host if request.client else None
                try:
                    raw = json.loads(body)
                except (ValueError, RecursionError):
                    context = build_context(request.headers, peer, None)
                    shaped = await pipeline.handle_malformed(kind, context, "invalid JSON body")
                    return _to_response(shaped)
                context = build_context(request.headers, peer, raw)
                return _to_response(await pipeline.handle(kind, raw, context))
            except Exception:
                logger.exception("Unhandled error on %s route", kind.value)
                return _to_response(shape(ServerFault()))

        submit.__name__ = f"submit_{kind.value}"
        return submit

    for path, kind in SUBMISSION_ROUTES.items():
        app.add_api_route(path, _submission_endpoint(kind), methods=["POST"])

    @app.get("/api/health")
    async def health() -> Response:
        issues = settings.issues()
        endpoints = settings.endpoints()
        body: dict[str, object] = {
            "ok": not issues,
            "uptime_ms": int((time.monotonic() - started) * 1000),
            "now_iso": datetime.now(UTC).isoformat(),
            "env": {
                "environment": settings.environment,
                "webhooks": {kind.value: bool(url) for kind, url in endpoints.items()},
                "chatbot_webhook_present": bool(settings.chatbot_webhook_url),
                "webhook_secret_present": bool(settings.webhook_secret),
                "rate_limit": {
                    "max": settings.rate_limit_max,
                    "window_ms": settings.rate_limit_window_ms,
                },
            },
        }
        if issues:
            body["issues"] = issues
        return JSONResponse(body, status_code=200 if not issues else 503, headers=NO_STORE)

    @app.post("/api/relay/chatbot")
    async def relay_chatbot(request: Request) -> Response:
        return await passthrough(
            await request.body(),
            settings.chatbot_webhook_url,
            timeout=settings.chatbot_timeout_ms / 1000,
            transport=passthrough_transport,
        )

    @app.options("/api/relay/chatbot")
    async def relay_chatbot_preflight() -> Response:
        return preflight()

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code != 405:
            return await http_exception_handler(request, exc)
        headers = dict(NO_STORE)
        if exc.headers and "Allow" in exc.headers:
            headers["Allow"] = exc.headers["Allow"]
        return JSONResponse(
            {"ok": False, "error": "Method not allowed"},
            status_code=405,
            headers=headers,
        )

    return app


def _to_response(shaped: ShapedResponse) -> JSONResponse:
    return JSONResponse(shaped.body, status_code=shaped.status_code, headers=NO_STORE)
