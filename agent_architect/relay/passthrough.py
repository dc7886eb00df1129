"""Chatbot webhook passthrough.

Forwards an arbitrary JSON body to a single configured URL and mirrors the
upstream status, body bytes and content type back to the caller.
"""

from __future__ import annotations

import json
import logging

import httpx
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

NOT_CONFIGURED_ERROR = "Chatbot webhook URL not configured"
DEFAULT_PASSTHROUGH_TIMEOUT = 30.0

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "86400",
}


async def passthrough(
    body: bytes,
    upstream_url: str | None,
    timeout: float = DEFAULT_PASSTHROUGH_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Response:
    if not upstream_url:
        return JSONResponse({"ok": False, "error": NOT_CONFIGURED_ERROR}, status_code=500)

    try:
        payload = json.loads(body)
        async with httpx.AsyncClient(transport=transport) as client:
            resp = await client.post(
                upstream_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=timeout,
            )
    except Exception as exc:
        logger.warning("Chatbot passthrough failed: %s", exc)
        return JSONResponse(
            {"ok": False, "error": str(exc) or "relay-error"},
            status_code=500,
        )

    return Response(
        content=resp.content,
        status_code=resp.status_code,
        headers={"Content-Type": resp.headers.get("content-type", "application/json")},
    )


def preflight() -> Response:
    return Response(status_code=204, headers=PREFLIGHT_HEADERS)
