"""Relay client: forwards webhook envelopes to the automation backend.

Transport problems never escape as exceptions. Every call returns a
``RelayOutcome`` the pipeline can map onto the external error taxonomy.
One request maps to at most one upstream call; nothing is retried here.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from agent_architect.models import SubmissionKind
from agent_architect.provenance import WebhookEnvelope

logger = logging.getLogger(__name__)

USER_AGENT = "AgentArchitect-Relay/1.0"
DEFAULT_TIMEOUT_SECONDS = 3.5


class RelayStatus(str, Enum):
    DELIVERED = "delivered"  # 2xx
    REJECTED = "rejected"  # reachable, non-2xx, parsable body
    UNAVAILABLE = "unavailable"  # unconfigured, transport error, timeout, garbage


@dataclass(frozen=True)
class RelayOutcome:
    status: RelayStatus
    status_code: int | None = None
    body: Any = None
    content_type: str | None = None
    error: str | None = None

    @property
    def delivered(self) -> bool:
        return self.status is RelayStatus.DELIVERED


class RelayClient:
    """Posts envelopes as JSON to the endpoint configured for their kind."""

    def __init__(
        self,
        endpoints: dict[SubmissionKind, str | None],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        secret: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoints = dict(endpoints)
        self._timeout = timeout
        self._secret = secret
        self._transport = transport

    def endpoint_for(self, kind: SubmissionKind) -> str | None:
        url = self._endpoints.get(kind)
        return url if url and url.strip() else None

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        if self._secret:
            headers["X-Webhook-Secret"] = self._secret
        return headers

    async def relay(self, envelope: WebhookEnvelope) -> RelayOutcome:
        url = self.endpoint_for(envelope.type)
        if url is None:
            return RelayOutcome(
                status=RelayStatus.UNAVAILABLE,
                error=f"webhook for '{envelope.type.value}' not configured",
            )

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(
                    url,
                    json=envelope.to_wire(),
                    headers=self._headers(),
                    timeout=self._timeout,
                )
        except httpx.TimeoutException:
            return RelayOutcome(status=RelayStatus.UNAVAILABLE, error="upstream timeout")
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return RelayOutcome(
                status=RelayStatus.UNAVAILABLE,
                error=f"{type(exc).__name__}: {exc}",
            )

        return _classify(resp)


def _classify(resp: httpx.Response) -> RelayOutcome:
    content_type = resp.headers.get("content-type")
    try:
        body: Any = resp.json() if resp.content else None
        parsed = True
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
        parsed = False

    if resp.is_success:
        # Tolerate empty or non-JSON acknowledgements from the webhook.
        return RelayOutcome(
            status=RelayStatus.DELIVERED,
            status_code=resp.status_code,
            body=body if body is not None else {},
            content_type=content_type,
        )

    if parsed and body is not None:
        return RelayOutcome(
            status=RelayStatus.REJECTED,
            status_code=resp.status_code,
            body=body,
            content_type=content_type,
            error=f"upstream returned HTTP {resp.status_code}",
        )

    return RelayOutcome(
        status=RelayStatus.UNAVAILABLE,
        status_code=resp.status_code,
        content_type=content_type,
        error=f"upstream returned HTTP {resp.status_code} with unparsable body",
    )
