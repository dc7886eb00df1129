"""Provenance enrichment: wrap a validated payload in a webhook envelope.

The envelope keeps user data (``data``) apart from request metadata
(``meta``) so the automation backend never confuses the two.
"""

from __future__ import annotations

import hashlib
import ipaddress
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from agent_architect.intake.schemas import (
    ChatMessageSubmission,
    ContactSubmission,
    IntakeSubmission,
    LeadSubmission,
    ValidatedPayload,
)
from agent_architect.models import UTM, ProvenanceMeta, SubmissionKind

UNKNOWN_IP = "0.0.0.0"
UNKNOWN_USER_AGENT = "unknown"

# Checked in order; x-forwarded-for contributes its first hop.
_IP_HEADERS = ("x-forwarded-for", "cf-connecting-ip", "x-real-ip", "x-client-ip")
_UTM_KEYS = ("source", "medium", "campaign", "term", "content")
_UTM_MAX_LENGTH = 200

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class RequestContext:
    ip: str
    user_agent: str
    page: str | None = None
    utm: UTM | None = None


class WebhookEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: SubmissionKind
    data: ContactSubmission | LeadSubmission | IntakeSubmission | ChatMessageSubmission
    meta: ProvenanceMeta

    @model_validator(mode="after")
    def check_type_matches_data(self) -> WebhookEnvelope:
        if self.data.kind != self.type:
            raise ValueError(
                f"envelope type {self.type.value!r} does not match payload kind "
                f"{self.data.kind.value!r}"
            )
        return self

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "data": self.data.model_dump(mode="json", exclude_none=True),
            "meta": self.meta.model_dump(mode="json", exclude_none=True),
        }


def _is_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def extract_client_ip(headers: Mapping[str, str], peer: str | None = None) -> str:
    """Best-effort client IP from proxy headers, then the socket peer."""
    for name in _IP_HEADERS:
        value = headers.get(name)
        if not value:
            continue
        candidate = value.split(",")[0].strip()
        if _is_ip(candidate):
            return candidate
    if peer and _is_ip(peer):
        return peer
    return UNKNOWN_IP


def hash_ip(ip: str) -> str:
    """Short non-reversible identifier for log lines."""
    return hashlib.sha256(ip.encode()).hexdigest()[:12]


def parse_utm(raw: Any) -> UTM | None:
    """Keep only known, non-blank string UTM keys; ``None`` if nothing is left."""
    if not isinstance(raw, dict):
        return None
    values = {
        key: raw[key].strip()[:_UTM_MAX_LENGTH]
        for key in _UTM_KEYS
        if isinstance(raw.get(key), str) and raw[key].strip()
    }
    return UTM(**values) if values else None


def build_context(
    headers: Mapping[str, str],
    peer: str | None,
    body: Any,
) -> RequestContext:
    utm = parse_utm(body.get("utm")) if isinstance(body, dict) else None
    return RequestContext(
        ip=extract_client_ip(headers, peer),
        user_agent=headers.get("user-agent") or UNKNOWN_USER_AGENT,
        page=headers.get("referer") or None,
        utm=utm,
    )


def enrich(
    payload: ValidatedPayload,
    context: RequestContext,
    clock: Clock = utc_now,
) -> WebhookEnvelope:
    meta = ProvenanceMeta(
        ip=context.ip,
        user_agent=context.user_agent,
        timestamp=clock().isoformat(),
        page=context.page,
        utm=context.utm,
    )
    return WebhookEnvelope(type=payload.kind, data=payload, meta=meta)
