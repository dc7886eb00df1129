"""Submission schemas: the validated, normalized form of each request kind.

Each model is frozen and ignores keys it does not declare (the honeypot
token, ``utm`` and any client extras), so a validated payload carries only
user data. Provenance travels separately in the webhook envelope.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, ClassVar
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

from agent_architect.models import SubmissionKind

EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
_DOMAIN_RE = re.compile(
    r"^[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(\.[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$"
)

# --- Enums ---


class ServiceType(str, Enum):
    AGENT = "agent"
    AUTOMATION = "automation"
    CHATBOT = "chatbot"
    N8N = "n8n"
    COURSE = "course"
    OTHER = "other"


class LeadBudget(str, Enum):
    UNDER_500 = "under_500"
    FROM_500_TO_1500 = "500_1500"
    FROM_1500_TO_3000 = "1500_3000"
    OVER_3000 = "3000_plus"
    UNSPECIFIED = "unspecified"


# --- Shared field checks ---


def normalize_email(value: str) -> str:
    email = value.strip().lower()
    if not EMAIL_RE.match(email):
        raise ValueError("invalid email address")
    return email


def is_valid_site_url(value: str) -> bool:
    """Accept a full http(s) URL or a bare domain name such as ``example.com``."""
    if "://" in value:
        parts = urlsplit(value)
        return parts.scheme in ("http", "https") and bool(parts.netloc)
    return bool(_DOMAIN_RE.match(value)) and 3 < len(value) < 255


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _require_consent(value: bool) -> bool:
    if value is not True:
        raise ValueError("consent must be given")
    return value


class _Submission(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    kind: ClassVar[SubmissionKind]


# --- Variants ---


class ContactSubmission(_Submission):
    kind: ClassVar[SubmissionKind] = SubmissionKind.CONTACT

    name: str = Field(min_length=2, max_length=120)
    email: str
    phone: str | None = None
    message: str = Field(min_length=1, max_length=2000)
    consent: StrictBool

    check_email = field_validator("email")(normalize_email)
    check_consent = field_validator("consent")(_require_consent)
    blanks_to_none = field_validator("phone", mode="before")(_blank_to_none)


class LeadSubmission(_Submission):
    kind: ClassVar[SubmissionKind] = SubmissionKind.LEAD

    email: str
    service_type: ServiceType
    consent: StrictBool
    name: str | None = Field(default=None, max_length=120)
    phone: str | None = None
    company: str | None = Field(default=None, max_length=200)
    budget: LeadBudget | None = None
    message: str | None = Field(default=None, max_length=2000)
    site_url: str | None = None

    check_email = field_validator("email")(normalize_email)
    check_consent = field_validator("consent")(_require_consent)
    blanks_to_none = field_validator(
        "name", "phone", "company", "budget", "message", "site_url", mode="before",
    )(_blank_to_none)

    @field_validator("site_url")
    @classmethod
    def check_site_url(cls, value: str | None) -> str | None:
        if value is not None and not is_valid_site_url(value):
            raise ValueError("invalid site url")
        return value


class IntakeSubmission(_Submission):
    """Agent Architect intake form: opens a chat session upstream."""

    kind: ClassVar[SubmissionKind] = SubmissionKind.INTAKE

    business_type: str = Field(min_length=1, max_length=120)
    primary_goal: str = Field(min_length=1, max_length=200)
    channels: list[str] = Field(min_length=1, max_length=20)
    current_tools: str = Field(min_length=3, max_length=1000)
    budget: str = Field(min_length=1, max_length=120)
    phone: str = Field(min_length=1, max_length=40)
    email: str
    consent: StrictBool
    website_url: str | None = None
    instagram_url: str | None = None

    check_email = field_validator("email")(normalize_email)
    check_consent = field_validator("consent")(_require_consent)
    blanks_to_none = field_validator("website_url", "instagram_url", mode="before")(_blank_to_none)

    @field_validator("current_tools", mode="before")
    @classmethod
    def join_tools(cls, value: Any) -> Any:
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return ", ".join(v.strip() for v in value if v.strip())
        return value

    @field_validator("channels")
    @classmethod
    def check_channels(cls, value: list[str]) -> list[str]:
        if any(not channel for channel in value):
            raise ValueError("channels must not be blank")
        return value

    @field_validator("website_url", "instagram_url")
    @classmethod
    def check_urls(cls, value: str | None) -> str | None:
        if value is not None and not is_valid_site_url(value):
            raise ValueError("invalid url")
        return value


class ChatMessageSubmission(_Submission):
    """A chat turn. ``session_id`` is an opaque upstream reference."""

    kind: ClassVar[SubmissionKind] = SubmissionKind.CHAT_MESSAGE

    session_id: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=800)


ValidatedPayload = ContactSubmission | LeadSubmission | IntakeSubmission | ChatMessageSubmission

SCHEMAS: dict[SubmissionKind, type[_Submission]] = {
    SubmissionKind.CONTACT: ContactSubmission,
    SubmissionKind.LEAD: LeadSubmission,
    SubmissionKind.INTAKE: IntakeSubmission,
    SubmissionKind.CHAT_MESSAGE: ChatMessageSubmission,
}
