"""Environment-driven configuration for the intake pipeline."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

from agent_architect.models import SubmissionKind

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 3500
DEFAULT_CHATBOT_TIMEOUT_MS = 30_000
DEFAULT_RATE_LIMIT_MAX = 10
DEFAULT_RATE_LIMIT_WINDOW_MS = 60_000
DEFAULT_HONEYPOT_FIELD = "hp_token"


class PipelineSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    contact_webhook_url: str | None = None
    lead_webhook_url: str | None = None
    session_webhook_url: str | None = None
    chat_webhook_url: str | None = None
    webhook_secret: str | None = None
    chatbot_webhook_url: str | None = None
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    chatbot_timeout_ms: int = Field(default=DEFAULT_CHATBOT_TIMEOUT_MS, gt=0)
    rate_limit_max: int = Field(default=DEFAULT_RATE_LIMIT_MAX, gt=0)
    rate_limit_window_ms: int = Field(default=DEFAULT_RATE_LIMIT_WINDOW_MS, gt=0)
    honeypot_field: str = DEFAULT_HONEYPOT_FIELD
    audit_log_path: str | None = None
    log_level: str = "INFO"
    environment: str = "development"

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def endpoints(self) -> dict[SubmissionKind, str | None]:
        """Relay target per submission kind."""
        return {
            SubmissionKind.CONTACT: self.contact_webhook_url,
            SubmissionKind.LEAD: self.lead_webhook_url,
            SubmissionKind.INTAKE: self.session_webhook_url,
            SubmissionKind.CHAT_MESSAGE: self.chat_webhook_url,
        }

    def issues(self) -> list[str]:
        """Configuration problems worth surfacing on the health endpoint."""
        found: list[str] = []
        if self.is_production:
            for kind, url in self.endpoints().items():
                if not url:
                    found.append(f"webhook for '{kind.value}' missing in production")
        return found


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default
    return value if value > 0 else default


def _optional(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(name, "").strip()
    return value or None


def load_settings_from_env(env: Mapping[str, str] | None = None) -> PipelineSettings:
    """Build settings from environment variables (``os.environ`` by default)."""
    env = os.environ if env is None else env
    agent_url = _optional(env, "N8N_WEBHOOK_AGENT")
    return PipelineSettings(
        contact_webhook_url=_optional(env, "N8N_WEBHOOK_CONTACT"),
        lead_webhook_url=_optional(env, "N8N_WEBHOOK_LEAD"),
        session_webhook_url=agent_url,
        chat_webhook_url=_optional(env, "N8N_WEBHOOK_AGENT_CHAT") or agent_url,
        webhook_secret=_optional(env, "N8N_WEBHOOK_SECRET"),
        chatbot_webhook_url=_optional(env, "N8N_CHATBOT_WEBHOOK"),
        timeout_ms=_positive_int(env, "API_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
        chatbot_timeout_ms=_positive_int(
            env, "CHATBOT_TIMEOUT_MS", DEFAULT_CHATBOT_TIMEOUT_MS,
        ),
        rate_limit_max=_positive_int(env, "RATE_LIMIT_MAX", DEFAULT_RATE_LIMIT_MAX),
        rate_limit_window_ms=_positive_int(
            env, "RATE_LIMIT_WINDOW_MS", DEFAULT_RATE_LIMIT_WINDOW_MS,
        ),
        honeypot_field=_optional(env, "HONEYPOT_FIELD") or DEFAULT_HONEYPOT_FIELD,
        audit_log_path=_optional(env, "AUDIT_LOG_PATH"),
        log_level=(_optional(env, "LOG_LEVEL") or "INFO").upper(),
        environment=_optional(env, "APP_ENV") or "development",
    )


def mask_secret(secret: str | None, visible: int = 4) -> str:
    if not secret or len(secret) <= visible * 2:
        return "***"
    return f"{secret[:visible]}***{secret[-visible:]}"
