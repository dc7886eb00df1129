"""PII redaction for log lines."""

from __future__ import annotations

import hashlib
from typing import Any

from agent_architect.config import DEFAULT_HONEYPOT_FIELD
from agent_architect.intake.schemas import SCHEMAS

_MESSAGE_LIMIT = 120
_UTM_LIMIT = 20
_VALUE_LIMIT = 80

# Only keys some submission schema declares, plus utm, reach the log.
LOGGED_FIELDS = frozenset(
    name for schema in SCHEMAS.values() for name in schema.model_fields
) | {"utm"}


def hash_email(email: Any) -> str:
    if not isinstance(email, str) or not email:
        return "invalid-email"
    return hashlib.sha256(email.strip().lower().encode()).hexdigest()[:8]


def _truncate(value: str, limit: int) -> str:
    return value if len(value) <= limit else value[:limit] + "..."


def _scalar(value: Any) -> Any:
    if isinstance(value, str):
        return _truncate(value, _VALUE_LIMIT)
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, list):
        return [_truncate(v, _VALUE_LIMIT) for v in value[:10] if isinstance(v, str)]
    return f"<{type(value).__name__}>"


def sanitize_for_logging(
    data: Any, honeypot_field: str = DEFAULT_HONEYPOT_FIELD,
) -> Any:
    """Copy of ``data`` safe to log.

    Unknown keys are dropped, email is hashed, phone masked, long values
    truncated and the honeypot removed. Non-object bodies are summarized by
    type.
    """
    if not isinstance(data, dict):
        return data if data is None else f"<{type(data).__name__}>"
    clean: dict[str, Any] = {}
    for key, value in data.items():
        if key not in LOGGED_FIELDS or key == honeypot_field:
            continue
        if key == "email":
            clean[key] = hash_email(value)
        elif key == "phone":
            clean[key] = "***"
        elif key == "message" and isinstance(value, str):
            clean[key] = _truncate(value, _MESSAGE_LIMIT)
        elif key == "utm":
            if isinstance(value, dict):
                clean[key] = {
                    k: _truncate(v, _UTM_LIMIT)
                    for k, v in value.items()
                    if isinstance(v, str)
                }
        else:
            clean[key] = _scalar(value)
    dropped = len(data) - len(clean) - (1 if honeypot_field in data else 0)
    if dropped > 0:
        clean["dropped_keys"] = dropped
    return clean
