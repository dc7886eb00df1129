"""Pure validation of raw submissions into typed payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from agent_architect.intake.schemas import SCHEMAS, ValidatedPayload
from agent_architect.models import SubmissionKind

# Fixed per-field messages; the client highlights inputs by key.
FIELD_MESSAGES: dict[str, str] = {
    "name": "Name must be at least 2 characters.",
    "email": "Email address is not valid.",
    "phone": "Phone number is not valid.",
    "message": "Message length is out of range.",
    "consent": "Consent is required.",
    "service_type": "Service type is not valid.",
    "budget": "Budget is not valid.",
    "company": "Company name is too long.",
    "site_url": "Website address is not valid.",
    "website_url": "Website address is not valid.",
    "instagram_url": "Instagram address is not valid.",
    "business_type": "Business type is required.",
    "primary_goal": "Primary goal is required.",
    "channels": "Select at least one channel.",
    "current_tools": "Current tools must be at least 3 characters.",
    "session_id": "Session id is required.",
}
MISSING_MESSAGE = "This field is required."
PAYLOAD_FIELD = "payload"


@dataclass(frozen=True)
class ValidationResult:
    payload: ValidatedPayload | None = None
    fields: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.payload is not None


def _field_errors(exc: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        name = str(loc[0]) if loc else PAYLOAD_FIELD
        if name in errors:
            continue
        if error.get("type") == "missing":
            errors[name] = MISSING_MESSAGE
        else:
            errors[name] = FIELD_MESSAGES.get(name, "Value is not valid.")
    return errors


def validate(kind: SubmissionKind, raw: Any) -> ValidationResult:
    """Check ``raw`` against the schema for ``kind``.

    Returns the normalized payload, or a field-keyed error map naming exactly
    the missing or invalid inputs. ``raw`` is never modified.
    """
    if not isinstance(raw, dict):
        return ValidationResult(fields={PAYLOAD_FIELD: "Request body must be a JSON object."})
    schema = SCHEMAS[kind]
    try:
        payload = schema.model_validate(raw)
    except ValidationError as exc:
        return ValidationResult(fields=_field_errors(exc))
    return ValidationResult(payload=payload)  # type: ignore[arg-type]
