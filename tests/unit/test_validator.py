"""Tests for submission validation."""

from __future__ import annotations

import pytest

from agent_architect.intake.schemas import (
    ContactSubmission,
    IntakeSubmission,
    LeadBudget,
    LeadSubmission,
    ServiceType,
    is_valid_site_url,
)
from agent_architect.intake.validator import MISSING_MESSAGE, PAYLOAD_FIELD, validate
from agent_architect.models import SubmissionKind
from tests.conftest import make_chat, make_contact, make_intake, make_lead


class TestContactValidation:
    def test_valid_contact(self) -> None:
        result = validate(SubmissionKind.CONTACT, make_contact())
        assert result.is_valid
        assert isinstance(result.payload, ContactSubmission)
        assert result.fields == {}

    def test_email_is_trimmed_and_lowercased(self) -> None:
        result = validate(SubmissionKind.CONTACT, make_contact(email="  Sara@Example.COM "))
        assert result.payload is not None
        assert result.payload.email == "sara@example.com"

    def test_short_name_rejected(self) -> None:
        result = validate(SubmissionKind.CONTACT, make_contact(name="A"))
        assert not result.is_valid
        assert set(result.fields) == {"name"}

    def test_name_whitespace_does_not_count(self) -> None:
        result = validate(SubmissionKind.CONTACT, make_contact(name="  A  "))
        assert "name" in result.fields

    def test_message_upper_bound(self) -> None:
        assert validate(SubmissionKind.CONTACT, make_contact(message="x" * 2000)).is_valid
        result = validate(SubmissionKind.CONTACT, make_contact(message="x" * 2001))
        assert set(result.fields) == {"message"}

    def test_consent_false_rejected(self) -> None:
        result = validate(SubmissionKind.CONTACT, make_contact(consent=False))
        assert set(result.fields) == {"consent"}

    def test_consent_must_be_boolean(self) -> None:
        result = validate(SubmissionKind.CONTACT, make_contact(consent="yes"))
        assert "consent" in result.fields

    def test_missing_fields_listed_exactly(self) -> None:
        result = validate(SubmissionKind.CONTACT, {"name": "Sara"})
        assert set(result.fields) == {"email", "message", "consent"}
        assert result.fields["email"] == MISSING_MESSAGE

    def test_blank_phone_becomes_none(self) -> None:
        result = validate(SubmissionKind.CONTACT, make_contact(phone="   "))
        assert result.payload is not None
        assert result.payload.phone is None

    def test_honeypot_and_extras_dropped(self) -> None:
        raw = make_contact(utm={"source": "ig"}, extra="x")
        result = validate(SubmissionKind.CONTACT, raw)
        dumped = result.payload.model_dump()  # type: ignore[union-attr]
        assert "hp_token" not in dumped
        assert "utm" not in dumped
        assert "extra" not in dumped

    def test_raw_is_not_modified(self) -> None:
        raw = make_contact(email=" Sara@Example.com ")
        snapshot = dict(raw)
        validate(SubmissionKind.CONTACT, raw)
        assert raw == snapshot

    @pytest.mark.parametrize("raw", [None, [], "text", 42])
    def test_non_object_body(self, raw: object) -> None:
        result = validate(SubmissionKind.CONTACT, raw)
        assert set(result.fields) == {PAYLOAD_FIELD}


class TestLeadValidation:
    def test_minimal_lead(self) -> None:
        result = validate(SubmissionKind.LEAD, make_lead())
        assert isinstance(result.payload, LeadSubmission)
        assert result.payload.service_type is ServiceType.AGENT

    def test_unknown_service_type(self) -> None:
        result = validate(SubmissionKind.LEAD, make_lead(service_type="crypto"))
        assert set(result.fields) == {"service_type"}

    def test_budget_enum(self) -> None:
        result = validate(SubmissionKind.LEAD, make_lead(budget="500_1500"))
        assert result.payload.budget is LeadBudget.FROM_500_TO_1500  # type: ignore[union-attr]
        assert "budget" in validate(SubmissionKind.LEAD, make_lead(budget="lots")).fields

    def test_blank_optionals_become_none(self) -> None:
        result = validate(SubmissionKind.LEAD, make_lead(budget="", site_url="", company=" "))
        assert result.payload is not None
        assert result.payload.budget is None
        assert result.payload.site_url is None
        assert result.payload.company is None

    def test_invalid_email(self) -> None:
        result = validate(SubmissionKind.LEAD, make_lead(email="not-an-email"))
        assert set(result.fields) == {"email"}

    def test_site_url(self) -> None:
        assert validate(SubmissionKind.LEAD, make_lead(site_url="example.com")).is_valid
        result = validate(SubmissionKind.LEAD, make_lead(site_url="ftp://example.com"))
        assert set(result.fields) == {"site_url"}


class TestIntakeValidation:
    def test_valid_intake_joins_tools(self) -> None:
        result = validate(SubmissionKind.INTAKE, make_intake())
        assert isinstance(result.payload, IntakeSubmission)
        assert result.payload.current_tools == "excel, whatsapp"

    def test_tools_too_short(self) -> None:
        result = validate(SubmissionKind.INTAKE, make_intake(current_tools="ab"))
        assert set(result.fields) == {"current_tools"}

    def test_channels_required(self) -> None:
        result = validate(SubmissionKind.INTAKE, make_intake(channels=[]))
        assert set(result.fields) == {"channels"}

    def test_optional_urls(self) -> None:
        ok = validate(
            SubmissionKind.INTAKE,
            make_intake(website_url="https://shop.example", instagram_url=""),
        )
        assert ok.payload is not None
        assert ok.payload.instagram_url is None
        bad = validate(SubmissionKind.INTAKE, make_intake(website_url="not a url"))
        assert set(bad.fields) == {"website_url"}


class TestChatValidation:
    def test_valid_chat(self) -> None:
        assert validate(SubmissionKind.CHAT_MESSAGE, make_chat()).is_valid

    def test_empty_session_id(self) -> None:
        result = validate(SubmissionKind.CHAT_MESSAGE, make_chat(session_id=""))
        assert set(result.fields) == {"session_id"}

    def test_message_bounds(self) -> None:
        assert validate(SubmissionKind.CHAT_MESSAGE, make_chat(message="x" * 800)).is_valid
        too_long = validate(SubmissionKind.CHAT_MESSAGE, make_chat(message="x" * 801))
        assert set(too_long.fields) == {"message"}
        blank = validate(SubmissionKind.CHAT_MESSAGE, make_chat(message="   "))
        assert set(blank.fields) == {"message"}


class TestSiteUrl:
    @pytest.mark.parametrize(
        "value", ["example.com", "https://example.com/path", "http://sub.example.org"],
    )
    def test_accepts(self, value: str) -> None:
        assert is_valid_site_url(value)

    @pytest.mark.parametrize("value", ["a.b", "https://", "javascript://x", "exa mple.com"])
    def test_rejects(self, value: str) -> None:
        assert not is_valid_site_url(value)
