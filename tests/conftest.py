"""Shared test fixtures for the Agent Architect intake pipeline."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from agent_architect.audit.logger import AuditLogger
from agent_architect.provenance import RequestContext

FIXED_NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


# --- Factory functions for test data ---


def make_contact(**kwargs: Any) -> dict[str, Any]:
    """Raw contact form body with sensible defaults."""
    defaults: dict[str, Any] = {
        "name": "Sara Ahmadi",
        "email": "sara@example.com",
        "message": "Hello, I would like to talk about an automation project.",
        "consent": True,
        "hp_token": "",
    }
    defaults.update(kwargs)
    return defaults


def make_lead(**kwargs: Any) -> dict[str, Any]:
    """Raw lead form body with sensible defaults."""
    defaults: dict[str, Any] = {
        "email": "a@b.com",
        "service_type": "agent",
        "consent": True,
        "hp_token": "",
    }
    defaults.update(kwargs)
    return defaults


def make_intake(**kwargs: Any) -> dict[str, Any]:
    """Raw Agent Architect intake body with sensible defaults."""
    defaults: dict[str, Any] = {
        "business_type": "online shop",
        "primary_goal": "more qualified leads",
        "channels": ["instagram", "telegram"],
        "current_tools": ["excel", "whatsapp"],
        "budget": "500_1500",
        "phone": "+989121234567",
        "email": "owner@shop.example",
        "consent": True,
        "hp_token": "",
    }
    defaults.update(kwargs)
    return defaults


def make_chat(**kwargs: Any) -> dict[str, Any]:
    """Raw chat message body with sensible defaults."""
    defaults: dict[str, Any] = {
        "session_id": "sess-123",
        "message": "Can you make the plan cheaper?",
    }
    defaults.update(kwargs)
    return defaults


def make_context(**kwargs: Any) -> RequestContext:
    """Factory for RequestContext with sensible defaults."""
    defaults: dict[str, Any] = {
        "ip": "203.0.113.7",
        "user_agent": BROWSER_UA,
    }
    defaults.update(kwargs)
    return RequestContext(**defaults)


def make_blocks(**kwargs: Any) -> dict[str, Any]:
    """Complete agent blocks matching the expected sizes."""
    defaults: dict[str, Any] = {
        "summary": "Automate lead capture from Instagram.",
        "recommendations": [
            {
                "title": f"Flow {i}",
                "goal": "capture leads",
                "recipe": "Form -> Webhook -> Telegram",
                "tools": ["n8n", "telegram"],
                "est_time": "2h",
                "impact": "H",
            }
            for i in range(3)
        ],
        "ideas": [
            {
                "title": f"Idea {i}",
                "revenue_model": "subscription",
                "first_step": "landing page",
                "target_channels": ["instagram"],
            }
            for i in range(3)
        ],
        "plan_7d": [
            {"day": day, "tasks": ["task"], "success_criteria": "done"}
            for day in range(1, 8)
        ],
    }
    defaults.update(kwargs)
    return defaults


def json_transport(
    status_code: int = 200,
    body: Any = None,
    requests: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """MockTransport answering every request with a fixed JSON body."""

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, json=body if body is not None else {})

    return httpx.MockTransport(handler)


def failing_transport(exc: Exception) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    return httpx.MockTransport(handler)
