"""Session contract between the pipeline and the automation backend.

Sessions are created and stored upstream. The pipeline only carries the
upstream-issued id between the client and the backend, and checks that
assistant replies have the shape the UI renders.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from agent_architect.intake.schemas import IntakeSubmission
from agent_architect.models import MessageRole

REQUIRED_BLOCK_KEYS = ("summary", "recommendations", "ideas", "plan_7d")


class MalformedUpstreamError(Exception):
    """Raised when a successful upstream response breaks the session contract."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Malformed upstream response: {reason}")


# --- Assistant output schema ---


class Recommendation(BaseModel):
    title: str
    goal: str
    recipe: str  # n8n flow, e.g. "Form → Webhook → Delay 5m → Telegram"
    tools: list[str]
    est_time: str
    impact: Literal["L", "M", "H"]


class Idea(BaseModel):
    title: str
    revenue_model: str
    first_step: str
    target_channels: list[str]


class DayPlan(BaseModel):
    day: int = Field(ge=1, le=7)
    tasks: list[str]
    success_criteria: str


class AgentBlocks(BaseModel):
    """Structured recommendations the backend must return with every reply."""

    summary: str
    recommendations: list[Recommendation]
    ideas: list[Idea]
    plan_7d: list[DayPlan]
    tips: list[str] | None = None


class AgentReply(BaseModel):
    model_config = ConfigDict(frozen=True)

    reply: str
    blocks: dict[str, Any]


# --- Session and messages ---


class Session(BaseModel):
    id: str
    intake: IntakeSubmission
    created_at: str
    last_activity: str

    def public_view(self) -> dict[str, str]:
        return {
            "id": self.id,
            "created_at": self.created_at,
            "last_activity": self.last_activity,
        }


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: MessageRole
    content: str
    timestamp: str


def extract_session_id(body: Any) -> str | None:
    """Upstream session id from ``session_id`` or ``session.id``, verbatim."""
    if not isinstance(body, dict):
        return None
    candidate = body.get("session_id")
    if not candidate and isinstance(body.get("session"), dict):
        candidate = body["session"].get("id")
    if isinstance(candidate, str) and candidate.strip():
        return candidate
    return None


def session_from_intake(body: Any, intake: IntakeSubmission, now: datetime) -> Session:
    session_id = extract_session_id(body)
    if session_id is None:
        raise MalformedUpstreamError("missing session id")
    stamp = now.isoformat()
    return Session(id=session_id, intake=intake, created_at=stamp, last_activity=stamp)


def check_blocks(blocks: Any) -> dict[str, Any]:
    if not isinstance(blocks, dict):
        raise MalformedUpstreamError("blocks is not an object")
    missing = [key for key in REQUIRED_BLOCK_KEYS if key not in blocks]
    if missing:
        raise MalformedUpstreamError(f"blocks missing {', '.join(missing)}")
    return blocks


def parse_agent_reply(body: Any) -> AgentReply:
    """Require a ``reply`` string and complete ``blocks``; blocks pass through as-is."""
    if not isinstance(body, dict):
        raise MalformedUpstreamError("reply body is not an object")
    reply = body.get("reply")
    if not isinstance(reply, str):
        raise MalformedUpstreamError("missing reply text")
    if "blocks" not in body:
        raise MalformedUpstreamError("missing blocks")
    return AgentReply(reply=reply, blocks=check_blocks(body["blocks"]))


def blocks_deviations(blocks: dict[str, Any]) -> list[str]:
    """Soft expectations on block sizes. Reported, never enforced."""
    notes: list[str] = []
    recommendations = blocks.get("recommendations")
    if not isinstance(recommendations, list) or not 3 <= len(recommendations) <= 5:
        notes.append("expected 3-5 recommendations")
    ideas = blocks.get("ideas")
    if not isinstance(ideas, list) or len(ideas) != 3:
        notes.append("expected 3 ideas")
    plan = blocks.get("plan_7d")
    if not isinstance(plan, list) or len(plan) != 7:
        notes.append("expected a 7 day plan")
    return notes


def chat_turn(user_text: str, reply: AgentReply, now: datetime) -> list[Message]:
    """User and assistant messages for one exchange, in insertion order."""
    stamp = now.isoformat()
    return [
        Message(role=MessageRole.USER, content=user_text, timestamp=stamp),
        Message(role=MessageRole.ASSISTANT, content=reply.reply, timestamp=stamp),
    ]
