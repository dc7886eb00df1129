"""Spam heuristics: honeypot, user-agent and message content checks."""

from __future__ import annotations

import re
from collections import Counter
from typing import Any

from agent_architect.config import DEFAULT_HONEYPOT_FIELD
from agent_architect.models import SpamCheckInfo

HONEYPOT_FILLED = "honeypot_filled"
SUSPICIOUS_UA = "suspicious_ua"
TOO_MANY_URLS = "too_many_urls"
CHAR_REPETITION = "char_repetition"
SPAM_KEYWORDS = "spam_keywords"

_SUSPICIOUS_UA_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^curl/",
        r"^wget/",
        r"^python-requests/",
        r"^Go-http-client/",
        r"^Java/",
        r"^(bot|crawler|spider|scraper)/",
        r"^Mozilla/5\.0 \(compatible; [^)]+\)$",
        r"^Lynx",
        r"^Links",
    )
]

_URL_RE = re.compile(r"https?://\S+")

_KEYWORDS = (
    "viagra", "casino", "lottery", "winner", "congratulations",
    "click here", "free money", "earn money", "work from home",
    "ویاگرا", "کازینو", "قرعه کشی", "برنده", "تبریک",
    "کلیک کنید", "پول رایگان", "درآمد", "کار در خانه",
)

_MAX_URLS = 2
_MAX_KEYWORDS = 1
_REPETITION_RATIO = 0.3
_REPETITION_MIN_LENGTH = 20


def check_honeypot(payload: Any, field: str = DEFAULT_HONEYPOT_FIELD) -> SpamCheckInfo:
    """Any non-blank value in the hidden field marks the request as spam."""
    if not isinstance(payload, dict):
        return SpamCheckInfo(is_spam=False)
    value = payload.get(field)
    if value is None or value is False:
        return SpamCheckInfo(is_spam=False)
    if isinstance(value, str) and value.strip() == "":
        return SpamCheckInfo(is_spam=False)
    return SpamCheckInfo(is_spam=True, reason=HONEYPOT_FILLED)


def is_suspicious_user_agent(user_agent: str | None) -> bool:
    if not user_agent or not user_agent.strip():
        return True
    return any(p.search(user_agent) for p in _SUSPICIOUS_UA_PATTERNS)


def check_content(message: Any) -> SpamCheckInfo:
    if not isinstance(message, str) or not message:
        return SpamCheckInfo(is_spam=False)
    text = message.lower()

    if len(_URL_RE.findall(text)) > _MAX_URLS:
        return SpamCheckInfo(is_spam=True, reason=TOO_MANY_URLS)

    if len(text) >= _REPETITION_MIN_LENGTH:
        _, top = Counter(text).most_common(1)[0]
        if top / len(text) > _REPETITION_RATIO:
            return SpamCheckInfo(is_spam=True, reason=CHAR_REPETITION)

    hits = sum(1 for keyword in _KEYWORDS if keyword in text)
    if hits > _MAX_KEYWORDS:
        return SpamCheckInfo(is_spam=True, reason=SPAM_KEYWORDS)

    return SpamCheckInfo(is_spam=False)


def check_spam(
    payload: Any,
    user_agent: str | None = None,
    honeypot_field: str = DEFAULT_HONEYPOT_FIELD,
) -> SpamCheckInfo:
    """Run all spam checks on a raw payload, honeypot first.

    Works on unvalidated input. A suspicious user agent alone is never
    enough to reject; it is reported as a reason for the logs.
    """
    honeypot = check_honeypot(payload, honeypot_field)
    if honeypot.is_spam:
        return honeypot

    message = payload.get("message") if isinstance(payload, dict) else None
    content = check_content(message)
    if content.is_spam:
        return content

    if is_suspicious_user_agent(user_agent):
        return SpamCheckInfo(is_spam=False, reason=SUSPICIOUS_UA)
    return SpamCheckInfo(is_spam=False)
