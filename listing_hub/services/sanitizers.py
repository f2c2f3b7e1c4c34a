"""
Contact field sanitizers.

A malformed contact detail never blocks a submission: each sanitizer returns a
FieldOutcome instead of raising, so callers can tell an omitted field from one
that was rejected and degraded to null. All sanitizers are idempotent.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import urlparse

OutcomeState = Literal["accepted", "omitted", "degraded"]

MIN_EMAIL_LENGTH = 6
# upper bounds match the listing columns that store these values
MAX_EMAIL_LENGTH = 320
MAX_VIDEO_URL_LENGTH = 500
MIN_PHONE_DIGITS = 7
MAX_PHONE_DIGITS = 15

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class FieldOutcome:
    value: str | None
    state: OutcomeState
    reason: str | None = None

    @property
    def degraded(self) -> bool:
        return self.state == "degraded"


OMITTED = FieldOutcome(value=None, state="omitted")


def _degrade(reason: str) -> FieldOutcome:
    return FieldOutcome(value=None, state="degraded", reason=reason)


def _blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def sanitize_email(raw: Any) -> FieldOutcome:
    if _blank(raw):
        return OMITTED
    if not isinstance(raw, str):
        return _degrade("not_a_string")

    v = raw.strip().lower()
    if len(v) < MIN_EMAIL_LENGTH:
        return _degrade("too_short")
    if len(v) > MAX_EMAIL_LENGTH:
        return _degrade("too_long")
    if v.count("@") != 1 or any(ch.isspace() for ch in v):
        return _degrade("malformed")
    local, domain = v.split("@")
    if not local or "." not in domain or domain.startswith(".") or domain.endswith("."):
        return _degrade("malformed")
    return FieldOutcome(value=v, state="accepted")


def sanitize_phone(raw: Any) -> FieldOutcome:
    """
    Normalize to "+<digits>": "+592-123-4567" and "(592) 123 4567" both become
    "+5921234567".
    """
    if _blank(raw):
        return OMITTED
    if isinstance(raw, bool) or not isinstance(raw, (str, int)):
        return _degrade("not_a_string")

    digits = _NON_DIGITS.sub("", str(raw))
    if not digits:
        return _degrade("no_digits")
    if len(digits) < MIN_PHONE_DIGITS or len(digits) > MAX_PHONE_DIGITS:
        return _degrade("bad_length")
    return FieldOutcome(value=f"+{digits}", state="accepted")


def sanitize_video_url(raw: Any) -> FieldOutcome:
    if _blank(raw):
        return OMITTED
    if not isinstance(raw, str):
        return _degrade("not_a_string")

    v = raw.strip()
    if len(v) > MAX_VIDEO_URL_LENGTH:
        return _degrade("too_long")
    try:
        parsed = urlparse(v)
    except ValueError:
        return _degrade("malformed")
    if parsed.scheme.lower() not in ("http", "https"):
        return _degrade("unsupported_scheme")
    if not parsed.netloc or any(ch.isspace() for ch in v):
        return _degrade("malformed")
    return FieldOutcome(value=v, state="accepted")
