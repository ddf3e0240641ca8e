"""Validation of the client-supplied ``X-Fingerprint`` token."""

from __future__ import annotations

import re
from typing import Optional

from .constants import FINGERPRINT_LENGTH
from .errors import InvalidFingerprint

_FINGERPRINT_RE = re.compile(rf"[0-9a-f]{{{FINGERPRINT_LENGTH}}}", re.IGNORECASE)


def validate_fingerprint(value: Optional[str]) -> str:
    """Return the canonical (lower-case) fingerprint or raise ``InvalidFingerprint``."""

    if value is None:
        raise InvalidFingerprint("fingerprint header missing")
    candidate = value.strip()
    if not _FINGERPRINT_RE.fullmatch(candidate):
        raise InvalidFingerprint("fingerprint must be 32 hex characters")
    return candidate.lower()


def fingerprint_hint(fingerprint: str) -> str:
    """Short, non-identifying prefix used in log lines."""

    return fingerprint[:6] + "..."


__all__ = ["fingerprint_hint", "validate_fingerprint"]
