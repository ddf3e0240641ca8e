"""Origin allow-listing for challenge requests."""

from __future__ import annotations

import logging
from typing import Iterable, Optional
from urllib.parse import urlsplit

from .errors import OriginNotAllowed

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_origin(value: str) -> Optional[str]:
    """Reduce ``value`` to ``scheme://host[:port]``.

    Scheme and host are lower-cased and a default port is dropped, so
    ``HTTPS://Vorte.App:443/`` and ``https://vorte.app`` compare equal.
    Returns ``None`` when the value is not a usable http(s) origin.
    """

    candidate = value.strip()
    if not candidate or candidate.lower() == "null":
        return None
    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    host = parts.hostname
    if scheme not in _DEFAULT_PORTS or not host:
        return None
    if ":" in host:
        host = f"[{host}]"
    if port is None or port == _DEFAULT_PORTS[scheme]:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


class OriginGate:
    """Decide whether a declared ``Origin`` may start a ceremony."""

    def __init__(self, allowed_origins: Iterable[str], *, allow_missing: bool = True) -> None:
        normalized = set()
        for entry in allowed_origins:
            origin = normalize_origin(entry)
            if origin is None:
                raise ValueError(f"Invalid allow-list origin: {entry!r}")
            normalized.add(origin)
        self.allowed = frozenset(normalized)
        self.allow_missing = allow_missing

    def is_allowed(self, origin: Optional[str]) -> bool:
        if origin is None:
            return self.allow_missing
        normalized = normalize_origin(origin)
        return normalized is not None and normalized in self.allowed

    def check(self, origin: Optional[str]) -> None:
        if not self.is_allowed(origin):
            logger.info("Rejected challenge request from origin %r", origin)
            raise OriginNotAllowed()


__all__ = ["OriginGate", "normalize_origin"]
