"""Relying-party identifier derivation."""

from __future__ import annotations

import re
from typing import Iterable

from .constants import DEV_HOSTS, PRODUCTION_RP_ID

_PORT_SUFFIX = re.compile(r":\d+$")


def strip_port(hostname: str) -> str:
    return _PORT_SUFFIX.sub("", hostname.strip())


def derive_rp_id(
    hostname: str,
    *,
    dev_hosts: Iterable[str] = DEV_HOSTS,
    apex: str = PRODUCTION_RP_ID,
) -> str:
    """Map the request host onto the RP ID used in WebAuthn options.

    Development hosts keep their own identity so local testing works against
    the local origin. Every other host, subdomain or not, shares the
    production apex.
    """

    host = strip_port(hostname).lower().rstrip(".")
    if host in dev_hosts:
        return host
    return apex


__all__ = ["derive_rp_id", "strip_port"]
