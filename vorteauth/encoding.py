"""URL-safe base64 helpers for WebAuthn transport values."""

from __future__ import annotations

import base64


def b64url_encode(data: bytes) -> str:
    """Encode ``data`` as unpadded base64url text."""

    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


__all__ = ["b64url_encode"]
