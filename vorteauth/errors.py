"""Failures surfaced by the challenge service."""

from __future__ import annotations

from typing import Dict


class VorteAuthError(Exception):
    """Base class for errors that are reported to the client."""

    status_code = 400
    message = "Request rejected"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)

    def to_dict(self) -> Dict[str, object]:
        # Only the fixed message is ever sent back, never the detail.
        return {"success": False, "error": self.message}


class InvalidFingerprint(VorteAuthError):
    status_code = 400
    message = "X-Fingerprint header is required or invalid"


class OriginNotAllowed(VorteAuthError):
    status_code = 403
    message = "Origin not allowed"


class RateLimited(VorteAuthError):
    status_code = 429
    message = "Only 1 challenge per 60 seconds (per fingerprint)"

    def __init__(self, retry_after: int) -> None:
        super().__init__(f"retry after {retry_after}s")
        self.retry_after = retry_after


class TransactionNotFound(VorteAuthError):
    """The transaction id is unknown, already consumed, or expired."""

    status_code = 404
    message = "Unknown or expired transaction"

    def __init__(self, transaction_id: str) -> None:
        super().__init__(f"transaction {transaction_id!r} not found")
        self.transaction_id = transaction_id


class RandomnessUnavailable(VorteAuthError):
    status_code = 503
    message = "Challenge issuance is temporarily unavailable"


__all__ = [
    "InvalidFingerprint",
    "OriginNotAllowed",
    "RandomnessUnavailable",
    "RateLimited",
    "TransactionNotFound",
    "VorteAuthError",
]
