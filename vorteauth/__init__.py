"""WebAuthn challenge issuance with origin gating and per-fingerprint rate limiting."""

from .challenge import ChallengeIssuer, IssuedChallenge
from .config import VorteSettings, get_settings
from .encoding import b64url_encode
from .errors import (
    InvalidFingerprint,
    OriginNotAllowed,
    RandomnessUnavailable,
    RateLimited,
    TransactionNotFound,
    VorteAuthError,
)
from .fingerprint import validate_fingerprint
from .origin import OriginGate, normalize_origin
from .ratelimit import RateLimitDecision, RateLimitKey, RateLimiter
from .rpid import derive_rp_id
from .service import ChallengeGrant, ChallengeService
from .transactions import Transaction, TransactionCache

__all__ = [
    "ChallengeGrant",
    "ChallengeIssuer",
    "ChallengeService",
    "IssuedChallenge",
    "InvalidFingerprint",
    "OriginGate",
    "OriginNotAllowed",
    "RandomnessUnavailable",
    "RateLimitDecision",
    "RateLimitKey",
    "RateLimited",
    "RateLimiter",
    "Transaction",
    "TransactionCache",
    "TransactionNotFound",
    "VorteAuthError",
    "VorteSettings",
    "b64url_encode",
    "derive_rp_id",
    "get_settings",
    "normalize_origin",
    "validate_fingerprint",
]
