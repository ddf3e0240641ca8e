"""Challenge request pipeline tying the gate, limiter, issuer and cache together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .challenge import ChallengeIssuer, IssuedChallenge
from .config import VorteSettings
from .errors import RateLimited
from .fingerprint import fingerprint_hint, validate_fingerprint
from .origin import OriginGate
from .ratelimit import RateLimitKey, RateLimiter
from .rpid import derive_rp_id
from .transactions import Transaction, TransactionCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChallengeGrant:
    """An issued challenge plus the rate-limit budget reported with it."""

    challenge: IssuedChallenge
    limit: str
    remaining: int
    reset: int

    def to_dict(self) -> dict:
        return {"success": True, "result": self.challenge.to_dict()}


class ChallengeService:
    def __init__(
        self,
        settings: Optional[VorteSettings] = None,
        *,
        limiter: Optional[RateLimiter] = None,
        transactions: Optional[TransactionCache] = None,
        issuer: Optional[ChallengeIssuer] = None,
        gate: Optional[OriginGate] = None,
    ) -> None:
        self.settings = settings if settings is not None else VorteSettings()
        self.limiter = limiter if limiter is not None else RateLimiter(
            self.settings.rate_limit_window_seconds,
            capacity=self.settings.rate_limit_capacity,
        )
        self.transactions = transactions if transactions is not None else TransactionCache(
            self.settings.transaction_ttl_seconds,
            capacity=self.settings.transaction_capacity,
        )
        self.issuer = issuer if issuer is not None else ChallengeIssuer(
            challenge_bytes=self.settings.challenge_bytes,
            user_verification=self.settings.user_verification,
            timeout_ms=self.settings.challenge_timeout_ms,
        )
        self.gate = gate if gate is not None else OriginGate(
            self.settings.allowed_origins,
            allow_missing=self.settings.allow_missing_origin,
        )

    def derive_rp_id(self, host: str) -> str:
        return derive_rp_id(
            host,
            dev_hosts=self.settings.dev_hosts,
            apex=self.settings.production_rp_id,
        )

    def request_challenge(
        self,
        *,
        host: str,
        fingerprint: Optional[str],
        origin: Optional[str] = None,
    ) -> ChallengeGrant:
        """Run a challenge request through every check and issue on admission.

        Origin and fingerprint checks fail before the limiter is consulted,
        so malformed requests never spend a window. The challenge is drawn
        before admission so a randomness failure leaves the limiter untouched.
        """

        self.gate.check(origin)
        fingerprint = validate_fingerprint(fingerprint)
        rp_id = self.derive_rp_id(host)
        issued = self.issuer.issue(rp_id)

        decision = self.limiter.admit(RateLimitKey(rp_id, fingerprint))
        if not decision.admitted:
            logger.info(
                "Rate limited %s on %s, retry in %ss",
                fingerprint_hint(fingerprint),
                rp_id,
                decision.retry_after,
            )
            raise RateLimited(decision.retry_after)

        self.transactions.put(issued.transaction_id, issued.challenge, rp_id)
        logger.debug("Issued transaction %s for %s", issued.transaction_id, rp_id)
        return ChallengeGrant(
            challenge=issued,
            limit=self.settings.rate_limit_policy,
            remaining=0,
            reset=decision.reset,
        )

    def complete_registration(self, transaction_id: str) -> Transaction:
        """Claim the challenge bound to ``transaction_id`` for verification."""

        return self.transactions.consume(transaction_id)


__all__ = ["ChallengeGrant", "ChallengeService"]
