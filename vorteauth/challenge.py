"""Generation of WebAuthn challenges and transaction identifiers."""

from __future__ import annotations

import logging
import secrets
import uuid
from dataclasses import dataclass
from typing import Callable, Dict

from .constants import CHALLENGE_BYTES, CHALLENGE_TIMEOUT_MS, USER_VERIFICATION
from .encoding import b64url_encode
from .errors import RandomnessUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedChallenge:
    """Challenge and request options returned to the browser."""

    transaction_id: str
    challenge: str
    rp_id: str
    user_verification: str
    timeout_ms: int

    def options(self) -> Dict[str, object]:
        return {
            "challenge": self.challenge,
            "rpId": self.rp_id,
            "userVerification": self.user_verification,
            "timeout": self.timeout_ms,
        }

    def to_dict(self) -> Dict[str, object]:
        return {"transactionId": self.transaction_id, "options": self.options()}


class ChallengeIssuer:
    """Produce fresh challenge/transaction pairs from the OS CSPRNG."""

    def __init__(
        self,
        *,
        challenge_bytes: int = CHALLENGE_BYTES,
        user_verification: str = USER_VERIFICATION,
        timeout_ms: int = CHALLENGE_TIMEOUT_MS,
        token_bytes: Callable[[int], bytes] = secrets.token_bytes,
        uuid_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ) -> None:
        self.challenge_bytes = challenge_bytes
        self.user_verification = user_verification
        self.timeout_ms = timeout_ms
        self._token_bytes = token_bytes
        self._uuid_factory = uuid_factory

    def issue(self, rp_id: str) -> IssuedChallenge:
        try:
            raw = self._token_bytes(self.challenge_bytes)
            transaction_id = str(self._uuid_factory())
        except (OSError, NotImplementedError) as exc:
            logger.error("Secure randomness unavailable: %s", exc)
            raise RandomnessUnavailable(str(exc)) from exc
        if len(raw) != self.challenge_bytes:
            raise RandomnessUnavailable("short read from randomness source")

        return IssuedChallenge(
            transaction_id=transaction_id,
            challenge=b64url_encode(raw),
            rp_id=rp_id,
            user_verification=self.user_verification,
            timeout_ms=self.timeout_ms,
        )


__all__ = ["ChallengeIssuer", "IssuedChallenge"]
