"""Process-local binding of transaction ids to issued challenges."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from .constants import TRANSACTION_CAPACITY, TRANSACTION_TTL_SECONDS
from .errors import TransactionNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transaction:
    transaction_id: str
    challenge: str
    rp_id: str
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TransactionCache:
    """Single-use, time-limited store of pending ceremonies.

    ``consume`` removes the entry it returns, so the completion path can use
    a transaction at most once. Entries older than ``ttl`` seconds are
    treated as missing and dropped whenever the cache is touched.
    """

    def __init__(
        self,
        ttl: float = TRANSACTION_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.time,
        capacity: int = TRANSACTION_CAPACITY,
    ) -> None:
        if ttl <= 0:
            raise ValueError("Transaction TTL must be positive")
        if capacity < 1:
            raise ValueError("Transaction capacity must be at least 1")
        self.ttl = float(ttl)
        self.capacity = capacity
        self._clock = clock
        # Insertion order doubles as expiry order since every entry shares one ttl.
        self._entries: "OrderedDict[str, Transaction]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def put(self, transaction_id: str, challenge: str, rp_id: str) -> Transaction:
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            if transaction_id in self._entries:
                logger.error("Transaction id collision for %s, overwriting", transaction_id)
                del self._entries[transaction_id]
            while len(self._entries) >= self.capacity:
                dropped, _ = self._entries.popitem(last=False)
                logger.warning("Transaction cache full, dropped %s", dropped)
            transaction = Transaction(
                transaction_id=transaction_id,
                challenge=challenge,
                rp_id=rp_id,
                created_at=now,
                expires_at=now + self.ttl,
            )
            self._entries[transaction_id] = transaction
            return transaction

    def get(self, transaction_id: str) -> Transaction:
        """Look up a pending transaction without consuming it."""

        with self._lock:
            self._evict_expired(self._clock())
            transaction = self._entries.get(transaction_id)
        if transaction is None:
            raise self._miss(transaction_id)
        return transaction

    def consume(self, transaction_id: str) -> Transaction:
        """Remove and return a pending transaction."""

        with self._lock:
            self._evict_expired(self._clock())
            transaction = self._entries.pop(transaction_id, None)
        if transaction is None:
            raise self._miss(transaction_id)
        return transaction

    def _miss(self, transaction_id: str) -> TransactionNotFound:
        # Expired, replayed or forged; worth noticing separately from bad input.
        logger.warning("Transaction %s not found (expired, reused or unknown)", transaction_id)
        return TransactionNotFound(transaction_id)

    def _evict_expired(self, now: float) -> None:
        while self._entries:
            oldest = next(iter(self._entries.values()))
            if not oldest.is_expired(now):
                break
            self._entries.popitem(last=False)


__all__ = ["Transaction", "TransactionCache"]
