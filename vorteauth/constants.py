"""Fixed policy values shared by the challenge service."""

from __future__ import annotations

CHALLENGE_BYTES = 32
USER_VERIFICATION = "required"
CHALLENGE_TIMEOUT_MS = 60_000

RATE_LIMIT_WINDOW_SECONDS = 60
RATE_LIMIT_CAPACITY = 100_000

TRANSACTION_TTL_SECONDS = 300
TRANSACTION_CAPACITY = 100_000

SWEEP_INTERVAL_SECONDS = 60.0

PRODUCTION_RP_ID = "vorte.app"
DEV_HOSTS = ("localhost", "127.0.0.1")
ALLOWED_ORIGINS = ("http://localhost:8787", "https://vorte.app")

FINGERPRINT_HEADER = "X-Fingerprint"
FINGERPRINT_LENGTH = 32

API_PREFIX = "/api/v1"
