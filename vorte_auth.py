"""Command line interface for the Vorte WebAuthn challenge service."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from vorteauth.config import get_settings
from vorteauth.errors import VorteAuthError
from vorteauth.service import ChallengeService


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API under uvicorn")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8787, help="Port to bind (default: 8787)")

    challenge_parser = subparsers.add_parser(
        "challenge",
        help="Issue a single challenge and print the response payload",
    )
    challenge_parser.add_argument(
        "--host",
        default="localhost",
        help="Request host used to derive the RP ID (default: localhost)",
    )
    challenge_parser.add_argument(
        "--fingerprint",
        required=True,
        help="32 hex character client fingerprint",
    )
    challenge_parser.add_argument("--origin", help="Optional Origin header value")

    rp_parser = subparsers.add_parser("rp-id", help="Print the RP ID derived for a host")
    rp_parser.add_argument("hostname", help="Host, optionally with a port")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    namespace = parse_args(argv or sys.argv[1:])
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if namespace.command == "serve":
        import uvicorn

        uvicorn.run("vorteauth.server:app", host=namespace.host, port=namespace.port)
        return 0

    service = ChallengeService(settings)

    if namespace.command == "challenge":
        try:
            grant = service.request_challenge(
                host=namespace.host,
                fingerprint=namespace.fingerprint,
                origin=namespace.origin,
            )
        except VorteAuthError as exc:
            print(exc.message, file=sys.stderr)
            return 1
        print(json.dumps(grant.to_dict(), indent=2))
        return 0

    if namespace.command == "rp-id":
        print(service.derive_rp_id(namespace.hostname))
        return 0

    raise RuntimeError("Unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
