# src/token_auth/cli.py

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import logging
import sys
from typing import Any, Sequence

from .adapters.jwt.decoder import UnverifiedJWTDecoder
from .config.env import settings_from_env
from .domain.value_objects import Credentials
from .integrations.common.authenticator import create_token_authenticator


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="token-auth",
        description="Exchange credentials for a bearer token and inspect tokens "
                    "(endpoints from TOKEN_AUTH_* environment variables)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log scheduling and transport details to stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Authenticate and print the session properties.")
    login.add_argument("--identification", "-u", required=True, help="Username / e-mail.")
    login.add_argument(
        "--password",
        "-p",
        help="Password (prompted for when omitted).",
    )

    decode = sub.add_parser("decode", help="Print the claims carried by a token.")
    decode.add_argument("token", help="Dot-delimited bearer token.")

    return parser.parse_args(args=argv)


async def _login(args: argparse.Namespace) -> dict[str, Any]:
    # a one-shot login never lives long enough to refresh
    settings = settings_from_env(inert_timers=True)
    password = args.password if args.password is not None else getpass.getpass("Password: ")

    async with create_token_authenticator(settings) as authenticator:
        session = await authenticator.authenticate(
            Credentials(identification=args.identification, password=password)
        )
        pending = authenticator.scheduler.pending
        return {
            "session": session,
            "refresh_in_ms": pending.wait_ms if pending else None,
        }


def _decode(args: argparse.Namespace) -> dict[str, Any]:
    return {"claims": dict(UnverifiedJWTDecoder().decode(args.token))}


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "login":
            summary = asyncio.run(_login(args))
        else:
            summary = _decode(args)
        json.dump({"ok": True, **summary}, sys.stdout, indent=2, default=str)
        sys.stdout.write("\n")
    except Exception as exc:  # noqa: BLE001
        error = getattr(exc, "payload", None) or str(exc)
        json.dump({"ok": False, "error": error}, sys.stdout, indent=2, default=str)
        sys.stdout.write("\n")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
