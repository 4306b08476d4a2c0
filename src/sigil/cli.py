"""Command line utilities for Sigil."""

from __future__ import annotations

import argparse
import json
import secrets
import sys
from typing import Sequence

from .codec import decode_token
from .config import ServiceProviderConfig
from .exceptions import FormatInvalidError
from .service import ServiceProvider

PROJECT_NAME = "sigil"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROJECT_NAME, description="Shared-secret SSO handshake tools")
    sub = parser.add_subparsers(dest="command", required=True)

    inspect = sub.add_parser("inspect", help="Decode a request or scope token and print its fields")
    inspect.add_argument("token")
    inspect.set_defaults(func=_cmd_inspect)

    secret = sub.add_parser("generate-secret", help="Print a random shared secret")
    secret.add_argument("--bytes", type=int, default=32, dest="size")
    secret.set_defaults(func=_cmd_generate_secret)

    request = sub.add_parser("request-token", help="Build a signed request token")
    request.add_argument("--sp", required=True, help="Service provider name")
    request.add_argument("--idp", required=True, help="Identity provider name")
    request.add_argument("--secret", required=True, help="Secret shared with the identity provider")
    request.add_argument("--redirect", required=True, help="URL the identity provider posts back to")
    request.add_argument("--scope", action="append", default=[], help="Requested scope, repeatable")
    request.set_defaults(func=_cmd_request_token)
    return parser


def _cmd_inspect(args: argparse.Namespace) -> int:
    try:
        fields = decode_token(args.token)
    except FormatInvalidError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(fields, indent=2, sort_keys=False))
    return 0


def _cmd_generate_secret(args: argparse.Namespace) -> int:
    if args.size < 16:
        print("error: secrets shorter than 16 bytes are not accepted", file=sys.stderr)
        return 2
    print(secrets.token_hex(args.size))
    return 0


def _cmd_request_token(args: argparse.Namespace) -> int:
    config = ServiceProviderConfig(
        name=args.sp,
        idp_name=args.idp,
        idp_login_url="",
        redirect_url=args.redirect,
        secret=args.secret,
    )
    print(ServiceProvider(config).create_request_token(args.redirect, args.scope))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
