"""HMAC-SHA256 signatures over canonical handshake messages."""

from __future__ import annotations

import hmac
from hashlib import sha256
from typing import Any


def sign(message: str, secret: str) -> str:
    """Return the lowercase hex HMAC-SHA256 of ``message`` keyed by ``secret``."""

    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), sha256).hexdigest()


def verify(message: str, secret: str, signature: Any) -> bool:
    """Check ``signature`` against ``message`` in constant time."""

    if not isinstance(signature, str):
        return False
    expected = sign(message, secret)
    try:
        return hmac.compare_digest(expected, signature)
    except TypeError:
        # compare_digest refuses non-ASCII str input
        return False


def request_message(sp: str, iat: int) -> str:
    return f"{sp}{iat}"


def response_message(idp: str, sp: str, uid: str | int, iat: int, scope: str) -> str:
    return f"{idp}{sp}{uid}{iat}{scope}"


__all__ = ["request_message", "response_message", "sign", "verify"]
