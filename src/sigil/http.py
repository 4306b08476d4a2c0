"""HTTP utilities and status code helpers."""

from __future__ import annotations

from enum import IntEnum
from http import HTTPStatus as _HTTPStatus


class Status(IntEnum):
    """Enumeration of the HTTP status codes emitted during a handshake."""

    OK = 200
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    INTERNAL_SERVER_ERROR = 500


def ensure_status(status: int | Status) -> int:
    """Normalize ``status`` to an ``int`` and ensure it is within the HTTP range."""

    code = int(status)
    if code < 100 or code > 599:
        raise ValueError(f"Invalid HTTP status code: {status}")
    return code


def reason_phrase(status: int | Status) -> str:
    """Return the HTTP reason phrase for ``status`` if known."""

    try:
        code = ensure_status(status)
    except ValueError:
        return "Unknown Status"
    try:
        return _HTTPStatus(code).phrase
    except ValueError:  # pragma: no cover - non-standard status codes
        return "Unknown Status"


def is_redirect(status: int | Status) -> bool:
    """Return ``True`` if ``status`` is a 3xx code."""

    code = ensure_status(status)
    return 300 <= code < 400


__all__ = [
    "Status",
    "ensure_status",
    "is_redirect",
    "reason_phrase",
]
