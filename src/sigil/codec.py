"""Token codec: compact JSON wrapped in base64 text."""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from typing import Any

import msgspec

from .exceptions import FormatInvalidError
from .serialization import json_decode, json_encode


def encode_token(fields: Mapping[str, Any]) -> str:
    """Serialize ``fields`` into the transport-safe token format."""

    return base64.b64encode(json_encode(dict(fields))).decode("ascii")


def decode_token(token: str | bytes) -> dict[str, Any]:
    """Parse a token produced by :func:`encode_token`.

    Raises :class:`FormatInvalidError` when the text is not base64, the
    payload is not JSON, or the JSON value is not an object.
    """

    try:
        raw = base64.b64decode(token, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise FormatInvalidError("invalid token encoding") from exc
    try:
        decoded = json_decode(raw)
    except msgspec.DecodeError as exc:
        raise FormatInvalidError("invalid token payload") from exc
    if not isinstance(decoded, dict):
        raise FormatInvalidError("token payload is not an object")
    return decoded


__all__ = ["decode_token", "encode_token"]
