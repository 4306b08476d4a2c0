"""Typed handshake payloads."""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from typing import Annotated, Any

import msgspec
from msgspec import Meta, Struct, field, structs

from .exceptions import CredentialsInvalidError, ParametersMissingError
from .signing import request_message, response_message

REQUEST_TOKEN_PARAM = "sso-request-token"
RESPONSE_FIELDS: tuple[str, ...] = ("idp", "sp", "uid", "iat", "scope", "sig")

Timestamp = Annotated[int, Meta(gt=0)]
UserId = Annotated[str, Meta(min_length=1)] | int
Scope = list[Any] | dict[str, Any]


class RequestToken(Struct, frozen=True):
    """Signed payload a service provider sends to start a handshake.

    ``sig`` covers ``sp`` and ``iat`` only; ``scope`` is whatever shape the
    service provider and its identity provider agreed on.
    """

    idp: str
    sp: str
    redir: str
    iat: Timestamp
    scope: Scope
    sig: str

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> "RequestToken":
        try:
            return msgspec.convert(fields, type=cls)
        except msgspec.ValidationError as exc:
            raise ParametersMissingError(f"incomplete request token: {exc}") from exc

    def message(self) -> str:
        return request_message(self.sp, self.iat)

    def to_fields(self) -> dict[str, Any]:
        return structs.asdict(self)


class ResponseToken(Struct, frozen=True):
    """Signed assertion an identity provider posts back to a service provider.

    ``scope`` holds the encoded attribute token exactly as signed.
    """

    idp: str
    sp: str
    uid: UserId
    iat: Timestamp
    scope: str
    sig: str

    def message(self) -> str:
        return response_message(self.idp, self.sp, self.uid, self.iat, self.scope)

    def form_fields(self) -> dict[str, str]:
        return {name: str(value) for name, value in structs.asdict(self).items()}


class LoginCredentials(Struct, frozen=True):
    uid: UserId
    scope: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, value: Any) -> "LoginCredentials":
        """Validate whatever a credential resolver handed back."""

        # Struct constructors skip type checks, so instances are revalidated too.
        if isinstance(value, cls):
            value = structs.asdict(value)
        elif isinstance(value, Mapping):
            value = dict(value)
        try:
            return msgspec.convert(value, type=cls)
        except msgspec.ValidationError as exc:
            raise CredentialsInvalidError(f"invalid login credentials: {exc}") from exc


class Identity(Struct, frozen=True):
    """A user identity verified by a service provider."""

    uid: str
    scope: dict[str, Any]


def ensure_utc(moment: dt.datetime | None) -> dt.datetime:
    if moment is None:
        return dt.datetime.now(dt.timezone.utc)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=dt.timezone.utc)
    return moment.astimezone(dt.timezone.utc)


def epoch_seconds(moment: dt.datetime | None = None) -> int:
    return int(ensure_utc(moment).timestamp())


__all__ = [
    "REQUEST_TOKEN_PARAM",
    "RESPONSE_FIELDS",
    "Identity",
    "LoginCredentials",
    "RequestToken",
    "ResponseToken",
    "ensure_utc",
    "epoch_seconds",
]
