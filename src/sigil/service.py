"""Service provider side of the handshake."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import urlencode, urlsplit

from .codec import decode_token, encode_token
from .config import ServiceProviderConfig
from .exceptions import (
    FormatInvalidError,
    InvalidScopeError,
    ParametersMissingError,
    ProviderMismatchError,
    ResponseExpiredError,
    SignatureMismatchError,
)
from .observability import Observability
from .replay import ReplayGuard
from .requests import Request, single_params
from .results import Redirect
from .signing import request_message, response_message, sign, verify
from .tokens import REQUEST_TOKEN_PARAM, RESPONSE_FIELDS, Identity, RequestToken, epoch_seconds


class ServiceProvider:
    """Start handshakes with the partner identity provider and verify its answers."""

    def __init__(
        self,
        config: ServiceProviderConfig,
        *,
        replay_guard: ReplayGuard | None = None,
        observability: Observability | None = None,
    ) -> None:
        self.config = config
        self.replay_guard = replay_guard
        self.observability = observability or Observability(config.observability)

    @property
    def name(self) -> str:
        return self.config.name

    def create_request_token(
        self,
        redirect_url: str,
        scope: Iterable[Any] | Mapping[str, Any],
        *,
        now: dt.datetime | None = None,
    ) -> str:
        if isinstance(scope, (str, bytes)):
            raise TypeError("scope must be a list or mapping, not a bare string")
        iat = epoch_seconds(now)
        scope_value: list[Any] | dict[str, Any] = dict(scope) if isinstance(scope, Mapping) else list(scope)
        with self.observability.observe("create_request_token", idp=self.config.idp_name, iat=iat):
            request = RequestToken(
                idp=self.config.idp_name,
                sp=self.name,
                redir=redirect_url,
                iat=iat,
                scope=scope_value,
                sig=sign(request_message(self.name, iat), self.config.secret),
            )
            return encode_token(request.to_fields())

    def request_login(
        self,
        scope: Iterable[Any] | Mapping[str, Any] = (),
        override_redirect_url: str | None = None,
        *,
        now: dt.datetime | None = None,
    ) -> Redirect:
        """Return the redirect that sends the browser to the identity provider's login page."""

        redirect_url = self.config.redirect_url if override_redirect_url is None else override_redirect_url
        token = self.create_request_token(redirect_url, scope, now=now)
        login_url = self.config.idp_login_url
        if login_url.endswith(("?", "&")):
            separator = ""
        elif urlsplit(login_url).query:
            separator = "&"
        else:
            separator = "?"
        return Redirect(location=f"{login_url}{separator}{urlencode({REQUEST_TOKEN_PARAM: token})}")

    def handle_response(
        self,
        params: Request | Mapping[str, Any],
        *,
        now: dt.datetime | None = None,
    ) -> Identity:
        """Verify the fields posted back by the identity provider.

        Checks run in a fixed order: presence, signature, addressee, age,
        then the scope payload. The first failure is raised.
        """

        values = single_params(params)
        with self.observability.observe("handle_response") as fields:
            missing = [name for name in RESPONSE_FIELDS if name not in values]
            if missing:
                raise ParametersMissingError(f"incomplete response, missing: {', '.join(missing)}")
            idp, sp, uid, scope_token, sig = (
                _text_field(values, "idp"),
                _text_field(values, "sp"),
                _uid_field(values["uid"]),
                _text_field(values, "scope"),
                _text_field(values, "sig"),
            )
            iat = _iat_field(values["iat"])
            fields.update(idp=idp, sp=sp, iat=iat)

            if not self.verify_response(idp, sp, uid, iat, scope_token, sig):
                raise SignatureMismatchError("response signature does not match")
            if sp != self.name:
                raise ProviderMismatchError(f"response addressed to service provider {sp!r}")
            current = epoch_seconds(now)
            expires_at = iat + self.config.response_timeout_seconds
            if current > expires_at:
                raise ResponseExpiredError("response timed out, please try again")
            try:
                scope = decode_token(scope_token)
            except FormatInvalidError as exc:
                raise InvalidScopeError("invalid user account scope returned") from exc
            if self.replay_guard is not None:
                self.replay_guard.remember(sig, expires_at=expires_at, now=current)
            return Identity(uid=str(uid), scope=scope)

    def verify_response(
        self,
        idp: str,
        sp: str,
        uid: str | int,
        iat: int,
        scope_token: str,
        sig: str,
    ) -> bool:
        return verify(response_message(idp, sp, uid, iat, scope_token), self.config.secret, sig)


def _text_field(values: Mapping[str, Any], name: str) -> str:
    value = values[name]
    if not isinstance(value, str):
        raise ParametersMissingError(f"response field {name!r} must be text")
    return value


def _uid_field(value: Any) -> str | int:
    if isinstance(value, bool) or not isinstance(value, (str, int)) or value == "":
        raise ParametersMissingError("response field 'uid' must be a non-empty identifier")
    return value


def _iat_field(value: Any) -> int:
    if isinstance(value, str) and value.isascii() and value.isdigit():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ParametersMissingError("response field 'iat' must be a positive integer")
    return value


__all__ = ["ServiceProvider"]
