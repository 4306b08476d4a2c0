"""Identity provider side of the handshake."""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from typing import Any

from .codec import decode_token, encode_token
from .config import IdentityProviderConfig
from .exceptions import (
    FormatInvalidError,
    ProviderMismatchError,
    RequestExpiredError,
    SignatureMismatchError,
)
from .observability import Observability
from .providers import CredentialResolver, SecretStore
from .requests import Request, single_params
from .results import FormPost, HandshakeResult, LoginRequired, NoRequest
from .signing import request_message, response_message, sign, verify
from .tokens import REQUEST_TOKEN_PARAM, LoginCredentials, RequestToken, ResponseToken, epoch_seconds


class IdentityProvider:
    """Validate inbound SSO requests and answer them with signed responses.

    Each call handles one inbound request cycle and keeps no state between
    calls, so a single instance can serve concurrent requests.
    """

    def __init__(
        self,
        config: IdentityProviderConfig,
        *,
        secrets: SecretStore,
        credentials: CredentialResolver,
        observability: Observability | None = None,
    ) -> None:
        self.config = config
        self.secrets = secrets
        self.credentials = credentials
        self.observability = observability or Observability(config.observability)

    @property
    def name(self) -> str:
        return self.config.name

    def check_request(
        self,
        params: Request | Mapping[str, Any],
        *,
        check_timeout: bool = True,
        now: dt.datetime | None = None,
    ) -> RequestToken | None:
        """Return the validated request carried by ``params``, or ``None`` if there is none.

        Pass ``check_timeout=False`` to accept a request whose login window
        has elapsed, for example to show a "please start again" page that
        links back to the requesting service.
        """

        checked = self._check_request(params, check_timeout=check_timeout, now=now)
        return None if checked is None else checked[0]

    def verify_request(self, sp: str, iat: int, sig: str) -> bool:
        secret = self.secrets.get_service_provider_secret(sp)
        if secret is None:
            return False
        return verify(request_message(sp, iat), secret, sig)

    def _check_request(
        self,
        params: Request | Mapping[str, Any],
        *,
        check_timeout: bool,
        now: dt.datetime | None,
    ) -> tuple[RequestToken, str] | None:
        raw = single_params(params).get(REQUEST_TOKEN_PARAM)
        if raw is None or raw == "":
            return None
        with self.observability.observe("check_request") as fields:
            if not isinstance(raw, str):
                raise FormatInvalidError("request token must be text")
            request = RequestToken.from_fields(decode_token(raw))
            fields.update(sp=request.sp, idp=request.idp, iat=request.iat)
            secret = self.secrets.get_service_provider_secret(request.sp)
            if secret is None or not verify(request_message(request.sp, request.iat), secret, request.sig):
                raise SignatureMismatchError("request signature does not match")
            if request.idp != self.name:
                raise ProviderMismatchError(f"request addressed to identity provider {request.idp!r}")
            if check_timeout and epoch_seconds(now) > request.iat + self.config.login_timeout_seconds:
                raise RequestExpiredError("request timed out, please try again")
        return request, secret

    def handle_request(
        self,
        params: Request | Mapping[str, Any],
        *,
        now: dt.datetime | None = None,
    ) -> HandshakeResult:
        """Answer an inbound request once the user is signed in.

        Returns :class:`NoRequest` when no handshake is in progress,
        :class:`LoginRequired` when the credential resolver reports nobody
        signed in, and otherwise a :class:`FormPost` carrying the signed
        response to the requester's redirect URL.
        """

        checked = self._check_request(params, check_timeout=True, now=now)
        if checked is None:
            return NoRequest()
        request, secret = checked
        with self.observability.observe("handle_request", sp=request.sp) as fields:
            resolved = self.credentials.get_login_credentials(request.scope)
            if resolved is None:
                fields["outcome"] = "login_required"
                return LoginRequired(request=request, token=self.reconstruct_token(request))
            credentials = LoginCredentials.coerce(resolved)
            response = self._build_response(request, credentials, secret, epoch_seconds(now))
            fields["outcome"] = "dispatched"
            return FormPost(action=request.redir, response=response)

    def reconstruct_token(self, request: RequestToken | Mapping[str, Any]) -> str:
        """Re-encode a validated request exactly as :func:`encode_token` would."""

        if isinstance(request, RequestToken):
            fields = request.to_fields()
        else:
            fields = {name: request[name] for name in RequestToken.__struct_fields__}
        return encode_token(fields)

    def _build_response(
        self,
        request: RequestToken,
        credentials: LoginCredentials,
        secret: str,
        iat: int,
    ) -> ResponseToken:
        scope = encode_token(credentials.scope)
        message = response_message(self.name, request.sp, credentials.uid, iat, scope)
        return ResponseToken(
            idp=self.name,
            sp=request.sp,
            uid=credentials.uid,
            iat=iat,
            scope=scope,
            sig=sign(message, secret),
        )


__all__ = ["IdentityProvider"]
