"""Shared builders for Sigil handshake tests."""

from __future__ import annotations

import datetime as dt
from typing import Any

from sigil.codec import encode_token
from sigil.config import IdentityProviderConfig, ServiceProviderConfig
from sigil.identity import IdentityProvider
from sigil.providers import StaticCredentialResolver, StaticSecretStore
from sigil.service import ServiceProvider
from sigil.signing import request_message, sign

NOW = dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.timezone.utc)
NOW_TS = int(NOW.timestamp())

IDP_NAME = "accounts"
SP_NAME = "shop"
SP_SECRET = "shop-shared-secret"
LOGIN_URL = "https://accounts.example.com/login"
CALLBACK_URL = "https://shop.example.com/sso/callback"


def at(seconds: int) -> dt.datetime:
    """Return ``NOW`` shifted by ``seconds``."""

    return NOW + dt.timedelta(seconds=seconds)


def make_sp_config(**overrides: Any) -> ServiceProviderConfig:
    values: dict[str, Any] = {
        "name": SP_NAME,
        "idp_name": IDP_NAME,
        "idp_login_url": LOGIN_URL,
        "redirect_url": CALLBACK_URL,
        "secret": SP_SECRET,
    }
    values.update(overrides)
    return ServiceProviderConfig(**values)


def make_service_provider(**overrides: Any) -> ServiceProvider:
    replay_guard = overrides.pop("replay_guard", None)
    return ServiceProvider(make_sp_config(**overrides), replay_guard=replay_guard)


def make_identity_provider(
    *,
    credentials: Any = None,
    secrets: dict[str, str] | None = None,
    login_timeout_minutes: int = 10,
) -> tuple[IdentityProvider, StaticSecretStore, StaticCredentialResolver]:
    store = StaticSecretStore({SP_NAME: SP_SECRET} if secrets is None else secrets)
    resolver = StaticCredentialResolver(credentials)
    config = IdentityProviderConfig(name=IDP_NAME, login_timeout_minutes=login_timeout_minutes)
    return IdentityProvider(config, secrets=store, credentials=resolver), store, resolver


def signed_request_fields(
    *,
    idp: str = IDP_NAME,
    sp: str = SP_NAME,
    redir: str = CALLBACK_URL,
    iat: int = NOW_TS,
    scope: Any = None,
    secret: str = SP_SECRET,
) -> dict[str, Any]:
    return {
        "idp": idp,
        "sp": sp,
        "redir": redir,
        "iat": iat,
        "scope": ["email"] if scope is None else scope,
        "sig": sign(request_message(sp, iat), secret),
    }


def request_params(fields: dict[str, Any]) -> dict[str, str]:
    return {"sso-request-token": encode_token(fields)}
