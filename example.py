"""Walk through one complete Sigil handshake in a single process.

Run ``python example.py`` after installing the package. The service provider
and identity provider are configured from ``SIGIL_SP_*`` and ``SIGIL_IDP_*``
environment variables when present and fall back to demo values otherwise.
"""

from __future__ import annotations

import logging
import os
from urllib.parse import urlencode, urlsplit

from sigil import (
    FormPost,
    IdentityProvider,
    IdentityProviderConfig,
    LoginCredentials,
    Request,
    ServiceProvider,
    ServiceProviderConfig,
    StaticCredentialResolver,
    StaticSecretStore,
    config_from_env,
)

_DEMO_SP = {
    "SIGIL_SP_NAME": "shop",
    "SIGIL_SP_IDP_NAME": "accounts",
    "SIGIL_SP_IDP_LOGIN_URL": "https://accounts.local.test/login",
    "SIGIL_SP_REDIRECT_URL": "https://shop.local.test/sso/callback",
    "SIGIL_SP_SECRET": "demo-shared-secret",
}
_DEMO_IDP = {"SIGIL_IDP_NAME": "accounts", "SIGIL_IDP_LOGIN_TIMEOUT_MINUTES": "10"}


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s %(message)s")
    environ = {**_DEMO_SP, **_DEMO_IDP, **os.environ}
    sp_config = config_from_env(ServiceProviderConfig, "SIGIL_SP", environ)
    idp_config = config_from_env(IdentityProviderConfig, "SIGIL_IDP", environ)

    shop = ServiceProvider(sp_config)
    accounts = IdentityProvider(
        idp_config,
        secrets=StaticSecretStore({sp_config.name: sp_config.secret}),
        credentials=StaticCredentialResolver(LoginCredentials(uid="42", scope={"email": "a@b.com"})),
    )

    redirect = shop.request_login(["email"])
    print(f"SP -> browser: {redirect.status} {redirect.location}")

    login_request = Request(method="GET", path="/login", query_string=urlsplit(redirect.location).query)
    result = accounts.handle_request(login_request)
    if not isinstance(result, FormPost):
        raise SystemExit(f"unexpected identity provider result: {result!r}")
    print(f"IdP -> browser: auto-submit form to {result.action}")

    callback = Request(
        method="POST",
        path="/sso/callback",
        headers={"content-type": "application/x-www-form-urlencoded"},
        body=urlencode(result.fields).encode(),
    )
    identity = shop.handle_response(callback)
    print(f"SP verified uid={identity.uid} scope={identity.scope}")


if __name__ == "__main__":
    main()
