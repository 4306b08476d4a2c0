"""Outcomes the handshake flows hand back for the host to carry out."""

from __future__ import annotations

import secrets

from msgspec import Struct

from .http import Status
from .responses import HTMLResponse, RedirectResponse, Response, render_form_post
from .tokens import RequestToken, ResponseToken


class NoRequest(Struct, frozen=True, tag="no_request"):
    """No handshake is in progress; serve the page as usual."""


class LoginRequired(Struct, frozen=True, tag="login_required"):
    """A valid request arrived but nobody is signed in yet.

    ``token`` is the request re-encoded so the login form can carry it
    through to the next attempt.
    """

    request: RequestToken
    token: str


class FormPost(Struct, frozen=True, tag="form_post"):
    """Deliver ``response`` to ``action`` through an auto-submitting form."""

    action: str
    response: ResponseToken

    @property
    def fields(self) -> dict[str, str]:
        return self.response.form_fields()

    def to_response(self, *, nonce: str | None = None) -> Response:
        nonce = nonce or secrets.token_urlsafe(16)
        document = render_form_post(self.action, self.fields, nonce=nonce)
        csp = f"default-src 'self'; script-src 'nonce-{nonce}'"
        return HTMLResponse(document, headers=(("content-security-policy", csp),))


class Redirect(Struct, frozen=True, tag="redirect"):
    location: str
    status: int = int(Status.MOVED_PERMANENTLY)

    def to_response(self) -> Response:
        return RedirectResponse(self.location, status=self.status)


HandshakeResult = NoRequest | LoginRequired | FormPost

__all__ = ["FormPost", "HandshakeResult", "LoginRequired", "NoRequest", "Redirect"]
