"""Response primitives."""

from __future__ import annotations

import html
from collections.abc import Iterable, Mapping

import msgspec

from .exceptions import HandshakeError, HTTPError
from .http import Status, ensure_status, is_redirect

DEFAULT_SECURITY_HEADERS: tuple[tuple[str, str], ...] = (
    ("strict-transport-security", "max-age=63072000; includeSubDomains; preload"),
    ("content-security-policy", "default-src 'self'"),
    ("x-content-type-options", "nosniff"),
    ("referrer-policy", "no-referrer"),
    ("x-frame-options", "DENY"),
    ("cache-control", "no-store"),
)

Headers = tuple[tuple[str, str], ...]


class Response(msgspec.Struct, frozen=True):
    """Immutable response payload."""

    status: int = int(Status.OK)
    headers: Headers = ()
    body: bytes = b""

    def with_headers(self, headers: Iterable[tuple[str, str]]) -> "Response":
        """Return a new response with ``headers`` appended."""

        return Response(status=self.status, headers=self.headers + tuple(headers), body=self.body)

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None


def apply_default_security_headers(
    response: Response,
    *,
    headers: Iterable[tuple[str, str]] | None = None,
) -> Response:
    """Append default security headers to ``response`` when missing."""

    baseline = tuple(headers or DEFAULT_SECURITY_HEADERS)
    if not baseline:
        return response
    existing = {name.lower() for name, _ in response.headers}
    additions = tuple((name, value) for name, value in baseline if name.lower() not in existing)
    if not additions:
        return response
    return response.with_headers(additions)


def HTMLResponse(
    document: str,
    *,
    status: int = int(Status.OK),
    headers: Iterable[tuple[str, str]] | None = None,
) -> Response:
    """Create an HTML response."""

    default_headers = (("content-type", "text/html; charset=utf-8"),)
    combined = default_headers + tuple(headers or ())
    response = Response(status=status, headers=combined, body=document.encode("utf-8"))
    return apply_default_security_headers(response)


def RedirectResponse(location: str, *, status: int = int(Status.MOVED_PERMANENTLY)) -> Response:
    """Create a redirect to ``location``."""

    code = ensure_status(status)
    if not is_redirect(code):
        raise ValueError(f"Redirect status must be 3xx, got {status}")
    response = Response(status=code, headers=(("location", location),))
    return apply_default_security_headers(response)


def render_form_post(action: str, fields: Mapping[str, str], *, nonce: str) -> str:
    """Render a page that immediately POSTs ``fields`` to ``action``.

    The action and every name and value are HTML-escaped. A button is shown
    for browsers that do not run the script.
    """

    inputs = "\n".join(
        f'   <input type="hidden" name="{html.escape(name)}" value="{html.escape(str(value))}">'
        for name, value in fields.items()
    )
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        " <head>\n"
        '  <meta charset="utf-8">\n'
        "  <title>SSO Response</title>\n"
        " </head>\n"
        " <body>\n"
        "  <p>SSO login successful. Sending credentials ...</p>\n"
        f'  <form id="sso" method="post" action="{html.escape(action)}">\n'
        f"{inputs}\n"
        '   <noscript><button type="submit">Continue</button></noscript>\n'
        "  </form>\n"
        f'  <script nonce="{html.escape(nonce)}">document.getElementById("sso").submit();</script>\n'
        " </body>\n"
        "</html>\n"
    )


def exception_to_response(exc: HTTPError | HandshakeError) -> Response:
    response = Response(
        status=exc.status,
        headers=(("content-type", "application/json"),),
        body=exc.to_response_body(),
    )
    return apply_default_security_headers(response)


__all__ = [
    "DEFAULT_SECURITY_HEADERS",
    "HTMLResponse",
    "RedirectResponse",
    "Response",
    "apply_default_security_headers",
    "exception_to_response",
    "render_form_post",
]
