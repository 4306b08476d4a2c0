"""Error types raised by the handshake flows."""

from __future__ import annotations

from typing import Any, ClassVar

from .http import Status, ensure_status, reason_phrase
from .serialization import json_encode


class SigilError(Exception):
    """Base error type."""


class ConfigurationError(SigilError):
    """Raised when provider configuration cannot be loaded."""


class HTTPError(SigilError):
    """Structured HTTP error that is msgspec serializable."""

    def __init__(self, status: int | Status, detail: Any) -> None:
        status_code = ensure_status(status)
        super().__init__(status_code, detail)
        self.status = status_code
        self.detail = detail
        self.reason = reason_phrase(status_code)

    def to_response_body(self) -> bytes:
        return json_encode({"error": {"status": self.status, "reason": self.reason, "detail": self.detail}})


class HandshakeError(SigilError):
    """A handshake attempt was rejected.

    Every subclass is terminal for the attempt that raised it. ``code`` is a
    stable identifier safe to show to end users and to record in logs.
    """

    code: ClassVar[str] = "handshake_failed"
    status: ClassVar[int] = int(Status.BAD_REQUEST)

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_response_body(self) -> bytes:
        return json_encode(
            {
                "error": {
                    "status": self.status,
                    "reason": reason_phrase(self.status),
                    "code": self.code,
                    "detail": self.message,
                }
            }
        )


class FormatInvalidError(HandshakeError):
    code = "format_invalid"


class ParametersMissingError(HandshakeError):
    code = "parameters_missing"


class SignatureMismatchError(HandshakeError):
    code = "signature_mismatch"
    status = int(Status.UNAUTHORIZED)


class ProviderMismatchError(HandshakeError):
    code = "provider_mismatch"
    status = int(Status.FORBIDDEN)


class RequestExpiredError(HandshakeError):
    code = "request_expired"
    status = int(Status.UNAUTHORIZED)


class ResponseExpiredError(HandshakeError):
    code = "response_expired"
    status = int(Status.UNAUTHORIZED)


class ReplayDetectedError(HandshakeError):
    code = "replay_detected"
    status = int(Status.UNAUTHORIZED)


class CredentialsInvalidError(HandshakeError):
    """The credential resolver returned something without a usable user id."""

    code = "credentials_invalid"
    status = int(Status.INTERNAL_SERVER_ERROR)


class InvalidScopeError(HandshakeError):
    code = "invalid_scope"


__all__ = [
    "ConfigurationError",
    "CredentialsInvalidError",
    "FormatInvalidError",
    "HTTPError",
    "HandshakeError",
    "InvalidScopeError",
    "ParametersMissingError",
    "ProviderMismatchError",
    "ReplayDetectedError",
    "RequestExpiredError",
    "ResponseExpiredError",
    "SigilError",
    "SignatureMismatchError",
]
