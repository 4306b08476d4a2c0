"""Collaborators the handshake flows consult."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from .tokens import LoginCredentials, Scope


@runtime_checkable
class SecretStore(Protocol):
    """Looks up the secret shared with a named service provider.

    Implementations must be safe to call concurrently. ``None`` means the
    provider is unknown.
    """

    def get_service_provider_secret(self, name: str) -> str | None: ...


@runtime_checkable
class CredentialResolver(Protocol):
    """Returns the signed-in user's credentials, or ``None`` when nobody is signed in."""

    def get_login_credentials(self, scope: Scope) -> LoginCredentials | Mapping[str, Any] | None: ...


class StaticSecretStore:
    """In-memory secret store keyed by service provider name."""

    def __init__(self, secrets: Mapping[str, str]) -> None:
        self._secrets = dict(secrets)
        self.calls: list[str] = []

    def get_service_provider_secret(self, name: str) -> str | None:
        self.calls.append(name)
        return self._secrets.get(name)


class StaticCredentialResolver:
    """Resolver that always answers with the same credentials."""

    def __init__(self, credentials: LoginCredentials | Mapping[str, Any] | None = None) -> None:
        self.credentials = credentials
        self.requested_scopes: list[Scope] = []

    def get_login_credentials(self, scope: Scope) -> LoginCredentials | Mapping[str, Any] | None:
        self.requested_scopes.append(scope)
        return self.credentials


__all__ = [
    "CredentialResolver",
    "SecretStore",
    "StaticCredentialResolver",
    "StaticSecretStore",
]
