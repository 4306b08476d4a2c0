"""Provider configuration objects."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Annotated, TypeVar

import msgspec
from msgspec import Meta, Struct

from .exceptions import ConfigurationError

C = TypeVar("C", bound=Struct)

PositiveInt = Annotated[int, Meta(gt=0)]


class ObservabilityConfig(Struct, frozen=True):
    """Logging and tracing configuration for the handshake flows."""

    enabled: bool = True
    tracer: str = "sigil"
    logger: str = "sigil.handshake"


class IdentityProviderConfig(Struct, frozen=True):
    """Settings for the identity provider end of the handshake."""

    name: str
    login_timeout_minutes: PositiveInt = 10
    observability: ObservabilityConfig = ObservabilityConfig()

    @property
    def login_timeout_seconds(self) -> int:
        return self.login_timeout_minutes * 60


class ServiceProviderConfig(Struct, frozen=True):
    """Settings for a service provider and its partner identity provider."""

    name: str
    idp_name: str
    idp_login_url: str
    redirect_url: str
    secret: str
    response_timeout_seconds: PositiveInt = 5
    observability: ObservabilityConfig = ObservabilityConfig()

    def __repr__(self) -> str:
        return (
            f"ServiceProviderConfig(name={self.name!r}, idp_name={self.idp_name!r}, "
            f"idp_login_url={self.idp_login_url!r}, redirect_url={self.redirect_url!r}, "
            f"secret='***', response_timeout_seconds={self.response_timeout_seconds!r})"
        )


def load_config(model: type[C], data: Mapping[str, object]) -> C:
    """Validate ``data`` into the configuration ``model``."""

    try:
        return msgspec.convert(dict(data), type=model)
    except msgspec.ValidationError as exc:
        raise ConfigurationError(f"invalid {model.__name__}: {exc}") from exc


def config_from_env(model: type[C], prefix: str, environ: Mapping[str, str] | None = None) -> C:
    """Build ``model`` from ``PREFIX_FIELD`` environment variables.

    Values arrive as strings, so numeric fields are converted leniently.
    Nested structs are left at their defaults.
    """

    source = os.environ if environ is None else environ
    marker = f"{prefix.upper()}_"
    values: dict[str, str] = {}
    for field_name in model.__struct_fields__:
        key = marker + field_name.upper()
        if key in source:
            values[field_name] = source[key]
    try:
        return msgspec.convert(values, type=model, strict=False)
    except msgspec.ValidationError as exc:
        raise ConfigurationError(f"invalid {model.__name__} from {marker}* environment: {exc}") from exc


__all__ = [
    "IdentityProviderConfig",
    "ObservabilityConfig",
    "ServiceProviderConfig",
    "config_from_env",
    "load_config",
]
