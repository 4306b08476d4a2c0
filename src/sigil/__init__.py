"""Sigil: browser-redirect single sign-on signed with shared secrets."""

from .codec import decode_token, encode_token
from .config import (
    IdentityProviderConfig,
    ObservabilityConfig,
    ServiceProviderConfig,
    config_from_env,
    load_config,
)
from .exceptions import (
    ConfigurationError,
    CredentialsInvalidError,
    FormatInvalidError,
    HandshakeError,
    HTTPError,
    InvalidScopeError,
    ParametersMissingError,
    ProviderMismatchError,
    ReplayDetectedError,
    RequestExpiredError,
    ResponseExpiredError,
    SigilError,
    SignatureMismatchError,
)
from .identity import IdentityProvider
from .observability import Observability
from .providers import CredentialResolver, SecretStore, StaticCredentialResolver, StaticSecretStore
from .replay import ReplayGuard
from .requests import Request
from .responses import Response, exception_to_response
from .results import FormPost, HandshakeResult, LoginRequired, NoRequest, Redirect
from .service import ServiceProvider
from .signing import sign, verify
from .tokens import REQUEST_TOKEN_PARAM, Identity, LoginCredentials, RequestToken, ResponseToken

__all__ = [
    "REQUEST_TOKEN_PARAM",
    "ConfigurationError",
    "CredentialResolver",
    "CredentialsInvalidError",
    "FormPost",
    "FormatInvalidError",
    "HTTPError",
    "HandshakeError",
    "HandshakeResult",
    "Identity",
    "IdentityProvider",
    "IdentityProviderConfig",
    "InvalidScopeError",
    "LoginCredentials",
    "LoginRequired",
    "NoRequest",
    "Observability",
    "ObservabilityConfig",
    "ParametersMissingError",
    "ProviderMismatchError",
    "Redirect",
    "ReplayDetectedError",
    "ReplayGuard",
    "Request",
    "RequestExpiredError",
    "RequestToken",
    "Response",
    "ResponseExpiredError",
    "ResponseToken",
    "SecretStore",
    "ServiceProvider",
    "ServiceProviderConfig",
    "SigilError",
    "SignatureMismatchError",
    "StaticCredentialResolver",
    "StaticSecretStore",
    "config_from_env",
    "decode_token",
    "encode_token",
    "exception_to_response",
    "load_config",
    "sign",
    "verify",
]
