from __future__ import annotations

import pytest

from sigil.config import (
    IdentityProviderConfig,
    ObservabilityConfig,
    ServiceProviderConfig,
    config_from_env,
    load_config,
)
from sigil.exceptions import ConfigurationError


def test_identity_provider_defaults() -> None:
    config = IdentityProviderConfig(name="accounts")
    assert config.login_timeout_minutes == 10
    assert config.login_timeout_seconds == 600
    assert config.observability == ObservabilityConfig()


def test_load_config_validates_mapping() -> None:
    config = load_config(
        ServiceProviderConfig,
        {
            "name": "shop",
            "idp_name": "accounts",
            "idp_login_url": "https://accounts.example.com/login",
            "redirect_url": "https://shop.example.com/cb",
            "secret": "s3cret",
            "observability": {"enabled": False},
        },
    )
    assert config.response_timeout_seconds == 5
    assert config.observability.enabled is False


@pytest.mark.parametrize(
    "data",
    [
        {"name": "accounts", "login_timeout_minutes": 0},
        {"name": "accounts", "login_timeout_minutes": "10"},
        {"login_timeout_minutes": 10},
    ],
)
def test_load_config_rejects_invalid_values(data: dict[str, object]) -> None:
    with pytest.raises(ConfigurationError) as exc:
        load_config(IdentityProviderConfig, data)
    assert "IdentityProviderConfig" in str(exc.value)


def test_config_from_env_converts_strings() -> None:
    environ = {
        "SIGIL_SP_NAME": "shop",
        "SIGIL_SP_IDP_NAME": "accounts",
        "SIGIL_SP_IDP_LOGIN_URL": "https://accounts.example.com/login",
        "SIGIL_SP_REDIRECT_URL": "https://shop.example.com/cb",
        "SIGIL_SP_SECRET": "s3cret",
        "SIGIL_SP_RESPONSE_TIMEOUT_SECONDS": "30",
        "UNRELATED": "ignored",
    }
    config = config_from_env(ServiceProviderConfig, "sigil_sp", environ)
    assert config.name == "shop"
    assert config.response_timeout_seconds == 30


def test_config_from_env_reports_missing_fields(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SIGIL_IDP_NAME", raising=False)
    with pytest.raises(ConfigurationError):
        config_from_env(IdentityProviderConfig, "SIGIL_IDP")
    monkeypatch.setenv("SIGIL_IDP_NAME", "accounts")
    assert config_from_env(IdentityProviderConfig, "SIGIL_IDP").name == "accounts"


def test_service_provider_repr_hides_secret() -> None:
    config = ServiceProviderConfig(
        name="shop",
        idp_name="accounts",
        idp_login_url="https://accounts.example.com/login",
        redirect_url="https://shop.example.com/cb",
        secret="do-not-print",
    )
    assert "do-not-print" not in repr(config)
    assert "secret='***'" in repr(config)
