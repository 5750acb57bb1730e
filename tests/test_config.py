import pytest
from pydantic import ValidationError

from lifebind import Lifetime
from lifebind.config import Settings


def test_defaults(settings):
    assert settings.app_name == "lifebind"
    assert settings.host == "127.0.0.1"
    assert settings.port == 3000
    assert settings.log_level == "INFO"
    assert settings.identifier_kind == "random"
    assert settings.consumer_lifetime is Lifetime.TRANSIENT


def test_environment_overrides(settings, monkeypatch):
    monkeypatch.setenv("LIFEBIND_PORT", "8080")
    monkeypatch.setenv("LIFEBIND_IDENTIFIER_KIND", "uuid")
    monkeypatch.setenv("LIFEBIND_CONSUMER_LIFETIME", "scoped")

    configured = Settings(_env_file=None)

    assert configured.port == 8080
    assert configured.identifier_kind == "uuid"
    assert configured.consumer_lifetime is Lifetime.SCOPED


def test_invalid_identifier_kind_rejected(settings, monkeypatch):
    monkeypatch.setenv("LIFEBIND_IDENTIFIER_KIND", "sequential")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_invalid_port_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, port=70000)
