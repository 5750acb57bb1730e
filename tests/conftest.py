"""Shared test fixtures and configuration."""

from __future__ import annotations

import itertools

import pytest

from lifebind import Container
from lifebind.config import Settings
from lifebind.identifiers import IdentifierSource
from lifebind.services import register_services


class CountingIdentifierSource(IdentifierSource):
    """Deterministic identifiers: ``"id-1"``, ``"id-2"``, ..."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def generate(self) -> str:
        return f"id-{next(self._counter)}"


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Settings built from defaults only, unaffected by the developer's environment."""
    for name in ("APP_NAME", "LOG_LEVEL", "HOST", "PORT", "IDENTIFIER_KIND", "CONSUMER_LIFETIME"):
        monkeypatch.delenv(f"LIFEBIND_{name}", raising=False)
    return Settings(_env_file=None)


@pytest.fixture
def identifiers() -> CountingIdentifierSource:
    return CountingIdentifierSource()


@pytest.fixture
def container(identifiers: CountingIdentifierSource) -> Container:
    """Container wired with the demo services and counting identifiers."""
    c = Container()
    c.register_instance(IdentifierSource, identifiers)
    register_services(c)
    return c
