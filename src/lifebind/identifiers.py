"""Identifier sources used to tell provider instances apart."""

from __future__ import annotations

import random
import uuid
from abc import ABC, abstractmethod
from typing import Literal


IdentifierKind = Literal["random", "uuid"]


class IdentifierSource(ABC):
    @abstractmethod
    def generate(self) -> str:
        """Return a fresh opaque identifier."""


class RandomIdentifierSource(IdentifierSource):
    """Decimal rendering of a uniform float in [0, 1), e.g. ``"0.8371023349512785"``."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()  # noqa: S311

    def generate(self) -> str:
        return repr(self._rng.random())


class UuidIdentifierSource(IdentifierSource):
    def generate(self) -> str:
        return uuid.uuid4().hex


def create_identifier_source(kind: IdentifierKind = "random") -> IdentifierSource:
    if kind == "random":
        return RandomIdentifierSource()
    if kind == "uuid":
        return UuidIdentifierSource()
    msg = f"Unknown identifier kind: {kind!r}"
    raise ValueError(msg)
