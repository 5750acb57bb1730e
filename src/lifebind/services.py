"""Lifetime-scoped providers and the consumers that depend on them.

Each provider draws one identifier when it is constructed, so comparing the
identifiers two consumers see tells which lifetime rule built the provider.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ._container import Lifetime
from .identifiers import IdentifierSource  # noqa: TC001


if TYPE_CHECKING:
    from ._container import Container


class _OperationIdProvider:
    def __init__(self, identifiers: IdentifierSource) -> None:
        self._operation_id = identifiers.generate()

    def get_operation_id(self) -> str:
        return self._operation_id


class SingletonService(_OperationIdProvider):
    """One instance per container."""


class RequestService(_OperationIdProvider):
    """One instance per request context."""


class TransientService(_OperationIdProvider):
    """A new instance on every resolution."""


class _Consumer:
    def __init__(
        self,
        transient_service: TransientService,
        singleton_service: SingletonService,
        request_service: RequestService,
    ) -> None:
        self._transient_service = transient_service
        self._singleton_service = singleton_service
        self._request_service = request_service

    def singleton_id(self) -> str:
        return self._singleton_service.get_operation_id()

    def request_id(self) -> str:
        return self._request_service.get_operation_id()

    def transient_id(self) -> str:
        return self._transient_service.get_operation_id()


class FirstConsumer(_Consumer):
    pass


class SecondConsumer(_Consumer):
    pass


def register_services(container: Container, *, consumer_lifetime: Lifetime = Lifetime.TRANSIENT) -> None:
    """Declare the three providers and both consumers.

    The identifier source must already be registered under `IdentifierSource`.
    """
    container.register(SingletonService, SingletonService, lifetime=Lifetime.SINGLETON)
    container.register(RequestService, RequestService, lifetime=Lifetime.SCOPED)
    container.register(TransientService, TransientService, lifetime=Lifetime.TRANSIENT)
    container.register(FirstConsumer, FirstConsumer, lifetime=consumer_lifetime)
    container.register(SecondConsumer, SecondConsumer, lifetime=consumer_lifetime)
