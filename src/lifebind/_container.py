from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    ParamSpec,
    TypeVar,
    get_type_hints,
    overload,
)


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

    T = TypeVar("T")
    # Parameter spec for factories
    P = ParamSpec("P")

    Token = type[T] | str

_MISSING = object()


class Lifetime(Enum):
    SINGLETON = "singleton"
    SCOPED = "scoped"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class Registration:
    factory: Callable[..., object] | None
    impl: type | None
    lifetime: Lifetime


class ResolutionError(RuntimeError):
    pass


class ScopeError(ResolutionError):
    """A scoped registration was resolved without an open request context."""


class Container:
    """Minimal DI container.

    - register types or factories
    - resolve with constructor injection
    - lifetimes: singleton / scoped / transient
    - request contexts own the scoped instances.
    """

    def __init__(self) -> None:
        self._registrations: dict[Any, Registration] = {}
        self._singletons: dict[Any, object] = {}
        self._lock = threading.RLock()

    @overload
    def register(
        self,
        token: type[T],
        impl: type[T],
        *,
        factory: None = ...,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None: ...

    @overload
    def register(
        self,
        token: type[T],
        impl: None = ...,
        *,
        factory: Callable[P, T],
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None: ...

    @overload
    def register(
        self,
        token: str,
        impl: type | None = ...,
        *,
        factory: Callable[..., Any] | None = ...,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None: ...

    def register(
        self,
        token: Token[T],
        impl: type | None = None,
        *,
        factory: Callable[..., Any] | None = None,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None:
        """Register a concrete type or a factory for a token.

        Example:
          container.register(IFoo, FooImpl, lifetime=Lifetime.SCOPED)
          container.register("db", factory=create_db, lifetime=Lifetime.SINGLETON)

        Registering a token again replaces the previous declaration and drops
        its cached singleton.
        """
        if impl is not None and factory is not None:
            msg = "Provide either `impl` or `factory`, not both."
            raise ValueError(msg)

        if impl is None and factory is None:
            msg = "Either `impl` or `factory` must be provided."
            raise ValueError(msg)

        lifetime = Lifetime(lifetime)

        # Non-type tokens (like strings) cannot be validated statically.
        if impl is not None and inspect.isclass(token):
            self._validate_impl(cls=token, impl=impl)

        with self._lock:
            self._registrations[token] = Registration(factory=factory, impl=impl, lifetime=lifetime)
            self._singletons.pop(token, None)

    def register_instance(
        self,
        token: Token[T],
        instance: object,
        *,
        replace: bool = False,
    ) -> None:
        """Register a pre-built instance (always singleton).

        The instance is returned as is; resolving the token with overrides
        raises `ResolutionError` since there is nothing to rebuild.
        """
        if inspect.isclass(token) and not isinstance(instance, token):
            msg = f"Instance of {type(instance).__name__} is not an instance of {token.__name__}"
            raise TypeError(msg)

        with self._lock:
            if not replace and token in self._registrations:
                msg = f"Token {token!r} is already registered. Pass replace=True to overwrite."
                raise KeyError(msg)
            self._registrations[token] = Registration(factory=None, impl=None, lifetime=Lifetime.SINGLETON)
            self._singletons[token] = instance

    def is_registered(self, token: Token[T]) -> bool:
        return token in self._registrations

    def lifetime_of(self, token: Token[T]) -> Lifetime:
        """Return the declared lifetime; unregistered classes are auto-wired as transient."""
        reg = self._registrations.get(token)
        if reg is not None:
            return reg.lifetime
        if inspect.isclass(token):
            return Lifetime.TRANSIENT
        msg = f"No registration found for token: {token!r}"
        raise KeyError(msg)

    @overload
    def resolve(self, token: type[T], **overrides: Any) -> T: ...

    @overload
    def resolve(self, token: str, **overrides: Any) -> object: ...

    def resolve(self, token: Token[T], **overrides: Any) -> object:
        """Resolve the token outside of any request context.

        Scoped registrations raise `ScopeError`; use `create_context()` for those.
        `overrides` lets you explicitly supply constructor args.
        """
        return self._resolve(token, None, overrides)

    def create_context(self) -> RequestContext:
        """Open a request context that owns the scoped instances of one unit of work."""
        return RequestContext(self, _from_container=True)

    def initialize(self) -> None:
        """Build every singleton registration up front.

        Called at application startup so concurrent first resolutions never
        race for the singleton cache.
        """
        with self._lock:
            tokens = [t for t, reg in self._registrations.items() if reg.lifetime is Lifetime.SINGLETON]
            for token in tokens:
                self._resolve(token, None, {})
        logger.debug("Initialized %d singleton registration(s)", len(tokens))

    def _resolve(self, token: Token[T], context: RequestContext | None, overrides: dict[str, Any]) -> object:
        """Apply the lifetime policy of `token` against `context`.

        - singleton: cached in the container, built once under the lock
        - scoped: cached in `context`, which must be open
        - transient (and unregistered classes): built on every call
        Overrides always build a fresh, uncached instance.
        """
        reg = self._registrations.get(token)

        if reg is None:
            if not inspect.isclass(token):
                msg = f"No registration found for token: {token!r}"
                raise KeyError(msg)
            # If no registration found and token is a class type, try auto-wiring
            return self._construct(token, context, overrides)

        if reg.lifetime is Lifetime.SCOPED and context is None:
            msg = f"{_token_name(token)} is registered as scoped and needs an open request context"
            raise ScopeError(msg)

        if overrides:
            build_context = None if reg.lifetime is Lifetime.SINGLETON else context
            return self._build(token, reg, build_context, overrides)

        if reg.lifetime is Lifetime.SINGLETON:
            instance = self._singletons.get(token, _MISSING)
            if instance is not _MISSING:
                return instance
            with self._lock:
                instance = self._singletons.get(token, _MISSING)
                if instance is not _MISSING:
                    return instance
                # register() may have replaced the declaration since the unlocked read
                reg = self._registrations[token]
                if reg.lifetime is Lifetime.SINGLETON:
                    # Singletons never see the caller's context: a scoped
                    # dependency would outlive its request.
                    instance = self._build(token, reg, None, overrides)
                    self._singletons[token] = instance
                    return instance
            return self._resolve(token, context, overrides)

        if reg.lifetime is Lifetime.SCOPED:
            return context._get_or_create(token, lambda: self._build(token, reg, context, overrides))  # noqa: SLF001

        return self._build(token, reg, context, overrides)

    def _build(
        self,
        token: Token[T],
        reg: Registration,
        context: RequestContext | None,
        overrides: dict[str, Any],
    ) -> object:
        # Build instance either via factory or constructor
        if reg.factory is not None:
            resolver = context if context is not None else self
            instance = reg.factory(resolver, **overrides)
            if inspect.isclass(token) and not isinstance(instance, token):
                msg = f"Resolved instance {type(instance).__name__} is not an instance of {token.__name__}"
                raise TypeError(msg)
        elif reg.impl is not None:
            instance = self._construct(reg.impl, context, overrides)
        else:
            # register_instance entries live in the singleton cache only;
            # overrides cannot rebuild them.
            msg = f"Registration for {_token_name(token)} has nothing to build"
            raise ResolutionError(msg)

        logger.debug("Created %s instance of %s", reg.lifetime.value, _token_name(token))
        return instance

    def _construct(self, cls: type[T], context: RequestContext | None, overrides: dict[str, Any]) -> T:
        """Call `cls` with its constructor dependencies resolved against `context`.

        Each keyword-bindable parameter is filled from, in order: an explicit
        override, its annotated type (registered, or a concrete class to
        auto-wire), a registration named like the parameter, its default.
        Overrides without a matching parameter go to ``**kwargs`` when the
        constructor takes one; ``*args`` is never filled.
        """
        if _inherits_object_init(cls):
            if overrides:
                msg = f"{cls.__name__} takes no constructor arguments, got {sorted(overrides)}"
                raise TypeError(msg)
            return cls()

        params = inspect.signature(cls).parameters
        hints = _get_init_type_hints(cls)
        remaining = dict(overrides)
        kwargs: dict[str, Any] = {}
        accepts_extra = False

        for name, p in params.items():
            if p.kind is p.VAR_KEYWORD:
                accepts_extra = True
                continue
            if p.kind is p.VAR_POSITIONAL:
                continue
            if p.kind is p.POSITIONAL_ONLY:
                if p.default is not p.empty:
                    continue
                msg = f"Cannot inject positional-only parameter '{name}' of {cls.__name__}"
                raise ResolutionError(msg)
            if name in remaining:
                kwargs[name] = remaining.pop(name)
            else:
                kwargs[name] = self._resolve_param(cls, p, hints.get(name, p.empty), context)

        if remaining and not accepts_extra:
            msg = f"Overrides don't match {cls.__name__} signature: unexpected {sorted(remaining)}"
            raise TypeError(msg)
        kwargs.update(remaining)

        return cls(**kwargs)

    def _resolve_param(self, cls: type, p: inspect.Parameter, ann: Any, context: RequestContext | None) -> Any:
        # Type first, so a name registration never shadows an annotated dependency
        if ann is not p.empty and (ann in self._registrations or _is_autowirable(ann)):
            return self._resolve(ann, context, {})
        if p.name in self._registrations:
            return self._resolve(p.name, context, {})
        if p.default is not p.empty:
            return p.default

        ann_repr = _token_name(ann) if ann is not p.empty else "no-annotation"
        msg = (
            f"Cannot satisfy constructor parameter '{p.name}' of {cls.__name__}: "
            f"no override, registration or default (annotation: {ann_repr})."
        )
        raise ResolutionError(msg)

    def _validate_impl(self, cls: type, impl: type) -> None:
        """Validate that 'impl' implements 'cls': require issubclass(impl, cls)."""
        if not inspect.isclass(impl) or not issubclass(impl, cls):
            impl_name = getattr(impl, "__name__", repr(impl))
            msg = f"Implementation {impl_name} must be a subclass of {cls.__name__}"
            raise TypeError(msg)


class RequestContext:
    """Owns the scoped instances created during one unit of work (usually one HTTP request).

    Resolution through a context applies the same lifetime policy as the
    container, except that scoped registrations are cached here. Closing the
    context drops those instances; a closed context refuses to resolve.
    """

    def __init__(self, container: Container, *, _from_container: bool = False) -> None:
        if not _from_container:
            msg = "RequestContext instances must be created via Container.create_context()"
            raise RuntimeError(msg)
        self._container = container
        self._instances: dict[Any, object] = {}
        self._closed = False
        logger.debug("Opened request context %#x", id(self))

    @property
    def container(self) -> Container:
        return self._container

    @property
    def closed(self) -> bool:
        return self._closed

    @overload
    def resolve(self, token: type[T], **overrides: Any) -> T: ...

    @overload
    def resolve(self, token: str, **overrides: Any) -> object: ...

    def resolve(self, token: Token[T], **overrides: Any) -> object:
        """Resolve the token within this context."""
        if self._closed:
            msg = f"Cannot resolve {_token_name(token)}: request context is closed"
            raise ScopeError(msg)
        return self._container._resolve(token, self, overrides)  # noqa: SLF001

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._instances.clear()
        logger.debug("Closed request context %#x", id(self))

    def __enter__(self) -> RequestContext:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _get_or_create(self, token: Any, build: Callable[[], object]) -> object:
        if self._closed:
            msg = f"Cannot resolve {_token_name(token)}: request context is closed"
            raise ScopeError(msg)
        instance = self._instances.get(token, _MISSING)
        if instance is _MISSING:
            instance = build()
            self._instances[token] = instance
        return instance


def _is_autowirable(tp: object) -> bool:
    return inspect.isclass(tp) and tp.__module__ != "builtins"


def _inherits_object_init(cls: type) -> bool:
    return inspect.getattr_static(cls, "__init__") is object.__init__


def _token_name(token: object) -> str:
    return getattr(token, "__name__", None) or repr(token)


def _get_init_type_hints(cls: type[T]) -> dict[str, Any]:
    try:
        init = inspect.getattr_static(cls, "__init__")
        hints = get_type_hints(init)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        hints = {}

    return hints
