"""Dependency-injection lifetimes, demonstrated over HTTP.

This package provides a minimal dependency injection container with
singleton, scoped (per request) and transient lifetimes, plus a small FastAPI
service whose endpoints return identifiers showing which lifetime built each
provider.

Exports:
- `Container`: DI container supporting type/factory registration and resolution.
- `Lifetime`: Enum for controlling object lifetimes (singleton, scoped, transient).
- `RequestContext`: Owns the scoped instances of one unit of work, such as
  one HTTP request. Created via `Container.create_context()`.
"""

from ._container import Container, Lifetime, RequestContext, ResolutionError, ScopeError


__all__ = ["Container", "Lifetime", "RequestContext", "ResolutionError", "ScopeError"]
