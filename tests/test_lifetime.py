import unittest

import pytest

from lifebind import Container, Lifetime, ScopeError


class TestLifetimeControl(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_singleton_resolved_without_context_is_cached_in_container(self):
        class Pool: ...

        self.cont.register(Pool, Pool, lifetime=Lifetime.SINGLETON)
        pool = self.cont.resolve(Pool)
        assert self.cont.resolve(Pool) is pool, "SINGLETON should return the cached instance"

    def test_transient_resolved_without_context_is_rebuilt(self):
        class Command: ...

        self.cont.register(Command, Command, lifetime=Lifetime.TRANSIENT)
        assert self.cont.resolve(Command) is not self.cont.resolve(Command), "TRANSIENT should never be cached"

    def test_resolve_register_scoped_returns_same_instance_within_context(self):
        class A: ...

        self.cont.register(A, impl=A, lifetime=Lifetime.SCOPED)
        with self.cont.create_context() as ctx:
            a1 = ctx.resolve(A)
            a2 = ctx.resolve(A)
        assert a2 is a1, "SCOPED should return the context's cached instance"

    def test_resolve_register_scoped_returns_new_instance_per_context(self):
        class A: ...

        self.cont.register(A, impl=A, lifetime=Lifetime.SCOPED)
        with self.cont.create_context() as first:
            a1 = first.resolve(A)
        with self.cont.create_context() as second:
            a2 = second.resolve(A)
        assert a2 is not a1, "SCOPED should never leak an instance into another context"

    def test_resolve_register_scoped_outside_context_raises(self):
        class A: ...

        self.cont.register(A, impl=A, lifetime=Lifetime.SCOPED)
        with pytest.raises(ScopeError):
            self.cont.resolve(A)

    def test_resolve_register_singleton_is_shared_between_contexts(self):
        class A: ...

        self.cont.register(A, impl=A, lifetime=Lifetime.SINGLETON)
        with self.cont.create_context() as first:
            a1 = first.resolve(A)
        with self.cont.create_context() as second:
            a2 = second.resolve(A)
        assert a2 is a1
        assert self.cont.resolve(A) is a1

    def test_resolve_register_transient_is_new_within_same_context(self):
        class A: ...

        self.cont.register(A, impl=A, lifetime=Lifetime.TRANSIENT)
        with self.cont.create_context() as ctx:
            assert ctx.resolve(A) is not ctx.resolve(A)

    def test_singleton_depending_on_scoped_raises_even_inside_context(self):
        class Session: ...

        class Cache:
            def __init__(self, session: Session):
                self.session = session

        self.cont.register(Session, impl=Session, lifetime=Lifetime.SCOPED)
        self.cont.register(Cache, impl=Cache, lifetime=Lifetime.SINGLETON)
        with self.cont.create_context() as ctx, pytest.raises(ScopeError):
            ctx.resolve(Cache)

    def test_scoped_dependency_is_shared_by_consumers_in_one_context(self):
        class Session: ...

        class RepoA:
            def __init__(self, session: Session):
                self.session = session

        class RepoB:
            def __init__(self, session: Session):
                self.session = session

        self.cont.register(Session, impl=Session, lifetime=Lifetime.SCOPED)
        with self.cont.create_context() as ctx:
            a = ctx.resolve(RepoA)
            b = ctx.resolve(RepoB)
        assert a.session is b.session

    def test_resolve_with_overrides_is_not_cached(self):
        class A:
            def __init__(self, value: int = 0):
                self.value = value

        self.cont.register(A, impl=A, lifetime=Lifetime.SINGLETON)
        overridden = self.cont.resolve(A, value=5)
        cached = self.cont.resolve(A)
        assert overridden.value == 5
        assert cached.value == 0
        assert self.cont.resolve(A) is cached

    def test_reregistering_drops_cached_singleton(self):
        class A: ...

        self.cont.register(A, impl=A, lifetime=Lifetime.SINGLETON)
        first = self.cont.resolve(A)
        self.cont.register(A, impl=A, lifetime=Lifetime.SINGLETON)
        assert self.cont.resolve(A) is not first

    def test_initialize_builds_singletons_eagerly(self):
        built = []

        class A:
            def __init__(self):
                built.append(self)

        self.cont.register(A, impl=A, lifetime=Lifetime.SINGLETON)
        self.cont.initialize()
        assert len(built) == 1
        assert self.cont.resolve(A) is built[0]
        assert len(built) == 1

    def test_initialize_propagates_factory_failure(self):
        def broken(_):
            msg = "boom"
            raise RuntimeError(msg)

        self.cont.register("broken", factory=broken, lifetime=Lifetime.SINGLETON)
        with pytest.raises(RuntimeError, match="boom"):
            self.cont.initialize()
