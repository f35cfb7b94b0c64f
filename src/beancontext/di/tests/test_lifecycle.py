# -*- coding: utf-8 -*-
"""
PYTHONPATH=src python -m pytest src/beancontext/di/tests/test_lifecycle.py -v -s

Lifecycle controller tests

Test initialization order, rollback, teardown and reload
"""

import pytest

from beancontext.di.bean_definition import Bean, BeanLifecycle, next_bean_id
from beancontext.di.context import new_context
from beancontext.di.exceptions import (
    ConstructError,
    DIException,
    ReloadUnsupportedError,
    TeardownError,
)
from beancontext.di.injection import inject
from beancontext.di.lifecycle import LifecycleController
from beancontext.di.resolver import DependencyEdge, ResolutionResult
from beancontext.di.tests.test_fixtures import (
    DatabaseConnection,
    DatabaseConnectionFactory,
    Journal,
    Recorder,
)


class Storage(Recorder):
    pass


class Cache(Recorder):
    storage = inject(Storage)


class Index(Recorder):
    storage = inject(Storage)
    cache = inject(Cache)


class Api(Recorder):
    index = inject(Index)
    cache = inject(Cache)


class Scheduler(Recorder):
    pass


def _created(obj) -> Bean:
    bean = Bean(next_bean_id(), obj)
    bean.lifecycle = BeanLifecycle.CREATED
    return bean


class TestInitializationOrder:
    """Test dependency ordering"""

    def test_order_is_topological(self):
        journal = Journal()
        api = Api(journal, "api")
        index = Index(journal, "index")
        cache = Cache(journal, "cache")
        storage = Storage(journal, "storage")
        new_context(api, Scheduler(journal, "scheduler"), index, cache, storage)

        order = journal.of("init")
        dependencies = {
            "api": ["index", "cache"],
            "index": ["storage", "cache"],
            "cache": ["storage"],
        }
        for dependent, needs in dependencies.items():
            for dependency in needs:
                assert order.index(dependency) < order.index(dependent)
        assert sorted(order) == sorted(["api", "index", "cache", "storage", "scheduler"])

    def test_ties_keep_registration_order(self):
        journal = Journal()
        new_context(*[Recorder(journal, str(i)) for i in range(5)])
        assert journal.of("init") == ["0", "1", "2", "3", "4"]

    def test_initialization_order_ignores_deferred_edges(self):
        beans = [_created(object()) for _ in range(3)]
        a, b, c = beans
        edges = [
            DependencyEdge(a.id, b.id, False),
            DependencyEdge(b.id, c.id, False),
            DependencyEdge(c.id, a.id, True),
            DependencyEdge(c.id, c.id, False),
        ]
        order = LifecycleController.initialization_order(beans, edges)
        assert order == [c, b, a]

    def test_lazy_product_edge_orders_after_factory(self):
        user, factory = _created(object()), _created(object())
        edges = [DependencyEdge(user.id, factory.id, True, True)]

        order = LifecycleController.initialization_order([user, factory], edges)
        assert order == [factory, user]

    def test_lazy_product_edge_closing_cycle_stays_deferred(self):
        user, factory = _created(object()), _created(object())
        edges = [
            DependencyEdge(factory.id, user.id, False),
            DependencyEdge(user.id, factory.id, True, True),
        ]

        order = LifecycleController.initialization_order([user, factory], edges)
        assert order == [user, factory]

    def test_destroy_in_reverse_initialization_order(self):
        journal = Journal()
        ctx = new_context(
            Api(journal, "api"),
            Index(journal, "index"),
            Cache(journal, "cache"),
            Storage(journal, "storage"),
        )
        ctx.close()
        assert journal.of("destroy") == list(reversed(journal.of("init")))


class TestRollback:
    """Test construction failures"""

    def test_failure_on_third_of_five(self):
        journal = Journal()
        recorders = [
            Recorder(journal, str(i), fail_init=(i == 3)) for i in range(1, 6)
        ]
        with pytest.raises(ConstructError) as exc_info:
            new_context(*recorders)

        assert journal.of("init") == ["1", "2"]
        assert journal.of("destroy") == ["2", "1"]
        assert exc_info.value.bean_name == "recorder"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_lifecycle_states_after_rollback(self):
        journal = Journal()
        beans = [
            _created(Recorder(journal, str(i), fail_init=(i == 3))) for i in range(1, 6)
        ]
        controller = LifecycleController()

        with pytest.raises(ConstructError):
            controller.initialize(beans, ResolutionResult(), {})

        assert [b.lifecycle for b in beans] == [
            BeanLifecycle.DESTROYED,
            BeanLifecycle.DESTROYED,
            BeanLifecycle.CONSTRUCTING,
            BeanLifecycle.CREATED,
            BeanLifecycle.CREATED,
        ]
        assert controller.initialized == []

    def test_rollback_logs_destroy_failures(self, caplog):
        journal = Journal()
        with pytest.raises(ConstructError):
            new_context(
                Recorder(journal, "a", fail_destroy=True),
                Recorder(journal, "b", fail_init=True),
            )

        assert journal.of("destroy") == ["a"]
        assert any("Failed to destroy" in r.getMessage() for r in caplog.records)


class TestTeardown:
    """Test close errors"""

    def test_errors_collected(self):
        journal = Journal()
        ctx = new_context(
            Recorder(journal, "a", fail_destroy=True),
            Recorder(journal, "b"),
            Recorder(journal, "c", fail_destroy=True),
        )

        with pytest.raises(TeardownError) as exc_info:
            ctx.close()

        assert journal.of("destroy") == ["c", "b", "a"]
        assert len(exc_info.value.errors) == 2
        assert all(b.lifecycle == BeanLifecycle.DESTROYED for b in ctx.beans())

        # Second close is a no-op
        ctx.close()
        assert journal.of("destroy") == ["c", "b", "a"]


class TestReload:
    """Test in place re-initialization"""

    def test_reload_runs_destroy_then_init(self):
        journal = Journal()
        ctx = new_context(Recorder(journal, "a"))
        bean = ctx.beans()[0]

        bean.reload()

        assert journal.events == ["init:a", "destroy:a", "init:a"]
        assert bean.lifecycle == BeanLifecycle.INITIALIZED

        ctx.close()
        assert journal.of("destroy") == ["a", "a"]

    def test_reload_product_unsupported(self):
        ctx = new_context(DatabaseConnectionFactory())
        product = ctx.bean(DatabaseConnection)[0]

        with pytest.raises(ReloadUnsupportedError):
            product.reload()

    def test_reload_requires_initialized(self):
        journal = Journal()
        ctx = new_context(Recorder(journal, "a"))
        bean = ctx.beans()[0]
        ctx.close()

        with pytest.raises(DIException):
            bean.reload()
