# -*- coding: utf-8 -*-
"""
Context facade

A Context owns the beans built from the items it was created with, plus an
optional link to the parent context it extends. Construction runs
collection -> registration -> resolution -> initialization as one sequential
pass and either returns a live context or raises.

Lock usage strategy:
- bean/lookup/inject: shared read lock, never block each other
- extend: read lock only for the open check, the child is built without it
  because the read lock is not reentrant and waiting writers go first
- close: write lock to flip the closed flag, teardown runs after it so that
  concurrent readers fail fast with ContextClosedError
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from beancontext.config.load_env import load_env_file
from beancontext.config.properties import InheritedResolver, Properties
from beancontext.di.bean_definition import Bean, BeanLifecycle, next_bean_id
from beancontext.di.collector import CandidateCollector, CollectedCandidates, ResourceSource
from beancontext.di.exceptions import ContextClosedError
from beancontext.di.interfaces import FactoryBean
from beancontext.di.lifecycle import LifecycleController
from beancontext.di.registry import ReadWriteLock, Registry
from beancontext.di.resolver import GraphResolver, apply_bindings
from beancontext.observation.logger import get_logger

logger = get_logger(__name__)

# Lookup levels
DEFAULT_LEVEL = 0
CURRENT_LEVEL = 1
ALL_LEVELS = -1


class Context:
    """Isolated registry of beans, optionally chained to a parent context"""

    def __init__(self, items: Sequence[Any], parent: Optional['Context'] = None):
        """
        Build and initialize a context

        Args:
            items: Candidate objects, scanners, lists, factories and configuration markers
            parent: Context being extended

        Raises:
            UnclassifiableCandidateError, MissingDependencyError, CyclicDependencyError,
            FactoryError, ConstructError: Construction failures, nothing stays initialized
        """
        self._parent = parent
        self._registry = Registry()
        self._lock = ReadWriteLock()
        self._closed = False

        collected = CandidateCollector().collect(items)
        self._trace_logger: Optional[logging.Logger] = collected.verbose or (
            parent._trace_logger if parent else None
        )
        self.properties = self._build_properties(collected)
        self._resource_sources: List[ResourceSource] = (
            list(parent._resource_sources) if parent else []
        ) + collected.resource_sources

        # Context and Properties are injectable but never part of the lifecycle
        self._register(self._managed_bean(self))
        self._register(self._managed_bean(self.properties))

        self._core: List[Bean] = []
        # {factory bean id: product bean}
        self._products: Dict[int, Bean] = {}
        for obj in collected.objects:
            bean = Bean(next_bean_id(), obj)
            self._core.append(bean)
            self._register(bean)
            if isinstance(obj, FactoryBean):
                product = Bean.product_of(next_bean_id(), bean)
                self._products[bean.id] = product
                self._register(product)
        for bean in self._core:
            bean.lifecycle = BeanLifecycle.CREATED
        self._trace("Registered %d beans: %s", len(self._core), [b.name for b in self._core])

        resolver = GraphResolver(self._registry_chain(), self.properties, self._trace_logger)
        result = resolver.resolve(self._core)

        self._lifecycle = LifecycleController(self._trace_logger)
        self._lifecycle.initialize(self._core, result, self._products)
        self._trace("Context ready: %s", self)

    def _trace(self, msg: str, *args):
        if self._trace_logger:
            self._trace_logger.info(msg, *args)
        else:
            logger.debug(msg, *args)

    @staticmethod
    def _managed_bean(obj: Any) -> Bean:
        bean = Bean(next_bean_id(), obj)
        bean.lifecycle = BeanLifecycle.INITIALIZED
        return bean

    def _register(self, bean: Bean):
        for capability in bean.capabilities:
            self._registry.add_bean(capability, bean)

    def _build_properties(self, collected: CollectedCandidates) -> Properties:
        properties = Properties()
        if self._parent is not None:
            properties.register_resolver(InheritedResolver(self._parent.properties))
            properties.set_error_handler(self._parent.properties.get_error_handler())

        for given in collected.properties:
            properties.merge(given)
            for resolver in given.resolvers():
                if resolver is not given:
                    properties.register_resolver(resolver)
            if given.get_error_handler() is not None:
                properties.set_error_handler(given.get_error_handler())

        for source in collected.property_sources:
            if source.path is not None:
                if source.export:
                    load_env_file(source.path)
                properties.load_env_file(source.path)
            if source.mapping:
                properties.merge(source.mapping)
        return properties

    def _registry_chain(self) -> List[Registry]:
        chain = []
        ctx = self
        while ctx is not None:
            chain.append(ctx._registry)
            ctx = ctx._parent
        return chain

    def _ensure_open(self):
        if self._closed:
            raise ContextClosedError()

    # ==================== Public API ====================

    def parent(self) -> Optional['Context']:
        """Parent context, None for a root context"""
        return self._parent

    def extend(self, *items: Any) -> 'Context':
        """
        Create a child context with additional beans

        Child beans may depend on beans of this context, never the other way
        around, and this context is not modified.

        The child is built outside the lock, its beans may query this context
        from post_construct.
        """
        with self._lock.read_locked():
            self._ensure_open()
        return Context(items, parent=self)

    def close(self):
        """
        Destroy every initialized bean in reverse initialization order

        Safe to call more than once, later calls do nothing.

        Raises:
            TeardownError: With every destroy failure of the first call
        """
        with self._lock.write_locked():
            if self._closed:
                return
            self._closed = True
        self._trace("Closing context with %d beans", len(self._core))
        self._lifecycle.teardown()

    def is_closed(self) -> bool:
        return self._closed

    def core(self) -> List[Type]:
        """Types of the beans registered when this context was created"""
        return [bean.bean_type for bean in self._core]

    def beans(self) -> List[Bean]:
        """Beans of this context in registration order"""
        return list(self._core)

    def resource_sources(self) -> List[ResourceSource]:
        return list(self._resource_sources)

    def bean(self, capability: Type, level: int = DEFAULT_LEVEL) -> List[Bean]:
        """
        Get beans by capability

        Lookup level defines how deep we go into parent contexts:

        level 0: current context, if nothing is found then the parent and so on (default)
        level 1: current context only
        level 2: current context in union with the parent context
        level N: current context and N-1 ancestor generations
        level -1: union of all contexts
        """
        return self._search(lambda registry: registry.find_by_type(capability)[0], level)

    def lookup(self, name: str, level: int = DEFAULT_LEVEL) -> List[Bean]:
        """Get beans by name, with the same level semantics as bean()"""
        return self._search(lambda registry: registry.find_by_name(name)[0], level)

    def _search(self, finder: Callable[[Registry], List[Bean]], level: int) -> List[Bean]:
        with self._lock.read_locked():
            self._ensure_open()
            chain = self._registry_chain()
            if level == DEFAULT_LEVEL:
                for registry in chain:
                    found = finder(registry)
                    if found:
                        return found
                return []
            if level > 0:
                chain = chain[:level]
            result = []
            for registry in chain:
                result.extend(finder(registry))
            return result

    def inject(self, obj: Any):
        """
        Inject fields into an object that is not part of the context

        The object is not registered, not initialized and not destroyed; lazy
        points are bound directly since every bean is constructed already. When a
        required point has no match the object is left untouched.

        Raises:
            MissingDependencyError: For a required point without matches
            FactoryError: When a factory fails to produce a target
        """
        with self._lock.read_locked():
            self._ensure_open()
            resolver = GraphResolver(self._registry_chain(), self.properties, self._trace_logger)
            bindings = resolver.resolve_object(obj, type(obj).__name__)
        # Factories may query this context while producing
        apply_bindings(obj, bindings)

    def __enter__(self) -> 'Context':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __str__(self):
        parent_str = f", parent={len(self._parent._core)} beans" if self._parent else ""
        state = "closed" if self._closed else "open"
        names = ", ".join(bean.name for bean in self._core)
        return f"Context({state}, beans=[{names}], products={len(self._products)}{parent_str})"

    __repr__ = __str__


def new_context(*items: Any) -> Context:
    """
    Create a root context

    Example:
        ctx = new_context(MySQLUserRepository(), UserServiceImpl(), Verbose(my_logger))
        service = ctx.bean(UserService)[0].obj
    """
    return Context(items)
