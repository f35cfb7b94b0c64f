# -*- coding: utf-8 -*-
"""
Lifecycle controller

Orders beans by their dependency edges, drives them from CREATED to
INITIALIZED and destroys them in reverse order, either as a rollback after a
failed construction or when the context is closed.
"""

import heapq
import logging
from typing import Dict, List, Optional, Set

from beancontext.di.bean_definition import Bean, BeanLifecycle
from beancontext.di.exceptions import TeardownError
from beancontext.di.resolver import (
    DependencyEdge,
    ResolutionResult,
    apply_bindings,
    fill_lazy,
)
from beancontext.observation.logger import get_logger

logger = get_logger(__name__)


class LifecycleController:
    """Initialization and teardown of the beans of one context"""

    def __init__(self, trace: Optional[logging.Logger] = None):
        self._trace_logger = trace or logger
        self._trace_level = logging.INFO if trace else logging.DEBUG
        # Beans in the order they reached INITIALIZED
        self._initialized: List[Bean] = []

    def _trace(self, msg: str, *args):
        self._trace_logger.log(self._trace_level, msg, *args)

    @property
    def initialized(self) -> List[Bean]:
        return list(self._initialized)

    @staticmethod
    def initialization_order(
        beans: List[Bean], edges: List[DependencyEdge]
    ) -> List[Bean]:
        """
        Topological order over immediate edges (Kahn's algorithm)

        Among ready beans the earliest registered goes first, so the order is
        deterministic. A lazy reference to a factory product also orders its
        dependent after the factory bean, unless that would close a cycle; such
        a reference is filled once the factory is initialized. Other deferred
        edges and self edges are ignored.
        """
        position = {bean.id: index for index, bean in enumerate(beans)}
        # {bean id: ids of the beans it needs}
        needs: Dict[int, Set[int]] = {bean.id: set() for bean in beans}
        for edge in edges:
            if not edge.deferred and edge.dependent != edge.dependency:
                needs[edge.dependent].add(edge.dependency)

        product_edges = sorted(
            {
                (position[edge.dependent], position[edge.dependency])
                for edge in edges
                if edge.deferred and edge.product and edge.dependent != edge.dependency
            }
        )
        for dependent_pos, dependency_pos in product_edges:
            dependent, dependency = beans[dependent_pos].id, beans[dependency_pos].id
            if not LifecycleController._reaches(needs, dependency, dependent):
                needs[dependent].add(dependency)

        dependents: Dict[int, List[int]] = {bean.id: [] for bean in beans}
        pending = {bean_id: len(deps) for bean_id, deps in needs.items()}
        for bean_id, deps in needs.items():
            for dependency in deps:
                dependents[dependency].append(bean_id)

        ready = [position[bean_id] for bean_id, count in pending.items() if count == 0]
        heapq.heapify(ready)
        order = []
        while ready:
            bean = beans[heapq.heappop(ready)]
            order.append(bean)
            for dependent in dependents[bean.id]:
                pending[dependent] -= 1
                if pending[dependent] == 0:
                    heapq.heappush(ready, position[dependent])
        # The resolver rejects cycles before ordering, so every bean is placed
        return order

    @staticmethod
    def _reaches(needs: Dict[int, Set[int]], start: int, goal: int) -> bool:
        """Whether goal is among the direct or transitive needs of start"""
        seen = {start}
        stack = [start]
        while stack:
            for dependency in needs[stack.pop()]:
                if dependency == goal:
                    return True
                if dependency not in seen:
                    seen.add(dependency)
                    stack.append(dependency)
        return False

    def initialize(
        self,
        beans: List[Bean],
        result: ResolutionResult,
        products: Dict[int, Bean],
    ) -> List[Bean]:
        """
        Construct beans in dependency order

        Args:
            beans: Beans of the context in registration order, all CREATED
            result: Resolution result for the beans
            products: {factory bean id: product bean}

        Returns:
            List[Bean]: Beans in initialization order

        Raises:
            ConstructError: A post_construct hook failed; initialized beans were rolled back
            FactoryError: A factory failed to produce; initialized beans were rolled back
        """
        order = self.initialization_order(beans, result.edges)
        self._trace("Initialization order: %s", [bean.name for bean in order])

        # Every bean is CREATED, so lazy references to plain beans can be bound now;
        # references to products wait for their factory bean
        lazy_waiting: Dict[int, List[tuple]] = {}
        for bean in beans:
            for binding in result.bindings.get(bean.id, []):
                if binding.point.lazy and not fill_lazy(bean.obj, binding):
                    lazy_waiting.setdefault(binding.targets[0].id, []).append(
                        (bean, binding)
                    )

        try:
            for bean in order:
                apply_bindings(bean.obj, result.bindings.get(bean.id, []))
                bean.run_post_construct()
                self._initialized.append(bean)
                self._trace("Bean '%s' initialized", bean.name)

                product = products.get(bean.id)
                if product is not None:
                    if bean.obj.singleton():
                        product.produce()
                    self._fill_waiting(product, lazy_waiting)
        except Exception:
            logger.error(
                "Context construction failed, rolling back %d initialized beans",
                len(self._initialized),
            )
            self.rollback()
            raise
        return order

    @staticmethod
    def _fill_waiting(product: Bean, lazy_waiting: Dict[int, List[tuple]]):
        for dependent, binding in lazy_waiting.pop(product.id, []):
            fill_lazy(dependent.obj, binding)

    def rollback(self):
        """Destroy initialized beans in reverse order, errors are only logged"""
        self._destroy_all()

    def teardown(self):
        """
        Destroy every initialized bean in reverse initialization order

        Raises:
            TeardownError: With every destroy failure, after all beans were attempted
        """
        errors = self._destroy_all()
        if errors:
            raise TeardownError(errors)

    def _destroy_all(self) -> List[Exception]:
        errors = []
        while self._initialized:
            bean = self._initialized.pop()
            if bean.lifecycle != BeanLifecycle.INITIALIZED:
                continue
            try:
                bean.run_destroy()
                self._trace("Bean '%s' destroyed", bean.name)
            except Exception as e:
                logger.error("Failed to destroy bean '%s': %s", bean.name, e)
                errors.append(e)
        return errors
