# -*- coding: utf-8 -*-
"""
Graph resolver

Matches every injection point of every bean to beans of the registry chain,
records the dependency edges between beans and rejects cycles made of
immediate edges only. Value points and lazy proxies are assigned once the
whole graph resolved, plain targets later, right before post_construct, by
apply_bindings().
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from beancontext.config.properties import Properties
from beancontext.di.bean_definition import Bean, BeanLifecycle
from beancontext.di.bean_order_strategy import BeanOrderStrategy
from beancontext.di.exceptions import CyclicDependencyError, MissingDependencyError
from beancontext.di.injection import (
    InjectionPoint,
    ValuePoint,
    injection_points,
    value_points,
)
from beancontext.di.lazy_proxy import IndirectionCell, LazyProxy, is_lazy_proxy, unwrap
from beancontext.di.registry import Registry
from beancontext.observation.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DependencyEdge:
    """
    dependent needs dependency

    Deferred edges come from lazy points. They only constrain ordering when
    the target is a factory product, whose dependency is its factory bean.
    """

    dependent: int
    dependency: int
    deferred: bool
    product: bool = False


@dataclass
class Binding:
    """Injection point matched to its target beans"""

    point: InjectionPoint
    targets: List[Bean]
    cell: Optional[IndirectionCell] = None


@dataclass
class ResolutionResult:
    edges: List[DependencyEdge] = field(default_factory=list)
    # {bean id: [Binding]}
    bindings: Dict[int, List[Binding]] = field(default_factory=dict)

    def immediate_edges(self) -> List[DependencyEdge]:
        return [edge for edge in self.edges if not edge.deferred]


class GraphResolver:
    """Resolves injection points against a chain of registries"""

    def __init__(
        self,
        registries: Sequence[Registry],
        properties: Properties,
        trace: Optional[logging.Logger] = None,
    ):
        """
        Args:
            registries: Registry of the current context first, then its ancestors
            properties: Source of value() points
            trace: Logger receiving resolution traces at INFO, module logger at DEBUG otherwise
        """
        self._registries = list(registries)
        self._properties = properties
        self._trace_logger = trace or logger
        self._trace_level = logging.INFO if trace else logging.DEBUG
        self._owner_thread = threading.get_ident()

    def _trace(self, msg: str, *args):
        self._trace_logger.log(self._trace_level, msg, *args)

    # ==================== Candidate selection ====================

    def find_candidates(self, point: InjectionPoint) -> List[Bean]:
        """Matches of the first registry in the chain that has any"""
        for registry in self._registries:
            if point.name:
                named, found = registry.find_by_name(point.name)
                matches = [b for b in named if b.implements(point.capability)] if found else []
            else:
                matches, _ = registry.find_by_type(point.capability)
            if matches:
                return matches
        return []

    def select(self, point: InjectionPoint, candidates: List[Bean]) -> List[Bean]:
        """Apply cardinality; single points fall back to registration order"""
        if not candidates:
            return []
        if point.is_collection:
            return BeanOrderStrategy.sort_beans(candidates)
        if len(candidates) > 1 and not point.name:
            hinted = [b for b in candidates if b.name == point.attr]
            if len(hinted) == 1:
                return hinted
            self._trace(
                "Field '%s' matches %d beans of '%s', using first registered '%s'",
                point.attr,
                len(candidates),
                point.capability.__name__,
                candidates[0].name,
            )
        return candidates[:1]

    # ==================== Resolution ====================

    def resolve(self, beans: List[Bean]) -> ResolutionResult:
        """
        Resolve every injection point of beans, in registration and declaration order

        Nothing is assigned to the beans until every point resolved and the
        graph is free of immediate cycles.

        Raises:
            MissingDependencyError: For a required point without matches
            CyclicDependencyError: For a cycle of immediate edges
        """
        result = ResolutionResult()
        local_ids = {bean.id for bean in beans}
        values_by_bean = {}
        for bean in beans:
            values, bindings = self._match_object(bean.obj, bean.name)
            values_by_bean[bean.id] = values
            result.bindings[bean.id] = bindings
            for binding in bindings:
                for target in binding.targets:
                    edge = self._edge_for(bean, binding, target, local_ids)
                    if edge is not None:
                        result.edges.append(edge)

        self.check_cycles(beans, result.immediate_edges())
        for bean in beans:
            install_points(bean.obj, values_by_bean[bean.id], result.bindings[bean.id])
        return result

    def resolve_object(self, obj: Any, display_name: str) -> List[Binding]:
        """Resolve the points of one object, then assign value points and lazy proxies"""
        values, bindings = self._match_object(obj, display_name)
        install_points(obj, values, bindings)
        return bindings

    def _match_object(
        self, obj: Any, display_name: str
    ) -> Tuple[List[Tuple[ValuePoint, Any]], List[Binding]]:
        values = [
            (vpoint, self._properties.get_value(vpoint.key, vpoint.kind, vpoint.default))
            for vpoint in value_points(type(obj))
        ]

        bindings = []
        for point in injection_points(type(obj)):
            targets = self.select(point, self.find_candidates(point))
            if not targets:
                if point.optional:
                    self._trace("Optional field '%s' of '%s' left unset", point.attr, display_name)
                    continue
                raise MissingDependencyError(
                    display_name, point.attr, point.capability, point.name
                )

            binding = Binding(point, targets)
            if point.lazy:
                binding.cell = IndirectionCell(point.capability, self._owner_thread)
            bindings.append(binding)
            self._trace(
                "Field '%s' of '%s' -> %s%s",
                point.attr,
                display_name,
                [t.name for t in targets],
                " (lazy)" if point.lazy else "",
            )
        return values, bindings

    def _edge_for(
        self, bean: Bean, binding: Binding, target: Bean, local_ids: Set[int]
    ) -> Optional[DependencyEdge]:
        # A product is ready once its factory bean is initialized
        owner = target.factory_bean or target
        if owner.id not in local_ids:
            # Ancestor contexts are initialized already
            return None
        if owner.id == bean.id and not binding.point.lazy:
            self._trace("Self reference '%s' of '%s' ignored for ordering", binding.point.attr, bean.name)
            return None
        return DependencyEdge(
            bean.id, owner.id, binding.point.lazy, target.factory_bean is not None
        )

    # ==================== Cycle detection ====================

    def check_cycles(self, beans: List[Bean], edges: List[DependencyEdge]):
        """Depth first search over immediate edges, in registration order"""
        names = {bean.id: bean.name for bean in beans}
        graph: Dict[int, List[int]] = {bean.id: [] for bean in beans}
        for edge in edges:
            if edge.dependent != edge.dependency:
                graph[edge.dependent].append(edge.dependency)

        white, grey, black = 0, 1, 2
        color = {bean_id: white for bean_id in graph}

        for bean in beans:
            if color[bean.id] != white:
                continue
            color[bean.id] = grey
            path = [bean.id]
            stack = [iter(graph[bean.id])]
            while stack:
                nxt = next(stack[-1], None)
                if nxt is None:
                    stack.pop()
                    color[path.pop()] = black
                elif color[nxt] == grey:
                    cycle = path[path.index(nxt):]
                    raise CyclicDependencyError([names[i] for i in cycle])
                elif color[nxt] == white:
                    color[nxt] = grey
                    path.append(nxt)
                    stack.append(iter(graph[nxt]))


# ==================== Binding ====================


def install_points(obj: Any, values: List[Tuple[ValuePoint, Any]], bindings: List[Binding]):
    """Assign resolved value points and put a proxy on every lazy point"""
    for vpoint, resolved in values:
        vpoint.__set__(obj, resolved)
    for binding in bindings:
        if binding.point.lazy:
            binding.point.__set__(obj, LazyProxy(binding.cell))


def fill_lazy(obj: Any, binding: Binding) -> bool:
    """
    Fill the cell of a lazy binding and rebind the attribute to the real target

    A factory product is only produced once its factory bean is initialized.

    Returns:
        bool: False when the target product can not be produced yet
    """
    target = binding.targets[0]
    if not binding.cell.is_filled():
        if (
            target.is_factory_product()
            and not target.is_produced()
            and target.factory_bean.lifecycle != BeanLifecycle.INITIALIZED
        ):
            return False
        binding.cell.fill(target.obj)
    current = binding.point.__get__(obj)
    if is_lazy_proxy(current) and unwrap(current) is binding.cell.get():
        binding.point.__set__(obj, binding.cell.get())
    return True


def apply_bindings(obj: Any, bindings: List[Binding]):
    """
    Assign resolved targets to the attributes of obj

    Lazy points whose target can not be produced yet keep their proxy.

    Raises:
        FactoryError: When a factory fails to produce a target
    """
    for binding in bindings:
        point = binding.point
        if point.lazy:
            fill_lazy(obj, binding)
        elif point.many:
            point.__set__(obj, [target.obj for target in binding.targets])
        elif point.mapping:
            mapping = {}
            for target in binding.targets:
                mapping.setdefault(target.name, target.obj)
            point.__set__(obj, mapping)
        else:
            point.__set__(obj, binding.targets[0].obj)
