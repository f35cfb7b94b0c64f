# -*- coding: utf-8 -*-
"""
Bean definition module

Contains the Bean record, its lifecycle enumeration and the helpers that derive
a bean's name, order and capability set at registration time
"""

import abc
import itertools
from enum import IntEnum
from threading import RLock
from typing import Any, FrozenSet, Iterable, Optional, Type, Generic

from beancontext.di.exceptions import (
    ConstructError,
    DIException,
    FactoryError,
    ReloadUnsupportedError,
)
from beancontext.di.interfaces import (
    DisposableBean,
    FactoryBean,
    InitializingBean,
    NamedBean,
    OrderedBean,
)

# Too generic to be useful for matching
_IGNORED_CAPABILITIES = frozenset({object, abc.ABC, Generic})

# Bean ids are unique across every context of the process
_bean_ids = itertools.count(1)


def next_bean_id() -> int:
    return next(_bean_ids)


class BeanLifecycle(IntEnum):
    """Bean lifecycle enumeration, values only grow except on reload"""

    ALLOCATED = 0
    CREATED = 1
    CONSTRUCTING = 2
    INITIALIZED = 3
    DESTROYING = 4
    DESTROYED = 5


def capabilities_of(cls: Type, extra: Iterable[Type] = ()) -> FrozenSet[Type]:
    """
    Compute the capability set of a class

    Args:
        cls: Concrete class
        extra: Additionally declared capabilities (e.g. typing.Protocol types)

    Returns:
        The class itself, every base class except the too generic ones, and extra
    """
    caps = {base for base in cls.__mro__ if base not in _IGNORED_CAPABILITIES}
    caps.update(getattr(cls, '_di_provides', ()))
    caps.update(extra)
    return frozenset(caps)


def derive_bean_name(obj: Any) -> str:
    """Name reported by NamedBean, else declared by @component, else lower-cased class name"""
    if isinstance(obj, NamedBean):
        name = obj.bean_name()
        if name:
            return name
    declared = vars(type(obj)).get('_di_name')
    if declared:
        return declared
    return type(obj).__name__.lower()


def derive_bean_order(obj: Any) -> Optional[int]:
    if isinstance(obj, OrderedBean):
        return obj.bean_order()
    return vars(type(obj)).get('_di_order')


class Bean:
    """Managed object tracked through its lifecycle by exactly one Context"""

    def __init__(
        self,
        bean_id: int,
        obj: Any,
        name: str = None,
        capabilities: FrozenSet[Type] = None,
        factory_bean: Optional['Bean'] = None,
        order: Optional[int] = None,
    ):
        """
        Initialize Bean

        Args:
            bean_id: Stable identifier, see next_bean_id()
            obj: Managed instance, None for a factory product not produced yet
            name: Bean name, derived from obj when omitted
            capabilities: Capability set, derived from type(obj) when omitted
            factory_bean: Bean of the FactoryBean producing this one
            order: Explicit order used for collection injection
        """
        self.id = bean_id
        self.factory_bean = factory_bean
        self.lifecycle = BeanLifecycle.ALLOCATED
        self._obj = obj
        self._produced = obj is not None
        self._lock = RLock()

        if factory_bean is None:
            self.name = name or derive_bean_name(obj)
            self.capabilities = capabilities or capabilities_of(type(obj))
            self.order = order if order is not None else derive_bean_order(obj)
        else:
            self.name = name
            self.capabilities = capabilities
            self.order = order

    @classmethod
    def product_of(cls, bean_id: int, factory_bean: 'Bean') -> 'Bean':
        """Create the product bean of a factory bean"""
        factory: FactoryBean = factory_bean.obj
        object_type = factory.object_type()
        name = factory.object_name() or object_type.__name__.lower()
        return cls(
            bean_id,
            None,
            name=name,
            capabilities=capabilities_of(object_type),
            factory_bean=factory_bean,
        )

    @property
    def obj(self) -> Any:
        """The managed object; a product bean is produced on first access"""
        if self.factory_bean is None:
            return self._obj
        return self.produce()

    def produce(self) -> Any:
        """
        Get the factory product

        Singleton factories are invoked once and memoized, others on each call.

        Raises:
            FactoryError: When the factory call fails
        """
        factory: FactoryBean = self.factory_bean.obj
        if not factory.singleton():
            product = self._call_factory(factory)
            self.lifecycle = BeanLifecycle.CREATED
            return product
        with self._lock:
            if not self._produced:
                self._obj = self._call_factory(factory)
                self._produced = True
                self.lifecycle = BeanLifecycle.CREATED
            return self._obj

    def _call_factory(self, factory: FactoryBean) -> Any:
        try:
            product = factory.object()
        except Exception as e:
            raise FactoryError(
                self.factory_bean.name,
                f"Factory '{self.factory_bean.name}' failed to create '{self.name}': {e}",
            ) from e
        if product is None:
            raise FactoryError(
                self.factory_bean.name,
                f"Factory '{self.factory_bean.name}' returned None for '{self.name}'",
            )
        return product

    def is_produced(self) -> bool:
        return self._produced

    def is_factory_product(self) -> bool:
        return self.factory_bean is not None

    def implements(self, capability: Type) -> bool:
        return capability in self.capabilities

    @property
    def bean_type(self) -> Type:
        if self.factory_bean is not None:
            return self.factory_bean.obj.object_type()
        return type(self._obj)

    def run_post_construct(self):
        """
        Move the bean through CONSTRUCTING to INITIALIZED

        Raises:
            ConstructError: When post_construct raises, the bean stays CONSTRUCTING
        """
        self.lifecycle = BeanLifecycle.CONSTRUCTING
        if isinstance(self._obj, InitializingBean):
            try:
                self._obj.post_construct()
            except Exception as e:
                raise ConstructError(self.name, e) from e
        self.lifecycle = BeanLifecycle.INITIALIZED

    def run_destroy(self):
        """Move the bean through DESTROYING to DESTROYED, re-raising a hook failure"""
        self.lifecycle = BeanLifecycle.DESTROYING
        try:
            if isinstance(self._obj, DisposableBean):
                self._obj.destroy()
        finally:
            self.lifecycle = BeanLifecycle.DESTROYED

    def reload(self):
        """
        Re-initialize the bean in place: destroy() if disposable, then post_construct()

        Raises:
            ReloadUnsupportedError: For beans produced by a FactoryBean
            ConstructError: When post_construct fails
        """
        if self.factory_bean is not None:
            raise ReloadUnsupportedError(self.name)
        with self._lock:
            if self.lifecycle != BeanLifecycle.INITIALIZED:
                raise DIException(
                    f"Bean '{self.name}' is {self.lifecycle.name} and can not be reloaded"
                )
            self.run_destroy()
            self.run_post_construct()

    def __repr__(self):
        factory_str = f", factory={self.factory_bean.name}" if self.factory_bean else ""
        return f"Bean(id={self.id}, name={self.name}, type={self.bean_type.__name__}, lifecycle={self.lifecycle.name}{factory_str})"

    __str__ = __repr__
