# -*- coding: utf-8 -*-
"""
Bean capability interfaces

A candidate opts into a container callback by inheriting the matching
abstract class. The container only ever checks these nominally.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Type


class InitializingBean(ABC):
    """Beans that run code once their fields are injected"""

    @abstractmethod
    def post_construct(self) -> None:
        """Called after injection, in dependency order"""
        ...


class DisposableBean(ABC):
    """Beans that free resources when the context is closed"""

    @abstractmethod
    def destroy(self) -> None:
        """Called on close, in reverse initialization order"""
        ...


class NamedBean(ABC):
    """Beans that report their own name"""

    @abstractmethod
    def bean_name(self) -> str:
        ...


class OrderedBean(ABC):
    """Beans collected into lists in a specific order (smaller first)"""

    @abstractmethod
    def bean_order(self) -> int:
        ...


class FactoryBean(ABC):
    """
    Bean whose product, not itself, is injected into other beans

    The factory bean goes through the lifecycle. The product is registered
    under object_type() and object_name() but receives no callbacks.
    """

    @abstractmethod
    def object(self) -> Any:
        """Produce the object"""
        ...

    @abstractmethod
    def object_type(self) -> Type:
        """Type of the produced object"""
        ...

    def object_name(self) -> Optional[str]:
        """Name of the produced object, None to derive it from object_type()"""
        return None

    def singleton(self) -> bool:
        """Whether the product is created once and shared"""
        return True


class Scanner(ABC):
    """Provider of pre-scanned candidate instances"""

    @abstractmethod
    def beans(self) -> List[Any]:
        ...
