# -*- coding: utf-8 -*-
"""
Dependency injection decorators

Decorators only attach declarative metadata to a class. Nothing is registered
globally: instances become beans when they are passed to a context, directly
or through a ComponentScanner.
"""

from typing import Callable, Optional, Sequence, Type, TypeVar

T = TypeVar('T')


def component(
    name: str = None,
    provides: Sequence[Type] = (),
    order: Optional[int] = None,
):
    """
    Component decorator

    Args:
        name: Bean name, overrides the lower-cased class name
        provides: Extra capabilities the instances satisfy (e.g. typing.Protocol types)
        order: Position in collection injections, smaller first
    """

    def decorator(cls: Type[T]) -> Type[T]:
        cls._di_component = True
        cls._di_name = name
        cls._di_provides = tuple(provides)
        cls._di_order = order
        return cls

    return decorator


def service(
    name: str = None,
    provides: Sequence[Type] = (),
    order: Optional[int] = None,
):
    """
    Service component decorator
    """
    return component(name, provides, order)


def repository(
    name: str = None,
    provides: Sequence[Type] = (),
    order: Optional[int] = None,
):
    """
    Repository component decorator
    """
    return component(name, provides, order)


def conditional(condition: Callable[[], bool]):
    """
    Conditional decorator - ComponentScanner skips the class when the condition is false
    Note: The condition is evaluated once, at decoration time
    """

    def decorator(cls: Type[T]) -> Type[T]:
        cls._di_conditional = condition

        if not condition():
            cls._di_skip = True

        return cls

    return decorator
