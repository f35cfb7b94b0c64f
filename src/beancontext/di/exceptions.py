# -*- coding: utf-8 -*-
"""
Dependency injection system exception class definitions
"""

from typing import Any, List, Optional


def _type_name(capability: Any) -> str:
    if isinstance(capability, str):
        return capability
    return getattr(capability, '__name__', repr(capability))


class DIException(Exception):
    """Base exception for dependency injection system"""

    pass


class UnclassifiableCandidateError(DIException):
    """Candidate item that is neither a bean, a provider nor a marker"""

    def __init__(self, item: Any, position: int):
        self.item = item
        self.position = position
        super().__init__(
            f"Candidate #{position} of type '{type(item).__name__}' can not be used as a bean: {item!r}"
        )


class MissingDependencyError(DIException):
    """Required injection point without any matching bean"""

    def __init__(
        self, target_name: str, attr: str, capability: Any, bean_name: str = None
    ):
        self.target_name = target_name
        self.attr = attr
        self.capability = capability
        self.bean_name = bean_name

        if bean_name:
            detail = f"bean named '{bean_name}' of type '{_type_name(capability)}'"
        else:
            detail = f"bean of type '{_type_name(capability)}'"
        super().__init__(
            f"Cannot resolve required field '{attr}' of '{target_name}': {detail} not found"
        )


class CyclicDependencyError(DIException):
    """Circular dependency exception, raised only for cycles of immediate edges"""

    def __init__(self, cycle: List[str]):
        self.cycle = cycle
        chain_str = " -> ".join(cycle + cycle[:1])
        super().__init__(f"Circular dependency detected: {chain_str}")


class FactoryError(DIException):
    """Factory exception"""

    def __init__(self, factory_name: str, message: str = None):
        self.factory_name = factory_name
        default_msg = f"Factory '{factory_name}' failed to create instance"
        super().__init__(message or default_msg)


class ConstructError(DIException):
    """Post construct hook failure"""

    def __init__(self, bean_name: str, cause: Optional[BaseException] = None):
        self.bean_name = bean_name
        self.cause = cause
        super().__init__(f"Bean '{bean_name}' failed in post_construct: {cause}")


class TeardownError(DIException):
    """One or more destroy hooks failed during close"""

    def __init__(self, errors: List[Exception]):
        self.errors = list(errors)
        details = "; ".join(str(e) for e in self.errors)
        super().__init__(f"{len(self.errors)} bean(s) failed to destroy: {details}")


class ReloadUnsupportedError(DIException):
    """Reload requested on a bean produced by a FactoryBean"""

    def __init__(self, bean_name: str):
        self.bean_name = bean_name
        super().__init__(
            f"Bean '{bean_name}' was produced by a FactoryBean and can not be reloaded"
        )


class LazyResolutionError(DIException):
    """Lazy reference used before its target was created"""

    def __init__(self, capability: Any, message: str = None):
        self.capability = capability
        super().__init__(
            message
            or f"Lazy reference to '{_type_name(capability)}' used before the target bean was created"
        )


class ContextClosedError(DIException):
    """Operation on a context that is closed or closing"""

    def __init__(self):
        super().__init__("Context is closed")
