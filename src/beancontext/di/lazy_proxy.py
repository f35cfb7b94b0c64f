# -*- coding: utf-8 -*-
"""
Lazy references

A lazy injection point receives a LazyProxy backed by an IndirectionCell. The
cell is filled exactly once, when the target bean is created, which always
happens before the dependent's post_construct runs.
"""

import threading
from typing import Any, Optional, Type

from beancontext.di.exceptions import DIException, LazyResolutionError

_EMPTY = object()


class IndirectionCell:
    """Single assignment reference cell"""

    def __init__(self, capability: Type, owner_thread: Optional[int] = None):
        """
        Args:
            capability: Capability the stored value satisfies
            owner_thread: Thread filling the cell; it must never wait on it
        """
        self.capability = capability
        self._value = _EMPTY
        self._filled = threading.Event()
        self._owner_thread = owner_thread or threading.get_ident()
        self._lock = threading.Lock()

    def fill(self, target: Any):
        with self._lock:
            if self._value is not _EMPTY:
                raise DIException(
                    f"Lazy reference to '{self.capability.__name__}' is already bound"
                )
            self._value = target
        self._filled.set()

    def is_filled(self) -> bool:
        return self._filled.is_set()

    def get(self, timeout: Optional[float] = None) -> Any:
        """
        Get the target, waiting for the fill when called from another thread

        Raises:
            LazyResolutionError: Cell still empty on the filling thread or after timeout
        """
        if self._filled.is_set():
            return self._value
        if threading.get_ident() == self._owner_thread:
            raise LazyResolutionError(self.capability)
        if not self._filled.wait(timeout):
            raise LazyResolutionError(
                self.capability,
                f"Timed out waiting for lazy reference to '{self.capability.__name__}'",
            )
        return self._value


class LazyProxy:
    """Stand-in forwarding everything to the target stored in its cell"""

    __slots__ = ('_cell',)

    def __init__(self, cell: IndirectionCell):
        object.__setattr__(self, '_cell', cell)

    @property
    def __class__(self):
        cell = object.__getattribute__(self, '_cell')
        if cell.is_filled():
            return type(cell.get())
        return cell.capability

    @property
    def __wrapped__(self) -> Any:
        return object.__getattribute__(self, '_cell').get()

    def __getattr__(self, name: str) -> Any:
        return getattr(object.__getattribute__(self, '_cell').get(), name)

    def __setattr__(self, name: str, value: Any):
        setattr(object.__getattribute__(self, '_cell').get(), name, value)

    def __call__(self, *args, **kwargs) -> Any:
        return object.__getattribute__(self, '_cell').get()(*args, **kwargs)

    def __bool__(self) -> bool:
        return bool(object.__getattribute__(self, '_cell').get())

    def __eq__(self, other) -> bool:
        return object.__getattribute__(self, '_cell').get() == other

    def __hash__(self) -> int:
        return hash(object.__getattribute__(self, '_cell').get())

    def __repr__(self) -> str:
        cell = object.__getattribute__(self, '_cell')
        if cell.is_filled():
            return repr(cell.get())
        return f"LazyProxy[{cell.capability.__name__}]"


def is_lazy_proxy(value: Any) -> bool:
    # type() is not fooled by the __class__ property
    return type(value) is LazyProxy


def unwrap(value: Any) -> Any:
    """Return the real target of a filled proxy, anything else unchanged"""
    if is_lazy_proxy(value):
        return object.__getattribute__(value, '_cell').get()
    return value
