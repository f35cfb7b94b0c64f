# -*- coding: utf-8 -*-
"""
Configuration properties

Properties is a thread safe key/value store of strings with typed getters and a
chain of secondary resolvers. Lookups walk the chain from the highest priority
down, the store itself takes part with DEFAULT_PRIORITY. A value that can not
be converted is reported to the error handler and the caller's default is used.
"""

import os
import re
from abc import ABC, abstractmethod
from datetime import timedelta
from pathlib import Path
from threading import RLock
from typing import Callable, Dict, List, Mapping, Optional, Union

from beancontext.config.load_env import read_env_file
from beancontext.observation.logger import get_logger

logger = get_logger(__name__)

ErrorHandler = Callable[[str, Exception], None]

_TRUE_VALUES = {"1", "t", "T", "true", "TRUE", "True", "on", "ON", "On"}
_FALSE_VALUES = {"0", "f", "F", "false", "FALSE", "False", "off", "OFF", "Off"}

# Durations: "300ms", "1h30m", "1.5s", "-2m"
_DURATION_UNITS = {
    "ns": 1e-3,
    "us": 1.0,
    "µs": 1.0,
    "ms": 1e3,
    "s": 1e6,
    "m": 60e6,
    "h": 3600e6,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_bool(value: str) -> bool:
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid syntax '{value}'")


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration such as "300ms" or "2h45m"

    Raises:
        ValueError: On an empty string, a missing unit or trailing garbage
    """
    text = value.strip()
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration '{value}'")

    micros = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if not match:
            raise ValueError(f"invalid duration '{value}'")
        micros += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return timedelta(microseconds=sign * micros)


class PropertyResolver(ABC):
    """Secondary source of property values"""

    @abstractmethod
    def priority(self) -> int:
        """Higher priority wins when several resolvers know a key"""
        ...

    @abstractmethod
    def get_property(self, key: str) -> Optional[str]:
        """Return the raw value or None when the key is unknown"""
        ...


class EnvironmentResolver(PropertyResolver):
    """
    Resolves keys from os.environ

    'server.http-port' is looked up as is, then as 'SERVER_HTTP_PORT'.
    """

    DEFAULT_PRIORITY = 200

    def __init__(self, priority: int = DEFAULT_PRIORITY, prefix: str = ""):
        self._priority = priority
        self._prefix = prefix

    def priority(self) -> int:
        return self._priority

    def get_property(self, key: str) -> Optional[str]:
        found = os.environ.get(self._prefix + key)
        if found is not None:
            return found
        env_key = re.sub(r"[.\-]", "_", self._prefix + key).upper()
        return os.environ.get(env_key)


class MappingResolver(PropertyResolver):
    """Resolves keys from a fixed mapping"""

    def __init__(self, values: Mapping[str, str], priority: int = 0):
        self._values = dict(values)
        self._priority = priority

    def priority(self) -> int:
        return self._priority

    def get_property(self, key: str) -> Optional[str]:
        return self._values.get(key)


class InheritedResolver(PropertyResolver):
    """Resolves keys through the whole chain of another Properties (a parent context)"""

    def __init__(self, parent: 'Properties', priority: int = 0):
        self._parent = parent
        self._priority = priority

    def priority(self) -> int:
        return self._priority

    def get_property(self, key: str) -> Optional[str]:
        return self._parent.get(key)


class Properties(PropertyResolver):
    """Key/value configuration consumed by value() injection points"""

    DEFAULT_PRIORITY = 100

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self._lock = RLock()
        self._store: Dict[str, str] = {}
        self._resolvers: List[PropertyResolver] = []
        self._error_handler: Optional[ErrorHandler] = None
        if values:
            self.merge(values)

    # ==================== Resolver chain ====================

    def priority(self) -> int:
        return self.DEFAULT_PRIORITY

    def get_property(self, key: str) -> Optional[str]:
        with self._lock:
            return self._store.get(key)

    def register_resolver(self, resolver: PropertyResolver) -> 'Properties':
        if resolver is self:
            raise ValueError("Properties can not resolve through itself")
        with self._lock:
            self._resolvers.append(resolver)
        return self

    def resolvers(self) -> List[PropertyResolver]:
        """Registered resolvers and the store itself, highest priority first"""
        with self._lock:
            chain = [self] + list(self._resolvers)
        # sorted() is stable, equal priorities keep registration order
        return sorted(chain, key=lambda r: -r.priority())

    # ==================== Store ====================

    def set(self, key: str, value: str):
        with self._lock:
            self._store[key] = str(value)

    def remove(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self):
        with self._lock:
            self._store.clear()

    def merge(self, other: Union['Properties', Mapping[str, str]]):
        values = other.to_dict() if isinstance(other, Properties) else other
        with self._lock:
            for key, val in values.items():
                self._store[key] = str(val)

    def load_env_file(self, path: Union[str, Path]) -> int:
        """Merge a .env file into the store, returns the number of keys read"""
        values = read_env_file(path)
        self.merge(values)
        return len(values)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._store.keys())

    def to_dict(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._store)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    # ==================== Typed getters ====================

    def get(self, key: str) -> Optional[str]:
        """Raw value from the first resolver in priority order that knows the key"""
        for resolver in self.resolvers():
            found = resolver.get_property(key)
            if found is not None:
                return found
        return None

    def contains(self, key: str) -> bool:
        return self.get(key) is not None

    def get_error_handler(self) -> Optional[ErrorHandler]:
        with self._lock:
            return self._error_handler

    def set_error_handler(self, on_error: Optional[ErrorHandler]):
        with self._lock:
            self._error_handler = on_error

    def _convert(self, key: str, default, converter):
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return converter(raw)
        except (ValueError, TypeError) as e:
            handler = self.get_error_handler()
            if handler is not None:
                handler(key, e)
            else:
                logger.warning("Invalid value for property '%s': %s", key, e)
            return default

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        raw = self.get(key)
        return default if raw is None else raw

    def get_int(self, key: str, default: int = 0) -> int:
        return self._convert(key, default, lambda raw: int(raw.strip()))

    def get_bool(self, key: str, default: bool = False) -> bool:
        return self._convert(key, default, parse_bool)

    def get_float(self, key: str, default: float = 0.0) -> float:
        return self._convert(key, default, lambda raw: float(raw.strip()))

    def get_duration(
        self, key: str, default: timedelta = timedelta(0)
    ) -> timedelta:
        return self._convert(key, default, parse_duration)

    def get_value(self, key: str, kind: type, default=None):
        """Typed lookup dispatched on kind, used by value() injection points"""
        if kind is bool:
            return self.get_bool(key, default)
        if kind is int:
            return self.get_int(key, default)
        if kind is float:
            return self.get_float(key, default)
        if kind is timedelta:
            return self.get_duration(key, default)
        return self.get_string(key, default)

    def __repr__(self):
        return f"Properties(keys={len(self)}, resolvers={len(self._resolvers)})"
