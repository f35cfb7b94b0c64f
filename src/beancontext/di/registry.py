# -*- coding: utf-8 -*-
"""
Bean registry

Holds every bean of one context indexed by capability and by name. Lists keep
insertion order, which is the tie-break for single valued injection.

Lock usage strategy:
- find_* operations: shared read lock, readers never block each other
- add_* operations: exclusive write lock, excludes readers and other writers
"""

from collections import defaultdict
from contextlib import contextmanager
from threading import Condition, Lock
from typing import Dict, Iterator, List, Tuple, Type

from beancontext.di.bean_definition import Bean


class ReadWriteLock:
    """Many readers or a single writer; writers are preferred once waiting"""

    def __init__(self):
        self._cond = Condition(Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class Registry:
    """Capability and name multimaps of beans"""

    def __init__(self):
        self._lock = ReadWriteLock()
        # {capability: [Bean]}
        self._beans_by_type: Dict[Type, List[Bean]] = defaultdict(list)
        # {name: [Bean]}
        self._beans_by_name: Dict[str, List[Bean]] = defaultdict(list)

    def add_bean(self, capability: Type, bean: Bean):
        with self._lock.write_locked():
            self._index(capability, bean)

    def add_beans(self, capability: Type, beans: List[Bean]):
        with self._lock.write_locked():
            for bean in beans:
                self._index(capability, bean)

    def _index(self, capability: Type, bean: Bean):
        by_type = self._beans_by_type[capability]
        if bean not in by_type:
            by_type.append(bean)
        by_name = self._beans_by_name[bean.name]
        if bean not in by_name:
            by_name.append(bean)

    def find_by_type(self, capability: Type) -> Tuple[List[Bean], bool]:
        with self._lock.read_locked():
            beans = self._beans_by_type.get(capability)
            if not beans:
                return [], False
            return list(beans), True

    def find_by_name(self, name: str) -> Tuple[List[Bean], bool]:
        with self._lock.read_locked():
            beans = self._beans_by_name.get(name)
            if not beans:
                return [], False
            return list(beans), True

    def types(self) -> List[Type]:
        with self._lock.read_locked():
            return list(self._beans_by_type.keys())
