# -*- coding: utf-8 -*-
"""
Candidate collector

Flattens the heterogeneous items given to new_context()/extend() into an
ordered list of candidate objects and separates the configuration markers
that are not beans.
"""

import inspect
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Union

from beancontext.config.properties import Properties
from beancontext.di.exceptions import UnclassifiableCandidateError
from beancontext.di.interfaces import Scanner
from beancontext.observation.logger import get_logger

logger = get_logger(__name__)

_SCALAR_TYPES = (str, bytes, bytearray, int, float, complex, bool)
_UNCLASSIFIABLE_TYPES = (dict, set, frozenset)


@dataclass(frozen=True)
class Verbose:
    """Route construction traces of one context to this logger"""

    logger: logging.Logger


@dataclass(frozen=True)
class PropertySource:
    """
    Configuration values for the context Properties

    Args:
        path: .env file merged into the Properties store
        mapping: Key/value pairs merged into the Properties store
        export: Also load the .env file into os.environ
    """

    path: Optional[Union[str, Path]] = None
    mapping: Optional[Mapping[str, str]] = None
    export: bool = False


@dataclass(frozen=True)
class ResourceSource:
    """Named resource provider, kept by the context and never interpreted"""

    name: str
    source: Any


@dataclass
class CollectedCandidates:
    """Result of one collection pass"""

    objects: List[Any] = field(default_factory=list)
    verbose: Optional[logging.Logger] = None
    property_sources: List[PropertySource] = field(default_factory=list)
    properties: List[Properties] = field(default_factory=list)
    resource_sources: List[ResourceSource] = field(default_factory=list)


class CandidateCollector:
    """Classifies construction items, expanding scanners and sequences in place"""

    def __init__(self):
        self._position = 0
        self._seen_ids = set()

    def collect(self, items: Sequence[Any]) -> CollectedCandidates:
        """
        Classify items

        Raises:
            UnclassifiableCandidateError: On the first item that is not usable
        """
        result = CollectedCandidates()
        self._position = 0
        self._seen_ids = set()
        self._collect_into(items, result)
        return result

    def _collect_into(self, items: Sequence[Any], result: CollectedCandidates):
        for item in items:
            position = self._position
            self._position += 1

            if isinstance(item, Verbose):
                result.verbose = item.logger
            elif isinstance(item, PropertySource):
                result.property_sources.append(item)
            elif isinstance(item, Properties):
                result.properties.append(item)
            elif isinstance(item, ResourceSource):
                result.resource_sources.append(item)
            elif isinstance(item, Scanner):
                scanned = list(item.beans())
                logger.debug(
                    "Scanner %s provided %d candidates",
                    type(item).__name__,
                    len(scanned),
                )
                self._collect_into(scanned, result)
            elif isinstance(item, (list, tuple)):
                self._collect_into(item, result)
            elif self._is_unclassifiable(item):
                raise UnclassifiableCandidateError(item, position)
            elif id(item) in self._seen_ids:
                logger.debug(
                    "Skipping duplicate candidate %s at #%d", type(item).__name__, position
                )
            else:
                self._seen_ids.add(id(item))
                result.objects.append(item)

    @staticmethod
    def _is_unclassifiable(item: Any) -> bool:
        if item is None:
            return True
        if isinstance(item, _SCALAR_TYPES + _UNCLASSIFIABLE_TYPES):
            return True
        return inspect.isclass(item) or inspect.isroutine(item) or inspect.ismodule(item)
