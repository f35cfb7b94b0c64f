# -*- coding: utf-8 -*-
"""
Dependency injection module

Note: This module re-exports the commonly used names of its submodules.
Inside the package, import from the specific submodules instead:
- Context: from beancontext.di.context import new_context, Context
- Injection points: from beancontext.di.injection import inject, value
- Decorators: from beancontext.di.decorators import component, service, repository
"""

# Context (from context.py)
from beancontext.di.context import (
    ALL_LEVELS,
    CURRENT_LEVEL,
    DEFAULT_LEVEL,
    Context,
    new_context,
)

# Injection points (from injection.py)
from beancontext.di.injection import inject, value

# Decorators (from decorators.py)
from beancontext.di.decorators import component, service, repository, conditional

# Capability interfaces (from interfaces.py)
from beancontext.di.interfaces import (
    DisposableBean,
    FactoryBean,
    InitializingBean,
    NamedBean,
    OrderedBean,
    Scanner,
)

# Construction markers (from collector.py)
from beancontext.di.collector import PropertySource, ResourceSource, Verbose

# Beans (from bean_definition.py)
from beancontext.di.bean_definition import Bean, BeanLifecycle

# Scanner (from scanner.py)
from beancontext.di.scanner import ComponentScanner

# Exceptions (from exceptions.py)
from beancontext.di.exceptions import (
    ConstructError,
    ContextClosedError,
    CyclicDependencyError,
    DIException,
    FactoryError,
    LazyResolutionError,
    MissingDependencyError,
    ReloadUnsupportedError,
    TeardownError,
    UnclassifiableCandidateError,
)

# Define public API
__all__ = [
    # Context
    'new_context',
    'Context',
    'DEFAULT_LEVEL',
    'CURRENT_LEVEL',
    'ALL_LEVELS',
    # Injection points
    'inject',
    'value',
    # Decorators
    'component',
    'service',
    'repository',
    'conditional',
    # Interfaces
    'InitializingBean',
    'DisposableBean',
    'NamedBean',
    'OrderedBean',
    'FactoryBean',
    'Scanner',
    # Markers
    'Verbose',
    'PropertySource',
    'ResourceSource',
    # Beans
    'Bean',
    'BeanLifecycle',
    'ComponentScanner',
    # Exceptions
    'DIException',
    'UnclassifiableCandidateError',
    'MissingDependencyError',
    'CyclicDependencyError',
    'FactoryError',
    'ConstructError',
    'TeardownError',
    'ReloadUnsupportedError',
    'LazyResolutionError',
    'ContextClosedError',
]
