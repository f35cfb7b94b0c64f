# -*- coding: utf-8 -*-
"""
beancontext - inversion of control container

Objects handed to new_context() become beans: their injection points are
resolved against each other, then they are initialized in dependency order
and destroyed in reverse order when the context is closed.

    ctx = new_context(MySQLUserRepository(), UserServiceImpl())
    service = ctx.bean(UserService)[0].obj
    ctx.close()
"""

from beancontext.config import EnvironmentResolver, Properties, PropertyResolver
from beancontext.di import (
    ALL_LEVELS,
    CURRENT_LEVEL,
    DEFAULT_LEVEL,
    Bean,
    BeanLifecycle,
    ComponentScanner,
    ConstructError,
    Context,
    ContextClosedError,
    CyclicDependencyError,
    DIException,
    DisposableBean,
    FactoryBean,
    FactoryError,
    InitializingBean,
    LazyResolutionError,
    MissingDependencyError,
    NamedBean,
    OrderedBean,
    PropertySource,
    ReloadUnsupportedError,
    ResourceSource,
    Scanner,
    TeardownError,
    UnclassifiableCandidateError,
    Verbose,
    component,
    conditional,
    inject,
    new_context,
    repository,
    service,
    value,
)

__version__ = "0.1.0"

__all__ = [
    'new_context',
    'Context',
    'DEFAULT_LEVEL',
    'CURRENT_LEVEL',
    'ALL_LEVELS',
    'inject',
    'value',
    'component',
    'service',
    'repository',
    'conditional',
    'InitializingBean',
    'DisposableBean',
    'NamedBean',
    'OrderedBean',
    'FactoryBean',
    'Scanner',
    'ComponentScanner',
    'Verbose',
    'PropertySource',
    'ResourceSource',
    'Properties',
    'PropertyResolver',
    'EnvironmentResolver',
    'Bean',
    'BeanLifecycle',
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
