# -*- coding: utf-8 -*-
"""
Configuration module: Properties store and .env loading
"""

from beancontext.config.properties import (
    EnvironmentResolver,
    InheritedResolver,
    MappingResolver,
    Properties,
    PropertyResolver,
    parse_bool,
    parse_duration,
)
from beancontext.config.load_env import load_env_file, read_env_file

__all__ = [
    'Properties',
    'PropertyResolver',
    'EnvironmentResolver',
    'MappingResolver',
    'InheritedResolver',
    'parse_bool',
    'parse_duration',
    'load_env_file',
    'read_env_file',
]
