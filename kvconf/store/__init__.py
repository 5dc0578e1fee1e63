"""
配置存储模块

提供键值配置的加载、类型化读写、默认值生成和整体校验功能。
"""

from .store import ConfigStore, StoreState
from .policy import StoreOptions, ValidationPolicy, IntRange, BUILTIN_DEFAULTS
from .coerce import Parsed, parse_int, parse_float, parse_bool, format_value
from .errors import (
    ConfigStoreError, ConfigFileNotFoundError, ConfigIOError, StoreNotBoundError,
    InvalidKeyError, InvalidValueError, CoercionError, ValidationError,
)

__all__ = [
    'ConfigStore', 'StoreState',
    'StoreOptions', 'ValidationPolicy', 'IntRange', 'BUILTIN_DEFAULTS',
    'Parsed', 'parse_int', 'parse_float', 'parse_bool', 'format_value',
    'ConfigStoreError', 'ConfigFileNotFoundError', 'ConfigIOError', 'StoreNotBoundError',
    'InvalidKeyError', 'InvalidValueError', 'CoercionError', 'ValidationError',
]
