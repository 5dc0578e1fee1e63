"""
工具模块

提供日志设置功能。
"""

from .log import setup_logging, loguru_reporter

__all__ = ['setup_logging', 'loguru_reporter']
