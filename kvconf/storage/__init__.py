"""
持久化模块

提供配置文件的按行读写后端。
"""

from .backend import PersistenceBackend, FileBackend, MemoryBackend

__all__ = ['PersistenceBackend', 'FileBackend', 'MemoryBackend']
