"""
设置管理模块

负责加载和管理 kvconf 的运行设置。
"""

from .manager import SettingsManager, StoreSettings, LoggingConfig

__all__ = ['SettingsManager', 'StoreSettings', 'LoggingConfig']
