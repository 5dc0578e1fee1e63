"""
配置存储策略数据

包括：
- 存储行为选项（加载后校验、默认值生成、写入即保存）
- 整体校验策略（必填键、整数范围）
- 内置默认配置表
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass
class StoreOptions:
    """存储行为选项"""
    validate_on_load: bool = True
    # 读取缺失键时写入默认值，需显式开启
    materialize_defaults: bool = False
    persist_on_write: bool = True


@dataclass(frozen=True)
class IntRange:
    """整数取值范围（闭区间）"""
    key: str
    minimum: int
    maximum: int

    def contains(self, value: int) -> bool:
        return self.minimum <= value <= self.maximum


@dataclass
class ValidationPolicy:
    """整体配置校验策略"""
    required_keys: Tuple[str, ...] = ("operation_mode", "max_threads", "batch_size")
    int_ranges: Tuple[IntRange, ...] = field(default_factory=lambda: (
        IntRange("max_threads", 1, 32),
        IntRange("batch_size", 1, 10000),
    ))


BUILTIN_DEFAULTS: Dict[str, str] = {
    "operation_mode": "normal",
    "max_threads": "4",
    "batch_size": "100",
    "processing_threshold": "0.8",
    "enable_logging": "true",
    "log_level": "INFO",
    "database_path": "data.db",
    "network_timeout": "30",
    "retry_count": "3",
    "compression_enabled": "true",
}
