"""
配置存储异常定义

结构性错误（文件无法读写、键非法、校验失败）以异常形式抛给调用方；
类型转换错误只作为解析结果的一部分返回，不会从取值接口抛出。
"""

from typing import Optional


class ConfigStoreError(Exception):
    """配置存储异常基类"""


class ConfigFileNotFoundError(ConfigStoreError):
    """配置文件不存在且未启用默认值生成"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"配置文件不存在: {path}")


class ConfigIOError(ConfigStoreError):
    """配置文件读写失败"""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"配置文件读写失败: {path}"
        if reason:
            message = f"{message} - {reason}"
        super().__init__(message)


class StoreNotBoundError(ConfigStoreError):
    """存储尚未绑定配置文件"""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"未绑定配置文件，无法执行 {operation}")


class InvalidKeyError(ConfigStoreError, ValueError):
    """配置键格式非法"""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"非法的配置键: {key!r}")


class InvalidValueError(ConfigStoreError, ValueError):
    """配置值包含换行或两端空白，无法按行原样持久化"""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"配置值不能包含换行或两端空白: {key}")


class CoercionError(ConfigStoreError, ValueError):
    """配置值无法转换为目标类型"""

    def __init__(self, value: str, target: str, key: str = ""):
        self.key = key
        self.value = value
        self.target = target
        super().__init__(f"无法将 {key or '值'} = {value!r} 转换为 {target}")


class ValidationError(ConfigStoreError):
    """
    整体配置校验失败

    Attributes:
        key: 未通过校验的配置键
        reason: missing / not_an_integer / out_of_range
        value: 当前存储的原始值（缺失时为 None）
    """

    MISSING = "missing"
    NOT_AN_INTEGER = "not_an_integer"
    OUT_OF_RANGE = "out_of_range"

    def __init__(self, key: str, reason: str, value: Optional[str] = None,
                 detail: str = ""):
        self.key = key
        self.reason = reason
        self.value = value
        message = f"配置校验失败: {key} ({reason})"
        if detail:
            message = f"{message} - {detail}"
        super().__init__(message)
