"""
配置值类型转换

解析函数不抛异常，统一返回 Parsed 结果，由调用方决定如何回退。
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

from .errors import CoercionError

TRUE_VALUES = frozenset({"true", "1", "yes"})

_INT_PATTERN = re.compile(r"[+-]?[0-9]+", re.ASCII)


@dataclass(frozen=True)
class Parsed:
    """解析结果：成功时携带 value，失败时携带 error"""
    value: Any = None
    error: Optional[CoercionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: Any) -> Any:
        return self.value if self.ok else default


def parse_int(text: str, key: str = "") -> Parsed:
    """只接受 ASCII 十进制整数，可带正负号"""
    stripped = text.strip()
    if not _INT_PATTERN.fullmatch(stripped):
        return Parsed(error=CoercionError(text, "int", key))
    return Parsed(value=int(stripped))


def parse_float(text: str, key: str = "") -> Parsed:
    stripped = text.strip()
    # float() 还接受下划线分组和非 ASCII 数字
    if not stripped.isascii() or "_" in stripped:
        return Parsed(error=CoercionError(text, "float", key))
    try:
        return Parsed(value=float(stripped))
    except ValueError:
        return Parsed(error=CoercionError(text, "float", key))


def parse_bool(text: str) -> Parsed:
    """true / 1 / yes（不区分大小写）为真，其余一律为假"""
    return Parsed(value=text.strip().lower() in TRUE_VALUES)


def format_value(value: Any) -> str:
    """
    转换为存储用的规范字符串

    bool 输出 true/false，float 使用最短可还原表示（0.95 而不是 0.950000）。
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)
