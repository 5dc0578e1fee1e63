"""
key=value 行格式编解码

- 以 # 开头的行为注释
- 空行忽略
- 按第一个 = 切分键和值，两侧去除空白
"""

import re
from typing import Callable, Dict, Iterable, List, Optional, Tuple

COMMENT_PREFIX = "#"
SEPARATOR = "="

_KEY_PATTERN = re.compile(r"[A-Za-z0-9_.]+")


def is_valid_key(key: str) -> bool:
    """键非空，且只包含字母、数字、下划线和点"""
    return bool(key) and _KEY_PATTERN.fullmatch(key) is not None


def is_storable_value(value: str) -> bool:
    """值不含换行且两端无空白，写入后能原样读回"""
    return "\n" not in value and "\r" not in value and value == value.strip()


def parse_line(line: str) -> Optional[Tuple[str, str]]:
    """
    解析单行

    Returns:
        (key, value)；注释、空行、无分隔符或空键返回 None
    """
    if is_ignorable(line):
        return None

    key, sep, value = line.strip().partition(SEPARATOR)
    if not sep:
        return None

    key = key.strip()
    if not key:
        return None
    return key, value.strip()


def is_ignorable(line: str) -> bool:
    """空行或注释行"""
    stripped = line.strip()
    return not stripped or stripped.startswith(COMMENT_PREFIX)


def parse_lines(lines: Iterable[str],
                on_skip: Optional[Callable[[int, str], None]] = None) -> Dict[str, str]:
    """
    解析整个文档，重复键以最后一次出现为准

    Args:
        lines: 文档行
        on_skip: 遇到既非注释也无法解析的行时回调 (行号, 原始行)
    """
    entries: Dict[str, str] = {}
    for lineno, line in enumerate(lines, start=1):
        pair = parse_line(line)
        if pair is not None:
            entries[pair[0]] = pair[1]
        elif on_skip is not None and not is_ignorable(line):
            on_skip(lineno, line)
    return entries


def dump_lines(entries: Dict[str, str]) -> List[str]:
    """按键排序输出 key=value 行"""
    return [f"{key}{SEPARATOR}{entries[key]}" for key in sorted(entries)]
