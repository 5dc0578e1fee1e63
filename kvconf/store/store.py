"""
持久化键值配置存储

负责配置项的读写和持久化，包括：
- key=value 文本文件的加载与保存
- 字符串/整数/浮点/布尔类型的取值与设置
- 缺失文件或缺失键时的默认值生成
- 加载后的整体配置校验
"""

import threading
from enum import Enum
from typing import Callable, Dict, List, Optional

from .codec import dump_lines, is_storable_value, is_valid_key, parse_lines
from .coerce import format_value, parse_bool, parse_float, parse_int
from .errors import (
    ConfigFileNotFoundError, ConfigIOError, InvalidKeyError,
    InvalidValueError, StoreNotBoundError, ValidationError,
)
from .policy import BUILTIN_DEFAULTS, StoreOptions, ValidationPolicy
from ..storage.backend import FileBackend, PersistenceBackend
from ..utils.log import loguru_reporter

Reporter = Callable[[str, str], None]


class StoreState(Enum):
    """存储状态枚举"""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"


class ConfigStore:
    """键值配置存储"""

    def __init__(self,
                 options: Optional[StoreOptions] = None,
                 policy: Optional[ValidationPolicy] = None,
                 defaults: Optional[Dict[str, str]] = None,
                 backend: Optional[PersistenceBackend] = None,
                 reporter: Optional[Reporter] = None):
        """
        初始化配置存储

        Args:
            options: 存储行为选项
            policy: 整体校验策略
            defaults: 配置文件缺失时生成的默认配置表
            backend: 持久化后端，默认本地文件
            reporter: (level, message) 日志接收器，默认输出到 loguru
        """
        self.options = options or StoreOptions()
        self.policy = policy or ValidationPolicy()
        self.defaults: Dict[str, str] = dict(BUILTIN_DEFAULTS if defaults is None else defaults)
        self.backend = backend or FileBackend()
        self.reporter = reporter or loguru_reporter

        self.backing_path: Optional[str] = None
        self.state = StoreState.UNINITIALIZED

        # 每次修改都整体替换字典，读操作无需加锁
        self._entries: Dict[str, str] = {}
        self._lock = threading.RLock()

    @property
    def loaded(self) -> bool:
        return self.state is StoreState.LOADED

    @property
    def entries(self) -> Dict[str, str]:
        """当前配置项副本"""
        return dict(self._entries)

    # ------------------------------------------------------------------
    # 加载与保存
    # ------------------------------------------------------------------

    def load(self, path: str) -> None:
        """
        加载配置文件

        文件中的配置项合并到当前配置中，同名键以文件为准。文件无法打开时，
        若启用了默认值生成则写入内置默认配置，否则抛出 ConfigFileNotFoundError。
        加载完成后按需执行整体校验，校验失败抛出 ValidationError，但已加载的
        配置项保留。

        Args:
            path: 配置文件路径
        """
        path = str(path)
        with self._lock:
            self.backing_path = path
            self.state = StoreState.LOADING

            try:
                lines = self.backend.read_lines(path)
            except OSError as e:
                self._load_defaults(path, e)
                return
            except UnicodeDecodeError as e:
                self.state = StoreState.LOAD_FAILED
                self._report("ERROR", f"配置文件编码错误: {path} - {e}")
                raise ConfigIOError(path, str(e)) from e

            def skipped(lineno: int, line: str) -> None:
                self._report("DEBUG", f"忽略无法解析的行 {path}:{lineno}: {line.strip()}")

            # 文件中的键覆盖内存中的同名键，其余键保留
            merged = dict(self._entries)
            merged.update(parse_lines(lines, on_skip=skipped))
            self._entries = merged
            self.state = StoreState.LOADED
            self._report("INFO", f"配置文件加载成功: {path} ({len(self._entries)} 项)")

            if self.options.validate_on_load:
                self.validate()

    def _load_defaults(self, path: str, error: OSError) -> None:
        """配置文件无法打开时的处理"""
        if not self.options.materialize_defaults:
            self.state = StoreState.LOAD_FAILED
            self._report("ERROR", f"无法打开配置文件: {path} - {error}")
            raise ConfigFileNotFoundError(path) from error

        self._report("WARNING", f"配置文件不存在，创建默认配置: {path}")
        merged = dict(self._entries)
        merged.update(self.defaults)
        try:
            self._write(path, merged)
        except ConfigIOError:
            self.state = StoreState.LOAD_FAILED
            raise

        self._entries = merged
        self.state = StoreState.LOADED
        self._report("INFO", f"默认配置已创建: {path} ({len(merged)} 项)")

    def save(self, path: Optional[str] = None) -> None:
        """
        保存配置到文件

        Args:
            path: 目标路径，为空时使用已绑定的配置文件
        """
        with self._lock:
            target = str(path) if path is not None else self.backing_path
            if target is None:
                self._report("ERROR", "保存配置失败: 未绑定配置文件")
                raise StoreNotBoundError("save")

            self._write(target, self._entries)
            if self.backing_path is None:
                self.backing_path = target
            self._report("DEBUG", f"配置已保存: {target}")

    def reload(self) -> None:
        """重新加载已绑定的配置文件"""
        with self._lock:
            if self.backing_path is None:
                self._report("ERROR", "重新加载失败: 未绑定配置文件")
                raise StoreNotBoundError("reload")
            self._report("INFO", f"重新加载配置文件: {self.backing_path}")
            self.load(self.backing_path)

    def _write(self, path: str, entries: Dict[str, str]) -> None:
        try:
            self.backend.write_lines(path, dump_lines(entries))
        except OSError as e:
            self._report("ERROR", f"写入配置文件失败: {path} - {e}")
            raise ConfigIOError(path, str(e)) from e

    def _commit(self, updated: Dict[str, str]) -> None:
        """持久化成功后再替换内存数据，失败时保持原状"""
        if self.options.persist_on_write:
            if self.backing_path is None:
                self._report("DEBUG", "未绑定配置文件，跳过自动保存")
            else:
                self._write(self.backing_path, updated)
        self._entries = updated

    # ------------------------------------------------------------------
    # 取值
    # ------------------------------------------------------------------

    def _lookup(self, key: str, default_text: str) -> Optional[str]:
        value = self._entries.get(key)
        if value is None and self.options.materialize_defaults:
            self._materialize(key, default_text)
        return value

    def _materialize(self, key: str, text: str) -> None:
        """将缺失键的默认值写入配置"""
        if not is_valid_key(key) or not is_storable_value(text):
            self._report("WARNING", f"非法的配置键或默认值，不写入默认值: {key!r}")
            return

        with self._lock:
            if key in self._entries:
                return
            updated = dict(self._entries)
            updated[key] = text
            try:
                self._commit(updated)
            except ConfigIOError:
                self._report("ERROR", f"默认值写入失败，已回滚: {key}")
                return
        self._report("DEBUG", f"写入默认值: {key}={text}")

    def get_string(self, key: str, default: str = "") -> str:
        value = self._lookup(key, default)
        return default if value is None else value

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._lookup(key, format_value(default))
        if value is None:
            return default

        parsed = parse_int(value, key)
        if not parsed.ok:
            self._report("WARNING", f"{parsed.error}，使用默认值 {default}")
        return parsed.unwrap_or(default)

    def get_double(self, key: str, default: float = 0.0) -> float:
        value = self._lookup(key, format_value(default))
        if value is None:
            return default

        parsed = parse_float(value, key)
        if not parsed.ok:
            self._report("WARNING", f"{parsed.error}，使用默认值 {default}")
        return parsed.unwrap_or(default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._lookup(key, format_value(default))
        if value is None:
            return default
        return parse_bool(value).value

    # ------------------------------------------------------------------
    # 设置
    # ------------------------------------------------------------------

    def _set(self, key: str, text: str) -> None:
        if not is_valid_key(key):
            self._report("ERROR", f"非法的配置键: {key!r}")
            raise InvalidKeyError(key)
        if not is_storable_value(text):
            self._report("ERROR", f"配置值不能包含换行或两端空白: {key!r}")
            raise InvalidValueError(key)

        with self._lock:
            updated = dict(self._entries)
            updated[key] = text
            self._commit(updated)

    def set_string(self, key: str, value: str) -> None:
        self._set(key, str(value))

    def set_int(self, key: str, value: int) -> None:
        self._set(key, format_value(int(value)))

    def set_double(self, key: str, value: float) -> None:
        self._set(key, format_value(float(value)))

    def set_bool(self, key: str, value: bool) -> None:
        self._set(key, format_value(bool(value)))

    # ------------------------------------------------------------------
    # 键操作
    # ------------------------------------------------------------------

    def has_key(self, key: str) -> bool:
        return key in self._entries

    def keys(self) -> List[str]:
        return sorted(self._entries)

    def remove_key(self, key: str) -> None:
        """删除配置项，键不存在时不做任何操作"""
        with self._lock:
            if key not in self._entries:
                return
            updated = dict(self._entries)
            del updated[key]
            self._commit(updated)
            self._report("DEBUG", f"删除配置项: {key}")

    def clear(self) -> None:
        """清空所有配置项，状态保持不变"""
        with self._lock:
            self._commit({})
            self._report("INFO", "配置已清空")

    def snapshot(self) -> Dict[str, str]:
        return dict(self._entries)

    def restore(self, snapshot: Dict[str, str]) -> None:
        """用快照整体替换当前配置"""
        for key, value in snapshot.items():
            if not is_valid_key(key):
                self._report("ERROR", f"快照包含非法的配置键: {key!r}")
                raise InvalidKeyError(key)
            if not is_storable_value(value):
                self._report("ERROR", f"快照配置值不能包含换行或两端空白: {key!r}")
                raise InvalidValueError(key)

        with self._lock:
            self._commit(dict(snapshot))
            self._report("INFO", f"已从快照恢复配置 ({len(snapshot)} 项)")

    # ------------------------------------------------------------------
    # 校验
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """
        整体配置校验

        依次检查必填键和整数范围，遇到第一个不合格项即抛出 ValidationError。
        """
        entries = self._entries

        for key in self.policy.required_keys:
            if key not in entries:
                self._fail(ValidationError(key, ValidationError.MISSING,
                                           detail="缺少必填配置项"))

        for rule in self.policy.int_ranges:
            raw = entries.get(rule.key)
            if raw is None:
                continue

            parsed = parse_int(raw, rule.key)
            if not parsed.ok:
                self._fail(ValidationError(rule.key, ValidationError.NOT_AN_INTEGER, raw,
                                           detail=f"{raw!r} 不是整数"))
            if not rule.contains(parsed.value):
                self._fail(ValidationError(
                    rule.key, ValidationError.OUT_OF_RANGE, raw,
                    detail=f"{parsed.value} 不在 [{rule.minimum}, {rule.maximum}] 范围内"
                ))

        self._report("DEBUG", "配置校验通过")

    def _fail(self, error: ValidationError) -> None:
        self._report("ERROR", str(error))
        raise error

    def _report(self, level: str, message: str) -> None:
        self.reporter(level, message)

    def __contains__(self, key: str) -> bool:
        return self.has_key(key)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (f"ConfigStore(path={self.backing_path!r}, entries={len(self._entries)}, "
                f"state={self.state.value})")
