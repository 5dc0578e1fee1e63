"""
应用设置管理器

负责加载、验证和管理 kvconf 自身的运行设置，包括：
- 配置存储文件路径和行为选项
- 整体校验策略（必填键、整数范围）
- 配置文件缺失时使用的默认配置表
- 日志输出设置
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger

from ..store.codec import is_storable_value, is_valid_key
from ..store.coerce import format_value, parse_bool
from ..store.policy import BUILTIN_DEFAULTS, IntRange, StoreOptions, ValidationPolicy
from ..store.store import ConfigStore, Reporter
from ..storage.backend import PersistenceBackend

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class StoreSettings:
    """配置存储设置数据类"""
    path: str = "data/kvconf.conf"
    options: StoreOptions = field(default_factory=StoreOptions)


@dataclass
class LoggingConfig:
    """日志配置数据类"""
    level: str = "INFO"

    # 控制台日志
    console_colored: bool = True

    # 文件日志
    file_enabled: bool = False
    file_path: str = "data/logs/kvconf.log"
    rotation: str = "10 MB"
    retention: str = "30 days"


class SettingsManager:
    """kvconf 设置管理器"""

    def __init__(self, config_dir: str = "config"):
        """
        初始化设置管理器

        Args:
            config_dir: 设置文件目录路径
        """
        self.config_dir = Path(config_dir)
        self.settings_file = self.config_dir / "settings.yaml"

        # 原始设置数据
        self._settings: Dict[str, Any] = {}

        # 设置对象
        self.store: Optional[StoreSettings] = None
        self.validation: Optional[ValidationPolicy] = None
        self.defaults: Dict[str, str] = {}
        self.logging: Optional[LoggingConfig] = None

        self.load_settings()

    def load_settings(self) -> None:
        """加载设置文件"""
        if not self.settings_file.exists():
            logger.warning(f"设置文件不存在: {self.settings_file}")
            self._create_default_settings()

        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                self._settings = yaml.safe_load(f) or {}

            self._parse_settings()
            logger.debug(f"设置文件加载成功: {self.settings_file}")

        except Exception as e:
            logger.error(f"加载设置文件失败: {self.settings_file} - {e}")
            raise

    def _create_default_settings(self) -> None:
        """创建默认设置文件"""
        default_settings = {
            'store': {
                'path': 'data/kvconf.conf',
                'validate_on_load': True,
                'materialize_defaults': False,
                'persist_on_write': True
            },
            'validation': {
                'required_keys': ['operation_mode', 'max_threads', 'batch_size'],
                'int_ranges': {
                    'max_threads': {'min': 1, 'max': 32},
                    'batch_size': {'min': 1, 'max': 10000}
                }
            },
            'defaults': dict(BUILTIN_DEFAULTS),
            'logging': {
                'level': 'INFO',
                'console': {
                    'colored': True
                },
                'file': {
                    'enabled': False,
                    'path': 'data/logs/kvconf.log',
                    'rotation': '10 MB',
                    'retention': '30 days'
                }
            }
        }

        # 确保目录存在
        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.settings_file, 'w', encoding='utf-8') as f:
            yaml.dump(default_settings, f, default_flow_style=False,
                      allow_unicode=True, indent=2, sort_keys=False)

        logger.info(f"创建默认设置文件: {self.settings_file}")

    def _parse_settings(self) -> None:
        """解析设置"""
        # 存储设置
        store_config = self._settings.get('store', {})
        self.store = StoreSettings(
            path=str(store_config.get('path', 'data/kvconf.conf')),
            options=StoreOptions(
                validate_on_load=_as_bool(store_config.get('validate_on_load', True)),
                materialize_defaults=_as_bool(store_config.get('materialize_defaults', False)),
                persist_on_write=_as_bool(store_config.get('persist_on_write', True))
            )
        )

        # 校验策略
        validation_config = self._settings.get('validation', {})
        ranges_config = validation_config.get('int_ranges', {
            'max_threads': {'min': 1, 'max': 32},
            'batch_size': {'min': 1, 'max': 10000}
        })
        self.validation = ValidationPolicy(
            required_keys=tuple(str(k) for k in validation_config.get(
                'required_keys', ['operation_mode', 'max_threads', 'batch_size'])),
            int_ranges=tuple(
                IntRange(str(key), int(bounds['min']), int(bounds['max']))
                for key, bounds in ranges_config.items()
            )
        )

        # 默认配置表，YAML 中的数字和布尔值统一转换为存储格式
        defaults_config = self._settings.get('defaults')
        if defaults_config is None:
            defaults_config = BUILTIN_DEFAULTS
        self.defaults = {str(k): format_value(v) for k, v in defaults_config.items()}

        # 日志设置
        logging_config = self._settings.get('logging', {})
        console_config = logging_config.get('console', {})
        file_config = logging_config.get('file', {})

        self.logging = LoggingConfig(
            level=str(logging_config.get('level', 'INFO')).upper(),
            console_colored=_as_bool(console_config.get('colored', True)),
            file_enabled=_as_bool(file_config.get('enabled', False)),
            file_path=file_config.get('path', 'data/logs/kvconf.log'),
            rotation=file_config.get('rotation', '10 MB'),
            retention=file_config.get('retention', '30 days')
        )

    def validate_settings(self) -> Dict[str, List[str]]:
        """验证设置的完整性和正确性"""
        errors = {
            'store': [],
            'validation': [],
            'defaults': [],
            'logging': []
        }

        if not self.store or not self.store.path:
            errors['store'].append("配置存储路径不能为空")

        if self.validation:
            for key in self.validation.required_keys:
                if not is_valid_key(key):
                    errors['validation'].append(f"必填键格式错误: {key}")
            for rule in self.validation.int_ranges:
                if rule.minimum > rule.maximum:
                    errors['validation'].append(
                        f"范围下限大于上限: {rule.key} [{rule.minimum}, {rule.maximum}]")

        for key, value in self.defaults.items():
            if not is_valid_key(key):
                errors['defaults'].append(f"默认配置键格式错误: {key}")
            if not is_storable_value(value):
                errors['defaults'].append(f"默认配置值不能包含换行或两端空白: {key}")

        # 默认配置表本身应能通过整体校验
        if self.validation and self.defaults:
            for key in self.validation.required_keys:
                if key not in self.defaults:
                    errors['defaults'].append(f"默认配置缺少必填键: {key}")

        if self.logging and self.logging.level not in LOG_LEVELS:
            errors['logging'].append(f"未知的日志级别: {self.logging.level}")

        return errors

    def build_store(self, backend: Optional[PersistenceBackend] = None,
                    reporter: Optional[Reporter] = None) -> ConfigStore:
        """按当前设置创建配置存储（不加载文件）"""
        return ConfigStore(
            options=StoreOptions(
                validate_on_load=self.store.options.validate_on_load,
                materialize_defaults=self.store.options.materialize_defaults,
                persist_on_write=self.store.options.persist_on_write
            ),
            policy=self.validation,
            defaults=self.defaults,
            backend=backend,
            reporter=reporter
        )

    def get_settings_summary(self) -> Dict[str, Any]:
        """获取设置摘要信息"""
        return {
            'store': {
                'path': self.store.path if self.store else 'N/A',
                'validate_on_load': self.store.options.validate_on_load if self.store else False,
                'materialize_defaults': self.store.options.materialize_defaults if self.store else False,
                'persist_on_write': self.store.options.persist_on_write if self.store else False
            },
            'validation': {
                'required_keys': list(self.validation.required_keys) if self.validation else [],
                'int_ranges': {
                    r.key: [r.minimum, r.maximum] for r in self.validation.int_ranges
                } if self.validation else {}
            },
            'defaults': {
                'total_keys': len(self.defaults)
            },
            'logging': {
                'level': self.logging.level if self.logging else 'N/A',
                'file_enabled': self.logging.file_enabled if self.logging else False
            }
        }

    def reload_settings(self) -> None:
        """重新加载设置"""
        logger.info("重新加载设置文件...")
        self.load_settings()
        logger.info("设置文件重新加载完成")

    def __str__(self) -> str:
        summary = self.get_settings_summary()
        return (f"SettingsManager("
                f"store={summary['store']['path']}, "
                f"required={len(summary['validation']['required_keys'])}, "
                f"defaults={summary['defaults']['total_keys']})")

    def __repr__(self) -> str:
        return self.__str__()


def _as_bool(value: Any) -> bool:
    """YAML 中带引号的 "false" 等字符串按配置文件的布尔规则解析"""
    if isinstance(value, str):
        return parse_bool(value).value
    return bool(value)
