from pathlib import Path

import pytest
import yaml

from kvconf.config import SettingsManager
from kvconf.store import BUILTIN_DEFAULTS, ValidationError
from kvconf.storage import MemoryBackend


def _write_settings(config_dir: Path, settings: dict) -> None:
    config_dir.mkdir(parents=True, exist_ok=True)
    with open(config_dir / "settings.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump(settings, f)


def test_default_settings_file_created(tmp_path: Path):
    config_dir = tmp_path / "config"
    manager = SettingsManager(config_dir=str(config_dir))

    assert (config_dir / "settings.yaml").exists()
    assert manager.store.path == "data/kvconf.conf"
    assert manager.store.options.validate_on_load is True
    assert manager.store.options.materialize_defaults is False
    assert manager.store.options.persist_on_write is True
    assert manager.defaults == BUILTIN_DEFAULTS
    assert manager.validation.required_keys == ("operation_mode", "max_threads", "batch_size")
    assert manager.logging.level == "INFO"
    assert all(not problems for problems in manager.validate_settings().values())


def test_default_settings_reload_identically(tmp_path: Path):
    config_dir = tmp_path / "config"
    first = SettingsManager(config_dir=str(config_dir))
    second = SettingsManager(config_dir=str(config_dir))

    assert second.get_settings_summary() == first.get_settings_summary()
    assert second.defaults == first.defaults


def test_custom_settings_parsed(tmp_path: Path, reporter):
    config_dir = tmp_path / "config"
    _write_settings(config_dir, {
        "store": {"path": "custom.conf", "materialize_defaults": True},
        "validation": {
            "required_keys": ["max_threads"],
            "int_ranges": {"max_threads": {"min": 2, "max": 16}},
        },
        "defaults": {"max_threads": 8, "enable_logging": False, "ratio": 0.5},
        "logging": {"level": "debug", "file": {"enabled": True, "path": "x.log"}},
    })

    manager = SettingsManager(config_dir=str(config_dir))

    assert manager.store.path == "custom.conf"
    assert manager.defaults == {"max_threads": "8", "enable_logging": "false", "ratio": "0.5"}
    assert manager.logging.level == "DEBUG"
    assert manager.logging.file_enabled is True

    backend = MemoryBackend()
    store = manager.build_store(backend=backend, reporter=reporter)
    store.load(manager.store.path)
    assert store.entries == manager.defaults
    assert backend.exists("custom.conf")

    store.set_int("max_threads", 20)
    with pytest.raises(ValidationError) as exc:
        store.validate()
    assert exc.value.key == "max_threads"


def test_build_store_does_not_share_options(tmp_path: Path):
    manager = SettingsManager(config_dir=str(tmp_path / "config"))
    store = manager.build_store()
    store.options.materialize_defaults = True

    assert manager.store.options.materialize_defaults is False


def test_validate_settings_reports_problems(tmp_path: Path):
    config_dir = tmp_path / "config"
    _write_settings(config_dir, {
        "validation": {
            "required_keys": ["bad key", "max_threads"],
            "int_ranges": {"max_threads": {"min": 10, "max": 1}},
        },
        "defaults": {"operation_mode": "normal"},
        "logging": {"level": "loud"},
    })

    problems = SettingsManager(config_dir=str(config_dir)).validate_settings()

    assert any("bad key" in p for p in problems["validation"])
    assert any("max_threads" in p for p in problems["validation"])
    assert any("max_threads" in p for p in problems["defaults"])
    assert problems["logging"]
    assert problems["store"] == []


def test_quoted_yaml_booleans_parsed_as_text(tmp_path: Path):
    config_dir = tmp_path / "config"
    config_dir.mkdir(parents=True)
    (config_dir / "settings.yaml").write_text(
        "store:\n"
        "  validate_on_load: \"false\"\n"
        "  materialize_defaults: \"yes\"\n"
        "  persist_on_write: 'False'\n"
        "logging:\n"
        "  console:\n"
        "    colored: \"no\"\n"
        "  file:\n"
        "    enabled: \"true\"\n",
        encoding="utf-8",
    )

    manager = SettingsManager(config_dir=str(config_dir))

    assert manager.store.options.validate_on_load is False
    assert manager.store.options.materialize_defaults is True
    assert manager.store.options.persist_on_write is False
    assert manager.logging.console_colored is False
    assert manager.logging.file_enabled is True


def test_validate_settings_flags_padded_default(tmp_path: Path):
    config_dir = tmp_path / "config"
    _write_settings(config_dir, {
        "defaults": {"operation_mode": " normal", "max_threads": 4, "batch_size": 100},
    })

    problems = SettingsManager(config_dir=str(config_dir)).validate_settings()

    assert any("operation_mode" in p for p in problems["defaults"])


def test_broken_yaml_raises(tmp_path: Path):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "settings.yaml").write_text("store: [unclosed\n", encoding="utf-8")

    with pytest.raises(yaml.YAMLError):
        SettingsManager(config_dir=str(config_dir))
