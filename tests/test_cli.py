import sys
from pathlib import Path

import pytest
from click.testing import CliRunner
from loguru import logger

from kvconf.cli import cli, run_demo
from kvconf.store import BUILTIN_DEFAULTS


@pytest.fixture(autouse=True)
def restore_loguru():
    # the CLI re-targets loguru at the runner's stderr
    yield
    logger.remove()
    logger.add(sys.stderr, level="INFO")


@pytest.fixture()
def invoke(tmp_path: Path):
    runner = CliRunner()
    config_dir = tmp_path / "config"
    store_path = tmp_path / "data" / "app.conf"

    def _invoke(*args: str):
        return runner.invoke(cli, ["--config-dir", str(config_dir), "--file", str(store_path), *args])

    _invoke.store_path = store_path
    return _invoke


def test_init_creates_settings_and_store(invoke, tmp_path: Path):
    result = invoke("init")

    assert result.exit_code == 0, result.output
    assert (tmp_path / "config" / "settings.yaml").exists()
    lines = invoke.store_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == len(BUILTIN_DEFAULTS)


def test_show_lists_entries(invoke):
    invoke("init")
    result = invoke("show")

    assert result.exit_code == 0, result.output
    assert "operation_mode" in result.output
    assert "normal" in result.output


def test_set_and_get_typed_value(invoke):
    invoke("init")

    result = invoke("set", "max_threads", "8", "--type", "int")
    assert result.exit_code == 0, result.output
    assert "max_threads=8" in invoke.store_path.read_text(encoding="utf-8").splitlines()

    result = invoke("get", "max_threads", "--type", "int")
    assert result.exit_code == 0, result.output
    assert "max_threads = 8" in result.output


def test_set_rejects_bad_typed_value(invoke):
    invoke("init")
    result = invoke("set", "max_threads", "eight", "--type", "int")
    assert result.exit_code != 0


def test_set_rejects_invalid_key(invoke):
    invoke("init")
    result = invoke("set", "bad key!", "x")

    assert result.exit_code == 1
    assert "bad key!" not in invoke.store_path.read_text(encoding="utf-8")


def test_get_missing_key(invoke):
    invoke("init")

    result = invoke("get", "nothing_here")
    assert result.exit_code == 1

    result = invoke("get", "nothing_here", "--default", "fallback")
    assert result.exit_code == 0
    assert "nothing_here = fallback" in result.output
    assert "nothing_here" not in invoke.store_path.read_text(encoding="utf-8")


def test_get_without_store_file_fails(invoke):
    result = invoke("get", "operation_mode")
    assert result.exit_code == 1


def test_validate_reports_range_error(invoke):
    invoke("init")
    assert invoke("validate").exit_code == 0

    invoke("set", "max_threads", "50")
    result = invoke("validate")

    assert result.exit_code == 1
    assert "max_threads" in result.output


def test_remove_and_clear(invoke):
    invoke("init")

    result = invoke("remove", "retry_count")
    assert result.exit_code == 0, result.output
    assert "retry_count" not in invoke.store_path.read_text(encoding="utf-8")

    result = invoke("clear", "--yes")
    assert result.exit_code == 0, result.output
    assert invoke.store_path.read_text(encoding="utf-8") == ""


def test_demo_command(invoke, tmp_path: Path):
    result = invoke("demo", "--path", str(tmp_path / "demo.txt"))
    assert result.exit_code == 0, result.output


def test_run_demo_walkthrough(tmp_path: Path):
    demo_path = tmp_path / "demo_config.txt"
    keys = run_demo(str(demo_path))

    assert "custom_setting" not in keys
    assert {"timeout_seconds", "accuracy_threshold", "debug_mode"} <= set(keys)
    assert set(BUILTIN_DEFAULTS) <= set(keys)
    assert demo_path.read_text(encoding="utf-8") == ""
