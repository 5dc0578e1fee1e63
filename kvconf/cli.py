"""
kvconf 命令行

查看和修改 key=value 配置文件。
"""

import sys
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

import click
from loguru import logger
from rich.console import Console
from rich.table import Table

from . import __version__
from .config.manager import SettingsManager
from .store import (
    ConfigStore, ConfigStoreError, StoreOptions, ValidationError, parse_bool,
)
from .utils.log import setup_logging

console = Console()

VALUE_TYPES = ['string', 'int', 'double', 'bool']


@click.group()
@click.version_option(version=__version__, prog_name="kvconf")
@click.option('--config-dir', '-c', default='config', envvar='KVCONF_CONFIG_DIR',
              show_default=True, help='设置文件目录')
@click.option('--file', '-f', 'file_path', default=None, help='配置文件路径（覆盖设置中的路径）')
@click.option('--verbose', '-v', is_flag=True, help='输出调试日志')
@click.pass_context
def cli(ctx: click.Context, config_dir: str, file_path: Optional[str], verbose: bool):
    """🗂️ kvconf - 键值配置文件管理工具"""
    try:
        settings = SettingsManager(config_dir=config_dir)
    except Exception as e:
        console.print(f"[bold red]❌ 设置加载失败: {e}[/bold red]")
        sys.exit(1)

    log_config = settings.logging
    setup_logging(
        level="DEBUG" if verbose else log_config.level,
        log_file=log_config.file_path if log_config.file_enabled else None,
        colorize=log_config.console_colored,
        rotation=log_config.rotation,
        retention=log_config.retention
    )

    ctx.obj = {
        'settings': settings,
        'path': file_path or settings.store.path,
    }


def _open_store(ctx: click.Context, materialize: bool = False) -> ConfigStore:
    """按设置创建并加载配置存储，整体校验只在 validate 命令中执行"""
    settings: SettingsManager = ctx.obj['settings']
    store = settings.build_store()
    if materialize:
        store.options.materialize_defaults = True
    store.options.validate_on_load = False

    store.load(ctx.obj['path'])
    return store


def _fail(message: str, error: Exception) -> None:
    logger.error(f"{message}: {error}")
    console.print(f"[bold red]❌ {message}: {error}[/bold red]")
    sys.exit(1)


def _persist(store: ConfigStore) -> None:
    """未开启写入即保存时手动保存"""
    if not store.options.persist_on_write:
        store.save()


@cli.command()
@click.pass_context
def init(ctx: click.Context):
    """🔧 初始化设置文件和配置文件"""
    console.print("[bold green]🔧 正在初始化 kvconf...[/bold green]")
    settings: SettingsManager = ctx.obj['settings']

    problems = {k: v for k, v in settings.validate_settings().items() if v}
    if problems:
        display_settings_problems(problems)
        console.print("[bold red]❌ 设置文件存在问题，请修正后重试[/bold red]")
        sys.exit(1)

    try:
        store = _open_store(ctx, materialize=True)
    except ConfigStoreError as e:
        _fail("初始化失败", e)

    console.print(f"[green]📄 配置文件: {store.backing_path} ({len(store)} 项)[/green]")
    console.print("[bold green]✅ 初始化完成！[/bold green]")


@cli.command()
@click.pass_context
def show(ctx: click.Context):
    """📋 显示全部配置项"""
    try:
        store = _open_store(ctx)
    except ConfigStoreError as e:
        _fail("读取配置失败", e)

    display_entries(store.entries, title=f"📋 {store.backing_path}")


@cli.command()
@click.argument('key')
@click.option('--type', '-t', 'value_type', type=click.Choice(VALUE_TYPES),
              default='string', show_default=True, help='取值类型')
@click.option('--default', '-d', 'default', default=None, help='键不存在时的默认值')
@click.pass_context
def get(ctx: click.Context, key: str, value_type: str, default: Optional[str]):
    """🔍 读取单个配置项"""
    try:
        store = _open_store(ctx)
    except ConfigStoreError as e:
        _fail("读取配置失败", e)

    if default is None and not store.has_key(key):
        console.print(f"[yellow]⚠️ 配置项不存在: {key}[/yellow]")
        sys.exit(1)

    value = _typed_get(store, key, value_type, default)
    console.print(f"{key} = {value}")


def _typed_get(store: ConfigStore, key: str, value_type: str, default: Optional[str]):
    if value_type == 'int':
        return store.get_int(key, _convert(default or "0", value_type))
    if value_type == 'double':
        return store.get_double(key, _convert(default or "0.0", value_type))
    if value_type == 'bool':
        return store.get_bool(key, _convert(default or "false", value_type))
    return store.get_string(key, default or "")


def _convert(text: str, value_type: str):
    """命令行参数转换为目标类型"""
    try:
        if value_type == 'int':
            return int(text)
        if value_type == 'double':
            return float(text)
    except ValueError:
        raise click.BadParameter(f"{text!r} 不是合法的 {value_type}")
    if value_type == 'bool':
        return parse_bool(text).value
    return text


@cli.command(name='set')
@click.argument('key')
@click.argument('value')
@click.option('--type', '-t', 'value_type', type=click.Choice(VALUE_TYPES),
              default='string', show_default=True, help='值类型')
@click.pass_context
def set_value(ctx: click.Context, key: str, value: str, value_type: str):
    """✏️ 设置配置项"""
    converted = _convert(value, value_type)
    try:
        store = _open_store(ctx)
        setter = {
            'string': store.set_string,
            'int': store.set_int,
            'double': store.set_double,
            'bool': store.set_bool,
        }[value_type]
        setter(key, converted)
        _persist(store)
    except ConfigStoreError as e:
        _fail("设置配置失败", e)

    console.print(f"[green]✅ {key} = {store.get_string(key)}[/green]")


@cli.command()
@click.argument('key')
@click.pass_context
def remove(ctx: click.Context, key: str):
    """🗑️ 删除配置项"""
    try:
        store = _open_store(ctx)
        if not store.has_key(key):
            console.print(f"[yellow]⚠️ 配置项不存在: {key}[/yellow]")
            return
        store.remove_key(key)
        _persist(store)
    except ConfigStoreError as e:
        _fail("删除配置失败", e)

    console.print(f"[green]✅ 已删除: {key}[/green]")


@cli.command()
@click.pass_context
def validate(ctx: click.Context):
    """🔎 校验配置文件"""
    try:
        store = _open_store(ctx)
        store.validate()
    except ValidationError as e:
        console.print(f"[bold red]❌ 校验失败: {e.key} ({e.reason})[/bold red]")
        sys.exit(1)
    except ConfigStoreError as e:
        _fail("读取配置失败", e)

    console.print(f"[bold green]✅ 配置校验通过 ({len(store)} 项)[/bold green]")


@cli.command()
@click.confirmation_option(prompt='确定清空所有配置项？')
@click.pass_context
def clear(ctx: click.Context):
    """🧹 清空配置文件"""
    try:
        store = _open_store(ctx)
        store.clear()
        _persist(store)
    except ConfigStoreError as e:
        _fail("清空配置失败", e)

    console.print("[green]✅ 配置已清空[/green]")


@cli.command()
@click.option('--path', '-p', 'demo_path', default=None,
              help='演示用配置文件路径，默认使用临时目录')
def demo(demo_path: Optional[str]):
    """🎬 演示配置存储的完整流程"""
    if demo_path:
        run_demo(demo_path)
        return

    with tempfile.TemporaryDirectory() as tmp_dir:
        run_demo(str(Path(tmp_dir) / "demo_config.txt"))


def run_demo(path: str) -> List[str]:
    """依次演示加载、读写、删除、保存、重新加载和清空，返回最终的键列表"""
    console.print("[bold cyan]=== ConfigStore 演示 ===[/bold cyan]")
    store = ConfigStore(options=StoreOptions(materialize_defaults=True))

    try:
        store.load(path)
    except ValidationError as e:
        console.print(f"[yellow]⚠️ {e}[/yellow]")

    display_entries({
        'operation_mode': store.get_string('operation_mode'),
        'max_threads': str(store.get_int('max_threads')),
        'batch_size': str(store.get_int('batch_size')),
        'processing_threshold': str(store.get_double('processing_threshold')),
        'enable_logging': str(store.get_bool('enable_logging')),
        'log_level': store.get_string('log_level'),
    }, title="📋 当前配置")

    store.set_string('custom_setting', 'test_value')
    store.set_int('timeout_seconds', 60)
    store.set_double('accuracy_threshold', 0.95)
    store.set_bool('debug_mode', True)
    console.print("[green]✏️ 已写入 custom_setting / timeout_seconds / accuracy_threshold / debug_mode[/green]")

    console.print(f"has operation_mode: {store.has_key('operation_mode')}")
    console.print(f"has non_existent_key: {store.has_key('non_existent_key')}")

    store.remove_key('custom_setting')
    console.print(f"删除后 has custom_setting: {store.has_key('custom_setting')}")

    store.save()
    store.reload()
    display_entries(store.entries, title="🔄 重新加载后的配置")

    keys = store.keys()
    store.clear()
    console.print(f"[green]🧹 配置已清空，剩余 {len(store)} 项[/green]")
    return keys


def display_entries(entries: Dict[str, str], title: str = "📋 配置项"):
    """显示配置项表格"""
    table = Table(title=title)

    table.add_column("键", style="cyan")
    table.add_column("值", style="magenta")

    for key in sorted(entries):
        table.add_row(key, entries[key])

    console.print(table)


def display_settings_problems(problems: Dict[str, List[str]]):
    """显示设置问题"""
    table = Table(title="⚠️ 设置问题")

    table.add_column("分组", style="cyan")
    table.add_column("问题", style="red")

    for section, messages in problems.items():
        for message in messages:
            table.add_row(section, message)

    console.print(table)


def main():
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️ 用户中断操作[/yellow]")
        sys.exit(0)
    except Exception as e:
        logger.error(f"程序异常退出: {e}")
        console.print(f"[bold red]💥 程序异常退出: {e}[/bold red]")
        sys.exit(1)
