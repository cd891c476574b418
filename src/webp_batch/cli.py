"""CLI 入口 — 使用 typer + rich 构建命令行界面"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from webp_batch import __version__
from webp_batch.config import (
    DEFAULT_CODEC,
    DEFAULT_QUALITY,
    DEFAULT_ROOT_DIR,
    MAX_QUALITY,
    MIN_QUALITY,
    SOURCE_EXTENSIONS,
    TARGET_EXTENSION,
)
from webp_batch.settings import (
    resolve_codec,
    resolve_quality,
    resolve_source_exts,
    resolve_target_ext,
)

console = Console()
app = typer.Typer(
    name="webp-batch",
    help="🖼️ webp-batch — 递归扫描目录，将 PNG/JPG 批量转换为 WebP",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def setup_logging(verbose: bool = False) -> None:
    """日志输出到 rich console"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )


# ========================================================================
# convert 命令
# ========================================================================


@app.command()
def convert(
    root: Path = typer.Argument(
        DEFAULT_ROOT_DIR,
        help=f"要扫描的根目录（默认 ./{DEFAULT_ROOT_DIR}）",
    ),
    quality: Optional[int] = typer.Option(
        None, "--quality", "-q",
        min=MIN_QUALITY, max=MAX_QUALITY,
        help=f"压缩质量 {MIN_QUALITY}-{MAX_QUALITY}（默认 {DEFAULT_QUALITY}，可通过 config set 持久化）",
    ),
    source_exts: Optional[str] = typer.Option(
        None, "--source-exts", "-s",
        help="源文件扩展名，逗号分隔（默认 png,jpg）",
    ),
    target_ext: Optional[str] = typer.Option(
        None, "--target-ext", "-t",
        help="目标扩展名（默认 webp）",
    ),
    codec: Optional[str] = typer.Option(
        None, "--codec", "-c",
        help=f"编码器: pillow / cwebp（默认 {DEFAULT_CODEC}）",
    ),
    ignore_case: bool = typer.Option(
        False, "--ignore-case", "-i",
        help="扩展名匹配不区分大小写（默认区分，photo.PNG 不会被转换）",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-V",
        help="输出调试日志",
    ),
) -> None:
    """🔄 批量转换 — 扫描目录树并转换图片，已转换的文件自动跳过"""
    from webp_batch.errors import FatalSetupError
    from webp_batch.scanner import Scanner

    setup_logging(verbose)

    try:
        scanner = Scanner(
            root,
            quality=resolve_quality(quality, DEFAULT_QUALITY),
            source_exts=resolve_source_exts(source_exts, SOURCE_EXTENSIONS),
            target_ext=resolve_target_ext(target_ext, TARGET_EXTENSION),
            codec_name=resolve_codec(codec, DEFAULT_CODEC),
            ignore_case=ignore_case,
        )
    except ValueError as e:
        console.print(f"\n[red]✗[/red] 参数错误: {e}")
        raise typer.Exit(1)

    try:
        stats = scanner.run()
    except FatalSetupError as e:
        console.print(f"\n[red]✗[/red] {e}")
        raise typer.Exit(1)

    if stats.failed or stats.unreadable_dirs:
        console.print(
            f"\n[yellow]![/yellow] 完成，但有 {stats.failed} 个文件失败、"
            f"{stats.unreadable_dirs} 个目录无法读取，详见上方日志。"
        )


# ========================================================================
# config 命令组
# ========================================================================

config_app = typer.Typer(
    help="⚙️ 配置管理 — 持久化 quality、source-exts、target-ext、codec 等参数",
    no_args_is_help=True,
)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        ...,
        help="配置项名称（quality / source-exts / target-ext / codec）",
    ),
    value: str = typer.Argument(
        ...,
        help="配置值",
    ),
) -> None:
    """✏️ 设置配置项"""
    from webp_batch.settings import UserSettings

    settings = UserSettings()
    try:
        converted = settings.set(key, value)
        console.print(f"[green]✓[/green] 已保存: {key} = {converted}")
    except KeyError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)
    except ValueError:
        console.print(f"[red]✗[/red] 值 '{value}' 对 {key} 无效")
        raise typer.Exit(1)


@config_app.command("get")
def config_get(
    key: Optional[str] = typer.Argument(
        None,
        help="配置项名称（留空显示全部）",
    ),
) -> None:
    """📋 查看配置"""
    from webp_batch.settings import CONFIG_FILE, UserSettings

    settings = UserSettings()

    if key:
        val = settings.get(key)
        if val is None:
            console.print(f"[dim]{key} 未设置（使用默认值）[/dim]")
        else:
            console.print(f"{key} = [cyan]{val}[/cyan]")
        return

    all_cfg = settings.all()
    if not all_cfg:
        console.print("[dim]暂无自定义配置，所有参数使用默认值。[/dim]")
        console.print(f"[dim]配置文件路径: {CONFIG_FILE}[/dim]")
        return

    console.print("[bold]⚙️ 当前配置[/bold]\n")
    table = Table()
    table.add_column("配置项", style="cyan")
    table.add_column("值", style="green")
    for k, v in all_cfg.items():
        table.add_row(k, str(v))
    console.print(table)
    console.print(f"\n[dim]配置文件: {CONFIG_FILE}[/dim]")


@config_app.command("reset")
def config_reset(
    confirm: bool = typer.Option(
        False, "--confirm", "-y",
        help="跳过确认提示",
    ),
) -> None:
    """🗑️ 清除所有配置"""
    from webp_batch.settings import UserSettings

    settings = UserSettings()
    all_cfg = settings.all()

    if not all_cfg:
        console.print("[dim]暂无自定义配置。[/dim]")
        return

    if not confirm:
        console.print("当前配置:")
        for k, v in all_cfg.items():
            console.print(f"  {k} = {v}")
        typer.confirm("确认清除所有配置？", abort=True)

    count = settings.clear()
    console.print(f"[green]✓[/green] 已清除 {count} 项配置。")


app.add_typer(config_app, name="config")


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v",
        help="显示版本号",
    ),
) -> None:
    if version:
        console.print(f"webp-batch v{__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def main():
    """CLI 主入口"""
    app()


if __name__ == "__main__":
    main()
