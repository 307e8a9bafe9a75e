"""
CLI 命令模块 - golsdk 的命令行命令定义。

本模块使用 Typer 框架定义 golsdk 的 CLI：
- init：在 ~/.golsdk/ 下生成默认配置
- status：查看配置文件与服务端连接参数
- watch：连接服务端、启动模拟，并逐代打印（或渲染）收到的数据

技术栈：
- Typer：CLI 框架（基于 Click，支持类型注解自动生成帮助文档）
- Rich：终端美化输出（表格、颜色）
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from golsdk import __logo__, __version__

# 创建 Typer 应用实例（CLI 根命令）
app = typer.Typer(
    name="golsdk",
    help=f"{__logo__} golsdk - Game of Life streaming client",
    no_args_is_help=True,  # 无参数时显示帮助信息
)

console = Console()  # Rich 控制台实例，用于美化输出


def version_callback(value: bool):
    """版本号回调：当用户传入 --version/-v 参数时，打印版本号并退出。"""
    if value:
        console.print(f"{__logo__} golsdk v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """golsdk CLI 根命令回调。处理全局选项（如 --version）。"""
    pass


# ============================================================================
# Setup
# ============================================================================


@app.command()
def init():
    """在 ~/.golsdk/config.json 生成默认配置（已存在时询问是否覆盖）。"""
    from golsdk.config.loader import get_config_path, save_config
    from golsdk.config.schema import Config

    config_path = get_config_path()

    if config_path.exists():
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    save_config(Config(), config_path)
    console.print(f"[green]✓[/green] Created config at {config_path}")
    console.print("\nNext: run [cyan]golsdk watch[/cyan] against a running server")


@app.command()
def status():
    """显示配置文件路径与当前生效的服务端参数。"""
    from golsdk.config.loader import get_config_path, load_config

    config_path = get_config_path()
    config = load_config()

    console.print(f"{__logo__} golsdk Status\n")
    console.print(f"Config: {config_path} {'[green]✓[/green]' if config_path.exists() else '[red]✗[/red]'}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("server.url", config.server.url)
    table.add_row("server.open_timeout", str(config.server.open_timeout))
    table.add_row("watch.generations", str(config.watch.generations or "unlimited"))
    table.add_row("watch.render", str(config.watch.render))
    table.add_row("watch.viewport", f"{config.watch.rows}x{config.watch.cols}")
    console.print(table)


# ============================================================================
# Watch
# ============================================================================


@app.command()
def watch(
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Server WebSocket URL"),
    generations: Optional[int] = typer.Option(
        None, "--generations", "-n", help="Exit after N completed generations (0 = unlimited)"
    ),
    render: Optional[bool] = typer.Option(None, "--render/--no-render", help="Render the board"),
    start: bool = typer.Option(True, "--start/--no-start", help="Send StartSim after subscribing"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show golsdk runtime logs"),
):
    """
    订阅服务端模拟数据流并逐代输出。

    参数:
        url: 覆盖配置中的 server.url
        generations: 收到多少个完整代后退出
        render: 是否渲染棋盘画面（默认取配置）
        start: 订阅后是否发送 StartSim
        logs: 是否显示运行时日志
    """
    from loguru import logger

    from golsdk.config.loader import load_config

    config = load_config()
    if url:
        config.server.url = url
    limit = config.watch.generations if generations is None else generations
    do_render = config.watch.render if render is None else render

    if logs:
        logger.enable("golsdk")
    else:
        logger.disable("golsdk")

    try:
        exit_code = asyncio.run(_watch(config, limit, do_render, start))
    except KeyboardInterrupt:
        console.print("\nGoodbye!")
        exit_code = 0

    if exit_code:
        raise typer.Exit(exit_code)


async def _watch(config, limit: int, do_render: bool, start: bool) -> int:
    """运行一次 watch 会话，返回进程退出码。"""
    from golsdk.board import Board
    from golsdk.session import GameOfLifeSession
    from golsdk.transport import websocket as ws_transport

    board = Board()
    done = asyncio.Event()
    received = 0
    failed = False
    closed = False

    def on_gen_complete(cells) -> None:
        nonlocal received
        received += 1
        board.apply(cells)
        index = cells[0].generation_index if cells else "?"

        if do_render:
            console.clear()
            console.print(board.render(config.watch.rows, config.watch.cols))
        console.print(
            f"[cyan]generation {index}[/cyan]  cells={len(cells)}  live={board.live_count}"
        )

        if limit and received >= limit:
            done.set()

    def on_err(message: str) -> None:
        nonlocal failed
        failed = True
        console.print(f"[red]Error: {message}[/red]")
        done.set()

    def on_close() -> None:
        nonlocal closed
        closed = True
        console.print("[yellow]Server closed the connection[/yellow]")
        done.set()

    session = GameOfLifeSession.from_config(
        config.server,
        on_gen_complete,
        on_err,
        connector=ws_transport.connect_to_server,
        on_close=on_close,
    )

    await session.connect()
    if not session.is_connected:
        return 1

    try:
        if start:
            await session.start_sim()
        await done.wait()
    finally:
        await session.destroy()

    # 对端提前关闭、未收满指定代数也视为失败
    if failed or (closed and limit and received < limit):
        return 1
    return 0


if __name__ == "__main__":
    app()
