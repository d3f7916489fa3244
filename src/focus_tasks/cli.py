"""Command-line interface for Focus Tasks."""

import asyncio
import inspect
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from . import __version__
from .client import (
    AppController,
    AppView,
    TaskApiClient,
    TaskListCallbacks,
    TaskListView,
    ViewState,
)
from .config import get_config, load_config
from .logging_setup import setup_logging


console = Console()

HELP_TEXT = """\
[bold]a[/bold] <title>   add a task
[bold]t[/bold] <n>       toggle task n
[bold]e[/bold] <n>       edit task n (draft starts with its title)
[bold]w[/bold] <text>    write the edit draft
[bold]s[/bold] [text]    save the draft (optionally replacing it first)
[bold]c[/bold]           cancel editing
[bold]d[/bold] <n>       delete task n
[bold]r[/bold]           reload from the server
[bold]q[/bold]           quit"""


def build_callbacks(controller: AppController) -> TaskListCallbacks:
    """Wire list row affordances to controller actions."""
    return TaskListCallbacks(
        on_toggle=controller.toggle_task,
        on_edit=controller.start_editing,
        on_save=lambda task_id: controller.save_edit(),
        on_cancel=lambda task_id: controller.cancel_edit(),
        on_delete=controller.delete_task,
    )


async def dispatch_row_action(controller: AppController, action: str, row: int):
    """Run a row action through the list view and await it if needed."""
    view = TaskListView.from_state(controller.snapshot(), build_callbacks(controller))
    result = view.dispatch(action, row)
    if inspect.isawaitable(result):
        result = await result
    return result


def editing_row(state: ViewState) -> Optional[int]:
    for row, task in enumerate(state.tasks, start=1):
        if task.id == state.editing_task_id:
            return row
    return None


def render(state: ViewState) -> None:
    console.print(AppView().render(state))


def run_client(
    ctx: click.Context,
    action: Optional[Callable[[AppController], Awaitable[object]]] = None,
) -> ViewState:
    """Load the list, run ``action`` against the controller and render the result."""
    api_url = ctx.obj["api_url"]
    timeout = ctx.obj["config"].request_timeout

    async def _run() -> ViewState:
        async with TaskApiClient(api_url, timeout=timeout) as api:
            controller = AppController(api)
            if await controller.load() and action is not None:
                await action(controller)
            return controller.snapshot()

    try:
        state = asyncio.run(_run())
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(2)

    render(state)
    if state.error:
        sys.exit(1)
    return state


@click.group()
@click.option("--config", "config_path", type=click.Path(), help="Path to config file")
@click.option("--api-url", help="Task API base URL (default from config)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(__version__, prog_name="focus-tasks")
@click.pass_context
def main(ctx, config_path, api_url, verbose):
    """Focus Tasks - track today's tasks from the terminal."""
    ctx.ensure_object(dict)

    config = load_config(Path(config_path)) if config_path else get_config()
    setup_logging("DEBUG" if verbose else config.log_level)

    ctx.obj["config"] = config
    ctx.obj["api_url"] = api_url or config.api_url
    ctx.obj["verbose"] = verbose


@main.command()
@click.option("--host", default=None, help="Host to bind the server to")
@click.option("--port", default=None, type=int, help="Port to bind the server to")
@click.option("--debug", is_flag=True, help="Enable debug mode with auto-reload")
@click.pass_context
def serve(ctx, host, port, debug):
    """Start the task API server."""
    from .web.server import start_server

    config = ctx.obj["config"]
    host = host or config.host
    port = port or config.port

    content = Text()
    content.append("Server will start at: ", style="white")
    content.append(f"http://{host}:{port}/api/tasks", style="bold green")
    content.append("\n")
    content.append("Database: ", style="white")
    content.append(config.database_path, style="cyan")
    if debug:
        content.append("\n")
        content.append("Debug mode: ", style="yellow")
        content.append("ENABLED", style="bold red")

    console.print(Panel(content, title=Text("Focus Tasks API", style="bold cyan"),
                        border_style="cyan", padding=(1, 2)))
    console.print("Press Ctrl+C to stop the server", style="dim")

    try:
        start_server(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        console.print("\nServer stopped", style="yellow")


@main.command("list")
@click.pass_context
def list_tasks(ctx):
    """Show all tasks."""
    run_client(ctx)


@main.command()
@click.argument("title")
@click.pass_context
def add(ctx, title):
    """Add a new task."""
    async def _add(controller: AppController):
        await controller.add_task(title)

    run_client(ctx, _add)


@main.command()
@click.argument("row", type=int)
@click.pass_context
def toggle(ctx, row):
    """Toggle completion of the task on ROW."""
    async def _toggle(controller: AppController):
        await dispatch_row_action(controller, "toggle", row)

    run_client(ctx, _toggle)


@main.command()
@click.argument("row", type=int)
@click.argument("title")
@click.pass_context
def edit(ctx, row, title):
    """Rename the task on ROW."""
    async def _edit(controller: AppController):
        await dispatch_row_action(controller, "edit", row)
        controller.set_editing_title(title)
        await dispatch_row_action(controller, "save", row)

    run_client(ctx, _edit)


@main.command()
@click.argument("row", type=int)
@click.pass_context
def delete(ctx, row):
    """Delete the task on ROW."""
    async def _delete(controller: AppController):
        await dispatch_row_action(controller, "delete", row)

    run_client(ctx, _delete)


async def handle_command(controller: AppController, line: str) -> bool:
    """Apply one interactive command. Returns False when the user quits."""
    command, _, arg = line.strip().partition(" ")
    arg = arg.strip()

    if command in ("q", "quit", "exit"):
        return False
    if command in ("h", "help", "?"):
        console.print(HELP_TEXT)
    elif command == "a":
        if arg:
            await controller.add_task(arg)
        else:
            console.print("[yellow]Nothing to add[/yellow]")
    elif command in ("t", "e", "d"):
        action = {"t": "toggle", "e": "edit", "d": "delete"}[command]
        await dispatch_row_action(controller, action, int(arg))
    elif command == "w":
        controller.set_editing_title(arg)
    elif command in ("s", "c"):
        row = editing_row(controller.snapshot())
        if row is None:
            console.print("[yellow]Not editing any task[/yellow]")
        else:
            if command == "s" and arg:
                controller.set_editing_title(arg)
            await dispatch_row_action(controller, "save" if command == "s" else "cancel", row)
    elif command == "r":
        await controller.load()
    elif command:
        console.print(f"[yellow]Unknown command: {command}[/yellow] (h for help)")
    return True


@main.command()
@click.pass_context
def ui(ctx):
    """Interactive task list."""
    api_url = ctx.obj["api_url"]
    timeout = ctx.obj["config"].request_timeout

    async def _loop():
        async with TaskApiClient(api_url, timeout=timeout) as api:
            controller = AppController(api)
            await controller.load()
            console.print(HELP_TEXT)
            while True:
                render(controller.snapshot())
                state = controller.snapshot()
                prompt = "edit> " if state.editing_task_id else "> "
                try:
                    line = await asyncio.to_thread(console.input, prompt)
                except EOFError:
                    break
                try:
                    if not await handle_command(controller, line):
                        break
                except ValueError as e:
                    console.print(f"[red]{e}[/red]")

    try:
        asyncio.run(_loop())
    except KeyboardInterrupt:
        console.print()


if __name__ == "__main__":
    main()
