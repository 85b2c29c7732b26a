"""
Process launcher for composite applications.

``main(apps)`` turns a registry into a runnable program::

    # box.py
    from appbox.cli import main
    main({"api": api, "worker": worker})

    $ python box.py --log-level debug api --port 8080 worker --queue high

Arguments before the first app name are the launcher's own options,
parsed by ``launcher_app``.  Exit codes: 0 on success or signal-driven
shutdown, 1 when a sub-application failed, 2 on usage errors.
"""

from __future__ import annotations

import asyncio
import signal
import sys
from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from appbox.core.errors import (
    ConfigError,
    ContextCancelled,
    InsufficientArguments,
    NoApplicationsSelected,
    exit_code_for,
)
from appbox.core.logging import configure_logging, get_logger
from appbox.core.settings import LauncherSettings, get_settings
from appbox.execution.context import RunContext
from appbox.execution.dispatcher import Dispatcher
from appbox.execution.registry import AppFunc, AppRegistry
from appbox.launch import run

logger = get_logger(__name__)

err_console = Console(stderr=True)


class LogFormat(str, Enum):
    auto = "auto"
    json = "json"
    console = "console"

    @property
    def json_logs(self) -> bool | None:
        return {"auto": None, "json": True, "console": False}[self.value]


launcher_app = typer.Typer(
    name="appbox",
    help="Launcher options.  Everything after the first app name belongs to the apps.",
    add_completion=False,
)


@launcher_app.command()
def launcher(
    ctx: typer.Context,
    log_level: str | None = typer.Option(  # noqa: UP007
        None, "--log-level", "-l", help="DEBUG, INFO, WARNING, ERROR or CRITICAL."
    ),
    log_format: LogFormat | None = typer.Option(  # noqa: UP007
        None, "--log-format", help="Log renderer; auto picks JSON when stdout is not a TTY."
    ),
    service: str | None = typer.Option(  # noqa: UP007
        None, "--service", help="Service name stamped into every log line."
    ),
    no_signals: bool = typer.Option(
        False, "--no-signals", help="Do not cancel the apps on SIGINT / SIGTERM."
    ),
) -> LauncherSettings:
    """Resolve launcher settings: environment first, then these options."""
    settings = get_settings().merged(
        log_level=log_level,
        service=service,
        handle_signals=False if no_signals else None,
    )
    if log_format is not None:
        settings = settings.model_copy(update={"json_logs": log_format.json_logs})
    if isinstance(ctx.obj, dict):
        ctx.obj["settings"] = settings
    return settings


def parse_launcher_args(args: Sequence[str], prog_name: str = "appbox") -> LauncherSettings | int:
    """Parse the launcher's own arguments.

    Returns the resolved settings, or an exit code when parsing ended the
    program (``--help`` → 0, usage or config error → 2).
    """
    command = typer.main.get_command(launcher_app)
    holder: dict[str, LauncherSettings] = {}
    try:
        # Standalone mode prints usage errors itself and always ends in SystemExit
        command.main(args=list(args), prog_name=prog_name, standalone_mode=True, obj=holder)
    except SystemExit as e:
        code = e.code if isinstance(e.code, int) else (0 if e.code is None else 2)
    except ConfigError as e:
        err_console.print(f"[red]{escape(e.message)}[/red]")
        return e.exit_code
    else:
        code = 0
    if code == 0 and "settings" in holder:
        return holder["settings"]
    return code


# ── Running ──────────────────────────────────────────────────────────────


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, ctx: RunContext) -> list[int]:
    def _handle(signum: int) -> None:
        name = signal.Signals(signum).name
        if ctx.cancel(reason=f"received {name}"):
            logger.info("launcher.signal", signal=name, action="cancel")
        else:
            logger.info("launcher.signal", signal=name, action="ignored")

    installed = []
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, _handle, signum)
        except (NotImplementedError, RuntimeError, ValueError):
            continue  # No loop signal support here (Windows, non-main thread)
        installed.append(signum)
    return installed


async def run_until_complete(
    runnable: Dispatcher,
    settings: LauncherSettings,
    *,
    name: str = "box",
) -> int:
    """Await ``runnable`` under a fresh root context and return an exit code."""
    ctx = RunContext(name)
    loop = asyncio.get_running_loop()
    installed = _install_signal_handlers(loop, ctx) if settings.handle_signals else []

    logger.info("launcher.start", apps=runnable.names)
    try:
        await runnable(ctx)
    except ContextCancelled as e:
        logger.info("launcher.cancelled", reason=e.message)
        return exit_code_for(e)
    except Exception as e:
        code = exit_code_for(e)
        logger.error(
            "launcher.failed",
            error_type=type(e).__name__,
            error=str(e),
            exit_code=code,
            exc_info=True,
        )
        return code
    finally:
        for signum in installed:
            loop.remove_signal_handler(signum)
        ctx.release()

    logger.info("launcher.exit", exit_code=0)
    return 0


# ── Entry point ──────────────────────────────────────────────────────────


def _configure(settings: LauncherSettings) -> None:
    configure_logging(
        level=settings.log_level,
        json_format=settings.json_logs,
        service=settings.service,
    )


def print_usage(apps: Mapping[str, AppFunc], prog_name: str, error: Exception | None = None) -> None:
    """Print the launcher usage line and the available apps to stderr."""
    if error is not None:
        err_console.print(f"[red]Error:[/red] {escape(str(error))}")
    err_console.print(
        f"Usage: {prog_name} [LAUNCHER OPTIONS] APP [APP ARGS]... [APP [APP ARGS]...]...",
        markup=False,
        highlight=False,
    )

    table = Table(title="Available apps")
    table.add_column("App", style="cyan")
    table.add_column("Description")
    if isinstance(apps, AppRegistry):
        for meta in apps.list_with_metadata():
            table.add_row(meta["name"], meta["description"] or "")
    else:
        for app_name in sorted(apps):
            table.add_row(app_name, "")
    err_console.print(table)


def main(apps: Mapping[str, AppFunc], argv: Sequence[str] | None = None) -> NoReturn:
    """Launch the apps named in ``argv`` (default ``sys.argv``) and exit."""
    argv = list(sys.argv if argv is None else argv)
    prog_name = Path(argv[0]).name if argv and argv[0] else "appbox"

    try:
        env_settings = get_settings()
    except ConfigError as e:
        err_console.print(f"[red]{escape(e.message)}[/red]")
        raise SystemExit(e.exit_code) from e
    _configure(env_settings)

    try:
        local_args, runnable = run(apps, *argv)
    except (InsufficientArguments, NoApplicationsSelected) as e:
        print_usage(apps, prog_name, e)
        raise SystemExit(e.exit_code) from e

    settings = parse_launcher_args(local_args, prog_name=prog_name)
    if isinstance(settings, int):
        raise SystemExit(settings)

    _configure(settings)
    raise SystemExit(asyncio.run(run_until_complete(runnable, settings, name=prog_name)))


__all__ = [
    "LogFormat",
    "launcher_app",
    "main",
    "parse_launcher_args",
    "print_usage",
    "run_until_complete",
]
