"""Command-line launcher built on typer."""

from appbox.cli.app import launcher_app, main, parse_launcher_args, run_until_complete

__all__ = ["launcher_app", "main", "parse_launcher_args", "run_until_complete"]
