"""
Shared pytest fixtures and configuration for appbox tests.

This module provides:
- Recording apps that capture the arguments they were started with
- Blocking / failing apps for fail-fast tests
- Settings cache cleanup for test isolation

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments.

    def test_something(recorder):
        apps = {"app1": recorder.blocking("app1")}
"""

import asyncio
import os
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Ensure appbox package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from appbox.core.errors import HandlerFailure
from appbox.core.settings import reset_settings
from appbox.execution.context import RunContext


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Settings Cleanup
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop cached settings and APPBOX_* variables around every test."""
    for key in list(os.environ):
        if key.startswith("APPBOX_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


# =============================================================================
# Recording Apps
# =============================================================================


class AppRecorder:
    """Builds fake apps and records what each one observed.

    ``calls[name]`` holds one argument list per invocation, in start order.
    ``cancelled`` lists the apps that saw their context cancelled.
    """

    def __init__(self) -> None:
        self.calls: dict[str, list[list[str]]] = {}
        self.cancelled: list[str] = []
        self.contexts: dict[str, list[RunContext]] = {}

    def _record(self, name: str, ctx: RunContext, args: list[str]) -> None:
        self.calls.setdefault(name, []).append(list(args))
        self.contexts.setdefault(name, []).append(ctx)

    def blocking(self, name: str):
        """App that runs until its context is cancelled, then reports it."""

        async def app(ctx: RunContext, args: list[str]) -> None:
            self._record(name, ctx, args)
            await ctx.wait()
            self.cancelled.append(name)
            raise ctx.err()

        return app

    def returning(self, name: str, value: object = None):
        """App that records its arguments and returns immediately."""

        async def app(ctx: RunContext, args: list[str]) -> object:
            self._record(name, ctx, args)
            return value

        return app

    def failing(self, name: str, error: BaseException | None = None, delay: float = 0.0):
        """App that fails after ``delay`` seconds."""

        async def app(ctx: RunContext, args: list[str]) -> None:
            self._record(name, ctx, args)
            if delay:
                await asyncio.sleep(delay)
            raise error or HandlerFailure(f"{name} failed", app=name)

        return app


@pytest.fixture
def recorder() -> AppRecorder:
    return AppRecorder()


@pytest.fixture
def blocking_apps(recorder: AppRecorder) -> dict:
    """Registry of two apps that block until cancelled."""
    return {
        "app1": recorder.blocking("app1"),
        "app2": recorder.blocking("app2"),
    }
