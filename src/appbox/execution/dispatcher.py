"""Concurrent dispatcher — the deferred runnable returned by ``appbox.run``.

Building a :class:`Dispatcher` never fails; all errors surface when it is
awaited.  One entry is awaited directly with the caller's context, so its
result or exception passes through untouched.  Two or more entries run as
sibling tasks in a :class:`~appbox.execution.group.FailFastGroup`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from appbox.core.logging import LogContext, get_logger
from appbox.execution.context import RunContext
from appbox.execution.group import FailFastGroup
from appbox.execution.partition import InvocationEntry

logger = get_logger(__name__)


class Dispatcher:
    """Awaitable runnable executing the selected sub-applications.

    Example::

        local_args, runnable = appbox.run(apps, *sys.argv)
        await runnable(RunContext("box"))
    """

    def __init__(self, entries: Sequence[InvocationEntry]) -> None:
        self._entries = tuple(entries)

    @property
    def entries(self) -> tuple[InvocationEntry, ...]:
        return self._entries

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self._entries]

    async def __call__(self, ctx: RunContext) -> Any:
        if not self._entries:
            return None

        if len(self._entries) == 1:
            entry = self._entries[0]
            logger.debug("dispatch.single", app=entry.name, args=list(entry.args))
            async with LogContext(app=entry.name):
                return await entry.handler(ctx, list(entry.args))

        logger.debug("dispatch.group_start", apps=self.names)
        group = FailFastGroup(ctx, name="apps")
        for entry in self._entries:
            group.spawn(entry.name, _bind(entry))
        await group.wait()
        return None

    def __repr__(self) -> str:
        return f"Dispatcher({self.names!r})"


def _bind(entry: InvocationEntry):
    async def run_entry(ctx: RunContext) -> Any:
        return await entry.handler(ctx, list(entry.args))

    return run_entry


def build_runnable(entries: Sequence[InvocationEntry]) -> Dispatcher:
    """Build the deferred runnable for partitioned entries."""
    return Dispatcher(entries)


__all__ = ["Dispatcher", "build_runnable"]
