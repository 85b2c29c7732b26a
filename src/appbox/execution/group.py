"""Fail-fast task group — first failure cancels every sibling.

WHY
───
Sub-applications started together live and die together: if the API
crashes there is no point keeping the worker alive, and a shutdown of the
launcher must reach every one of them.  ``asyncio.TaskGroup`` comes
close, but it reports every failure as an ``ExceptionGroup`` and stops
children by injecting ``CancelledError``.  Here cancellation is
cooperative (children observe their :class:`RunContext`) and exactly one
error, the first, is reported.

ARCHITECTURE
────────────
::

    FailFastGroup(ctx)
      ├── .spawn(name, fn)   ─ asyncio task running fn(child_ctx)
      ├── .wait()            ─ join all; raise first failure
      └── .cancel()          ─ cancel the shared group context

    parent ctx ──► group ctx ──► task ctx (one per spawn)

    task outcome                          group reaction
    ───────────────────────────────────   ─────────────────────────────
    returns                               nothing
    raises, group still live              record as first failure,
                                          cancel group ctx
    raises ContextCancelled after the     cancellation-induced, ignored
    group ctx was cancelled
    raises after another failure          logged, not reported

Result of :meth:`FailFastGroup.wait`:

1. the first recorded failure, re-raised unchanged
2. else ``ContextCancelled`` if the parent context was cancelled
3. else ``None``

Example::

    async with FailFastGroup(ctx) as group:
        group.spawn("api", lambda c: api(c, ["--port", "8080"]))
        group.spawn("worker", lambda c: worker(c, []))
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from appbox.core.errors import ContextCancelled
from appbox.core.logging import LogContext, get_logger
from appbox.execution.context import RunContext

logger = get_logger(__name__)

TaskFunc = Callable[[RunContext], Awaitable[Any]]


class FailFastGroup:
    """Runs sibling tasks under one shared, cancellable context.

    Parameters
    ----------
    ctx : RunContext
        Parent context.  Cancelling it cancels every task in the group.
    name : str
        Name of the derived group context.
    """

    def __init__(self, ctx: RunContext, name: str = "group") -> None:
        self._parent = ctx
        self._ctx = ctx.child(name)
        self._tasks: list[asyncio.Task[None]] = []
        self._error: BaseException | None = None
        self._failed_task: str | None = None

    @property
    def context(self) -> RunContext:
        return self._ctx

    @property
    def error(self) -> BaseException | None:
        """First failure recorded, if any."""
        return self._error

    @property
    def failed_task(self) -> str | None:
        return self._failed_task

    # ── Spawning ─────────────────────────────────────────────────────

    def spawn(self, name: str, fn: TaskFunc) -> asyncio.Task[None]:
        """Start ``fn`` as a child task with its own derived context."""
        task_ctx = self._ctx.child(name)
        task = asyncio.create_task(self._run(name, task_ctx, fn), name=name)
        self._tasks.append(task)
        return task

    async def _run(self, name: str, ctx: RunContext, fn: TaskFunc) -> None:
        async with LogContext(app=name):
            try:
                await fn(ctx)
            except ContextCancelled as e:
                if self._ctx.cancelled:
                    logger.debug("group.task_cancelled", task=name)
                    return
                self._fail(name, e)
            except asyncio.CancelledError:
                self._fail(name, ContextCancelled(f"task {name!r} was cancelled"))
                raise
            except Exception as e:
                self._fail(name, e)
            else:
                logger.debug("group.task_complete", task=name)
            finally:
                ctx.release()

    def _fail(self, name: str, error: BaseException) -> None:
        if self._error is not None:
            logger.debug("group.task_failed_after_first", task=name, error=str(error))
            return
        self._error = error
        self._failed_task = name
        logger.warning(
            "group.task_failed",
            task=name,
            error_type=type(error).__name__,
            error=str(error),
        )
        self._ctx.cancel(error, reason=f"task {name!r} failed")

    # ── Joining ──────────────────────────────────────────────────────

    def cancel(self, reason: str = "group cancelled") -> None:
        """Cancel the shared context; tasks are expected to return promptly."""
        self._ctx.cancel(reason=reason)

    async def wait(self) -> None:
        """Join every task, then raise the group's outcome.

        If the awaiting task is itself cancelled, the group context is
        cancelled, children are joined cooperatively, and
        ``CancelledError`` propagates.
        """
        try:
            await self._join()
        except asyncio.CancelledError:
            self.cancel(reason="awaiting task cancelled")
            await self._join()
            raise
        finally:
            if all(task.done() for task in self._tasks):
                self._ctx.release()

        logger.debug(
            "group.complete",
            group=self._ctx.path,
            tasks=len(self._tasks),
            failed_task=self._failed_task,
        )

        if self._error is not None:
            raise self._error
        self._parent.check()

    async def _join(self) -> None:
        if self._tasks:
            await asyncio.wait(self._tasks)

    async def __aenter__(self) -> FailFastGroup:
        return self

    async def __aexit__(self, exc_type: Any, exc: BaseException | None, tb: Any) -> None:
        if exc is not None:
            self.cancel(reason=f"group body raised {type(exc).__name__}")
            await self._join()
            self._ctx.release()
            return None
        await self.wait()


__all__ = ["FailFastGroup", "TaskFunc"]
