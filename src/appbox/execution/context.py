"""Run context — hierarchical, cooperative cancellation for sub-applications.

WHY
───
Every sub-application needs one signal telling it to stop, whether the
stop comes from a sibling failing, from the launcher shutting down, or
from an outer supervisor.  ``RunContext`` is that signal: it is passed
into each handler, can be derived into child contexts, and cancelling a
context cancels every context derived from it.

Cancellation is cooperative.  Nothing here interrupts a running
coroutine; handlers observe the context (``await ctx.wait()``,
``ctx.check()``, ``ctx.cancelled``) and return promptly.

ARCHITECTURE
────────────
::

    RunContext("box")                    root, owned by the launcher
      └── RunContext("box.group")        FailFastGroup context
            ├── RunContext("box.group.api")      one per task
            └── RunContext("box.group.worker")

    .cancel(cause)  ─ set once, propagates downwards only
    .err()          ─ ContextCancelled carrying the cause
    .check()        ─ raise err() if cancelled
    .wait()         ─ suspend until cancelled
    .child(name)    ─ derive; already cancelled if parent is
    .release()      ─ cancel and detach from parent

Example::

    async def worker(ctx: RunContext, args: list[str]) -> None:
        while not ctx.cancelled:
            await do_one_job()
        raise ctx.err()
"""

from __future__ import annotations

import asyncio
from typing import Any

from appbox.core.errors import ContextCancelled
from appbox.core.logging import get_logger


class RunContext:
    """Cancellable execution context handed to every handler.

    Parameters
    ----------
    name : str
        Name of this context; children extend it with ``.<child>``.
    parent : RunContext | None
        Context this one derives from.  A child is cancelled whenever its
        parent is.
    """

    def __init__(self, name: str = "root", *, parent: RunContext | None = None) -> None:
        self._name = name
        self._parent = parent
        self._event = asyncio.Event()
        self._cause: BaseException | None = None
        self._reason: str | None = None
        self._children: set[RunContext] = set()
        self.logger = get_logger("appbox.context", context=self.path)

        if parent is not None:
            if parent.cancelled:
                self._cancel(parent._cause, parent._reason)
            else:
                parent._children.add(self)

    # ── Identity ─────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent(self) -> RunContext | None:
        return self._parent

    @property
    def path(self) -> str:
        """Dotted name from the root, e.g. ``box.group.api``."""
        if self._parent is None:
            return self._name
        return f"{self._parent.path}.{self._name}"

    # ── State ────────────────────────────────────────────────────────

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def cause(self) -> BaseException | None:
        """Exception that triggered cancellation, if any."""
        return self._cause

    def err(self) -> ContextCancelled | None:
        """Describe why this context was cancelled, or ``None`` if it is live."""
        if not self.cancelled:
            return None
        message = f"context {self.path!r} cancelled"
        if self._reason:
            message += f": {self._reason}"
        return ContextCancelled(message, cause=self._cause, context={"context": self.path})

    def check(self) -> None:
        """Raise :class:`ContextCancelled` if this context is cancelled."""
        error = self.err()
        if error is not None:
            raise error

    async def wait(self) -> None:
        """Suspend until this context is cancelled."""
        await self._event.wait()

    # ── Derivation / cancellation ────────────────────────────────────

    def child(self, name: str) -> RunContext:
        """Derive a child context."""
        return RunContext(name, parent=self)

    def cancel(self, cause: BaseException | None = None, *, reason: str | None = None) -> bool:
        """Cancel this context and every context derived from it.

        Returns ``False`` if the context was already cancelled; the first
        cause wins.
        """
        if self.cancelled:
            return False
        self._cancel(cause, reason)
        self.logger.debug("context.cancelled", reason=self._reason)
        return True

    def release(self) -> None:
        """Cancel and detach from the parent so it stops tracking us."""
        self.cancel(reason="released")
        if self._parent is not None:
            self._parent._children.discard(self)

    def _cancel(self, cause: BaseException | None, reason: str | None) -> None:
        if self._event.is_set():
            return
        self._cause = cause
        self._reason = reason or (str(cause) if cause is not None else None)
        self._event.set()
        children, self._children = self._children, set()
        for child in children:
            child._cancel(cause, self._reason)

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "live"
        return f"RunContext({self.path!r}, {state})"

    def bind(self, **kwargs: Any) -> Any:
        """Logger bound with this context plus extra fields."""
        return self.logger.bind(**kwargs)


__all__ = ["RunContext"]
