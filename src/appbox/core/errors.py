"""
Structured error types for appbox.

Every failure the launcher can report is a :class:`LaunchError` carrying a
category, structured context, an optional chained cause, and the process
exit code the launcher uses when that error ends a run.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                         LaunchError                           │
        │       (category, context, cause, exit_code)                   │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  InsufficientArguments   NoApplicationsSelected               │
        │  (ARGUMENTS, exit 2)     (SELECTION, exit 2)                  │
        │                                                               │
        │  RegistrationError       ConfigError                          │
        │  (REGISTRATION, exit 2)  (CONFIG, exit 2)                     │
        │                                                               │
        │  HandlerFailure          ContextCancelled                     │
        │  (HANDLER, exit 1)       (CANCELLED, exit 0)                  │
        └──────────────────────────────────────────────────────────────┘

Partitioning errors (``InsufficientArguments``, ``NoApplicationsSelected``)
are raised synchronously by :func:`appbox.run` and mean nothing was
launched.  Handler errors are never wrapped by the dispatcher: whatever a
handler raises is what the runnable raises.  ``HandlerFailure`` is the
conventional type for handler authors who want a categorised failure.

Guardrails:
    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

    ❌ DON'T: Treat ContextCancelled as a failure of the sub-application
    ✅ DO: Raise ``ctx.err()`` once the context is cancelled

Usage:
    from appbox.core.errors import HandlerFailure

    async def api(ctx, args):
        try:
            await serve(ctx, args)
        except OSError as e:
            raise HandlerFailure("listener died", app="api", cause=e)
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and exit codes."""

    ARGUMENTS = "ARGUMENTS"          # Argument vector too short
    SELECTION = "SELECTION"          # No registered application named
    REGISTRATION = "REGISTRATION"    # Invalid or duplicate app registration
    CONFIG = "CONFIG"                # Invalid launcher settings

    HANDLER = "HANDLER"              # Sub-application failed
    CANCELLED = "CANCELLED"          # Context cancelled

    INTERNAL = "INTERNAL"            # Bugs, unexpected state


class LaunchError(Exception):
    """
    Base exception for all appbox errors.

    Subclasses set ``default_category`` and ``default_exit_code``; both can
    be overridden per instance.

    Examples:
        >>> error = LaunchError("boom", category=ErrorCategory.CONFIG)
        >>> error.to_dict()["category"]
        'CONFIG'
        >>> error.with_context(app="api").context
        {'app': 'api'}
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_exit_code: int = 1

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
        exit_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause
        self.exit_code = exit_code if exit_code is not None else self.default_exit_code

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> LaunchError:
        """Add context fields to the error. Returns self for chaining."""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "exit_code": self.exit_code,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# ── Partitioning errors ──────────────────────────────────────────────────


class InsufficientArguments(LaunchError):
    """Fewer than two tokens: no program identity plus payload."""

    default_category = ErrorCategory.ARGUMENTS
    default_exit_code = 2

    def __init__(self, message: str = "no arguments provided", *, count: int = 0, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.count = count
        self.context.setdefault("argument_count", count)


class NoApplicationsSelected(LaunchError):
    """No token in the argument vector matched a registered application."""

    default_category = ErrorCategory.SELECTION
    default_exit_code = 2

    def __init__(
        self,
        message: str = "no applications to execute",
        *,
        available: list[str] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.available = sorted(available or [])
        self.context.setdefault("available", self.available)


class RegistrationError(LaunchError):
    """An application could not be registered or looked up."""

    default_category = ErrorCategory.REGISTRATION
    default_exit_code = 2


class ConfigError(LaunchError):
    """Launcher settings failed validation."""

    default_category = ErrorCategory.CONFIG
    default_exit_code = 2


# ── Execution errors ─────────────────────────────────────────────────────


class HandlerFailure(LaunchError):
    """A sub-application reported failure."""

    default_category = ErrorCategory.HANDLER
    default_exit_code = 1

    def __init__(self, message: str, *, app: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.app = app
        if app is not None:
            self.context.setdefault("app", app)


class ContextCancelled(LaunchError):
    """The run context was cancelled.

    ``cause`` is the exception that triggered cancellation (a sibling's
    failure) or ``None`` for an external cancel such as a shutdown signal.
    """

    default_category = ErrorCategory.CANCELLED
    default_exit_code = 0

    def __init__(self, message: str = "context cancelled", **kwargs: Any):
        super().__init__(message, **kwargs)


def exit_code_for(exc: BaseException | None) -> int:
    """Map the outcome of a run to a process exit code."""
    if exc is None:
        return 0
    if isinstance(exc, LaunchError):
        return exc.exit_code
    if isinstance(exc, asyncio.CancelledError):
        return 0
    return 1


__all__ = [
    "ErrorCategory",
    "LaunchError",
    "InsufficientArguments",
    "NoApplicationsSelected",
    "RegistrationError",
    "ConfigError",
    "HandlerFailure",
    "ContextCancelled",
    "exit_code_for",
]
