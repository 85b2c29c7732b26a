"""App Registry — name → handler table for one launcher.

Manifesto:
The partitioner needs to recognise ``"api"`` in the argument vector and
resolve it to the coroutine that runs the API.  The registry is built by
the caller and passed explicitly to :func:`appbox.run`; there is no
process-wide singleton, so tests and embedding programs each own an
isolated table.

ARCHITECTURE
────────────
::

    AppRegistry  (read-only Mapping[str, AppFunc])
      ├── .register(name, handler)  ─ store handler + metadata
      ├── .app(name)                ─ decorator form of register
      ├── .resolve(name)            ─ lookup, RegistrationError if missing
      ├── .describe(name)           ─ metadata (description, tags)
      ├── .list_with_metadata()     ─ for usage / help output
      └── .freeze()                 ─ MappingProxyType snapshot

Any plain ``dict`` of handlers works too; ``AppRegistry`` adds
validation and descriptions for the launcher's usage output.

Related modules:
    partition.py  — consumes the mapping
    cli/app.py    — prints list_with_metadata() on usage errors
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from appbox.core.errors import RegistrationError

if TYPE_CHECKING:
    from appbox.execution.context import RunContext

AppFunc = Callable[["RunContext", Sequence[str]], Awaitable[Any]]
"""Handler signature: ``async def app(ctx, args) -> Any``."""

Apps = Mapping[str, AppFunc]


def validate_app_name(name: object) -> str:
    """Check a name can delimit an argument vector and return it."""
    if not isinstance(name, str) or not name:
        raise RegistrationError(f"App name must be a non-empty string, got {name!r}")
    if any(ch.isspace() for ch in name):
        raise RegistrationError(f"App name must not contain whitespace: {name!r}")
    return name


class AppRegistry(Mapping[str, AppFunc]):
    """Explicit, validated application registry.

    Example:
        >>> registry = AppRegistry()
        >>>
        >>> @registry.app("api", description="HTTP API")
        ... async def api(ctx, args):
        ...     await ctx.wait()
        >>>
        >>> "api" in registry
        True
    """

    def __init__(self, apps: Mapping[str, AppFunc] | None = None) -> None:
        self._handlers: dict[str, AppFunc] = {}
        self._metadata: dict[str, dict[str, Any]] = {}
        for name, handler in (apps or {}).items():
            self.register(name, handler)

    # ── Mapping protocol ─────────────────────────────────────────────

    def __getitem__(self, name: str) -> AppFunc:
        return self._handlers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    # ── Registration ─────────────────────────────────────────────────

    def register(
        self,
        name: str,
        handler: AppFunc,
        description: str | None = None,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Register a handler.

        Args:
            name: Name that selects the app on the command line
            handler: Async callable ``(ctx, args)``
            description: Optional description for usage output
            tags: Optional tags for filtering/categorization

        Raises:
            RegistrationError: Invalid name, duplicate name, or non-callable handler
        """
        validate_app_name(name)
        if name in self._handlers:
            raise RegistrationError(f"App {name!r} already registered", context={"app": name})
        if not callable(handler):
            raise RegistrationError(
                f"Handler for {name!r} must be callable, got {type(handler).__name__}",
                context={"app": name},
            )
        self._handlers[name] = handler
        self._metadata[name] = {
            "name": name,
            "description": description or _first_doc_line(handler),
            "tags": tags or {},
        }

    def app(
        self,
        name: str,
        description: str | None = None,
        tags: dict[str, str] | None = None,
    ) -> Callable[[AppFunc], AppFunc]:
        """Decorator form of :meth:`register`."""

        def decorator(handler: AppFunc) -> AppFunc:
            self.register(name, handler, description=description, tags=tags)
            return handler

        return decorator

    # ── Lookup ───────────────────────────────────────────────────────

    def resolve(self, name: str) -> AppFunc:
        """Get a handler.

        Raises:
            RegistrationError: If no app is registered under ``name``
        """
        if name not in self._handlers:
            available = sorted(self._handlers)
            raise RegistrationError(
                f"No app registered as {name!r}. Available apps: {available or 'none'}",
                context={"app": name, "available": available},
            )
        return self._handlers[name]

    def describe(self, name: str) -> dict[str, Any] | None:
        """Get app metadata (description, tags)."""
        return self._metadata.get(name)

    def list_with_metadata(self) -> list[dict[str, Any]]:
        """List apps with their metadata, sorted by name."""
        return [self._metadata[name] for name in sorted(self._metadata)]

    def freeze(self) -> Mapping[str, AppFunc]:
        """Read-only snapshot of the current name → handler table."""
        return MappingProxyType(dict(self._handlers))


def _first_doc_line(handler: Any) -> str | None:
    doc = getattr(handler, "__doc__", None)
    if not doc:
        return None
    return doc.strip().splitlines()[0]


__all__ = [
    "AppFunc",
    "Apps",
    "AppRegistry",
    "validate_app_name",
]
