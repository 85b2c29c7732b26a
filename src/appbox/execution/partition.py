"""Argument partitioner — split one argument vector into per-app slices.

A composite launcher is started as::

    box --log-level debug  api --port 8080  worker --queue high
    ───  ────────────────  ─────────────── ──────────────────
    id   launcher's own    entry "api"      entry "worker"

Registered app names are the only delimiters.  Element 0 (the program
identity) is always skipped; everything before the first recognised name
belongs to the launcher itself.  Each occurrence of a name opens a new
entry, so a name given twice runs twice with its own slice.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from appbox.core.errors import InsufficientArguments, NoApplicationsSelected
from appbox.execution.registry import AppFunc


@dataclass(frozen=True)
class InvocationEntry:
    """One selected sub-application: its name, argument slice and handler."""

    name: str
    args: tuple[str, ...]
    handler: AppFunc


@dataclass(frozen=True)
class Partition:
    """Result of partitioning an argument vector."""

    local_args: tuple[str, ...]
    entries: tuple[InvocationEntry, ...]

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]


def partition(apps: Mapping[str, AppFunc], argv: Sequence[str]) -> Partition:
    """Partition ``argv`` into the launcher's own arguments and app entries.

    Args:
        apps: Registered name → handler table
        argv: Full argument vector, program identity first

    Returns:
        :class:`Partition` with at least one entry

    Raises:
        InsufficientArguments: ``argv`` has fewer than two elements
        NoApplicationsSelected: no element after the first names an app
    """
    if len(argv) < 2:
        raise InsufficientArguments(count=len(argv))

    local_args: list[str] = []
    entries: list[InvocationEntry] = []

    name: str | None = None
    current = local_args
    for arg in argv[1:]:
        if arg in apps:
            if name is not None:
                entries.append(InvocationEntry(name, tuple(current), apps[name]))
            name, current = arg, []
            continue
        current.append(arg)
    if name is not None:
        entries.append(InvocationEntry(name, tuple(current), apps[name]))

    if not entries:
        raise NoApplicationsSelected(available=list(apps))

    return Partition(local_args=tuple(local_args), entries=tuple(entries))


__all__ = ["InvocationEntry", "Partition", "partition"]
