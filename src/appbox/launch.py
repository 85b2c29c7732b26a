"""Launch entry point: partition an argument vector and build its runnable."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from appbox.core.logging import get_logger
from appbox.execution.dispatcher import Dispatcher, build_runnable
from appbox.execution.partition import partition
from appbox.execution.registry import AppFunc

logger = get_logger(__name__)


def run(apps: Mapping[str, AppFunc], *argv: str) -> tuple[list[str], Dispatcher]:
    """Run applications given CLI arguments.

    Args:
        apps: Registered name → handler table, snapshotted for this launch
        *argv: Full argument vector, program identity first

    Returns:
        ``(local_args, runnable)``: the launcher's own arguments and the
        awaitable that runs every selected app

    Raises:
        InsufficientArguments: fewer than two arguments
        NoApplicationsSelected: no registered app named in ``argv``
    """
    snapshot = MappingProxyType(dict(apps))
    result = partition(snapshot, argv)

    logger.info(
        "launch.partitioned",
        apps=result.names,
        local_args=len(result.local_args),
    )
    return list(result.local_args), build_runnable(result.entries)


__all__ = ["run"]
