"""Execution layer: partitioning, run contexts, and fail-fast dispatch.

::

    argv ──► partition() ──► Partition(local_args, entries)
                                        │
                              build_runnable(entries)
                                        │
                                        ▼
                    Dispatcher ──await(ctx)──► handler          (1 entry)
                                          └──► FailFastGroup    (N entries)
"""

from appbox.execution.context import RunContext
from appbox.execution.dispatcher import Dispatcher, build_runnable
from appbox.execution.group import FailFastGroup
from appbox.execution.partition import InvocationEntry, Partition, partition
from appbox.execution.registry import AppFunc, AppRegistry, Apps, validate_app_name

__all__ = [
    "RunContext",
    "Dispatcher",
    "build_runnable",
    "FailFastGroup",
    "InvocationEntry",
    "Partition",
    "partition",
    "AppFunc",
    "AppRegistry",
    "Apps",
    "validate_app_name",
]
