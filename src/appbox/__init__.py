"""
appbox - run several sub-applications from one command line.

    box [launcher args] app1 [app1 args] app2 [app2 args] ...

``run(apps, *argv)`` splits the argument vector at registered app names
and returns the launcher's own arguments plus an awaitable runnable that
executes every selected app concurrently, fail-fast.
"""

__version__ = "0.1.0"

from appbox.core.errors import (
    ContextCancelled,
    HandlerFailure,
    InsufficientArguments,
    LaunchError,
    NoApplicationsSelected,
    RegistrationError,
)
from appbox.execution.context import RunContext
from appbox.execution.dispatcher import Dispatcher
from appbox.execution.registry import AppFunc, AppRegistry, Apps
from appbox.launch import run

__all__ = [
    "__version__",
    "run",
    "RunContext",
    "Dispatcher",
    "AppFunc",
    "Apps",
    "AppRegistry",
    "LaunchError",
    "InsufficientArguments",
    "NoApplicationsSelected",
    "RegistrationError",
    "HandlerFailure",
    "ContextCancelled",
]
