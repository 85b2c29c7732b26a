"""Core primitives shared by every appbox module: errors, logging, settings."""

from appbox.core.errors import (
    ConfigError,
    ContextCancelled,
    ErrorCategory,
    HandlerFailure,
    InsufficientArguments,
    LaunchError,
    NoApplicationsSelected,
    RegistrationError,
    exit_code_for,
)
from appbox.core.logging import LogContext, configure_logging, get_logger

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
    "configure_logging",
    "get_logger",
    "LogContext",
]
