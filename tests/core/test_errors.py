"""Tests for the LaunchError hierarchy."""

from __future__ import annotations

import asyncio

import pytest

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


class TestCategories:
    @pytest.mark.parametrize(
        ("error", "category", "exit_code"),
        [
            (InsufficientArguments(), ErrorCategory.ARGUMENTS, 2),
            (NoApplicationsSelected(), ErrorCategory.SELECTION, 2),
            (RegistrationError("dup"), ErrorCategory.REGISTRATION, 2),
            (ConfigError("bad"), ErrorCategory.CONFIG, 2),
            (HandlerFailure("x"), ErrorCategory.HANDLER, 1),
            (ContextCancelled(), ErrorCategory.CANCELLED, 0),
        ],
    )
    def test_defaults(self, error, category, exit_code):
        assert isinstance(error, LaunchError)
        assert error.category == category
        assert error.exit_code == exit_code

    def test_default_messages(self):
        assert str(InsufficientArguments()) == "no arguments provided"
        assert str(NoApplicationsSelected()) == "no applications to execute"


class TestLaunchError:
    def test_cause_is_chained(self):
        root = OSError("disk")
        error = HandlerFailure("write failed", app="api", cause=root)
        assert error.__cause__ is root
        assert error.to_dict()["cause"] == "OSError: disk"

    def test_with_context(self):
        error = LaunchError("x").with_context(app="api", attempt=1)
        assert error.context == {"app": "api", "attempt": 1}

    def test_to_dict(self):
        d = HandlerFailure("boom", app="api").to_dict()
        assert d["error_type"] == "HandlerFailure"
        assert d["category"] == "HANDLER"
        assert d["context"] == {"app": "api"}

    def test_repr(self):
        assert repr(ConfigError("bad")) == "ConfigError('bad', category=CONFIG)"

    def test_selection_lists_available(self):
        error = NoApplicationsSelected(available=["b", "a"])
        assert error.available == ["a", "b"]
        assert error.context["available"] == ["a", "b"]


class TestExitCodes:
    def test_success(self):
        assert exit_code_for(None) == 0

    def test_launch_errors_use_their_code(self):
        assert exit_code_for(HandlerFailure("x")) == 1
        assert exit_code_for(ContextCancelled()) == 0
        assert exit_code_for(NoApplicationsSelected()) == 2
        assert exit_code_for(HandlerFailure("x", exit_code=7)) == 7

    def test_arbitrary_exception_is_failure(self):
        assert exit_code_for(RuntimeError("x")) == 1

    def test_cancelled_error_is_clean(self):
        assert exit_code_for(asyncio.CancelledError()) == 0
