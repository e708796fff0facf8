"""Tests for the exception hierarchy."""

from chatcommand.exceptions import (
    ChatCommandError,
    ConfigurationError,
    ErrorCategory,
    ExecutionError,
)


def test_execution_error_defaults():
    cause = RuntimeError("boom")
    err = ExecutionError("Could not execute ping", command_name="ping", cause=cause)
    assert isinstance(err, ChatCommandError)
    assert err.command_name == "ping"
    assert err.cause is cause
    assert err.module == "dispatch"
    assert err.category == ErrorCategory.PERMANENT
    assert err.is_retryable is False


def test_configuration_error_defaults():
    err = ConfigurationError("bad prefix", setting_name="command_prefix")
    assert err.setting_name == "command_prefix"
    assert err.module == "config"
    assert err.category == ErrorCategory.INFRASTRUCTURE


def test_transient_is_retryable():
    err = ChatCommandError("flaky", category=ErrorCategory.TRANSIENT)
    assert err.is_retryable is True


def test_str_includes_module_and_context():
    err = ExecutionError("Could not execute ping", attempt=2)
    assert str(err) == "Could not execute ping [module=dispatch] (attempt=2)"


def test_str_falls_back_to_class_name():
    assert str(ChatCommandError()) == "ChatCommandError"


def test_repr():
    err = ConfigurationError("bad")
    assert repr(err) == (
        "ConfigurationError('bad', category='infrastructure', module='config')"
    )
