"""Tests for the exception hierarchy."""

from __future__ import annotations

from port_manager.errors import (
    CommandExecutionError,
    CommandExitError,
    CommandSpawnError,
    CommandTimeoutError,
    PortManagerError,
    UnsupportedPlatformError,
)


def test_execution_errors_share_a_base():
    for error_type in (CommandSpawnError, CommandTimeoutError, CommandExitError):
        assert issubclass(error_type, CommandExecutionError)
    assert issubclass(CommandExecutionError, PortManagerError)
    assert not issubclass(UnsupportedPlatformError, CommandExecutionError)


def test_exit_error_message_and_context():
    error = CommandExitError(command=["lsof", "-i", "tcp:1"], exit_code=2, stderr="boom\n")

    assert str(error) == "Command execution failed (exit code: 2) for: lsof -i tcp:1\nStderr: boom"
    assert error.command == ("lsof", "-i", "tcp:1")
    assert error.exit_code == 2


def test_custom_message_keeps_context():
    error = CommandSpawnError("could not start ss", command=["ss"])

    assert str(error) == "could not start ss"
    assert error.command == ("ss",)


def test_unsupported_platform_message():
    error = UnsupportedPlatformError(platform="bsd")

    assert str(error) == "Operating system not supported: bsd"
    assert error.platform == "bsd"


def test_default_message_from_docstring():
    assert str(PortManagerError()) == "Base exception for all port manager errors."
