"""Exception hierarchy for port resolution and process termination.

Every exception accepts a message plus keyword context that is stored as
attributes, so handlers can inspect ``err.command`` or ``err.exit_code``
without parsing the message.
"""

from __future__ import annotations

from typing import Any, Sequence


class PortManagerError(Exception):
    """Base exception for all port manager errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "Port manager error occurred"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


class UnsupportedPlatformError(PortManagerError):
    """Operating system family is not supported."""

    def __init__(self, message: str = "", *, platform: str = "unknown", **kwargs: Any) -> None:
        if not message:
            message = f"Operating system not supported: {platform}"
        super().__init__(message, platform=platform, **kwargs)


class CommandExecutionError(PortManagerError):
    """External command could not be run to completion."""

    def __init__(self, message: str = "", *, command: Sequence[str] = (), **kwargs: Any) -> None:
        if not message:
            message = f"Command execution failed: {format_command(command)}"
        super().__init__(message, command=tuple(command), **kwargs)


class CommandSpawnError(CommandExecutionError):
    """External command could not be started."""


class CommandTimeoutError(CommandExecutionError):
    """External command did not exit within its timeout."""

    def __init__(self, message: str = "", *, command: Sequence[str] = (), timeout_ms: int = 0, **kwargs: Any) -> None:
        if not message:
            message = f"Command timed out after {timeout_ms}ms: {format_command(command)}"
        super().__init__(message, command=command, timeout_ms=timeout_ms, **kwargs)


class CommandExitError(CommandExecutionError):
    """External command exited with a failing status."""

    def __init__(
        self,
        message: str = "",
        *,
        command: Sequence[str] = (),
        exit_code: int = 1,
        stderr: str = "",
        **kwargs: Any,
    ) -> None:
        if not message:
            message = f"Command execution failed (exit code: {exit_code}) for: {format_command(command)}"
            if stderr.strip():
                message += f"\nStderr: {stderr.strip()}"
        super().__init__(message, command=command, exit_code=exit_code, stderr=stderr, **kwargs)


def format_command(command: Sequence[str]) -> str:
    return " ".join(command)


__all__ = [
    "CommandExecutionError",
    "CommandExitError",
    "CommandSpawnError",
    "CommandTimeoutError",
    "PortManagerError",
    "UnsupportedPlatformError",
    "format_command",
]
