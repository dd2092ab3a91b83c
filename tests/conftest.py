"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import threading
from typing import Dict, List, Sequence, Tuple, Union

import pytest

from port_manager.command_executor import CommandResult
from port_manager.config import runtime
from port_manager.errors import CommandSpawnError
from port_manager.port_resolver_helpers.platform_detection import detect_platform_family

FakeResponse = Union[CommandResult, BaseException]


class FakeRunner:
    """Scripted stand-in for ``execute_command``.

    Commands without a scripted response behave like a missing binary.
    """

    def __init__(self) -> None:
        self._responses: Dict[Tuple[str, ...], FakeResponse] = {}
        self._lock = threading.Lock()
        self.calls: List[Tuple[Tuple[str, ...], int]] = []

    def add(self, command: Sequence[str], response: FakeResponse) -> "FakeRunner":
        self._responses[tuple(command)] = response
        return self

    def ok(self, command: Sequence[str], stdout: str = "", stderr: str = "") -> "FakeRunner":
        return self.add(command, CommandResult(exit_code=0, stdout=stdout, stderr=stderr))

    def fail(self, command: Sequence[str], exit_code: int, stdout: str = "", stderr: str = "") -> "FakeRunner":
        return self.add(command, CommandResult(exit_code=exit_code, stdout=stdout, stderr=stderr))

    @property
    def commands(self) -> List[Tuple[str, ...]]:
        return [command for command, _ in self.calls]

    def __call__(self, command: Sequence[str], timeout_ms: int) -> CommandResult:
        key = tuple(command)
        with self._lock:
            self.calls.append((key, timeout_ms))
        response = self._responses.get(key)
        if response is None:
            raise CommandSpawnError(command=command)
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep host configuration and cached platform detection out of every test."""
    for key in list(os.environ):
        if key.startswith("PORT_MANAGER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", ())
    monkeypatch.setattr(runtime, "_JSON_ENV_CANDIDATES", ())
    runtime.reset_default_values()
    detect_platform_family.cache_clear()
    yield
    runtime.reset_default_values()
    detect_platform_family.cache_clear()
