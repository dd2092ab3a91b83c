"""
Command Executor

Runs an external program with a bounded timeout and captures its output.
A non-zero exit code is returned to the caller rather than raised, because
some inspection tools use failure-looking codes for "nothing found". Use
:func:`ensure_success` (or :func:`run_checked`) to apply the benign-exit
policy for a given platform.

Usage:
    from port_manager.command_executor import run_checked

    result = run_checked(["lsof", "-i", "tcp:8080"], 3000, PlatformFamily.MACOS)
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Callable, Dict, Sequence, Tuple

import psutil

from .errors import CommandExitError, CommandSpawnError, CommandTimeoutError, format_command
from .port_resolver_helpers.platform_detection import PlatformFamily

logger = logging.getLogger(__name__)

# Seconds to wait for a killed child to be reaped after a timeout
_REAP_TIMEOUT_SECONDS = 1


@dataclass(frozen=True)
class CommandResult:
    exit_code: int
    stdout: str
    stderr: str


CommandRunner = Callable[[Sequence[str], int], CommandResult]


def _lsof_found_nothing(result: CommandResult) -> bool:
    return result.exit_code == 1 and not result.stdout.strip()


# (platform, executable) -> predicate deciding whether a non-zero exit means "no data"
BENIGN_EXIT_POLICIES: Dict[Tuple[PlatformFamily, str], Callable[[CommandResult], bool]] = {
    (PlatformFamily.MACOS, "lsof"): _lsof_found_nothing,
}


def execute_command(command: Sequence[str], timeout_ms: int) -> CommandResult:
    """
    Run *command* and capture its output.

    Args:
        command: Executable name followed by its arguments
        timeout_ms: Maximum wall time before the child is killed

    Returns:
        CommandResult with the exit code and decoded output

    Raises:
        CommandSpawnError: If the executable cannot be started
        CommandTimeoutError: If the child does not exit in time
    """
    argv = list(command)
    logger.debug("Executing %s (timeout %sms)", format_command(argv), timeout_ms)
    try:
        proc = subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
    except OSError as exc:
        raise CommandSpawnError(f"Unable to start {format_command(argv)}: {exc}", command=argv) from exc

    try:
        stdout, stderr = proc.communicate(timeout=timeout_ms / 1000)
    except subprocess.TimeoutExpired as exc:
        _kill_process_tree(proc)
        raise CommandTimeoutError(command=argv, timeout_ms=timeout_ms) from exc

    return CommandResult(exit_code=proc.returncode, stdout=stdout or "", stderr=stderr or "")


def _kill_process_tree(proc: subprocess.Popen) -> None:
    """Kill a timed-out child and anything it spawned, then reap it."""
    try:
        children = psutil.Process(proc.pid).children(recursive=True)
    except (psutil.NoSuchProcess, psutil.AccessDenied):  # policy_guard: allow-silent-handler
        children = []
    for child in children:
        try:
            child.kill()
        except psutil.NoSuchProcess:  # policy_guard: allow-silent-handler
            continue
        except psutil.AccessDenied:
            logger.debug("Access denied killing child %s of timed-out command", child.pid)
    proc.kill()
    try:
        proc.communicate(timeout=_REAP_TIMEOUT_SECONDS)
    except subprocess.TimeoutExpired:
        logger.warning("Timed-out command (PID %s) was not reaped after kill", proc.pid)


def is_benign_exit(result: CommandResult, command: Sequence[str], family: PlatformFamily) -> bool:
    """Return True when a non-zero exit is the tool's way of saying "no match"."""
    if not command:
        return False
    executable = os.path.basename(command[0])
    policy = BENIGN_EXIT_POLICIES.get((family, executable))
    return policy is not None and policy(result)


def ensure_success(result: CommandResult, command: Sequence[str], family: PlatformFamily) -> CommandResult:
    """
    Classify a finished command.

    Returns the result unchanged on exit code 0 or on a benign non-zero exit;
    raises CommandExitError for any other non-zero exit.
    """
    if result.exit_code == 0:
        return result
    if is_benign_exit(result, command, family):
        logger.info("%s found no matching entries (exit code %s)", os.path.basename(command[0]), result.exit_code)
        return result
    error = CommandExitError(command=command, exit_code=result.exit_code, stderr=result.stderr)
    logger.debug(str(error))
    raise error


def run_checked(
    command: Sequence[str],
    timeout_ms: int,
    family: PlatformFamily,
    *,
    runner: CommandRunner = execute_command,
) -> CommandResult:
    """Execute *command* and apply :func:`ensure_success`."""
    return ensure_success(runner(command, timeout_ms), command, family)


__all__ = [
    "BENIGN_EXIT_POLICIES",
    "CommandResult",
    "CommandRunner",
    "ensure_success",
    "execute_command",
    "is_benign_exit",
    "run_checked",
]
