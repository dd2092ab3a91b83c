"""
Port Resolver

Finds which processes are listening on a TCP port and terminates them on
request, using each operating system's own inspection tools (``lsof`` on
macOS, ``ss``/``netstat`` on Linux, ``netstat`` on Windows).

Usage:
    from port_manager.port_resolver import find_processes_on_port, kill_process

    for record in find_processes_on_port(8080):
        print(record.display())
        kill_process(record.pid)

An empty list means nothing is listening. A failure to inspect the port
raises ``CommandExecutionError`` (or ``UnsupportedPlatformError``), so the two
outcomes never share a return shape.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import List, Optional

from .command_executor import CommandRunner, execute_command
from .config import ConfigurationError, ResolverSettings, load_resolver_settings
from .errors import CommandExecutionError, UnsupportedPlatformError, format_command
from .port_resolver_helpers.command_enrichment import enrich_records
from .port_resolver_helpers.discovery import discover_listeners
from .port_resolver_helpers.platform_detection import PlatformFamily, detect_platform_family
from .port_resolver_helpers.platform_profiles import profile_for, require_profile
from .port_resolver_helpers.process_models import ProcessRecord

logger = logging.getLogger(__name__)

_PID_PATTERN = re.compile(r"[1-9]\d*")


class PortResolver:
    """Platform-bound resolver; all state lives in the OS process table."""

    def __init__(
        self,
        family: PlatformFamily,
        *,
        settings: Optional[ResolverSettings] = None,
        runner: CommandRunner = execute_command,
    ) -> None:
        self.family = family
        self.settings = settings if settings is not None else ResolverSettings()
        self._runner = runner

    def find_processes_on_port(self, port: int) -> List[ProcessRecord]:
        """
        Return the processes listening on *port*.

        The port must already be validated (1-65535) by the caller.

        Raises:
            UnsupportedPlatformError: If this resolver's family has no profile
            CommandExecutionError: If the discovery tool(s) could not be run
        """
        profile = require_profile(self.family)
        records = discover_listeners(
            profile,
            port,
            self._runner,
            timeout_ms=self.settings.discovery_timeout_ms,
        )
        records = enrich_records(
            records,
            profile.lookup_command,
            self._runner,
            timeout_ms=self.settings.enrichment_timeout_ms,
            parallel=self.settings.parallel_enrichment,
        )
        for record in records:
            logger.info("Found process on port %s: PID=%s, Command=%s", record.port, record.pid, record.command)
        if not records:
            logger.info("No process is listening on port %s", port)
        return records

    def kill_process(self, pid: str) -> bool:
        """Force-kill *pid*; returns True only when the kill command exits 0. Never raises."""
        profile = profile_for(self.family)
        if profile is None:
            logger.warning("Unsupported operating system for killing process: %s", self.family.value)
            return False
        if not _PID_PATTERN.fullmatch(pid or ""):
            logger.warning("Refusing to kill invalid PID %r", pid)
            return False

        command = profile.kill_command(pid)
        try:
            result = self._runner(command, self.settings.kill_timeout_ms)
        except CommandExecutionError:
            logger.exception("Error executing kill command for PID: %s (%s)", pid, format_command(command))
            return False

        if result.exit_code == 0:
            logger.info("Successfully killed process with PID: %s", pid)
            return True
        logger.warning(
            "Failed to kill process with PID: %s. Exit code: %s, Error: %s",
            pid,
            result.exit_code,
            result.stderr.strip(),
        )
        return False


def get_resolver(platform: Optional[PlatformFamily] = None, *, runner: CommandRunner = execute_command) -> PortResolver:
    """Build a resolver for *platform* (detected when omitted) with environment settings."""
    family = platform if platform is not None else detect_platform_family()
    return PortResolver(family, settings=load_resolver_settings(), runner=runner)


def find_processes_on_port(port: int, *, platform: Optional[PlatformFamily] = None) -> List[ProcessRecord]:
    """Module-level shortcut for :meth:`PortResolver.find_processes_on_port`."""
    return get_resolver(platform).find_processes_on_port(port)


def kill_process(pid: str, *, platform: Optional[PlatformFamily] = None) -> bool:
    """Module-level shortcut for :meth:`PortResolver.kill_process`."""
    try:
        resolver = get_resolver(platform)
    except ConfigurationError:
        logger.exception("Invalid port manager configuration; not killing PID %s", pid)
        return False
    return resolver.kill_process(pid)


async def find_processes_on_port_async(port: int, *, platform: Optional[PlatformFamily] = None) -> List[ProcessRecord]:
    """Run :func:`find_processes_on_port` off the event loop."""
    return await asyncio.to_thread(find_processes_on_port, port, platform=platform)


async def kill_process_async(pid: str, *, platform: Optional[PlatformFamily] = None) -> bool:
    """Run :func:`kill_process` off the event loop."""
    return await asyncio.to_thread(kill_process, pid, platform=platform)


__all__ = [
    "CommandExecutionError",
    "PlatformFamily",
    "PortResolver",
    "ProcessRecord",
    "UnsupportedPlatformError",
    "find_processes_on_port",
    "find_processes_on_port_async",
    "get_resolver",
    "kill_process",
    "kill_process_async",
]
