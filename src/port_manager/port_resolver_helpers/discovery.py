"""Run a profile's discovery tool, falling back once when the preferred one fails."""

from __future__ import annotations

import logging
from typing import List

from ..command_executor import CommandRunner, run_checked
from ..errors import CommandExecutionError
from .platform_profiles import DiscoveryStrategy, PlatformProfile
from .process_models import ProcessRecord, filter_records_for_port

logger = logging.getLogger(__name__)


def _run_strategy(
    strategy: DiscoveryStrategy,
    profile: PlatformProfile,
    port: int,
    runner: CommandRunner,
    timeout_ms: int,
) -> List[ProcessRecord]:
    command = strategy.command_for(port)
    result = run_checked(command, timeout_ms, profile.family, runner=runner)
    candidates = strategy.parse(result.stdout)
    matches = filter_records_for_port(candidates, port)
    logger.debug(
        "%s reported %d listening sockets, %d on port %s",
        strategy.tool,
        len(candidates),
        len(matches),
        port,
    )
    return matches


def discover_listeners(
    profile: PlatformProfile,
    port: int,
    runner: CommandRunner,
    *,
    timeout_ms: int,
) -> List[ProcessRecord]:
    """
    Return the processes listening on *port* according to the profile's tools.

    When the primary tool raises CommandExecutionError and the profile
    declares a fallback, the fallback is tried exactly once. A failing
    fallback propagates its own error chained to the primary one.

    Raises:
        CommandExecutionError: When the primary tool (and fallback, if any) fails
    """
    try:
        return _run_strategy(profile.primary, profile, port, runner, timeout_ms)
    except CommandExecutionError as primary_error:
        if not profile.fallbacks:
            raise
        fallback = profile.fallbacks[0]
        logger.warning("%s failed (%s); falling back to %s", profile.primary.tool, primary_error, fallback.tool)
        try:
            return _run_strategy(fallback, profile, port, runner, timeout_ms)
        except CommandExecutionError as fallback_error:
            raise fallback_error from primary_error
