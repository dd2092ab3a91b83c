"""Per-platform dispatch table: which tools to run and how to read them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import UnsupportedPlatformError
from .command_enrichment import (
    CommandLookup,
    lookup_command_linux,
    lookup_command_macos,
    lookup_command_windows,
)
from .output_parsers import (
    parse_linux_netstat_output,
    parse_lsof_output,
    parse_ss_output,
    parse_windows_netstat_output,
)
from .platform_detection import PlatformFamily
from .process_models import ProcessRecord


@dataclass(frozen=True)
class DiscoveryStrategy:
    """One inspection tool invocation plus the parser for its output."""

    tool: str
    build_args: Callable[[int], List[str]]
    parse: Callable[[str], List[ProcessRecord]]

    def command_for(self, port: int) -> List[str]:
        return [self.tool, *self.build_args(port)]


@dataclass(frozen=True)
class PlatformProfile:
    family: PlatformFamily
    discovery: Tuple[DiscoveryStrategy, ...]
    kill_command: Callable[[str], List[str]]
    lookup_command: CommandLookup

    @property
    def primary(self) -> DiscoveryStrategy:
        return self.discovery[0]

    @property
    def fallbacks(self) -> Tuple[DiscoveryStrategy, ...]:
        return self.discovery[1:]


def _posix_kill(pid: str) -> List[str]:
    return ["kill", "-9", pid]


MACOS_PROFILE = PlatformProfile(
    family=PlatformFamily.MACOS,
    discovery=(
        DiscoveryStrategy(
            tool="lsof",
            build_args=lambda port: ["-i", f"tcp:{port}", "-sTCP:LISTEN", "-P", "-n"],
            parse=parse_lsof_output,
        ),
    ),
    kill_command=_posix_kill,
    lookup_command=lookup_command_macos,
)

LINUX_PROFILE = PlatformProfile(
    family=PlatformFamily.LINUX,
    discovery=(
        DiscoveryStrategy(
            tool="ss",
            build_args=lambda port: ["-tulnp", "sport", "=", f":{port}"],
            parse=parse_ss_output,
        ),
        DiscoveryStrategy(
            tool="netstat",
            build_args=lambda port: ["-tulnp"],
            parse=parse_linux_netstat_output,
        ),
    ),
    kill_command=_posix_kill,
    lookup_command=lookup_command_linux,
)

WINDOWS_PROFILE = PlatformProfile(
    family=PlatformFamily.WINDOWS,
    discovery=(
        DiscoveryStrategy(
            tool="netstat",
            build_args=lambda port: ["-ano"],
            parse=parse_windows_netstat_output,
        ),
    ),
    kill_command=lambda pid: ["taskkill", "/PID", pid, "/F"],
    lookup_command=lookup_command_windows,
)

PLATFORM_PROFILES: Dict[PlatformFamily, PlatformProfile] = {
    PlatformFamily.MACOS: MACOS_PROFILE,
    PlatformFamily.LINUX: LINUX_PROFILE,
    PlatformFamily.WINDOWS: WINDOWS_PROFILE,
}


def profile_for(family: PlatformFamily) -> Optional[PlatformProfile]:
    return PLATFORM_PROFILES.get(family)


def require_profile(family: PlatformFamily) -> PlatformProfile:
    """Return the profile for *family* or raise UnsupportedPlatformError."""
    profile = PLATFORM_PROFILES.get(family)
    if profile is None:
        raise UnsupportedPlatformError(platform=family.value)
    return profile
