"""Detect which operating-system family the resolver should target."""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache

import psutil

from ..config import env_str

logger = logging.getLogger(__name__)

PLATFORM_OVERRIDE_ENV = "PORT_MANAGER_PLATFORM"


class PlatformFamily(Enum):
    MACOS = "macos"
    LINUX = "linux"
    WINDOWS = "windows"
    UNSUPPORTED = "unsupported"


_OVERRIDE_ALIASES = {
    "macos": PlatformFamily.MACOS,
    "mac": PlatformFamily.MACOS,
    "darwin": PlatformFamily.MACOS,
    "osx": PlatformFamily.MACOS,
    "linux": PlatformFamily.LINUX,
    "windows": PlatformFamily.WINDOWS,
    "win32": PlatformFamily.WINDOWS,
}


def family_from_name(name: str) -> PlatformFamily:
    """Map a free-form OS name onto a family; unknown names are unsupported."""
    return _OVERRIDE_ALIASES.get(name.strip().lower(), PlatformFamily.UNSUPPORTED)


def _family_from_psutil() -> PlatformFamily:
    if psutil.MACOS:
        return PlatformFamily.MACOS
    if psutil.LINUX:
        return PlatformFamily.LINUX
    if psutil.WINDOWS:
        return PlatformFamily.WINDOWS
    return PlatformFamily.UNSUPPORTED


@lru_cache(maxsize=1)
def detect_platform_family() -> PlatformFamily:
    """Resolve the platform family once per process.

    ``PORT_MANAGER_PLATFORM`` takes precedence over the host OS so an
    operator can force a parsing strategy (or simulate an unsupported host).
    """
    override = env_str(PLATFORM_OVERRIDE_ENV)
    if override:
        family = family_from_name(override)
        logger.debug("Platform overridden via %s=%r -> %s", PLATFORM_OVERRIDE_ENV, override, family.value)
        return family

    family = _family_from_psutil()
    if family is PlatformFamily.UNSUPPORTED:
        logger.warning("Unsupported operating system detected; port lookups will fail")
    return family
