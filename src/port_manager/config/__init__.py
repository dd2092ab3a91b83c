"""Shared configuration helpers."""

from .errors import ConfigurationError
from .runtime import (
    env_bool,
    env_int,
    env_millis,
    env_str,
    reset_default_values,
)
from .settings import ResolverSettings, load_resolver_settings

__all__ = [
    "ConfigurationError",
    "ResolverSettings",
    "env_bool",
    "env_int",
    "env_millis",
    "env_str",
    "load_resolver_settings",
    "reset_default_values",
]
