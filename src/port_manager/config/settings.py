"""Resolver settings loaded from the environment."""

from __future__ import annotations

from dataclasses import dataclass

from .runtime import env_bool, env_millis

DEFAULT_DISCOVERY_TIMEOUT_MS = 3000
DEFAULT_ENRICHMENT_TIMEOUT_MS = 500
DEFAULT_KILL_TIMEOUT_MS = 3000


@dataclass(frozen=True)
class ResolverSettings:
    """Timeouts and switches that shape a single resolver."""

    discovery_timeout_ms: int = DEFAULT_DISCOVERY_TIMEOUT_MS
    enrichment_timeout_ms: int = DEFAULT_ENRICHMENT_TIMEOUT_MS
    kill_timeout_ms: int = DEFAULT_KILL_TIMEOUT_MS
    parallel_enrichment: bool = True


def load_resolver_settings() -> ResolverSettings:
    """Build settings from ``PORT_MANAGER_*`` variables, falling back to defaults."""

    return ResolverSettings(
        discovery_timeout_ms=env_millis("PORT_MANAGER_DISCOVERY_TIMEOUT_MS", DEFAULT_DISCOVERY_TIMEOUT_MS),
        enrichment_timeout_ms=env_millis("PORT_MANAGER_ENRICHMENT_TIMEOUT_MS", DEFAULT_ENRICHMENT_TIMEOUT_MS),
        kill_timeout_ms=env_millis("PORT_MANAGER_KILL_TIMEOUT_MS", DEFAULT_KILL_TIMEOUT_MS),
        parallel_enrichment=bool(env_bool("PORT_MANAGER_PARALLEL_ENRICHMENT", or_value=True)),
    )
