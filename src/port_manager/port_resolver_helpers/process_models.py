"""Listening-process records and port filtering."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List

UNKNOWN_COMMAND = "(unknown)"


@dataclass(frozen=True)
class ProcessRecord:
    """A process found listening on a port."""

    pid: str
    command: str
    port: str

    def with_command(self, command: str) -> "ProcessRecord":
        """Return a copy carrying *command*; blank labels never replace the current one."""
        if not command or not command.strip():
            return self
        return replace(self, command=command.strip())

    def display(self) -> str:
        return f"[PID: {self.pid}] Port {self.port} - {self.command}"


def filter_records_for_port(records: Iterable[ProcessRecord], port: int) -> List[ProcessRecord]:
    """Keep records for *port* only, dropping repeated pids while preserving order."""
    target = str(port)
    seen: set[str] = set()
    kept: List[ProcessRecord] = []
    for record in records:
        if record.port != target or record.pid in seen:
            continue
        seen.add(record.pid)
        kept.append(record)
    return kept
