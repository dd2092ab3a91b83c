"""Best-effort lookups that replace terse process labels with fuller ones."""

from __future__ import annotations

import csv
import io
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from ..command_executor import CommandRunner
from ..errors import CommandExecutionError
from .process_models import ProcessRecord

logger = logging.getLogger(__name__)

# (pid, runner, timeout_ms) -> richer label, or None when nothing better is known
CommandLookup = Callable[[str, CommandRunner, int], Optional[str]]

PROC_ROOT = Path("/proc")


def _run_lookup(command: Sequence[str], runner: CommandRunner, timeout_ms: int) -> Optional[str]:
    result = runner(command, timeout_ms)
    if result.exit_code != 0:
        return None
    output = result.stdout.strip()
    return output or None


def lookup_command_windows(pid: str, runner: CommandRunner, timeout_ms: int) -> Optional[str]:
    """Return the image name ``tasklist`` reports for *pid*."""
    output = _run_lookup(["tasklist", "/FI", f"PID eq {pid}", "/NH", "/FO", "CSV"], runner, timeout_ms)
    if output is None:
        return None
    for line in output.splitlines():
        line = line.strip()
        # "INFO: No tasks are running..." is printed with exit code 0
        if not line.startswith('"'):
            continue
        row = next(csv.reader(io.StringIO(line)), [])
        if row and row[0].strip():
            return row[0].strip()
    return None


def lookup_command_macos(pid: str, runner: CommandRunner, timeout_ms: int) -> Optional[str]:
    return _run_lookup(["ps", "-p", pid, "-o", "command="], runner, timeout_ms)


def lookup_command_linux(pid: str, runner: CommandRunner, timeout_ms: int) -> Optional[str]:
    """Ask ``ps`` for the full command line, then fall back to ``/proc/<pid>/cmdline``."""
    try:
        label = _run_lookup(["ps", "-p", pid, "-o", "cmd="], runner, timeout_ms)
    except CommandExecutionError as exc:
        logger.debug("ps lookup failed for PID %s: %s", pid, exc)
        label = None
    if label:
        return label
    return read_proc_cmdline(pid)


def read_proc_cmdline(pid: str, proc_root: Optional[Path] = None) -> Optional[str]:
    root = proc_root if proc_root is not None else PROC_ROOT
    raw = (root / pid / "cmdline").read_bytes()
    text = raw.decode("utf-8", errors="replace").replace("\x00", " ").strip()
    return text or None


def enrich_records(
    records: List[ProcessRecord],
    lookup: CommandLookup,
    runner: CommandRunner,
    *,
    timeout_ms: int,
    parallel: bool = True,
) -> List[ProcessRecord]:
    """
    Replace each record's label with the result of *lookup*, keeping order.

    Lookups run once per distinct pid. Failures keep the original label, so a
    single slow or vanished process never aborts the query.
    """
    pids = list(dict.fromkeys(record.pid for record in records))
    if not pids:
        return []

    def _lookup_pid(pid: str) -> Optional[str]:
        try:
            return lookup(pid, runner, timeout_ms)
        except (CommandExecutionError, OSError, ValueError) as exc:  # Best-effort enrichment  # policy_guard: allow-silent-handler
            logger.debug("Could not resolve command for PID %s: %s", pid, exc)
            return None

    if parallel and len(pids) > 1:
        with ThreadPoolExecutor(max_workers=len(pids), thread_name_prefix="port-enrichment") as pool:
            labels: Dict[str, Optional[str]] = dict(zip(pids, pool.map(_lookup_pid, pids)))
    else:
        labels = {pid: _lookup_pid(pid) for pid in pids}

    enriched = []
    for record in records:
        label = labels.get(record.pid)
        enriched.append(record.with_command(label) if label else record)
    return enriched


__all__ = [
    "CommandLookup",
    "enrich_records",
    "lookup_command_linux",
    "lookup_command_macos",
    "lookup_command_windows",
    "read_proc_cmdline",
]
