"""Parse the listening-socket listings printed by each platform's inspection tool.

Every parser reads the whole tool output and returns records for all ports it
recognises; narrowing to the queried port happens afterwards in
:func:`~port_manager.port_resolver_helpers.process_models.filter_records_for_port`.
"""

from __future__ import annotations

import re
from typing import List

from .process_models import UNKNOWN_COMMAND, ProcessRecord

# lsof: "java 12345 audi 50u IPv6 0x... 0t0 TCP *:8080 (LISTEN)"
LSOF_PATTERN = re.compile(
    r"^(\S+)\s+(\d+)\s+\S+\s+\S+\s+(?:IPv[46]|\*)\s+\S+\s+\S+\s+TCP\s+(?:\S*:|\*:)(\d+)\s+\(LISTEN\).*$",
    re.MULTILINE,
)

# Windows netstat -ano: "  TCP    0.0.0.0:8080   0.0.0.0:0    LISTENING       4567"
WINDOWS_NETSTAT_PATTERN = re.compile(
    r"^[ \t]*TCP\s+\S+:(\d+)\s+\S+\s+LISTENING\s+(\d+)[ \t\r]*$",
    re.MULTILINE,
)

# ss -tulnp: "tcp   LISTEN 0  511  0.0.0.0:8080  0.0.0.0:*  users:(("node",pid=9999,fd=22))"
# The Netid column is only printed when more than one socket family is requested.
SS_LISTEN_PATTERN = re.compile(
    r"^(?:tcp\s+)?LISTEN\s+\d+\s+\d+\s+\S*:(\d+)\s+\S+\s+users:\((.*)\)[ \t]*$",
    re.MULTILINE,
)
SS_USER_PATTERN = re.compile(r'\("((?:[^"\\]|\\.)*)",pid=(\d+)')

# Linux netstat -tulnp: "tcp  0  0 0.0.0.0:8080  0.0.0.0:*  LISTEN  1234/java"
LINUX_NETSTAT_PATTERN = re.compile(
    r"^tcp6?\s+\d+\s+\d+\s+\S*:(\d+)\s+\S+\s+LISTEN\s+(\d+)(?:/(.*?))?[ \t]*$",
    re.MULTILINE,
)


def parse_lsof_output(output: str) -> List[ProcessRecord]:
    return [
        ProcessRecord(pid=match.group(2), command=match.group(1), port=match.group(3))
        for match in LSOF_PATTERN.finditer(output)
    ]


def parse_windows_netstat_output(output: str) -> List[ProcessRecord]:
    # netstat carries no process name; enrichment fills it in later
    return [
        ProcessRecord(pid=match.group(2), command=UNKNOWN_COMMAND, port=match.group(1))
        for match in WINDOWS_NETSTAT_PATTERN.finditer(output)
    ]


def parse_ss_output(output: str) -> List[ProcessRecord]:
    """Parse ``ss`` output, yielding one record per process sharing a socket."""
    records: List[ProcessRecord] = []
    for match in SS_LISTEN_PATTERN.finditer(output):
        port = match.group(1)
        for user in SS_USER_PATTERN.finditer(match.group(2)):
            name = user.group(1) or UNKNOWN_COMMAND
            records.append(ProcessRecord(pid=user.group(2), command=name, port=port))
    return records


def parse_linux_netstat_output(output: str) -> List[ProcessRecord]:
    records: List[ProcessRecord] = []
    for match in LINUX_NETSTAT_PATTERN.finditer(output):
        command = (match.group(3) or "").strip() or UNKNOWN_COMMAND
        records.append(ProcessRecord(pid=match.group(2), command=command, port=match.group(1)))
    return records


__all__ = [
    "LINUX_NETSTAT_PATTERN",
    "LSOF_PATTERN",
    "SS_LISTEN_PATTERN",
    "SS_USER_PATTERN",
    "WINDOWS_NETSTAT_PATTERN",
    "parse_linux_netstat_output",
    "parse_lsof_output",
    "parse_ss_output",
    "parse_windows_netstat_output",
]
