#!/usr/bin/env python3
"""Find and terminate the processes listening on TCP ports.

Usage:
    port-manager find 3000 8080
    port-manager kill --port 8080 [--yes]
    port-manager kill --pid 4567 [--yes]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, List, Optional, Sequence

from port_manager.config import ConfigurationError
from port_manager.errors import PortManagerError
from port_manager.logging_config import setup_logging
from port_manager.port_resolver import PortResolver, get_resolver

logger = logging.getLogger(__name__)

MIN_PORT = 1
MAX_PORT = 65535

EXIT_OK = 0
EXIT_FAILURE = 1


def port_number(text: str) -> int:
    """argparse type: an integer TCP port in 1-65535."""
    try:
        port = int(text.strip())
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid port number: {text!r}") from exc
    if port < MIN_PORT or port > MAX_PORT:
        raise argparse.ArgumentTypeError(f"port number must be between {MIN_PORT} and {MAX_PORT} (got {port})")
    return port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="port-manager", description="Find and terminate processes listening on TCP ports")
    parser.add_argument("--verbose", action="store_true", help="Log debug detail to the console")
    parser.add_argument("--log-file", metavar="NAME", help="Also write logs/NAME.log")
    subparsers = parser.add_subparsers(dest="action", required=True)

    find_parser = subparsers.add_parser("find", help="List processes listening on ports")
    find_parser.add_argument("ports", nargs="+", type=port_number, metavar="PORT")

    kill_parser = subparsers.add_parser("kill", help="Force-kill a process by PID or by port")
    target = kill_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--pid", help="Process ID to kill")
    target.add_argument("--port", type=port_number, help="Kill every process listening on this port")
    kill_parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    return parser


def _confirm(prompt: str, input_func: Callable[[str], str]) -> bool:
    try:
        answer = input_func(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def cmd_find(resolver: PortResolver, ports: Sequence[int]) -> int:
    exit_code = EXIT_OK
    for port in ports:
        try:
            records = resolver.find_processes_on_port(port)
        except PortManagerError as exc:
            print(f"Error fetching processes for port {port}: {exc}", file=sys.stderr)
            exit_code = EXIT_FAILURE
            continue
        if not records:
            print(f"No process is listening on port {port}")
            continue
        for record in records:
            print(record.display())
    return exit_code


def cmd_kill_pid(resolver: PortResolver, pid: str, *, assume_yes: bool, input_func: Callable[[str], str]) -> int:
    if not assume_yes and not _confirm(f"Terminate process {pid}?", input_func):
        print("Aborted")
        return EXIT_FAILURE
    if resolver.kill_process(pid):
        print(f"PID: {pid} terminated successfully.")
        return EXIT_OK
    print(f"Failed to terminate PID: {pid}.", file=sys.stderr)
    return EXIT_FAILURE


def cmd_kill_port(resolver: PortResolver, port: int, *, assume_yes: bool, input_func: Callable[[str], str]) -> int:
    try:
        records = resolver.find_processes_on_port(port)
    except PortManagerError as exc:
        print(f"Error fetching processes for port {port}: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    if not records:
        print(f"No process is listening on port {port}")
        return EXIT_OK

    exit_code = EXIT_OK
    for record in records:
        prompt = f"Terminate process?\n\nPID: {record.pid}\nPort: {record.port}\nCommand: {record.command}\n"
        if not assume_yes and not _confirm(prompt, input_func):
            print(f"Skipped PID: {record.pid}")
            exit_code = EXIT_FAILURE
            continue
        if resolver.kill_process(record.pid):
            print(f"PID: {record.pid} on port {record.port} terminated successfully.")
        else:
            print(f"Failed to terminate PID: {record.pid} on port {record.port}.", file=sys.stderr)
            exit_code = EXIT_FAILURE
    return exit_code


def main(argv: Optional[List[str]] = None, *, input_func: Callable[[str], str] = input) -> int:
    """Console entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file, verbose=args.verbose, user_friendly=not args.verbose, console_stream=sys.stderr)

    try:
        resolver = get_resolver()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    logger.debug("Resolving ports for platform %s", resolver.family.value)

    if args.action == "find":
        return cmd_find(resolver, args.ports)
    if args.pid is not None:
        return cmd_kill_pid(resolver, args.pid, assume_yes=args.yes, input_func=input_func)
    return cmd_kill_port(resolver, args.port, assume_yes=args.yes, input_func=input_func)


if __name__ == "__main__":
    sys.exit(main())
