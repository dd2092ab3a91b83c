"""
Centralized logging configuration for the port manager.

This module provides a single setup_logging function that configures
logging consistently with:
- Console output to stdout, or a caller-supplied stream (DEBUG when verbose,
  INFO otherwise, WARNING in user-friendly mode)
- Optional file output to logs/{service_name}.log
- Fresh log file on each start unless PORT_MANAGER_LOG_APPEND is set
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Optional, TextIO

from port_manager.config import env_bool

# Thread-safe lock for logging configuration
_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)
_UNKNOWN_LOGGER_NAME = "<unknown>"
_TECHNICAL_FORMAT = "%(asctime)s%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _should_skip_logging_configuration(root_logger: logging.Logger, service_name: Optional[str]) -> bool:
    if not root_logger.handlers:
        return False

    has_console = any(
        isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler) for handler in root_logger.handlers
    )
    if not service_name:
        has_file = True
    else:
        has_file = any(isinstance(handler, logging.FileHandler) for handler in root_logger.handlers)
    return has_console and has_file


def _close_handlers(logger: logging.Logger, logger_name: Optional[str] = None) -> None:
    """Close all handlers for a logger, logging any errors."""
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as e:  # Best-effort cleanup operation  # policy_guard: allow-silent-handler
            safe_name = logger_name if logger_name else _UNKNOWN_LOGGER_NAME
            _MODULE_LOGGER.debug("Handler close failed for logger '%s': %s", safe_name, e)


def _reset_all_handlers(root_logger: logging.Logger) -> None:
    _close_handlers(root_logger)
    root_logger.handlers = []


def _build_console_handler(verbose: bool, user_friendly: bool, stream: TextIO) -> logging.Handler:
    if user_friendly:
        formatter = logging.Formatter("%(message)s")
    else:
        formatter = logging.Formatter(_TECHNICAL_FORMAT, _DATE_FORMAT)

    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(formatter)

    if verbose:
        console_handler.setLevel(logging.DEBUG)
    elif user_friendly:
        console_handler.setLevel(logging.WARNING)
    else:
        console_handler.setLevel(logging.INFO)

    return console_handler


def _configure_file_handler(service_name: Optional[str], logs_dir: Path) -> Optional[logging.Handler]:
    if not service_name:
        return None

    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"{service_name}.log"
    file_mode = "a" if env_bool("PORT_MANAGER_LOG_APPEND", or_value=False) else "w"

    file_handler = logging.handlers.WatchedFileHandler(log_path, mode=file_mode)
    file_handler.setFormatter(logging.Formatter(_TECHNICAL_FORMAT, _DATE_FORMAT))
    file_handler.setLevel(logging.DEBUG)
    return file_handler


def _suppress_noisy_third_parties() -> None:
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("psutil").setLevel(logging.WARNING)


def setup_logging(
    service_name: Optional[str] = None,
    *,
    verbose: bool = False,
    user_friendly: bool = False,
    logs_dir: Optional[Path] = None,
    console_stream: Optional[TextIO] = None,
) -> None:
    """Configure logging for the application"""

    with _config_lock:
        root_logger = logging.getLogger()

        if _should_skip_logging_configuration(root_logger, service_name):
            return

        _reset_all_handlers(root_logger)
        stream = console_stream if console_stream is not None else sys.stdout
        root_logger.addHandler(_build_console_handler(verbose, user_friendly, stream))

        file_handler = _configure_file_handler(service_name, logs_dir if logs_dir is not None else Path.cwd() / "logs")
        if file_handler:
            root_logger.addHandler(file_handler)

        root_logger.setLevel(logging.DEBUG if verbose or file_handler else logging.INFO)
        _suppress_noisy_third_parties()
