"""
Centralized logging configuration for the lock watcher.

``setup_logging`` configures the root logger once per call with:
- Console output on stderr (INFO when verbose, WARNING otherwise)
- Optional file output when ``log_file`` or ``LOCKWATCH_LOG_FILE`` is set
- Quieter third-party loggers
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Optional, Union

from lockwatch.config import env_str

# Thread-safe lock for logging configuration
_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)
_TECHNICAL_FORMAT = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _close_handlers(logger: logging.Logger) -> None:
    """Close all handlers for a logger, logging any errors."""
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as e:  # Best-effort cleanup operation  # policy_guard: allow-silent-handler
            _MODULE_LOGGER.debug("Handler close failed for logger '%s': %s", logger.name, e)


def _build_console_handler(verbose: bool) -> logging.Handler:
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(_TECHNICAL_FORMAT, _DATE_FORMAT))
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    return console_handler


def _build_file_handler(log_file: Path) -> logging.Handler:
    log_file = log_file.expanduser()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler_cls = getattr(logging.handlers, "WatchedFileHandler", logging.FileHandler)
    file_handler = handler_cls(log_file, mode="a")
    file_handler.setFormatter(logging.Formatter(_TECHNICAL_FORMAT, _DATE_FORMAT))
    file_handler.setLevel(logging.INFO)
    return file_handler


def _suppress_noisy_third_parties() -> None:
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("objc").setLevel(logging.WARNING)


def setup_logging(verbose: bool = False, log_file: Optional[Union[str, Path]] = None) -> None:
    """Configure logging for the daemon, replacing any existing root handlers."""

    with _config_lock:
        root_logger = logging.getLogger()
        _close_handlers(root_logger)
        root_logger.handlers = []

        root_logger.addHandler(_build_console_handler(verbose))

        target = log_file or env_str("LOCKWATCH_LOG_FILE")
        if target:
            root_logger.addHandler(_build_file_handler(Path(target)))

        root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
        _suppress_noisy_third_parties()
