"""
Logging setup for Jukebox.

Console output through logging.basicConfig plus an optional rotation-tolerant
file handler. Logging failures must never interrupt frame delivery, so file
write errors are dropped.
"""

import logging
import logging.handlers
import os
from typing import Optional

from jukebox.config import PlayerConfig

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _make_file_handler(path: str) -> Optional[logging.Handler]:
    try:
        # WatchedFileHandler reopens the file after external rotation
        handler = logging.handlers.WatchedFileHandler(path, mode='a')
    except OSError as e:
        logging.getLogger(__name__).warning(f"[LOGGING] Cannot open log file {path}: {e}")
        return None

    handler.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s'))
    original_emit = handler.emit

    def safe_emit(record):
        try:
            original_emit(record)
        except OSError:
            # Logging failures degrade silently
            pass

    handler.emit = safe_emit
    return handler


def configure_logging(config: PlayerConfig) -> None:
    """
    Install console logging and, if configured, the file handler.

    Args:
        config: Player configuration (log_level, log_file)
    """
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if config.log_file:
        root = logging.getLogger()
        # Prevent duplicate handlers when configure_logging runs twice
        if any(isinstance(h, logging.handlers.WatchedFileHandler)
               and getattr(h, 'baseFilename', None) == os.path.abspath(config.log_file)
               for h in root.handlers):
            return
        handler = _make_file_handler(config.log_file)
        if handler is not None:
            handler.setLevel(level)
            root.addHandler(handler)
