"""
Logging setup.

Every named logger gets a rich console handler (INFO, or DEBUG with
DEBUG=1) and, unless LOG_TO_FILE=0, a per-run DEBUG file under LOG_DIR.

Usage:
    from voter_vault.logger import get_logger
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from rich.logging import RichHandler

from .config import get_config

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"


def _console_handler(level: int) -> logging.Handler:
    handler = RichHandler(rich_tracebacks=True, show_path=False, markup=False)
    handler.setLevel(level)
    return handler


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / f"{datetime.now():%Y%m%d_%H%M%S}.log", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logger(
    name: str = "voter_vault",
    log_dir: Optional[Path] = None,
    debug: Optional[bool] = None,
    log_to_file: Optional[bool] = None,
) -> logging.Logger:
    """
    Attach handlers to a logger once.

    Args:
        name: Logger name
        log_dir: Directory for the log file (default: config.logs_dir)
        debug: Console at DEBUG instead of INFO (default: config.debug)
        log_to_file: Also write a file (default: config.log_to_file)
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    config = get_config()
    debug = config.debug if debug is None else debug
    log_to_file = config.log_to_file if log_to_file is None else log_to_file

    # Handlers filter; the logger itself passes everything
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(_console_handler(logging.DEBUG if debug else logging.INFO))

    if log_to_file:
        file_handler = _file_handler(log_dir or config.logs_dir)
        logger.addHandler(file_handler)
        logger.debug(f"Writing log to {file_handler.baseFilename}")

    return logger


_loggers: Dict[str, logging.Logger] = {}


def get_logger(name: str = "voter_vault") -> logging.Logger:
    if name not in _loggers:
        _loggers[name] = setup_logger(name)
    return _loggers[name]
