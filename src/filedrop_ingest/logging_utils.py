"""Logging utilities for file-drop ingestion."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional


_LOGGER_SETUP = False
_ROOT_LOGGER_NAME = "filedrop_ingest"
_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _formatter() -> logging.Formatter:
    return logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the package logger with a console and optional file handler.

    Parameters
    ----------
    verbose: bool
        If True, console output includes DEBUG records (traversal details).
    log_file: Optional[Path]
        If provided, every record down to DEBUG is also written here.

    Returns
    -------
    logging.Logger
        The package root logger.
    """
    global _LOGGER_SETUP

    root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG if verbose or log_file is not None else logging.INFO)

    if _LOGGER_SETUP:
        root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(_formatter())
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(_formatter())
        root_logger.addHandler(file_handler)

    root_logger.propagate = False
    _LOGGER_SETUP = True
    return root_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the package root.

    Before ``setup_logging`` runs, the returned logger simply propagates so
    that library users (and pytest's ``caplog``) see the records through
    their own configuration.
    """
    if name is None:
        return logging.getLogger(_ROOT_LOGGER_NAME)

    if name.startswith(_ROOT_LOGGER_NAME):
        return logging.getLogger(name)

    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")
