"""Logging configuration for tlsgauge.

Every module logs through ``logging.getLogger(__name__)`` so records land under
the ``tlsgauge`` logger configured here.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "tlsgauge"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_LOG_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5


class LoggerSetup:
    """Configures the package logger once for console and optional file output."""

    _initialized = False

    @classmethod
    def setup(cls, *, verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
        logger = logging.getLogger(LOGGER_NAME)
        level = logging.DEBUG if verbose else logging.WARNING
        logger.setLevel(level)

        if cls._initialized:
            for handler in logger.handlers:
                handler.setLevel(level)
            return logger

        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=_MAX_LOG_BYTES,
                backupCount=_BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        logger.propagate = False
        cls._initialized = True
        logger.debug("Logging initialized (verbose=%s)", verbose)
        return logger

    @classmethod
    def reset(cls) -> None:
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True
        cls._initialized = False


def configure_logging(verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the ``tlsgauge`` logger hierarchy."""

    return LoggerSetup.setup(verbose=verbose, log_file=log_file)


__all__ = ["LOGGER_NAME", "LoggerSetup", "configure_logging"]
