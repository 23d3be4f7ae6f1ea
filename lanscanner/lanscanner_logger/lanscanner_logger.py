"""LAN Scanner Logger"""
import logging
import logging.handlers
import os
import sys

import lanscanner.constants.constants as constants

FORMATTER = logging.Formatter("".join(['[%(levelname)s:%(asctime)s]',
                                       '[%(filename)s:%(lineno)s:%(process)s]%(message)s']))


def _create_console_handler(stream) -> logging.StreamHandler:
    """Build a console handler at the configured console level."""
    handler = logging.StreamHandler(stream)
    handler.setLevel(constants.CONSOLE_LOG_LEVEL.upper())
    handler.setFormatter(FORMATTER)
    return handler


def _create_rotating_file_handler(path: str, *, max_bytes: int, backup_count: int) -> logging.handlers.RotatingFileHandler:
    """Build a rotating file handler that captures full debug output."""
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(FORMATTER)
    return handler


def _ensure_logs_dir() -> bool:
    """Create the logs directory, returns False if it can't be used"""
    try:
        os.makedirs(constants.LOGS_DIR, exist_ok=True)
    except OSError as exc:
        print(f"WARNING: Unable to create logs directory {constants.LOGS_DIR}: {exc}", file=sys.stderr)
        return False
    return True


def get_logger(name: str) -> logging.Logger:
    """Creates a pre-configured logger"""
    logger = logging.getLogger(name)
    if getattr(logger, "_lanscanner_configured", False):
        return logger
    logger.propagate = False
    logger.setLevel(logging.DEBUG)  # Handlers do the filtering

    logger.addHandler(_create_console_handler(sys.stderr))

    if constants.LOG_TO_FILE and _ensure_logs_dir():
        rotating_handler = _create_rotating_file_handler(
            os.path.join(constants.LOGS_DIR, f"{name}.log"),
            max_bytes=100_000,
            backup_count=constants.LOG_ENTRIES_TO_RETAIN,
        )
        logger.addHandler(rotating_handler)
        try:
            rotating_handler.doRollover()
        except OSError:
            pass
    logger._lanscanner_configured = True
    return logger
