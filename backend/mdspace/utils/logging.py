"""Unified logging configuration for the mdspace backend.

Provides consistent logging with both console and file output.
Log files are written to the configured logs directory with rotation support.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from mdspace.settings import Settings, settings

ROOT_LOGGER_NAME = "mdspace"

# Default log format
LOG_FORMAT = "[%(asctime)s.%(msecs)03d][%(levelname)s][%(filename)s:%(lineno)d]: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _ensure_app_logger_configured():
    """
    Ensure the mdspace parent logger is configured with a console handler.
    This is called automatically on module import.
    """
    app_logger = logging.getLogger(ROOT_LOGGER_NAME)

    # Check if the parent logger already has our formatted console handler
    has_formatted_handler = any(
        isinstance(h, logging.StreamHandler)
        and not isinstance(h, RotatingFileHandler)
        and h.formatter
        and "%(asctime)s" in (h.formatter._fmt if hasattr(h.formatter, "_fmt") else "")
        for h in app_logger.handlers
    )

    if not has_formatted_handler:
        app_logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        app_logger.addHandler(console_handler)

        app_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

        # Keep our records out of the root logger (uvicorn configures it too)
        app_logger.propagate = False


def setup_logging(log_name: str = "mdspace", cfg: Settings | None = None) -> logging.Logger:
    """
    Setup logging configuration with console and file output.

    Log file path pattern: {logs_root}/{log_name}.log
    File output is skipped when the logs directory cannot be created.

    Args:
        log_name: The name of the log file (without .log extension).
                 Default: "mdspace"
        cfg: Settings to read the logs directory and rotation from
             (default: global settings)

    Returns:
        Configured logger instance
    """
    _ensure_app_logger_configured()
    cfg = cfg or settings

    log_dir = _get_logs_root(cfg)

    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{log_name}")

    if log_dir:
        log_file_path = os.path.join(log_dir, f"{log_name}.log")

        app_logger = logging.getLogger(ROOT_LOGGER_NAME)

        # One file per log_name: drop a handler left over from another logs directory
        for h in list(app_logger.handlers):
            if (
                isinstance(h, RotatingFileHandler)
                and os.path.basename(h.baseFilename) == f"{log_name}.log"
                and h.baseFilename != log_file_path
            ):
                app_logger.removeHandler(h)
                h.close()

        if not any(isinstance(h, RotatingFileHandler) and h.baseFilename == log_file_path for h in app_logger.handlers):
            file_handler = RotatingFileHandler(
                log_file_path,
                maxBytes=cfg.log_max_bytes,
                backupCount=cfg.log_backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            app_logger.addHandler(file_handler)

        logger.propagate = True

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Logger instance
    """
    _ensure_app_logger_configured()

    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)


def _get_logs_root(cfg: Settings) -> Path | None:
    """
    Get the logs root directory, or None if it cannot be created.
    """
    logs_root = cfg.get_logs_root()
    if _can_create_dir(logs_root):
        return logs_root
    return None


def _can_create_dir(path: Path) -> bool:
    """Check if a directory can be created."""
    try:
        path.mkdir(parents=True, exist_ok=True)
        return True
    except OSError:
        return False


# Configure the parent logger on module import
_ensure_app_logger_configured()
