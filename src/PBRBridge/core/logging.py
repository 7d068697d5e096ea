"""Logging setup for the texture converter."""

import logging
import logging.handlers
import os
import threading

logger = logging.getLogger("pbr_bridge")

# 10 MB per log file, 3 rotated backups
_LOG_MAX_BYTES = 10 * 1024 * 1024
_LOG_BACKUP_COUNT = 3
_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_setup_lock = threading.Lock()


def setup_logging(level: str = "INFO", log_file: str = None, force: bool = False):
    """Configure logging without clobbering host-app handlers by default.

    With no root handlers (or ``force=True``) this installs a stream handler
    and, when ``log_file`` is set, a rotating file handler on the root
    logger. When the host application already configured logging, only the
    ``pbr_bridge`` logger level is changed and the file handler is attached
    to it.
    """
    with _setup_lock:
        _configure(level, log_file, force)


def _resolve_level(level: str) -> int:
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        logger.warning("Invalid log level '%s', defaulting to INFO", level)
        return logging.INFO
    return numeric_level


def _file_handler(log_file: str) -> logging.Handler:
    os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        log_file, maxBytes=_LOG_MAX_BYTES, backupCount=_LOG_BACKUP_COUNT,
        encoding="utf-8",
    )


def _configure(level: str, log_file: str, force: bool):
    numeric_level = _resolve_level(level)
    root = logging.getLogger()

    if force or not root.handlers:
        handlers = [logging.StreamHandler()]
        if log_file:
            handlers.append(_file_handler(log_file))
        logging.basicConfig(
            level=numeric_level,
            format=_LOG_FORMAT,
            handlers=handlers,
            force=force,
        )
        logger.setLevel(numeric_level)
        logger.debug("Logging configured (force=%s, handlers=%d)", force, len(handlers))
        return

    # Embedded mode: leave the host's root logger alone.
    logger.setLevel(numeric_level)
    if not log_file:
        return
    target = os.path.abspath(log_file)
    existing_files = {
        getattr(h, "baseFilename", None)
        for h in logger.handlers
        if isinstance(h, logging.FileHandler)
    }
    if target not in existing_files:
        handler = _file_handler(log_file)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
        logger.info("Adding file handler: %s", target)
