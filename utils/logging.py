#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging configuration and utilities
"""

# Standard library imports
import re
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

import logging

# Local imports
from config import (
    APP_NAME,
    LOG_FILE_PATTERN,
    LOG_MAX_AGE_S,
    LOG_MAX_FILE_SIZE_MB_DEFAULT,
    LOG_SEPARATOR_WIDTH,
    LOG_TIMESTAMP_FORMAT,
    PRODUCTION_MODE,
)

# Add custom TRACE logging level (below DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

def trace(self, message, *args, **kwargs):
    """Log a trace message (ultra-detailed, below DEBUG)"""
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)

# Add trace() method to Logger class
logging.Logger.trace = trace

# Global log mode (set by setup_logging)
_CURRENT_LOG_MODE = 'customer'

def get_log_mode() -> str:
    """Get the current logging mode"""
    return _CURRENT_LOG_MODE


class SanitizingFilter(logging.Filter):
    """
    Logging filter that controls verbosity and strips local paths.

    Three modes:
    - customer: Clean, user-friendly logs (INFO+ only, no per-sample chatter)
    - verbose: Full technical details (DEBUG+)
    - debug: Ultra-detailed (TRACE+, per-sample scores)
    """

    PATTERNS = [
        # File paths - Windows paths
        (re.compile(r'[A-Za-z]:\\[^\s]*'), '[PATH]'),
        # File paths - Unix paths (multiple slashes)
        (re.compile(r'/[^/\s]+/[^\s]+'), '[PATH]'),
    ]

    # Message prefixes suppressed in customer mode
    SUPPRESS_PREFIXES = [
        '[timing]',
        '[avg]',
        '[score]',
        '[boot]',
        '[class]',
        'Adding new class',
        'Log file location:',
    ]

    def __init__(self, production_mode: bool, log_mode: str = 'customer'):
        """
        Initialize filter

        Args:
            production_mode: If True, sanitize paths regardless of log mode
            log_mode: 'customer', 'verbose', or 'debug'
        """
        super().__init__()
        self.production_mode = production_mode
        self.log_mode = log_mode

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Filter log records. Returns False to suppress, True to allow.
        """
        msg_str = str(record.getMessage())

        if self.log_mode == 'customer':
            if record.levelno < logging.INFO:
                return False

            # Suppress separator lines
            if msg_str.strip() and all(c == '=' for c in msg_str.strip()):
                return False

            for prefix in self.SUPPRESS_PREFIXES:
                if msg_str.startswith(prefix):
                    return False

        elif self.log_mode == 'verbose':
            if record.levelno < logging.DEBUG:
                return False

        if self.production_mode and isinstance(record.msg, str):
            sanitized = record.msg
            for pattern, replacement in self.PATTERNS:
                sanitized = pattern.sub(replacement, sanitized)
            record.msg = sanitized
            if not sanitized.strip():
                return False

        return True


class SizeRotatingCompositeHandler(logging.Handler):
    """
    A handler that delegates to an inner file handler and rolls over
    to a new file when the current file size reaches a threshold.

    - Creates files as: base.ext, base.ext.1, base.ext.2, ...
    - Does not delete on rotation (retention handled by cleanup_logs)
    """
    def __init__(self, base_path: Path, create_handler_fn, max_bytes: int):
        super().__init__()
        self.base_path = Path(base_path)
        self.create_handler_fn = create_handler_fn
        self.max_bytes = max_bytes
        self._index = 0
        self.current_path = self._compute_current_path()
        self.current_handler = self.create_handler_fn(self.current_path)
        self._stored_formatter = None

    def _compute_current_path(self) -> Path:
        if self._index == 0:
            return self.base_path
        return self.base_path.with_name(f"{self.base_path.name}.{self._index}")

    def _apply_stored_config(self):
        self.current_handler.setLevel(self.level)
        if self._stored_formatter is not None:
            self.current_handler.setFormatter(self._stored_formatter)
        for flt in self.filters:
            self.current_handler.addFilter(flt)

    def _maybe_rotate(self):
        current_size = self.current_path.stat().st_size if self.current_path.exists() else 0
        if current_size >= self.max_bytes:
            self.current_handler.close()
            self._index += 1
            self.current_path = self._compute_current_path()
            self.current_handler = self.create_handler_fn(self.current_path)
            self._apply_stored_config()

    def emit(self, record):
        try:
            self._maybe_rotate()
            self.current_handler.emit(record)
        except Exception:
            self.handleError(record)

    def setFormatter(self, fmt):
        self._stored_formatter = fmt
        self.current_handler.setFormatter(fmt)
        super().setFormatter(fmt)

    def setLevel(self, level):
        super().setLevel(level)
        self.current_handler.setLevel(level)

    def addFilter(self, filter):
        super().addFilter(filter)
        self.current_handler.addFilter(filter)

    def close(self):
        self.current_handler.close()
        super().close()


class _Fmt(logging.Formatter):
    """Console formatter with a short wall-clock stamp"""
    def format(self, record):
        record._when = time.strftime("%H:%M:%S", time.localtime())
        return super().format(record)


class _FileFmt(logging.Formatter):
    """File formatter with a full date stamp"""
    def format(self, record):
        record._when = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        return super().format(record)


def _format_for_mode(log_mode: str) -> str:
    if log_mode == 'customer':
        return "%(_when)s | %(message)s"
    if log_mode == 'verbose':
        return "%(_when)s | %(levelname)-7s | %(message)s"
    return "%(_when)s | %(levelname)-7s | %(name)-15s | %(funcName)-20s | %(message)s"


def _level_for_mode(log_mode: str) -> int:
    if log_mode == 'debug':
        return TRACE
    if log_mode == 'verbose':
        return logging.DEBUG
    return logging.INFO


def setup_logging(log_mode: str = 'customer', production_mode: bool = None,
                  log_to_file: bool = True) -> Optional[Path]:
    """
    Setup logging configuration with three modes

    Args:
        log_mode: 'customer' (clean logs), 'verbose' (developer), or 'debug' (ultra-detailed)
        production_mode: Override PRODUCTION_MODE (None = use config default)
        log_to_file: Also write a session log file under the user data directory

    Returns:
        Path of the session log file, or None when file logging is off or failed
    """
    global _CURRENT_LOG_MODE

    if production_mode is None:
        production_mode = PRODUCTION_MODE

    # In production mode, always use verbose mode for full logging
    _CURRENT_LOG_MODE = 'verbose' if production_mode else log_mode

    console_stream = sys.stdout if sys.stdout is not None else sys.stderr
    console_handler = logging.StreamHandler(console_stream)
    console_handler.setFormatter(_Fmt(_format_for_mode(_CURRENT_LOG_MODE)))
    console_handler.setLevel(_level_for_mode(_CURRENT_LOG_MODE))
    console_handler.addFilter(SanitizingFilter(production_mode, _CURRENT_LOG_MODE))

    file_handler = None
    log_file = None
    if log_to_file:
        try:
            from .paths import get_logs_dir
            timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
            log_file = get_logs_dir() / f"{APP_NAME.lower()}_{timestamp}.log"
            max_bytes = int(LOG_MAX_FILE_SIZE_MB_DEFAULT * 1024 * 1024)

            def _factory_plain(p: Path):
                return logging.FileHandler(p, encoding='utf-8')

            file_handler = SizeRotatingCompositeHandler(log_file, _factory_plain, max_bytes)
            file_handler.setFormatter(_FileFmt(_format_for_mode(_CURRENT_LOG_MODE)))
            file_handler.setLevel(_level_for_mode(_CURRENT_LOG_MODE))
            file_handler.addFilter(SanitizingFilter(production_mode, _CURRENT_LOG_MODE))
        except OSError as e:
            # If file logging fails, continue without it
            file_handler = None
            log_file = None
            print(f"Warning: Could not setup file logging: {e}", file=sys.stderr)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if not production_mode:
        root.addHandler(console_handler)
    if file_handler:
        root.addHandler(file_handler)

    # Root logger must be at TRACE to allow all handlers to receive all messages
    root.setLevel(TRACE)

    logger = logging.getLogger("startup")
    if _CURRENT_LOG_MODE == 'customer':
        logger.info(f"{APP_NAME} started")
    else:
        logger.info("=" * LOG_SEPARATOR_WIDTH)
        logger.info(f"{APP_NAME} - Starting... ({_CURRENT_LOG_MODE} mode)")
        logger.info("=" * LOG_SEPARATOR_WIDTH)
        if log_file is not None:
            logger.debug(f"Log file location: {log_file.absolute()}")

    # Keep third-party chatter out of the training logs
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)

    return log_file


def get_logger(name: str = "tracer") -> logging.Logger:
    """Get a logger instance"""
    return logging.getLogger(name)


def cleanup_logs():
    """
    Clean up old log files based on age.

    Deletes session logs older than LOG_MAX_AGE_S; no limit on count or size.
    """
    from .paths import get_user_data_dir
    logs_dir = get_user_data_dir() / "logs"
    if not logs_dir.exists():
        return

    now = time.time()
    for log_file in logs_dir.glob(LOG_FILE_PATTERN):
        try:
            if now - log_file.stat().st_mtime > LOG_MAX_AGE_S:
                log_file.unlink()
        except OSError as e:
            print(f"Warning: Failed to remove old log {log_file.name}: {e}", file=sys.stderr)


# ==================== Pretty Logging Helpers ====================

def log_section(logger: logging.Logger, title: str, icon: str = "📌", details: dict = None, mode: str = None):
    """
    Log a section with title and optional details

    Args:
        logger: Logger instance
        title: Main title text (will be uppercased in verbose/debug mode)
        icon: Emoji icon to use
        details: Optional dict of key-value pairs to display
        mode: 'customer' (simple), 'verbose' (detailed), or 'debug' (ultra-detailed).
              If None, uses current global log mode.

    Example:
        log_section(log, "Outliers removed", "🧹", {"Kept": 118, "Removed": 4})
    """
    if mode is None:
        mode = get_log_mode()

    if mode == 'customer':
        if details:
            detail_str = ", ".join(f"{k}: {v}" for k, v in details.items())
            logger.info(f"{icon} {title} ({detail_str})")
        else:
            logger.info(f"{icon} {title}")
    else:
        logger.info("=" * LOG_SEPARATOR_WIDTH)
        logger.info(f"{icon} {title.upper()}")
        if details:
            for key, value in details.items():
                logger.info(f"   📋 {key}: {value}")
        logger.info("=" * LOG_SEPARATOR_WIDTH)


def log_event(logger: logging.Logger, event: str, icon: str = "✓", details: dict = None):
    """
    Log a single event with optional details

    Example:
        log_event(log, "Model padded", "➕", {"Classes": 10, "Samples": 160})
    """
    logger.info(f"{icon} {event}")
    if details:
        for key, value in details.items():
            logger.info(f"   • {key}: {value}")


def log_success(logger: logging.Logger, message: str, icon: str = "✅"):
    """Log a success message"""
    logger.info(f"{icon} {message}")
