#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utils Package - Utility functions and helpers

- paths: user data, log, debug and config locations
- logging: logging setup, TRACE level and pretty helpers
"""

# Import paths first (depends only on config constants)
from utils.paths import (
    get_user_data_dir, get_logs_dir, get_debug_dir, get_config_file_path
)

# Lazy imports for the logging helpers
# These will be imported on first access via __getattr__
def __getattr__(name):
    """Lazy import for the logging helpers"""
    if name in {
        'get_logger', 'setup_logging', 'log_section', 'log_success',
        'get_log_mode', 'log_event', 'cleanup_logs'
    }:
        from utils.logging import (
            get_logger, setup_logging, log_section, log_success,
            get_log_mode, log_event, cleanup_logs
        )
        return locals()[name]

    raise AttributeError(f"module 'utils' has no attribute '{name}'")

__all__ = [
    # Paths (eagerly imported)
    'get_user_data_dir', 'get_logs_dir', 'get_debug_dir', 'get_config_file_path',
    # Logging (lazy)
    'get_logger', 'setup_logging', 'log_section', 'log_success',
    'get_log_mode', 'log_event', 'cleanup_logs',
]
