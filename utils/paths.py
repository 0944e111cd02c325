#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Path utilities for the symbol recognizer trainer
Handles user data directories for logs, debug images and configuration
"""

import os
from pathlib import Path

from config import APP_NAME, CONFIG_FILE_NAME, DEBUG_DIR_NAME


def get_user_data_dir() -> Path:
    """
    Get the user data directory where the application can write files.
    This ensures proper permissions regardless of where the app is installed.
    """
    override = os.environ.get("SYMBOLRECOG_DATA_DIR")
    if override:
        return Path(override)

    if os.name == "nt":  # Windows
        localappdata = os.environ.get("LOCALAPPDATA")
        if localappdata:
            return Path(localappdata) / APP_NAME
        userprofile = os.environ.get("USERPROFILE")
        if userprofile:
            return Path(userprofile) / "AppData" / "Local" / APP_NAME
        return Path.cwd() / APP_NAME
    else:  # Linux/macOS
        xdg_data_home = os.environ.get("XDG_DATA_HOME")
        if xdg_data_home:
            return Path(xdg_data_home) / APP_NAME
        return Path.home() / ".local" / "share" / APP_NAME


def get_logs_dir() -> Path:
    """
    Get the logs directory path.
    Creates the directory if it doesn't exist.
    """
    logs_dir = get_user_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def get_debug_dir() -> Path:
    """
    Get the directory where diagnostic images are written.
    Creates the directory if it doesn't exist.
    """
    debug_dir = get_user_data_dir() / DEBUG_DIR_NAME
    debug_dir.mkdir(parents=True, exist_ok=True)
    return debug_dir


def get_config_file_path() -> Path:
    """Get the path to the user's config.ini (may not exist yet)"""
    return get_user_data_dir() / CONFIG_FILE_NAME
