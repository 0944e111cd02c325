#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Training settings
Loads optional overrides of the training defaults from config.ini
"""

import configparser
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from config import (
    BOOT_LINE_WIDTH,
    BOOT_MIN_SCORE_DEFAULT,
    BOOT_SCALE_HEIGHT,
    CONFIG_SECTION,
    OUTLIER_MIN_FRACTION_DEFAULT,
    OUTLIER_MIN_SCORE_DEFAULT,
    RECOG_MAX_Y_SHIFT_DEFAULT,
    RECOG_MIN_NOPAD_DEFAULT,
    RECOG_THRESHOLD_DEFAULT,
)
from utils.logging import get_logger
from utils.paths import get_config_file_path

log = get_logger()


@dataclass
class TrainingSettings:
    """Parameters of a training run"""
    scale_w: int = 0
    scale_h: int = BOOT_SCALE_HEIGHT
    line_w: int = 0
    threshold: int = RECOG_THRESHOLD_DEFAULT
    max_y_shift: int = RECOG_MAX_Y_SHIFT_DEFAULT
    min_nopad: int = RECOG_MIN_NOPAD_DEFAULT
    outlier_min_score: float = OUTLIER_MIN_SCORE_DEFAULT
    outlier_min_fraction: float = OUTLIER_MIN_FRACTION_DEFAULT
    boot_min_score: float = BOOT_MIN_SCORE_DEFAULT
    boot_line_w: int = BOOT_LINE_WIDTH

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "TrainingSettings":
        """
        Load settings from the [Recognizer] section of config.ini.

        Missing files, sections or keys keep the defaults; unparsable
        values are logged and ignored.
        """
        settings = cls()
        config_path = Path(config_path) if config_path is not None else get_config_file_path()
        if not config_path.exists():
            log.debug("Config file not found, using default training settings")
            return settings

        config = configparser.ConfigParser()
        try:
            config.read(config_path, encoding='utf-8')
        except configparser.Error as e:
            log.warning(f"Failed to read config file: {e}")
            return settings

        if CONFIG_SECTION not in config:
            return settings

        section = config[CONFIG_SECTION]
        for f in fields(cls):
            if f.name not in section:
                continue
            try:
                if f.type in (int, 'int'):
                    value = section.getint(f.name)
                else:
                    value = section.getfloat(f.name)
            except ValueError as e:
                log.warning(f"Ignoring invalid value for {f.name}: {e}")
                continue
            setattr(settings, f.name, value)
            log.debug(f"Loaded {f.name} = {value} from config")
        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Write these settings to the [Recognizer] section of config.ini."""
        config_path = Path(config_path) if config_path is not None else get_config_file_path()
        config = configparser.ConfigParser()
        if config_path.exists():
            config.read(config_path, encoding='utf-8')
        if CONFIG_SECTION not in config:
            config.add_section(CONFIG_SECTION)
        for name, value in asdict(self).items():
            config.set(CONFIG_SECTION, name, str(value))

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w', encoding='utf-8') as f:
            config.write(f)
        log.debug(f"Saved training settings to config: {config_path}")
