"""
Pytest configuration and shared fixtures for the symbol recognizer tests.
"""

import logging
import sys
from pathlib import Path

import cv2
import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")

# Add project root to path so tests can import config, utils and symbol_recognition
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from symbol_recognition.boot_digits import BOOT_FONTS, DIGITS, render_digit  # noqa: E402
from symbol_recognition.samples import Sample  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    """Point the user data directory (logs, debug images, config) at a temp dir."""
    data_dir = tmp_path / "userdata"
    monkeypatch.setenv("SYMBOLRECOG_DATA_DIR", str(data_dir))
    return data_dir


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging() changes to the root logger after a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def make_bar(width: int = 4, height: int = 30, pad: int = 3) -> np.ndarray:
    """Bit image of a filled vertical bar surrounded by pad background pixels."""
    bit = np.zeros((height + 2 * pad, width + 2 * pad), dtype=np.uint8)
    bit[pad:pad + height, pad:pad + width] = 1
    return bit


def make_disk(diameter: int = 30) -> np.ndarray:
    """Bit image of a filled disk."""
    bit = np.zeros((diameter, diameter), dtype=np.uint8)
    r = diameter // 2
    cv2.circle(bit, (r, r), r - 1, 1, -1)
    return bit


def draw_row(pieces, gap: int = 12, margin: int = 10) -> np.ndarray:
    """
    Grayscale page (dark on white) with bit images placed left to right.

    All pieces are bottom-aligned on a common baseline.
    """
    height = max(p.shape[0] for p in pieces) + 2 * margin
    width = sum(p.shape[1] for p in pieces) + gap * (len(pieces) - 1) + 2 * margin
    page = np.full((height, width), 255, dtype=np.uint8)
    x = margin
    for p in pieces:
        h, w = p.shape
        y = height - margin - h
        page[y:y + h, x:x + w][p > 0] = 0
        x += w + gap
    return page


@pytest.fixture
def digit_samples():
    """Three labeled samples (one per font) of every digit."""
    return [Sample(render_digit(d, font, thickness), d)
            for font, thickness in BOOT_FONTS for d in DIGITS]


@pytest.fixture
def bar():
    return make_bar()
