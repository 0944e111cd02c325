#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Synthetic digit templates.

Digits 0-9 are rendered in three OpenCV Hershey font styles and extended
by horizontal scaling. They seed the bootstrap digit recognizer and pad
sparse digit classes.
"""

import cv2
import numpy as np
from typing import List

from config import (
    BOOT_CANVAS_SIZE,
    BOOT_FONT_SCALE,
    BOOT_FONT_THICKNESS,
    BOOT_LINE_WIDTH,
    BOOT_SCALE_HEIGHT,
    BOOT_WIDTH_SCALE_FACTORS,
    RECOG_MAX_Y_SHIFT_DEFAULT,
    RECOG_THRESHOLD_DEFAULT,
)
from utils.logging import get_logger
from .bitmap import scale_to_size, tight_crop_to_foreground
from .recognizer import RecognizerModel
from .samples import CharsetType, Sample

log = get_logger()

# (font face, stroke thickness); DUPLEX and COMPLEX share their digit glyphs,
# so every entry must differ from the others in face or thickness
BOOT_FONTS = (
    (cv2.FONT_HERSHEY_SIMPLEX, BOOT_FONT_THICKNESS),
    (cv2.FONT_HERSHEY_DUPLEX, BOOT_FONT_THICKNESS),
    (cv2.FONT_HERSHEY_TRIPLEX, BOOT_FONT_THICKNESS + 1),
)

DIGITS = "0123456789"


def render_digit(digit: str, font: int, thickness: int = BOOT_FONT_THICKNESS) -> np.ndarray:
    """Render one digit as a tight-cropped bit image."""
    canvas = np.zeros((BOOT_CANVAS_SIZE, BOOT_CANVAS_SIZE), dtype=np.uint8)
    (text_w, text_h), baseline = cv2.getTextSize(digit, font, BOOT_FONT_SCALE, thickness)
    origin = ((BOOT_CANVAS_SIZE - text_w) // 2, (BOOT_CANVAS_SIZE + text_h) // 2)
    cv2.putText(canvas, digit, origin, font, BOOT_FONT_SCALE, 1,
                thickness, cv2.LINE_8)
    cropped = tight_crop_to_foreground(canvas)
    if cropped is None:
        raise RuntimeError(f"rendering digit '{digit}' produced no pixels")
    return cropped


def extend_by_scaling(samples: List[Sample], factors=BOOT_WIDTH_SCALE_FACTORS) -> List[Sample]:
    """Originals followed by one horizontally scaled copy per factor."""
    extended = list(samples)
    for factor in factors:
        for sample in samples:
            height, width = sample.image.shape
            new_w = max(1, int(round(width * factor)))
            extended.append(Sample(scale_to_size(sample.image, new_w, height), sample.label))
    return extended


def make_boot_digit_templates() -> List[Sample]:
    """
    Labeled synthetic digit samples.

    Returns:
        120 samples: 10 digits x 3 fonts, plus three width-scaled copies
    """
    base = [Sample(render_digit(d, font, thickness), d)
            for font, thickness in BOOT_FONTS for d in DIGITS]
    templates = extend_by_scaling(base)
    log.debug(f"[boot] Made {len(templates)} synthetic digit templates")
    return templates


def make_boot_digit_recog(scale_h: int = BOOT_SCALE_HEIGHT, line_w: int = BOOT_LINE_WIDTH,
                          max_y_shift: int = RECOG_MAX_Y_SHIFT_DEFAULT) -> RecognizerModel:
    """
    Finalized digit recognizer built from the synthetic templates.

    The templates are scaled to scale_h and, if line_w > 0, redrawn with
    strokes of that width when training finishes.
    """
    return RecognizerModel.from_samples(
        make_boot_digit_templates(),
        scale_w=0, scale_h=scale_h, line_w=line_w,
        threshold=RECOG_THRESHOLD_DEFAULT, max_y_shift=max_y_shift,
        charset_type=CharsetType.ARABIC_NUMERALS)
