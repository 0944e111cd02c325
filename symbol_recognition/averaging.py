#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Average template synthesis.

Builds one average template per class, for both the unscaled and the
modified sample variants, by summing centroid-aligned samples and
thresholding the sum at half the sample count.
"""

import time
from typing import List, NamedTuple, Sequence, Tuple

import numpy as np

from config import (
    RECOG_MAX_AVERAGE_SAMPLES,
    SPLIT_MIN_DIMENSION,
    SPLIT_MIN_TEMPLATE_SIZE,
    SPLIT_SIZE_MARGIN,
    SPLIT_SKEW_MARGIN,
)
from utils.logging import get_logger
from .bitmap import translate
from .errors import EmptyClass
from .samples import Template

log = get_logger()


class SplitBounds(NamedTuple):
    """Size range of the average templates and the derived splitting bounds"""
    min_width_u: int
    min_height_u: int
    max_width_u: int
    max_height_u: int
    min_width: int
    max_width: int
    min_split_w: int
    min_split_h: int
    max_split_h: int


def accumulate_samples(templates: Sequence[Template]) -> Tuple[np.ndarray, Tuple[float, float]]:
    """
    Sum centroid-aligned samples.

    Every sample is translated so that its centroid lands on the average
    centroid (integer offset, truncated toward zero) and added into an
    int32 canvas as large as the largest sample. Only the first
    RECOG_MAX_AVERAGE_SAMPLES templates are used.

    Args:
        templates: Templates of one class

    Returns:
        Tuple of (sum_image, (x_average, y_average))

    Raises:
        EmptyClass: templates is empty
    """
    templates = list(templates[:RECOG_MAX_AVERAGE_SAMPLES])
    n = len(templates)
    if n == 0:
        raise EmptyClass("cannot accumulate an empty set of samples")

    x_ave = sum(t.centroid[0] for t in templates) / n
    y_ave = sum(t.centroid[1] for t in templates) / n

    max_w = max(t.width for t in templates)
    max_h = max(t.height for t in templates)
    total = np.zeros((max_h, max_w), dtype=np.int32)

    for t in templates:
        dx = int(x_ave - t.centroid[0])
        dy = int(y_ave - t.centroid[1])
        total += translate(t.image, dx, dy, (max_h, max_w))

    return total, (x_ave, y_ave)


def average_templates(templates: Sequence[Template]) -> Template:
    """
    Average template of a class.

    A class without samples yields the 1x1 placeholder. Otherwise the
    accumulated sum is thresholded at max(1, n // 2), where a single
    sample counts as two so that it passes through unchanged.
    """
    n = min(len(templates), RECOG_MAX_AVERAGE_SAMPLES)
    if n == 0:
        return Template.placeholder()

    total, _ = accumulate_samples(templates)
    divisor = 2 if n == 1 else n
    threshold = max(1, divisor // 2)
    average = (total >= threshold).astype(np.uint8)
    return Template.from_image(average)


def _size_range(templates: Sequence[Template]) -> Tuple[int, int, int, int]:
    """(min_w, min_h, max_w, max_h) over templates at least 5x5; zeros if none."""
    selected = [t for t in templates
                if t.width >= SPLIT_MIN_TEMPLATE_SIZE and t.height >= SPLIT_MIN_TEMPLATE_SIZE]
    if not selected:
        return 0, 0, 0, 0
    widths = [t.width for t in selected]
    heights = [t.height for t in selected]
    return min(widths), min(heights), max(widths), max(heights)


def compute_split_bounds(unscaled: Sequence[Template], modified: Sequence[Template]) -> SplitBounds:
    """Size range of the averages and the splitting bounds derived from it."""
    min_w_u, min_h_u, max_w_u, max_h_u = _size_range(unscaled)
    min_w, _, max_w, _ = _size_range(modified)
    return SplitBounds(
        min_width_u=min_w_u,
        min_height_u=min_h_u,
        max_width_u=max_w_u,
        max_height_u=max_h_u,
        min_width=min_w,
        max_width=max_w,
        min_split_w=max(SPLIT_MIN_DIMENSION, min_w_u - SPLIT_SIZE_MARGIN),
        min_split_h=max(SPLIT_MIN_DIMENSION, min_h_u - SPLIT_SIZE_MARGIN),
        max_split_h=max_h_u + SPLIT_SKEW_MARGIN,
    )


def compute_averages(model, force: bool = False, diagnostics=None) -> None:
    """
    Compute and cache the average templates of every class of a model.

    Does nothing when the averages are already computed, unless forced.
    The model is finalized first if it is still accumulating samples.

    Args:
        model: RecognizerModel
        force: Recompute even if the averages are cached
        diagnostics: Optional DiagnosticsContext that receives the averages

    Raises:
        EmptyClass: the model has no classes
    """
    if model.averages_computed and not force:
        if diagnostics is not None:
            diagnostics.show_average_templates(model)
        return

    if model.setsize == 0:
        raise EmptyClass("cannot compute averages of a model with no classes")

    if not model.training_finalized:
        model.training_finished()

    start = time.perf_counter()
    unscaled: List[Template] = []
    modified: List[Template] = []
    for cls in model.classes:
        cls.average_unscaled = average_templates([s.unscaled for s in cls.samples])
        cls.average_modified = average_templates([s.modified for s in cls.samples])
        unscaled.append(cls.average_unscaled)
        modified.append(cls.average_modified)
        log.trace(f"[avg] class {cls.index} '{cls.label}': {cls.count} samples, "
                  f"unscaled {cls.average_unscaled.width}x{cls.average_unscaled.height}, "
                  f"modified {cls.average_modified.width}x{cls.average_modified.height}")

    model.split_bounds = compute_split_bounds(unscaled, modified)
    model.averages_computed = True

    elapsed = (time.perf_counter() - start) * 1000
    log.debug(f"[timing] Averages for {model.setsize} classes: {elapsed:.2f}ms")

    if diagnostics is not None:
        diagnostics.show_average_templates(model)
