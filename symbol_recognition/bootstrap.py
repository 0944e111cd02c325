#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Bootstrap labeling of unlabeled samples with a trained recognizer.
"""

import numpy as np
from typing import List, Sequence, Union

from config import BOOT_MIN_SCORE_DEFAULT, RECOG_THRESHOLD_DEFAULT
from utils.logging import get_logger, log_event
from .bitmap import binarize, normalize_stroke_width, scale_to_size, tight_crop_to_foreground
from .matcher import identify
from .samples import Sample

log = get_logger()


def _as_bit_image(item: Union[Sample, np.ndarray], threshold: int) -> np.ndarray:
    image = item.image if isinstance(item, Sample) else item
    return binarize(image, threshold)


def prepare_for_boot(boot_model, bit: np.ndarray) -> np.ndarray:
    """
    Bring a bit image to the boot model's template convention.

    Scales to the model's height (width free) and redraws strokes at its
    line width; correlation scores are only meaningful when both match.
    """
    cropped = tight_crop_to_foreground(bit)
    if cropped is None:
        return bit
    scaled = scale_to_size(cropped, 0, boot_model.scale_h) if boot_model.scale_h > 0 else cropped
    if boot_model.line_w > 0:
        scaled = normalize_stroke_width(scaled, boot_model.line_w)
    return scaled


def train_from_boot(boot_model, samples: Sequence[Union[Sample, np.ndarray]],
                    min_score: float = BOOT_MIN_SCORE_DEFAULT,
                    threshold: int = RECOG_THRESHOLD_DEFAULT,
                    diagnostics=None) -> List[Sample]:
    """
    Label samples with a finalized bootstrap recognizer.

    Args:
        boot_model: Trained RecognizerModel used for identification
        samples: Unlabeled Samples or raw images (any existing label is ignored)
        min_score: Minimum match score to accept a label
        threshold: Binarization threshold for non-bit inputs
        diagnostics: Optional DiagnosticsContext; receives every match

    Returns:
        Accepted samples: the binarized, unscaled inputs carrying the
        winning label
    """
    if not samples:
        log.warning("No samples given to the bootstrap labeler")
        return []

    labeled: List[Sample] = []
    for i, item in enumerate(samples):
        original = _as_bit_image(item, threshold)
        probe = prepare_for_boot(boot_model, original)
        result = identify(boot_model, probe, modify=False)

        accepted = result.index >= 0 and result.score >= min_score
        if diagnostics is not None:
            diagnostics.show_match(probe, result, accepted=accepted)
        if accepted:
            labeled.append(Sample(original, result.label))
            log.trace(f"[boot] sample {i}: '{result.label}' ({result.score:.3f})")
        else:
            log.trace(f"[boot] sample {i}: rejected ({result.score:.3f})")

    if diagnostics is not None:
        diagnostics.flush_matches("boot_matches")

    log_event(log, "Bootstrap labeling finished", "🏷️", {
        "Input": len(samples),
        "Labeled": len(labeled),
        "Min score": f"{min_score:.2f}",
    })
    return labeled
