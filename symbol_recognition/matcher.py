#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Matching module for trained recognizer models.

Correlates a symbol image against the modified templates of a finalized
model (or against its class averages) and reports the best class.
"""

import numpy as np
from typing import List, NamedTuple, Optional, Sequence, Tuple

from utils.logging import get_logger
from .bitmap import binarize, correlation_score, is_bit_image, tight_crop_to_foreground
from .samples import Template

log = get_logger()


class MatchResult(NamedTuple):
    """Best class for an input: index (-1 if none), score and label"""
    index: int
    score: float
    label: Optional[str]


NO_MATCH = MatchResult(-1, 0.0, None)


def _candidates(model) -> List[Tuple[int, Template]]:
    """(class_index, template) pairs the input is matched against."""
    if model.use_averages:
        model.average_samples()
        return [(cls.index, cls.average_modified) for cls in model.classes
                if not cls.average_modified.is_placeholder]
    return [(cls.index, s.modified) for cls in model.classes for s in cls.samples]


def score_against(template: Template, probe: Template, max_y_shift: int) -> float:
    """Correlation of probe against template, centroids aligned, y-jiggle allowed."""
    return correlation_score(template.image, probe.image, template.area, probe.area,
                             template.centroid[0] - probe.centroid[0],
                             template.centroid[1] - probe.centroid[1],
                             0, max_y_shift)


def identify(model, image: np.ndarray, modify: bool = True) -> MatchResult:
    """
    Identify a single symbol image with a trained model.

    Args:
        model: RecognizerModel (finalized first if still accumulating)
        image: Bit, grayscale or BGR image of one symbol
        modify: Apply the model's template modification to the input

    Returns:
        MatchResult of the best class; NO_MATCH if the model has no
        classes or the image has no foreground
    """
    if model.setsize == 0:
        log.warning("Cannot identify with a model that has no classes")
        return NO_MATCH

    if not model.training_finalized:
        model.training_finished()

    bit = image if is_bit_image(image) else binarize(image, model.threshold)
    bit = tight_crop_to_foreground(bit)
    if bit is None:
        log.debug("No foreground in image to identify")
        return NO_MATCH

    if modify:
        bit = model.modify_template(bit)
    probe = Template.from_image(bit)
    if probe.area == 0:
        return NO_MATCH

    best_index = -1
    best_score = 0.0
    for index, template in _candidates(model):
        score = score_against(template, probe, model.max_y_shift)
        if score > best_score:
            best_score = score
            best_index = index

    if best_index < 0:
        return NO_MATCH

    label = model.classes[best_index].label
    log.trace(f"[score] Identified '{label}' (class {best_index}, score {best_score:.3f})")
    return MatchResult(best_index, best_score, label)


def identify_all(model, images: Sequence[np.ndarray], modify: bool = True) -> List[MatchResult]:
    """Identify every image of a batch"""
    return [identify(model, image, modify=modify) for image in images]
