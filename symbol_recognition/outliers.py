#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Outlier removal for labeled training sets.

Every sample is scored against the average template of its class in a
height-normalized scratch model. A sample is kept when its score reaches
a per-class threshold that combines a minimum score with a minimum
fraction of the class that must survive.
"""

import math
from typing import List, NamedTuple, Sequence, Tuple

from config import (
    OUTLIER_MATCH_TOLERANCE,
    OUTLIER_MIN_FRACTION_DEFAULT,
    OUTLIER_MIN_SCORE_DEFAULT,
    OUTLIER_SCALE_HEIGHT,
    RECOG_MAX_Y_SHIFT_DEFAULT,
    RECOG_THRESHOLD_DEFAULT,
)
from utils.logging import get_logger, log_section
from .bitmap import correlation_score
from .errors import EmptyClass
from .recognizer import RecognizerModel
from .samples import Sample

log = get_logger()


class OutlierResult(NamedTuple):
    """Samples kept, and (when collected) samples removed with their scores"""
    kept: List[Sample]
    removed: List[Sample]
    removed_scores: List[float]


def _clamp(value: float, default: float) -> float:
    value = min(value, 1.0)
    return default if value <= 0.0 else value


def rank_value(scores: Sequence[float], min_fraction: float) -> float:
    """
    Score at rank 1 - min_fraction of the scores in ascending order.

    This is the ceil(n * min_fraction)-th best score, so at least that
    many samples score at or above it.
    """
    ordered = sorted(scores)
    n = len(ordered)
    keep = max(1, math.ceil(n * min_fraction - 1e-9))
    index = min(max(n - keep, 0), n - 1)
    return ordered[index]


def select_by_score(scores: Sequence[float], min_score: float = OUTLIER_MIN_SCORE_DEFAULT,
                    min_fraction: float = OUTLIER_MIN_FRACTION_DEFAULT) -> Tuple[float, List[bool]]:
    """
    Per-class keep/remove decision.

    threshold = min(max_score, min(min_score, rank_score)), where rank_score
    is the score at rank 1 - min_fraction. Capping at the best score keeps
    at least one sample; the rank score relaxes the cutoff when the whole
    class scores poorly.

    Args:
        scores: Scores of the samples of one class
        min_score: Keep everything scoring at least this
        min_fraction: Minimum fraction of the class to keep

    Returns:
        Tuple of (threshold, keep_mask)

    Raises:
        EmptyClass: scores is empty
    """
    if not scores:
        raise EmptyClass("cannot select from an empty class")
    rank_score = rank_value(scores, min_fraction)
    threshold = min(max(scores), min(min_score, rank_score))
    return threshold, [score >= threshold for score in scores]


def score_class(model: RecognizerModel, index: int) -> List[float]:
    """Score every sample of a class against the class's modified average."""
    cls = model.classes[index]
    avg = cls.average_modified
    scores = []
    for sample in cls.samples:
        t = sample.modified
        scores.append(correlation_score(
            avg.image, t.image, avg.area, t.area,
            avg.centroid[0] - t.centroid[0], avg.centroid[1] - t.centroid[1],
            OUTLIER_MATCH_TOLERANCE, OUTLIER_MATCH_TOLERANCE))
    return scores


def remove_outliers(samples: Sequence[Sample], min_score: float = OUTLIER_MIN_SCORE_DEFAULT,
                    min_fraction: float = OUTLIER_MIN_FRACTION_DEFAULT,
                    collect_removed: bool = False, diagnostics=None) -> OutlierResult:
    """
    Remove samples that correlate poorly with their class average.

    Args:
        samples: Unscaled labeled samples
        min_score: Keep everything with at least this score (clamped to 1.0;
                   non-positive values use the default)
        min_fraction: Minimum fraction of each class to keep (same clamping)
        collect_removed: Also return the removed samples and their scores
        diagnostics: Optional DiagnosticsContext; receives the removed samples

    Returns:
        OutlierResult; kept samples are the unscaled originals

    Raises:
        EmptyClass: no samples, or none of them carries a label
    """
    min_score = _clamp(min_score, OUTLIER_MIN_SCORE_DEFAULT)
    min_fraction = _clamp(min_fraction, OUTLIER_MIN_FRACTION_DEFAULT)
    if not samples:
        raise EmptyClass("no samples to filter")

    # Scratch model, scaled to a fixed height, used only for scoring
    model = RecognizerModel.from_samples(
        samples, scale_w=0, scale_h=OUTLIER_SCALE_HEIGHT, line_w=0,
        threshold=RECOG_THRESHOLD_DEFAULT, max_y_shift=RECOG_MAX_Y_SHIFT_DEFAULT)
    model.average_samples()

    collect = collect_removed or diagnostics is not None
    kept: List[Sample] = []
    removed: List[Sample] = []
    removed_scores: List[float] = []

    for cls in model.classes:
        scores = score_class(model, cls.index)
        threshold, keep = select_by_score(scores, min_score, min_fraction)
        log.debug(f"[class] '{cls.label}': min_score = {min_score:.2f}, "
                  f"threshold = {threshold:.2f}, kept {sum(keep)}/{len(keep)}")
        for sample, score, ok in zip(cls.samples, scores, keep):
            original = Sample(sample.image.copy(), cls.label)
            if ok:
                kept.append(original)
            elif collect:
                removed.append(original)
                removed_scores.append(score)

    log_section(log, "Outliers removed", "🧹", {
        "Classes": model.setsize,
        "Kept": len(kept),
        "Removed": model.num_samples - len(kept),
    })

    if diagnostics is not None and removed:
        diagnostics.display_outliers(removed, removed_scores)

    if not collect_removed:
        removed, removed_scores = [], []
    return OutlierResult(kept, removed, removed_scores)
