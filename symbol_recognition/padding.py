#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Class-balance padding with synthetic templates.

A model whose classes do not cover its charset, or whose classes hold
fewer than min_nopad samples, is rebuilt with synthetic templates added
for exactly the deficient labels. Only digits can be synthesized.
"""

from typing import List, Sequence, Tuple

from utils.logging import get_logger, log_event
from .boot_digits import DIGITS, make_boot_digit_templates
from .errors import CharsetUnavailable
from .recognizer import RecognizerModel
from .samples import CharsetType, Sample

log = get_logger()


def charset_available(charset_type: CharsetType) -> bool:
    """True if synthetic templates exist for the charset"""
    if charset_type == CharsetType.ARABIC_NUMERALS:
        return True
    try:
        known = CharsetType(charset_type) != CharsetType.UNKNOWN
    except ValueError:
        known = False
    if known:
        log.info(f"Charset type {CharsetType(charset_type).name} not available")
    else:
        log.info(f"Charset type {charset_type} is unknown")
    return False


def missing_class_labels(model: RecognizerModel) -> List[str]:
    """Digit labels of the charset that have no class in the model."""
    if model.charset_type != CharsetType.ARABIC_NUMERALS or model.setsize == model.charset_size:
        return []
    present = set(model.labels)
    return [d for d in DIGITS[:model.charset_size] if d not in present]


def is_padding_needed(model: RecognizerModel) -> Tuple[bool, List[str]]:
    """
    Whether the model needs padding, and the labels to pad.

    Padding is needed when the model has fewer classes than its charset
    or some class holds fewer than min_nopad unscaled samples.

    Returns:
        Tuple of (needed, labels). labels lists the missing charset labels
        first, then every present class under the floor. It can be empty
        while needed is True when the missing labels of a charset cannot
        be named.
    """
    counts = model.class_counts()
    classes_missing = model.setsize < model.charset_size
    min_count = min(counts) if counts else 0
    if not classes_missing and min_count >= model.min_nopad:
        return False, []

    deficient = missing_class_labels(model)
    deficient.extend(cls.label for cls in model.classes if cls.count < model.min_nopad)
    return True, deficient


def add_digit_pad_templates(model: RecognizerModel, labels: Sequence[str]) -> List[Sample]:
    """
    The model's unscaled samples plus synthetic digits for the given labels.

    Raises:
        CharsetUnavailable: the model's charset cannot be synthesized
    """
    if not charset_available(model.charset_type):
        raise CharsetUnavailable(f"no synthetic templates for charset {model.charset_type!r}")

    wanted = set(labels)
    merged = model.extract_samples()
    merged.extend(t for t in make_boot_digit_templates() if t.label in wanted)
    return merged


def pad_if_needed(model: RecognizerModel, scale_h: int, line_w: int) -> RecognizerModel:
    """
    Pad sparse or missing digit classes.

    Args:
        model: Trained model
        scale_h: Template height of the rebuilt model
        line_w: Stroke width of the rebuilt model

    Returns:
        model itself when nothing is deficient, otherwise a new finalized
        model built from the merged sample set

    Raises:
        CharsetUnavailable: padding is needed but the charset cannot be
                            synthesized; model is left untouched
    """
    needed, labels = is_padding_needed(model)
    if not needed:
        return model

    merged = add_digit_pad_templates(model, labels)
    padded = RecognizerModel.from_samples(
        merged, scale_w=0, scale_h=scale_h, line_w=line_w,
        threshold=model.threshold, max_y_shift=model.max_y_shift,
        charset_type=model.charset_type, charset_size=model.charset_size,
        min_nopad=model.min_nopad, use_averages=model.use_averages)

    log_event(log, "Model padded", "➕", {
        "Deficient labels": ", ".join(labels),
        "Classes": padded.setsize,
        "Samples": padded.num_samples,
    })
    return padded
