#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Ingestion of labeled images into a recognizer model.

An image holds either one symbol (single mode) or a row of contiguous
symbols with one label character each (multi mode).
"""

import numpy as np
from typing import List, Optional

from config import (
    CONNECTIVITY,
    MULTI_CLOSING_HEIGHT,
    MULTI_MIN_REGION_HEIGHT,
    MULTI_MIN_REGION_WIDTH,
    RECOG_THRESHOLD_DEFAULT,
)
from utils.logging import get_logger
from .bitmap import (
    Box,
    binarize,
    connected_components,
    crop,
    filter_by_size,
    merge_overlapping,
    morphological_close,
    sort_left_to_right,
    tight_crop_to_foreground,
)
from .errors import EmptyRegion, NoLabel, RecognitionError, SegmentationMismatch, TrainingFinalized
from .samples import Sample, label_to_key

log = get_logger()


def _resolve_text(image, text: Optional[str]) -> Optional[str]:
    """Explicit text wins; otherwise the label embedded in a Sample."""
    if text:
        return text
    embedded = getattr(image, 'label', None)
    return embedded or None


def _pixels(image) -> np.ndarray:
    return image.image if isinstance(image, Sample) else image


def _crop_and_binarize(image: np.ndarray, box: Optional[Box], threshold: int) -> np.ndarray:
    region = crop(image, box) if box is not None else image
    return binarize(region, threshold)


def process_single_labeled(image, box: Optional[Box] = None, text: Optional[str] = None,
                           threshold: int = RECOG_THRESHOLD_DEFAULT) -> List[Sample]:
    """
    Turn an image of one symbol into a labeled sample.

    Args:
        image: Bit/grayscale/BGR array, or a Sample carrying its own label
        box: Optional region of the image holding the symbol
        text: Label (overrides the label embedded in a Sample)
        threshold: Binarization threshold for non-bit inputs

    Returns:
        One-element list with the tight-cropped, labeled sample

    Raises:
        NoLabel: no text given and none embedded
        EmptyRegion: nothing left after cropping
    """
    label = _resolve_text(image, text)
    if not label:
        raise NoLabel("no text for single-symbol image")

    bit = _crop_and_binarize(_pixels(image), box, threshold)
    cropped = tight_crop_to_foreground(bit)
    if cropped is None:
        raise EmptyRegion(f"no foreground in region for label '{label}'")
    return [Sample(cropped, label)]


def find_symbol_boxes(bit: np.ndarray) -> List[Box]:
    """
    Locate the symbols of a row of contiguous symbols.

    A tall vertical closing consolidates the pieces of each symbol (it
    never opens, so touching symbols are not split); overlapping
    components are merged and small ones dropped.
    """
    closed = morphological_close(bit, MULTI_CLOSING_HEIGHT)
    boxes = connected_components(closed, CONNECTIVITY)
    boxes = merge_overlapping(boxes)
    boxes = filter_by_size(boxes, MULTI_MIN_REGION_WIDTH, MULTI_MIN_REGION_HEIGHT)
    return sort_left_to_right(boxes)


def process_multi_labeled(image, box: Optional[Box] = None, text: Optional[str] = None,
                          threshold: int = RECOG_THRESHOLD_DEFAULT,
                          diagnostics=None) -> List[Sample]:
    """
    Turn an image of several contiguous symbols into labeled samples.

    Args:
        image: Bit/grayscale/BGR array, or a Sample carrying its own label
        box: Optional region of the image holding the symbols
        text: One label character per symbol, left to right
        threshold: Binarization threshold for non-bit inputs
        diagnostics: Optional DiagnosticsContext; receives a rendering of
                     the detected regions on a count mismatch

    Returns:
        List of samples, one per label character

    Raises:
        NoLabel: no text given and none embedded
        SegmentationMismatch: region count differs from the text length
    """
    label = _resolve_text(image, text)
    if not label:
        raise NoLabel("no text for multi-symbol image")

    bit = _crop_and_binarize(_pixels(image), box, threshold)
    boxes = find_symbol_boxes(bit)

    if len(boxes) != len(label):
        log.error(f"Found {len(boxes)} symbol regions for text '{label}' ({len(label)} chars)")
        if diagnostics is not None:
            diagnostics.render_boxes(bit, boxes, name=f"mismatch_{label}")
        raise SegmentationMismatch(len(label), len(boxes))

    return [Sample(crop(bit, region), char) for region, char in zip(boxes, label)]


def train_labeled(model, image, box: Optional[Box] = None, text: Optional[str] = None,
                  multi: bool = False, diagnostics=None) -> int:
    """
    Ingest one labeled image into a model.

    Nothing is stored when processing fails; the model stays usable.

    Returns:
        Number of samples added

    Raises:
        RecognitionError: processing or storing failed
    """
    if not model.samples_accumulating:
        raise TrainingFinalized("training is finished; no more samples can be added")

    try:
        if multi:
            samples = process_multi_labeled(image, box, text, model.threshold, diagnostics)
        else:
            samples = process_single_labeled(image, box, text, model.threshold)
        for sample in samples:
            label_to_key(sample.label)
    except RecognitionError as e:
        log.warning(f"Failed to ingest labeled image (sample {model.num_samples}): {e}")
        raise

    for sample in samples:
        model.add_sample(sample)
    return len(samples)
