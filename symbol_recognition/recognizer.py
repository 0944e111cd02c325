#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Recognizer model: the sample store of the training engine.

Samples are classified into labeled classes (dense indices in order of
first appearance) while the model is accumulating. Finishing training
derives the modified (matching) templates; averages are computed on
demand and cached.
"""

import time
import numpy as np
from typing import Dict, Iterable, List, Optional

from config import (
    RECOG_MAX_ARRAY_SIZE,
    RECOG_MAX_Y_SHIFT_DEFAULT,
    RECOG_MIN_NOPAD_DEFAULT,
    RECOG_THRESHOLD_DEFAULT,
)
from utils.logging import get_logger
from .averaging import SplitBounds, compute_averages
from .bitmap import normalize_stroke_width, scale_to_size
from .errors import ClassLimitExceeded, InvalidLabelConversion, NoLabel, TrainingFinalized
from .samples import CHARSET_SIZES, CharsetType, Sample, SymbolClass, Template, label_to_key

log = get_logger()


class RecognizerModel:
    """Template-based symbol classifier under training."""

    def __init__(self, scale_w: int = 0, scale_h: int = 0, line_w: int = 0,
                 threshold: int = RECOG_THRESHOLD_DEFAULT,
                 max_y_shift: int = RECOG_MAX_Y_SHIFT_DEFAULT,
                 charset_type: CharsetType = CharsetType.UNKNOWN,
                 charset_size: Optional[int] = None,
                 min_nopad: int = RECOG_MIN_NOPAD_DEFAULT,
                 use_averages: bool = False):
        """
        Create an empty model that accepts samples.

        Args:
            scale_w: Width templates are scaled to (0 = no width scaling)
            scale_h: Height templates are scaled to (0 = no height scaling)
            line_w: Stroke width of the modified templates (0 = keep image strokes)
            threshold: Binarization threshold for non-bit inputs
            max_y_shift: Centroid y-jiggle allowed when matching
            charset_type: Character set the model is expected to cover
            charset_size: Number of classes expected (default from charset_type)
            min_nopad: Minimum samples per class before padding is needed
            use_averages: Match against class averages instead of every sample
        """
        if scale_w < 0 or scale_h < 0 or line_w < 0:
            raise ValueError("scale_w, scale_h and line_w must be >= 0")
        if not 0 <= threshold <= 255:
            raise ValueError(f"threshold must be in [0, 255], got {threshold}")
        if max_y_shift < 0:
            raise ValueError("max_y_shift must be >= 0")

        self.scale_w = scale_w
        self.scale_h = scale_h
        self.line_w = line_w
        self.threshold = threshold
        self.max_y_shift = max_y_shift
        self.charset_type = CharsetType(charset_type)
        self.charset_size = (CHARSET_SIZES[self.charset_type]
                             if charset_size is None else charset_size)
        self.min_nopad = min_nopad
        self.use_averages = use_averages

        self.classes: List[SymbolClass] = []
        self._key_to_index: Dict[int, int] = {}
        self.num_samples = 0
        self.split_bounds: Optional[SplitBounds] = None

        # Lifecycle
        self.samples_accumulating = True
        self.averages_computed = False
        self.training_finalized = False

    @classmethod
    def from_samples(cls, samples: Iterable[Sample], modify: bool = True,
                     **config) -> "RecognizerModel":
        """
        Build a finalized model from labeled samples.

        Args:
            samples: Labeled samples; unlabeled ones are logged and skipped
            modify: Derive scaled/stroke-normalized templates when finishing
            **config: Keyword arguments for the constructor

        Returns:
            Finalized RecognizerModel
        """
        model = cls(**config)
        model.add_samples(samples)
        model.training_finished(modify=modify)
        return model

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def setsize(self) -> int:
        """Number of classes"""
        return len(self.classes)

    @property
    def labels(self) -> List[str]:
        return [c.label for c in self.classes]

    def class_counts(self) -> List[int]:
        """Number of unscaled samples in each class, in index order"""
        return [c.count for c in self.classes]

    def index_of(self, label: str) -> Optional[int]:
        """Class index of label, or None if the label has no class."""
        try:
            return self._key_to_index.get(label_to_key(label))
        except InvalidLabelConversion:
            return None

    def label_of(self, index: int) -> str:
        return self.classes[index].label

    # ------------------------------------------------------------------
    # Sample ingestion
    # ------------------------------------------------------------------

    def add_sample(self, sample: Sample, label: Optional[str] = None,
                   class_index: Optional[int] = None) -> int:
        """
        Store one sample.

        Args:
            sample: Sample to store (its unscaled variant is kept)
            label: Label overriding the sample's own label
            class_index: Store into this existing class, ignoring any label

        Returns:
            Index of the class the sample was stored in

        Raises:
            TrainingFinalized: the model no longer accepts samples
            NoLabel: no label given and the sample carries none
            InvalidLabelConversion: the label cannot be mapped to a class key
            IndexError: class_index does not name an existing class
            ClassLimitExceeded: a new class would exceed RECOG_MAX_ARRAY_SIZE classes
        """
        if not self.samples_accumulating:
            raise TrainingFinalized("training is finished; no more samples can be added")

        if class_index is not None:
            if not 0 <= class_index < len(self.classes):
                raise IndexError(f"class index {class_index} out of range "
                                 f"(model has {len(self.classes)} classes)")
            target = self.classes[class_index]
            target.samples.append(Sample(sample.image, target.label))
            self.num_samples += 1
            return class_index

        text = label if label else sample.label
        if not text:
            raise NoLabel(f"sample {self.num_samples} has no label")

        key = label_to_key(text)
        index = self._key_to_index.get(key)
        if index is None:
            if len(self.classes) >= RECOG_MAX_ARRAY_SIZE:
                raise ClassLimitExceeded(f"cannot hold more than {RECOG_MAX_ARRAY_SIZE} classes")
            index = len(self.classes)
            self.classes.append(SymbolClass(index=index, label=text, key=key))
            self._key_to_index[key] = index
            log.debug(f"Adding new class '{text}' with index {index}")

        stored = sample if sample.label == text else Sample(sample.image, text)
        self.classes[index].samples.append(stored)
        self.num_samples += 1
        return index

    def add_samples(self, samples: Iterable[Sample], class_index: Optional[int] = None) -> int:
        """
        Store several samples, skipping those that cannot be labeled.

        Returns:
            Number of samples stored

        Raises:
            TrainingFinalized: the model no longer accepts samples
        """
        stored = 0
        for i, sample in enumerate(samples):
            try:
                self.add_sample(sample, class_index=class_index)
                stored += 1
            except (NoLabel, InvalidLabelConversion, ClassLimitExceeded) as e:
                log.warning(f"Skipping sample {i}: {e}")
        return stored

    # ------------------------------------------------------------------
    # Finalization and averages
    # ------------------------------------------------------------------

    def modify_template(self, image: np.ndarray) -> np.ndarray:
        """
        Apply the model's template convention to a bit image.

        Scales to (scale_w, scale_h) unless the image already has that size
        (0 meaning "any"), then redraws the strokes at line_w if line_w > 0.
        """
        height, width = image.shape[:2]
        if ((self.scale_w == 0 or self.scale_w == width) and
                (self.scale_h == 0 or self.scale_h == height)):
            scaled = image.copy()
        else:
            scaled = scale_to_size(image, self.scale_w, self.scale_h)

        if self.line_w <= 0:
            return scaled
        return normalize_stroke_width(scaled, self.line_w)

    def training_finished(self, modify: bool = True) -> None:
        """
        Stop accumulating samples and derive the modified templates.

        Args:
            modify: If False the modified template of every sample is its
                    unscaled template
        """
        if self.training_finalized:
            return

        start = time.perf_counter()
        for cls in self.classes:
            for sample in cls.samples:
                if modify:
                    sample.modified = Template.from_image(self.modify_template(sample.image))
                else:
                    sample.modified = sample.unscaled

        # Truncate to the populated class prefix
        while self.classes and not self.classes[-1].samples:
            dropped = self.classes.pop()
            del self._key_to_index[dropped.key]

        self.samples_accumulating = False
        self.training_finalized = True
        self.averages_computed = False

        elapsed = (time.perf_counter() - start) * 1000
        log.debug(f"[timing] Training finished: {self.setsize} classes, "
                  f"{self.num_samples} samples in {elapsed:.2f}ms")

    def average_samples(self, force: bool = False, diagnostics=None) -> None:
        """Compute the per-class average templates (cached)."""
        compute_averages(self, force=force, diagnostics=diagnostics)

    def extract_samples(self) -> List[Sample]:
        """Labeled copies of every unscaled sample, in class order."""
        return [Sample(s.image.copy(), cls.label)
                for cls in self.classes for s in cls.samples]

    def __repr__(self):
        return (f"RecognizerModel(classes={self.setsize}, samples={self.num_samples}, "
                f"scale=({self.scale_w}, {self.scale_h}), line_w={self.line_w}, "
                f"finalized={self.training_finalized})")
