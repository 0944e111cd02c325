#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sample records for the recognizer model.

A Sample carries both of its template variants: the unscaled one (as
ingested, authoritative for segmentation) and the modified one (scaled
and/or stroke-normalized, used for matching) that is derived when
training is finished. Keeping both on one record means the two variants
can never get out of step.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Tuple

import numpy as np

from config import RECOG_MAX_LABEL_BYTES
from .bitmap import centroid_and_area, is_bit_image
from .errors import InvalidLabelConversion


class CharsetType(IntEnum):
    """Character sets known to the padder"""
    UNKNOWN = 0
    ARABIC_NUMERALS = 1
    LC_ROMAN_NUMERALS = 2
    UC_ROMAN_NUMERALS = 3
    LC_ALPHA = 4
    UC_ALPHA = 5


CHARSET_SIZES = {
    CharsetType.UNKNOWN: 0,
    CharsetType.ARABIC_NUMERALS: 10,
    CharsetType.LC_ROMAN_NUMERALS: 7,   # i v x l c d m
    CharsetType.UC_ROMAN_NUMERALS: 7,   # I V X L C D M
    CharsetType.LC_ALPHA: 26,
    CharsetType.UC_ALPHA: 26,
}


def label_to_key(label: str) -> int:
    """
    Convert a label to its integer class key.

    The label is UTF-8 encoded and read as a big-endian integer, so two
    labels share a class exactly when they are the same text.

    Raises:
        InvalidLabelConversion: empty label or more than RECOG_MAX_LABEL_BYTES bytes
    """
    data = label.encode('utf-8') if label is not None else b''
    if not data or len(data) > RECOG_MAX_LABEL_BYTES:
        raise InvalidLabelConversion(f"label {label!r} cannot be mapped to a class key")
    return int.from_bytes(data, 'big')


@dataclass
class Template:
    """Bit image with its centroid and foreground area"""
    image: np.ndarray
    centroid: Tuple[float, float]
    area: int

    @classmethod
    def from_image(cls, image: np.ndarray) -> "Template":
        x, y, area = centroid_and_area(image)
        return cls(image, (x, y), area)

    @classmethod
    def placeholder(cls) -> "Template":
        """1x1 empty template standing in for a class without samples."""
        return cls(np.zeros((1, 1), dtype=np.uint8), (0.0, 0.0), 0)

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    @property
    def is_placeholder(self) -> bool:
        return self.area == 0 and self.image.shape == (1, 1)


@dataclass
class Sample:
    """
    One symbol image with its (optional) label.

    Attributes:
        image: Bit image as ingested
        label: Label text, None for unlabeled samples
        unscaled: Template of image (computed on construction)
        modified: Matching template, set when training is finished
    """
    image: np.ndarray
    label: Optional[str] = None
    unscaled: Template = field(init=False, repr=False)
    modified: Optional[Template] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if not is_bit_image(self.image):
            raise ValueError("sample image must be a 2-D uint8 array of 0/1 values")
        self.unscaled = Template.from_image(self.image)

    @property
    def centroid(self) -> Tuple[float, float]:
        return self.unscaled.centroid

    @property
    def area(self) -> int:
        return self.unscaled.area

    def with_label(self, label: Optional[str]) -> "Sample":
        """Copy of this sample carrying a different label."""
        return Sample(self.image.copy(), label)


@dataclass
class SymbolClass:
    """A group of samples sharing one label"""
    index: int
    label: str
    key: int
    samples: List[Sample] = field(default_factory=list)
    average_unscaled: Optional[Template] = None
    average_modified: Optional[Template] = None

    @property
    def count(self) -> int:
        return len(self.samples)
