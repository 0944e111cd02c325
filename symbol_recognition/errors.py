#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exceptions raised by the symbol recognition training engine.

All of them are data-quality or programmer errors: they are raised
synchronously and never retried. Batch loops catch RecognitionError per
item, log it and continue with the next sample.
"""


class RecognitionError(Exception):
    """Base class for all training engine errors."""


class NoLabel(RecognitionError):
    """A sample has no resolvable label text."""


class SegmentationMismatch(RecognitionError):
    """The number of detected symbol regions differs from the label length."""

    def __init__(self, expected: int, found: int):
        super().__init__(f"expected {expected} symbol regions, found {found}")
        self.expected = expected
        self.found = found


class EmptyRegion(RecognitionError):
    """Cropping an image left no foreground."""


class TrainingFinalized(RecognitionError):
    """A sample was added after training was finished."""


class EmptyClass(RecognitionError):
    """An operation that needs at least one sample (or class) got none."""


class InvalidLabelConversion(RecognitionError):
    """A label cannot be mapped to an integer class key."""


class CharsetUnavailable(RecognitionError):
    """No synthetic template generator exists for the requested charset."""


class ClassLimitExceeded(RecognitionError):
    """A new class would exceed the maximum number of classes a model holds."""
