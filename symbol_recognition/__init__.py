#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Symbol Recognition Module

Training engine for template-based symbol recognizers: sample ingestion,
average template synthesis, outlier removal, bootstrap labeling and
class-balance padding.
"""

from .errors import (
    RecognitionError, NoLabel, SegmentationMismatch, EmptyRegion,
    TrainingFinalized, EmptyClass, InvalidLabelConversion, CharsetUnavailable,
    ClassLimitExceeded,
)
from .samples import CharsetType, Sample, SymbolClass, Template
from .recognizer import RecognizerModel
from .averaging import compute_averages
from .ingestion import process_single_labeled, process_multi_labeled, train_labeled
from .outliers import remove_outliers, select_by_score, OutlierResult
from .matcher import identify, MatchResult
from .bootstrap import train_from_boot
from .boot_digits import make_boot_digit_templates, make_boot_digit_recog
from .padding import is_padding_needed, pad_if_needed, add_digit_pad_templates, charset_available
from .diagnostics import DiagnosticsContext

__all__ = [
    'RecognitionError', 'NoLabel', 'SegmentationMismatch', 'EmptyRegion',
    'TrainingFinalized', 'EmptyClass', 'InvalidLabelConversion', 'CharsetUnavailable',
    'ClassLimitExceeded',
    'CharsetType', 'Sample', 'SymbolClass', 'Template',
    'RecognizerModel',
    'compute_averages',
    'process_single_labeled', 'process_multi_labeled', 'train_labeled',
    'remove_outliers', 'select_by_score', 'OutlierResult',
    'identify', 'MatchResult',
    'train_from_boot',
    'make_boot_digit_templates', 'make_boot_digit_recog',
    'is_padding_needed', 'pad_if_needed', 'add_digit_pad_templates', 'charset_available',
    'DiagnosticsContext',
]
