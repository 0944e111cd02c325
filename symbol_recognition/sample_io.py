#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Reading and writing labeled sample directories.

Labels are encoded in file names:
    upper_A_<hash>.png -> 'A'
    lower_a_<hash>.png -> 'a'
    7_<hash>.png       -> '7'
    7.png              -> '7'
    code_2f_<hash>.png -> '/' (labels that cannot appear in a file name)
Images are stored dark-on-white; dark pixels are foreground.
"""

import hashlib
import cv2
from pathlib import Path
from typing import List, Optional

from config import RECOG_THRESHOLD_DEFAULT, TEMPLATE_FILE_PATTERN
from utils.logging import get_logger
from .bitmap import binarize, to_display
from .samples import Sample

log = get_logger()


def parse_label(stem: str) -> Optional[str]:
    """Label encoded in a file name stem, or None if there is none."""
    if stem.startswith('upper_') or stem.startswith('lower_'):
        rest = stem[6:]
        return rest.split('_')[0] or None
    if stem.startswith('code_'):
        code = stem[5:].split('_')[0]
        try:
            return bytes.fromhex(code).decode('utf-8')
        except ValueError:
            return None
    label = stem.split('_')[0] if '_' in stem else stem
    return label or None


def label_to_filename(label: str, image_bytes: bytes) -> str:
    """File name for a sample: label prefix plus a short content hash."""
    img_hash = hashlib.md5(image_bytes).hexdigest()[:8]
    if label.isalpha() and label.isupper():
        prefix = f"upper_{label}"
    elif label.isalpha() and label.islower():
        prefix = f"lower_{label}"
    elif label.isalnum():
        prefix = label
    else:
        prefix = f"code_{label.encode('utf-8').hex()}"
    return f"{prefix}_{img_hash}.png"


def _read_bit_image(path: Path, threshold: int):
    image = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if image is None:
        log.warning(f"Failed to load image: {path}")
        return None
    return binarize(image, threshold)


def load_labeled_samples(directory, threshold: int = RECOG_THRESHOLD_DEFAULT) -> List[Sample]:
    """
    Load every labeled image of a directory.

    Files that cannot be read or carry no label are logged and skipped.
    """
    directory = Path(directory)
    if not directory.exists():
        log.error(f"Samples directory does not exist: {directory}")
        return []

    files = sorted(directory.glob(TEMPLATE_FILE_PATTERN))
    if not files:
        log.warning(f"No sample files found in: {directory}")
        return []

    samples = []
    for path in files:
        label = parse_label(path.stem)
        if label is None:
            log.warning(f"No label in file name: {path.name}")
            continue
        bit = _read_bit_image(path, threshold)
        if bit is None:
            continue
        samples.append(Sample(bit, label))

    log.info(f"Loaded {len(samples)} labeled samples from {directory}")
    return samples


def load_unlabeled_images(directory, threshold: int = RECOG_THRESHOLD_DEFAULT) -> List[Sample]:
    """Load every image of a directory as an unlabeled sample."""
    directory = Path(directory)
    samples = []
    for path in sorted(directory.glob(TEMPLATE_FILE_PATTERN)):
        bit = _read_bit_image(path, threshold)
        if bit is not None:
            samples.append(Sample(bit))
    log.info(f"Loaded {len(samples)} unlabeled images from {directory}")
    return samples


def save_templates(samples: List[Sample], directory) -> int:
    """
    Write labeled samples as PNG files.

    Returns:
        Number of distinct files written; identical samples of a label
        share one file
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    written = set()
    for sample in samples:
        if not sample.label:
            log.warning("Skipping unlabeled sample")
            continue
        image = to_display(sample.image)
        path = directory / label_to_filename(sample.label, image.tobytes())
        if path in written:
            log.debug(f"Duplicate template for '{sample.label}': {path.name}")
            continue
        if not cv2.imwrite(str(path), image):
            log.error(f"Failed to save template: {path}")
            continue
        written.add(path)

    log.debug(f"Saved {len(written)} templates to {directory}")
    return len(written)
