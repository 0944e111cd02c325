#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Bitmap primitives used by the training engine.

Thin, side-effect free wrappers over OpenCV and NumPy. A "bit image" is a
2-D uint8 array holding 0 (background) and 1 (foreground). Grayscale and
BGR inputs are binarized on demand: pixels darker than the threshold
become foreground.
"""

import cv2
import numpy as np
from typing import List, NamedTuple, Optional, Sequence, Tuple

from config import CONNECTIVITY, RECOG_THRESHOLD_DEFAULT


class Box(NamedTuple):
    """Axis-aligned region: top-left corner plus width and height."""
    x: int
    y: int
    w: int
    h: int


def is_bit_image(image: np.ndarray) -> bool:
    """Return True if image is a 2-D uint8 array of 0/1 values."""
    if not isinstance(image, np.ndarray) or image.ndim != 2 or image.dtype != np.uint8:
        return False
    return image.size == 0 or int(image.max()) <= 1


def binarize(image: np.ndarray, threshold: int = RECOG_THRESHOLD_DEFAULT) -> np.ndarray:
    """
    Convert an image to a bit image.

    Args:
        image: Bit, grayscale (2-D) or BGR/BGRA (3-D) uint8 image
        threshold: Pixels with a value below this become foreground

    Returns:
        New bit image of the same width and height
    """
    if is_bit_image(image):
        return image.copy()
    if image.dtype == np.bool_:
        return image.astype(np.uint8)

    if image.ndim == 3:
        code = cv2.COLOR_BGRA2GRAY if image.shape[2] == 4 else cv2.COLOR_BGR2GRAY
        image = cv2.cvtColor(image, code)
    if image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)

    # src >= threshold -> 0, src < threshold -> 1
    _, bit = cv2.threshold(image, threshold - 1, 1, cv2.THRESH_BINARY_INV)
    return bit


def to_display(bit: np.ndarray) -> np.ndarray:
    """Render a bit image as 8-bit grayscale, dark foreground on white."""
    return np.where(bit > 0, 0, 255).astype(np.uint8)


def crop(image: np.ndarray, box: Box) -> np.ndarray:
    """Copy the part of image inside box (clipped to the image bounds)."""
    height, width = image.shape[:2]
    x0 = max(0, box.x)
    y0 = max(0, box.y)
    x1 = min(width, box.x + box.w)
    y1 = min(height, box.y + box.h)
    if x1 <= x0 or y1 <= y0:
        return image[0:0, 0:0].copy()
    return image[y0:y1, x0:x1].copy()


def foreground_box(bit: np.ndarray) -> Optional[Box]:
    """Bounding box of the foreground, or None if there is none."""
    if bit.size == 0:
        return None
    coords = cv2.findNonZero(bit)
    if coords is None:
        return None
    x, y, w, h = cv2.boundingRect(coords)
    return Box(x, y, w, h)


def tight_crop_to_foreground(bit: np.ndarray) -> Optional[np.ndarray]:
    """Crop a bit image to its foreground bounding box; None if empty."""
    box = foreground_box(bit)
    if box is None:
        return None
    return crop(bit, box)


def morphological_close(bit: np.ndarray, vertical_size: int) -> np.ndarray:
    """
    Close a bit image with a 1 x vertical_size brick.

    The image is padded before closing so that foreground touching the
    top or bottom edge is not smeared into the border. An even size is
    rounded up to the next odd one; with a centered brick the closing
    always contains the input.
    """
    if vertical_size <= 1:
        return bit.copy()
    vertical_size |= 1
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (1, vertical_size))
    pad = vertical_size
    padded = cv2.copyMakeBorder(bit, pad, pad, 0, 0, cv2.BORDER_CONSTANT, value=0)
    closed = cv2.morphologyEx(padded, cv2.MORPH_CLOSE, kernel)
    return closed[pad:pad + bit.shape[0], :].copy()


def connected_components(bit: np.ndarray, connectivity: int = CONNECTIVITY) -> List[Box]:
    """Bounding boxes of the connected foreground components."""
    if bit.size == 0:
        return []
    num_labels, _, stats, _ = cv2.connectedComponentsWithStats(bit, connectivity=connectivity)
    boxes = []
    for i in range(1, num_labels):  # Skip background (label 0)
        x, y, w, h, _ = stats[i]
        boxes.append(Box(int(x), int(y), int(w), int(h)))
    return boxes


def _overlaps(a: Box, b: Box) -> bool:
    return (a.x < b.x + b.w and b.x < a.x + a.w and
            a.y < b.y + b.h and b.y < a.y + a.h)


def _union(a: Box, b: Box) -> Box:
    x0 = min(a.x, b.x)
    y0 = min(a.y, b.y)
    x1 = max(a.x + a.w, b.x + b.w)
    y1 = max(a.y + a.h, b.y + b.h)
    return Box(x0, y0, x1 - x0, y1 - y0)


def merge_overlapping(boxes: Sequence[Box]) -> List[Box]:
    """
    Replace every group of overlapping boxes by its bounding box.

    Repeats until no two output boxes overlap, since a merged box can
    reach a box that neither of its parts touched.
    """
    merged = list(boxes)
    changed = True
    while changed:
        changed = False
        result: List[Box] = []
        for box in merged:
            for i, other in enumerate(result):
                if _overlaps(box, other):
                    result[i] = _union(box, other)
                    changed = True
                    break
            else:
                result.append(box)
        merged = result
    return merged


def filter_by_size(boxes: Sequence[Box], min_width: int, min_height: int) -> List[Box]:
    """Keep boxes strictly wider than min_width and strictly taller than min_height."""
    return [b for b in boxes if b.w > min_width and b.h > min_height]


def sort_left_to_right(boxes: Sequence[Box]) -> List[Box]:
    """Sort boxes by their left edge (reading order)."""
    return sorted(boxes, key=lambda b: (b.x, b.y))


def scale_to_size(bit: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Scale a bit image to width x height.

    If one of the dimensions is 0 it is derived from the other so that the
    aspect ratio is preserved; if both are 0 the image is copied.
    """
    h, w = bit.shape[:2]
    if (width == 0 and height == 0) or w == 0 or h == 0:
        return bit.copy()
    if width == 0:
        width = max(1, int(round(w * height / h)))
    elif height == 0:
        height = max(1, int(round(h * width / w)))
    if width == w and height == h:
        return bit.copy()

    scaled = cv2.resize(bit.astype(np.float32), (width, height), interpolation=cv2.INTER_LINEAR)
    return (scaled >= 0.5).astype(np.uint8)


def skeletonize(bit: np.ndarray) -> np.ndarray:
    """Morphological skeleton of a bit image."""
    element = cv2.getStructuringElement(cv2.MORPH_CROSS, (3, 3))
    # Erosion treats out-of-image pixels as foreground; a zero frame makes
    # foreground touching the edge erode too
    img = cv2.copyMakeBorder(bit, 1, 1, 1, 1, cv2.BORDER_CONSTANT, value=0)
    skeleton = np.zeros_like(img)
    while cv2.countNonZero(img) > 0:
        eroded = cv2.erode(img, element)
        opened = cv2.dilate(eroded, element)
        skeleton = cv2.bitwise_or(skeleton, cv2.subtract(img, opened))
        img = eroded
    return skeleton[1:-1, 1:-1].copy()


def normalize_stroke_width(bit: np.ndarray, width: int) -> np.ndarray:
    """
    Redraw the strokes of a bit image with a fixed line width.

    The image is thinned to its skeleton, padded by width // 2 on every
    side and dilated with a width x width brick.
    """
    if width <= 0:
        return bit.copy()
    skeleton = skeletonize(bit)
    border = width // 2
    padded = cv2.copyMakeBorder(skeleton, border, border, border, border,
                                cv2.BORDER_CONSTANT, value=0)
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (width, width))
    return cv2.dilate(padded, kernel)


def centroid_and_area(bit: np.ndarray) -> Tuple[float, float, int]:
    """
    Centroid and foreground pixel count of a bit image.

    Returns:
        Tuple of (x, y, area); (0.0, 0.0, 0) when there is no foreground
    """
    if bit.size == 0:
        return 0.0, 0.0, 0
    moments = cv2.moments(bit, binaryImage=True)
    area = moments['m00']
    if area == 0:
        return 0.0, 0.0, 0
    return moments['m10'] / area, moments['m01'] / area, int(cv2.countNonZero(bit))


def translate(bit: np.ndarray, dx: int, dy: int,
              shape: Optional[Tuple[int, int]] = None) -> np.ndarray:
    """
    Copy bit into a zero canvas of the given (height, width), shifted by (dx, dy).

    Pixels shifted outside the canvas are dropped.
    """
    out_h, out_w = shape if shape is not None else bit.shape[:2]
    out = np.zeros((out_h, out_w), dtype=np.uint8)
    h, w = bit.shape[:2]
    x0 = max(0, dx)
    y0 = max(0, dy)
    x1 = min(out_w, w + dx)
    y1 = min(out_h, h + dy)
    if x1 > x0 and y1 > y0:
        out[y0:y1, x0:x1] = bit[y0 - dy:y1 - dy, x0 - dx:x1 - dx]
    return out


def correlation_score(a: np.ndarray, b: np.ndarray, area_a: int, area_b: int,
                      dx: float, dy: float, tol_x: int, tol_y: int) -> float:
    """
    Best normalized correlation between two bit images.

    b is shifted by the rounded (dx, dy) and by every extra offset within
    (+-tol_x, +-tol_y); the score for one alignment is
    overlap^2 / (area_a * area_b).

    Args:
        a: First bit image (usually the template)
        b: Second bit image
        area_a: Foreground pixel count of a
        area_b: Foreground pixel count of b
        dx: Horizontal shift that aligns b with a (centroid difference)
        dy: Vertical shift that aligns b with a
        tol_x: Horizontal search window around dx
        tol_y: Vertical search window around dy

    Returns:
        Score in [0, 1]; 0 when either area is 0
    """
    if area_a <= 0 or area_b <= 0:
        return 0.0
    base_x = int(np.floor(dx + 0.5))
    base_y = int(np.floor(dy + 0.5))
    ha, wa = a.shape
    hb, wb = b.shape

    # Pad a so that b fits at every shift in the window
    left = max(0, tol_x - base_x)
    top = max(0, tol_y - base_y)
    right = max(0, base_x + tol_x + wb - wa)
    bottom = max(0, base_y + tol_y + hb - ha)
    canvas = cv2.copyMakeBorder(a, top, bottom, left, right, cv2.BORDER_CONSTANT, value=0)

    # overlaps[y, x] counts shared foreground with b at (x - left, y - top)
    overlaps = cv2.matchTemplate(canvas.astype(np.float32), b.astype(np.float32), cv2.TM_CCORR)
    x0 = base_x - tol_x + left
    y0 = base_y - tol_y + top
    window = overlaps[y0:y0 + 2 * tol_y + 1, x0:x0 + 2 * tol_x + 1]
    best = max(0, int(round(float(window.max()))))
    return float(best * best) / float(area_a * area_b)
