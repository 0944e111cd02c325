#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Diagnostics context for training runs.

Collects debug renderings (segmentation boxes, average templates,
removed outliers, bootstrap matches) on request. It is created by the
caller and passed only to the calls that should report into it; no
training result depends on it.
"""

import cv2
import numpy as np
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from config import DEBUG_BORDER, DEBUG_MAX_ROW_WIDTH, DEBUG_TILE_SPACING
from utils.logging import get_logger
from .bitmap import Box, binarize, to_display
from .matcher import identify

log = get_logger()

RED = (0, 0, 255)
GREEN = (0, 160, 0)
BLUE = (255, 0, 0)
TEXT_BAND = 18


def to_bgr(bit: np.ndarray) -> np.ndarray:
    """Bit image as a BGR image with a thin white border."""
    gray = to_display(bit)
    gray = cv2.copyMakeBorder(gray, DEBUG_BORDER, DEBUG_BORDER, DEBUG_BORDER, DEBUG_BORDER,
                              cv2.BORDER_CONSTANT, value=255)
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


def add_caption(tile: np.ndarray, caption: str, color=BLUE) -> np.ndarray:
    """Append a white band with a caption below a BGR tile."""
    width = max(tile.shape[1], 8 * len(caption))
    out = np.full((tile.shape[0] + TEXT_BAND, width, 3), 255, dtype=np.uint8)
    out[:tile.shape[0], :tile.shape[1]] = tile
    cv2.putText(out, caption, (1, out.shape[0] - 5), cv2.FONT_HERSHEY_PLAIN, 0.8, color, 1)
    return out


def tile_images(tiles: Sequence[np.ndarray], spacing: int = DEBUG_TILE_SPACING,
                max_row_width: int = DEBUG_MAX_ROW_WIDTH) -> Optional[np.ndarray]:
    """
    Lay BGR tiles out in rows on a white canvas.

    Returns:
        Mosaic image, or None if there are no tiles
    """
    if not tiles:
        return None

    rows: List[List[np.ndarray]] = [[]]
    row_width = 0
    for tile in tiles:
        w = tile.shape[1]
        if rows[-1] and row_width + spacing + w > max_row_width:
            rows.append([])
            row_width = 0
        rows[-1].append(tile)
        row_width += w + spacing

    width = max(sum(t.shape[1] for t in row) + spacing * (len(row) + 1) for row in rows)
    heights = [max(t.shape[0] for t in row) for row in rows]
    height = sum(heights) + spacing * (len(rows) + 1)
    canvas = np.full((height, width, 3), 255, dtype=np.uint8)

    y = spacing
    for row, row_h in zip(rows, heights):
        x = spacing
        for tile in row:
            h, w = tile.shape[:2]
            canvas[y:y + h, x:x + w] = tile
            x += w + spacing
        y += row_h + spacing
    return canvas


class DiagnosticsContext:
    """Named debug images of a training run, optionally written to disk."""

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Args:
            output_dir: If given, every recorded image is also written there as PNG
        """
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.images: Dict[str, np.ndarray] = {}
        self.match_tiles: List[np.ndarray] = []
        if self.output_dir is not None:
            self.output_dir.mkdir(parents=True, exist_ok=True)

    def record(self, name: str, image: Optional[np.ndarray]) -> None:
        """Store an image under name (replacing any previous one)."""
        if image is None:
            return
        self.images[name] = image
        if self.output_dir is not None:
            path = self.output_dir / f"{name}.png"
            if not cv2.imwrite(str(path), image):
                log.error(f"Failed to write debug image: {path}")
            else:
                log.debug(f"Debug image saved to: {path}")

    def render_boxes(self, bit: np.ndarray, boxes: Sequence[Box], name: str = "boxes") -> np.ndarray:
        """Outline regions on a bit image (segmentation debugging)."""
        image = cv2.cvtColor(to_display(bit), cv2.COLOR_GRAY2BGR)
        for i, b in enumerate(boxes):
            cv2.rectangle(image, (b.x, b.y), (b.x + b.w - 1, b.y + b.h - 1), RED, 1)
            cv2.putText(image, str(i), (b.x, max(b.y - 2, 8)), cv2.FONT_HERSHEY_PLAIN, 0.7, RED, 1)
        self.record(name, image)
        return image

    def _average_tiles(self, model, modified: bool) -> List[np.ndarray]:
        tiles = []
        for cls in model.classes:
            avg = cls.average_modified if modified else cls.average_unscaled
            if avg is None:
                continue
            tile = to_bgr(avg.image)
            if avg.area > 0:
                cx = int(round(avg.centroid[0])) + DEBUG_BORDER
                cy = int(round(avg.centroid[1])) + DEBUG_BORDER
                cv2.circle(tile, (cx, cy), 1, RED, -1)
            tiles.append(add_caption(tile, cls.label))
        return tiles

    def show_average_templates(self, model) -> None:
        """Average templates of every class with their centroids marked."""
        self.record("averages_unscaled", tile_images(self._average_tiles(model, False)))
        self.record("averages_modified", tile_images(self._average_tiles(model, True)))

    def display_outliers(self, removed: Sequence, scores: Sequence[float]) -> Optional[np.ndarray]:
        """Removed samples captioned with their label and score."""
        tiles = [add_caption(to_bgr(s.image), f"{s.label} {score:.2f}", RED)
                 for s, score in zip(removed, scores)]
        mosaic = tile_images(tiles)
        self.record("outliers", mosaic)
        return mosaic

    @staticmethod
    def _match_tile(probe: np.ndarray, result, accepted: bool) -> np.ndarray:
        label = result.label if result.label is not None else "?"
        color = GREEN if accepted else RED
        return add_caption(to_bgr(probe), f"{label} {result.score:.2f}", color)

    def show_match(self, probe: np.ndarray, result, accepted: bool = True) -> np.ndarray:
        """Keep a captioned tile of one identification result."""
        tile = self._match_tile(probe, result, accepted)
        self.match_tiles.append(tile)
        return tile

    def flush_matches(self, name: str = "matches") -> None:
        """Record the collected match tiles as one mosaic and clear them."""
        self.record(name, tile_images(self.match_tiles))
        self.match_tiles = []

    def show_matches_in_range(self, model, images: Sequence[np.ndarray],
                              min_score: float = 0.0, max_score: float = 1.0) -> int:
        """
        Identify images and keep those whose score lies in [min_score, max_score].

        Returns:
            Number of matches in range
        """
        tiles = []
        for image in images:
            result = identify(model, image)
            if min_score <= result.score <= max_score:
                tiles.append(self._match_tile(binarize(image, model.threshold), result, True))
        if not tiles:
            log.info("No symbol matches in the range of scores")
            return 0
        self.record("matches_in_range", tile_images(tiles))
        return len(tiles)

    def describe_model(self, model) -> str:
        """Text report of a model's configuration and class sizes."""
        lines = [
            "Recognizer model contents",
            f"  Setsize: {model.setsize}",
            f"  Binarization threshold: {model.threshold}",
            f"  Maximum matching y-jiggle: {model.max_y_shift}",
            ("  Using image templates for matching" if model.line_w <= 0
             else f"  Using templates with fixed line width {model.line_w} for matching"),
            ("  No width scaling of templates" if model.scale_w == 0
             else f"  Template width scaled to {model.scale_w}"),
            ("  No height scaling of templates" if model.scale_h == 0
             else f"  Template height scaled to {model.scale_h}"),
            "  Number of samples in each class:",
        ]
        for cls in model.classes:
            lines.append(f"    class {cls.index}, label '{cls.label}': {cls.count}")
        return "\n".join(lines)
