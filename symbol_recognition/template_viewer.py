#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Template viewer for trained recognizer models.

Displays labeled samples or class averages with matplotlib for manual
inspection of a training set.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as patches
from pathlib import Path
from typing import Dict, List, Optional

from utils.logging import get_logger
from .bitmap import to_display
from .samples import Sample

log = get_logger()


def _grid(count: int):
    """Figure with a roughly square grid of at least count axes, all blank."""
    cols = max(1, int(np.ceil(np.sqrt(count))))
    rows = max(1, int(np.ceil(count / cols)))
    fig, axes = plt.subplots(rows, cols, figsize=(cols * 2, rows * 2), squeeze=False)
    axes = axes.flatten()
    for ax in axes:
        ax.set_xticks([])
        ax.set_yticks([])
    return fig, axes


class TemplateViewer:
    """Visualizes labeled bit images for manual verification."""

    def __init__(self, entries: Optional[List[Dict]] = None, templates_per_page: int = 50):
        """
        Args:
            entries: Dicts with 'label', 'image' (bit image) and 'title'
            templates_per_page: Number of templates per page
        """
        self.entries: List[Dict] = entries or []
        self.templates_per_page = templates_per_page
        self.fig = None

    @classmethod
    def from_samples(cls, samples: List[Sample], **kwargs) -> "TemplateViewer":
        entries = [{'label': s.label or '?', 'image': s.image, 'title': f"#{i}"}
                   for i, s in enumerate(samples)]
        return cls(entries, **kwargs)

    @classmethod
    def from_model(cls, model, averages: bool = True, modified: bool = False,
                   **kwargs) -> "TemplateViewer":
        """
        Viewer over a model's class averages (computed if needed) or its samples.

        Args:
            model: RecognizerModel
            averages: Show one average per class instead of every sample
            modified: Show the modified variant instead of the unscaled one
        """
        entries = []
        if averages:
            model.average_samples()
            for c in model.classes:
                avg = c.average_modified if modified else c.average_unscaled
                entries.append({'label': c.label, 'image': avg.image,
                                'title': f"class {c.index} (n={c.count})"})
        else:
            for c in model.classes:
                for j, s in enumerate(c.samples):
                    image = s.modified.image if modified and s.modified is not None else s.image
                    entries.append({'label': c.label, 'image': image, 'title': f"{c.index}.{j}"})
        return cls(entries, **kwargs)

    @property
    def page_count(self) -> int:
        return (len(self.entries) + self.templates_per_page - 1) // self.templates_per_page

    def _draw(self, ax, entry: Dict):
        image = entry['image']
        ax.imshow(to_display(image), cmap='gray', vmin=0, vmax=255)
        ax.set_title(f"'{entry['label']}'\n{entry['title']}", fontsize=8, pad=2)
        ax.add_patch(patches.Rectangle((-0.5, -0.5), image.shape[1], image.shape[0],
                                       linewidth=1, edgecolor='blue', facecolor='none'))

    def show_templates(self, page: int = 0, show: bool = True):
        """
        Display one page of templates in a grid, sorted by label.

        Returns:
            The matplotlib figure, or None if there is nothing to show
        """
        if not self.entries:
            log.error("No templates to display")
            return None
        if not 0 <= page < self.page_count:
            log.warning(f"Page {page} out of range (0-{self.page_count - 1})")
            return None

        ordered = sorted(self.entries, key=lambda e: (e['label'].lower(), e['label']))
        start = page * self.templates_per_page
        shown = ordered[start:start + self.templates_per_page]

        self.close()
        self.fig, axes = _grid(len(shown))
        for ax, entry in zip(axes, shown):
            self._draw(ax, entry)
        for ax in axes[len(shown):]:
            ax.set_visible(False)

        self.fig.suptitle(f"Templates - Page {page + 1}/{self.page_count} "
                          f"({len(self.entries)} total)", fontsize=12)
        self.fig.tight_layout()
        if show:
            plt.show()
        log.info(f"Displayed templates {start + 1}-{start + len(shown)} of {len(self.entries)}")
        return self.fig

    def show_label(self, label: str, show: bool = True):
        """Display all templates carrying one label."""
        selected = [e for e in self.entries if e['label'] == label]
        if not selected:
            log.warning(f"No templates found for label: '{label}'")
            return None

        self.close()
        self.fig, axes = _grid(len(selected))
        for ax, entry in zip(axes, selected):
            self._draw(ax, entry)
        for ax in axes[len(selected):]:
            ax.set_visible(False)
        self.fig.suptitle(f"Templates for '{label}' ({len(selected)})", fontsize=12)
        self.fig.tight_layout()
        if show:
            plt.show()
        return self.fig

    def show_statistics(self, show: bool = True):
        """Bar chart of templates per label and scatter of template sizes."""
        if not self.entries:
            log.error("No templates to display")
            return None

        counts: Dict[str, int] = {}
        for entry in self.entries:
            counts[entry['label']] = counts.get(entry['label'], 0) + 1
        ranked = sorted(counts.items(), key=lambda x: x[1], reverse=True)

        self.close()
        self.fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(15, 6))
        labels, values = zip(*ranked)
        ax1.bar(range(len(labels)), values)
        ax1.set_xlabel('Label')
        ax1.set_ylabel('Number of templates')
        ax1.set_title('Templates per label')
        ax1.set_xticks(range(len(labels)))
        ax1.set_xticklabels(labels, rotation=45)

        ax2.scatter([e['image'].shape[1] for e in self.entries],
                    [e['image'].shape[0] for e in self.entries], alpha=0.6)
        ax2.set_xlabel('Width (pixels)')
        ax2.set_ylabel('Height (pixels)')
        ax2.set_title('Template size distribution')
        ax2.grid(True, alpha=0.3)

        self.fig.suptitle(f"Template statistics ({len(self.entries)} total)", fontsize=14)
        self.fig.tight_layout()
        if show:
            plt.show()

        log.info(f"Templates: {len(self.entries)}, labels: {len(counts)}, "
                 f"most common: '{ranked[0][0]}' ({ranked[0][1]})")
        return self.fig

    def save_current_view(self, output_path) -> bool:
        """Save the current figure to a file."""
        if self.fig is None:
            log.error("No figure to save")
            return False
        self.fig.savefig(str(Path(output_path)), dpi=150, bbox_inches='tight')
        log.info(f"Template view saved to: {output_path}")
        return True

    def close(self):
        """Close the current figure."""
        if self.fig is not None:
            plt.close(self.fig)
            self.fig = None
