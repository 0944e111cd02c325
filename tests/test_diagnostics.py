"""
Tests for the diagnostics context and the template viewer
"""

import cv2
import numpy as np
import pytest

from conftest import make_bar
from symbol_recognition import DiagnosticsContext, RecognizerModel, Sample
from symbol_recognition.bitmap import Box
from symbol_recognition.diagnostics import tile_images, to_bgr
from symbol_recognition.matcher import MatchResult
from symbol_recognition.template_viewer import TemplateViewer


@pytest.fixture
def digit_model(digit_samples):
    return RecognizerModel.from_samples(digit_samples, scale_h=40)


class TestTiles:
    def test_no_tiles(self):
        assert tile_images([]) is None

    def test_rows_wrap(self):
        tiles = [np.zeros((10, 50, 3), dtype=np.uint8) for _ in range(4)]
        mosaic = tile_images(tiles, spacing=10, max_row_width=150)
        # Two tiles per row
        assert mosaic.shape == (10 * 2 + 10 * 3, 50 * 2 + 10 * 3, 3)

    def test_to_bgr(self):
        tile = to_bgr(make_bar())
        assert tile.shape == (36 + 4, 10 + 4, 3)


class TestDiagnosticsContext:
    """Debug renderings"""

    def test_render_boxes(self):
        diagnostics = DiagnosticsContext()
        image = diagnostics.render_boxes(make_bar(), [Box(3, 3, 4, 30)])
        assert image.shape == (36, 10, 3)
        assert "boxes" in diagnostics.images

    def test_writes_to_output_dir(self, tmp_path):
        out = tmp_path / "debug"
        diagnostics = DiagnosticsContext(out)
        diagnostics.render_boxes(make_bar(), [], name="page")
        assert (out / "page.png").exists()
        assert cv2.imread(str(out / "page.png")) is not None

    def test_show_average_templates(self, digit_model):
        diagnostics = DiagnosticsContext()
        digit_model.average_samples(diagnostics=diagnostics)
        assert "averages_unscaled" in diagnostics.images
        assert "averages_modified" in diagnostics.images

    def test_cached_averages_still_reported(self, digit_model):
        digit_model.average_samples()
        diagnostics = DiagnosticsContext()
        digit_model.average_samples(diagnostics=diagnostics)
        assert "averages_modified" in diagnostics.images

    def test_display_outliers(self):
        diagnostics = DiagnosticsContext()
        mosaic = diagnostics.display_outliers([Sample(make_bar(), "1")], [0.42])
        assert mosaic is not None
        assert "outliers" in diagnostics.images

    def test_show_match_and_flush(self):
        diagnostics = DiagnosticsContext()
        diagnostics.show_match(make_bar(), MatchResult(0, 0.9, "1"))
        diagnostics.show_match(make_bar(), MatchResult(-1, 0.0, None), accepted=False)
        assert len(diagnostics.match_tiles) == 2
        diagnostics.flush_matches()
        assert "matches" in diagnostics.images
        assert diagnostics.match_tiles == []

    def test_show_matches_in_range(self, digit_model, digit_samples):
        diagnostics = DiagnosticsContext()
        images = [s.image for s in digit_samples[:5]]
        assert diagnostics.show_matches_in_range(digit_model, images, 0.99, 1.0) == 5
        assert "matches_in_range" in diagnostics.images
        assert diagnostics.show_matches_in_range(digit_model, images, 0.0, 0.01) == 0

    def test_describe_model(self, digit_model):
        report = DiagnosticsContext().describe_model(digit_model)
        assert "Setsize: 10" in report
        assert "Template height scaled to 40" in report
        assert "class 3, label '3': 3" in report


class TestTemplateViewer:
    """Matplotlib template pages"""

    def test_from_model_averages(self, digit_model):
        viewer = TemplateViewer.from_model(digit_model, templates_per_page=4)
        assert len(viewer.entries) == 10
        assert viewer.page_count == 3
        fig = viewer.show_templates(page=2, show=False)
        assert fig is not None
        viewer.close()

    def test_from_samples(self, digit_samples):
        viewer = TemplateViewer.from_samples(digit_samples)
        assert len(viewer.entries) == 30
        assert viewer.show_label("4", show=False) is not None
        assert viewer.show_label("z", show=False) is None
        viewer.close()

    def test_statistics_and_save(self, digit_model, tmp_path):
        viewer = TemplateViewer.from_model(digit_model, averages=False, modified=True)
        assert len(viewer.entries) == 30
        assert viewer.show_statistics(show=False) is not None
        assert viewer.save_current_view(tmp_path / "stats.png")
        assert (tmp_path / "stats.png").exists()
        viewer.close()
