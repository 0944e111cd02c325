"""
Tests for identification against trained models
"""

import cv2
import numpy as np
import pytest

from conftest import make_bar, make_disk
from symbol_recognition import RecognizerModel, Sample, identify
from symbol_recognition.bitmap import tight_crop_to_foreground, to_display
from symbol_recognition.boot_digits import render_digit
from symbol_recognition.matcher import NO_MATCH, identify_all


@pytest.fixture
def shapes_model():
    samples = [Sample(make_bar(pad=0), "1"),
               Sample(tight_crop_to_foreground(make_disk(30)), "o")]
    return RecognizerModel.from_samples(samples, scale_h=40)


class TestIdentify:
    """Best-class search"""

    def test_identifies_training_shapes(self, shapes_model):
        result = identify(shapes_model, to_display(make_bar()))
        assert result.label == "1"
        assert result.index == 0
        assert result.score == pytest.approx(1.0)
        assert identify(shapes_model, make_disk(30)).label == "o"

    def test_scaled_input(self, shapes_model):
        bigger = cv2.resize(make_disk(30), (60, 60), interpolation=cv2.INTER_NEAREST)
        result = identify(shapes_model, bigger)
        assert result.label == "o"
        assert result.score > 0.8

    def test_digits(self, digit_samples):
        model = RecognizerModel.from_samples(digit_samples, scale_h=40, line_w=5)
        for digit in "0123456789":
            image = render_digit(digit, cv2.FONT_HERSHEY_DUPLEX)
            assert identify(model, image).label == digit

    def test_against_averages(self):
        samples = [Sample(render_digit(d, cv2.FONT_HERSHEY_SIMPLEX), d) for d in "0123456789" * 2]
        model = RecognizerModel.from_samples(samples, scale_h=40, use_averages=True)
        result = identify(model, render_digit("7", cv2.FONT_HERSHEY_SIMPLEX))
        assert result.label == "7"
        assert result.score == pytest.approx(1.0)
        assert model.averages_computed

    def test_finalizes_accumulating_model(self):
        model = RecognizerModel(scale_h=40)
        model.add_sample(Sample(make_bar(), "1"))
        assert identify(model, make_bar()).label == "1"
        assert model.training_finalized

    def test_empty_model(self):
        assert identify(RecognizerModel(), make_bar()) == NO_MATCH

    def test_blank_image(self, shapes_model):
        blank = np.full((20, 20), 255, dtype=np.uint8)
        assert identify(shapes_model, blank) == NO_MATCH

    def test_identify_all(self, shapes_model):
        results = identify_all(shapes_model, [make_bar(), make_disk(30)])
        assert [r.label for r in results] == ["1", "o"]
