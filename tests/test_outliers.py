"""
Tests for outlier removal
"""

import math
import random

import numpy as np
import pytest

from conftest import make_bar, make_disk
from symbol_recognition import DiagnosticsContext, EmptyClass, Sample, remove_outliers, select_by_score
from symbol_recognition.outliers import rank_value


class TestSelectByScore:
    """Per-class threshold policy"""

    def test_single_bad_sample_is_removed(self):
        scores = [0.10, 0.80, 0.82, 0.84, 0.85, 0.86, 0.88, 0.89, 0.90, 0.90]
        threshold, keep = select_by_score(scores, min_score=0.75, min_fraction=0.5)
        assert threshold == pytest.approx(0.75)
        assert keep == [False] + [True] * 9

    def test_poor_class_keeps_min_fraction(self):
        scores = [0.2, 0.3, 0.4, 0.5]
        threshold, keep = select_by_score(scores, min_score=0.75, min_fraction=0.5)
        assert threshold == pytest.approx(0.4)
        assert sum(keep) == 2

    def test_best_sample_always_kept(self):
        threshold, keep = select_by_score([0.1, 0.2], min_score=0.75, min_fraction=0.01)
        assert threshold == pytest.approx(0.2)
        assert keep == [False, True]

    def test_single_score(self):
        threshold, keep = select_by_score([0.3])
        assert threshold == pytest.approx(0.3)
        assert keep == [True]

    def test_empty_scores(self):
        with pytest.raises(EmptyClass):
            select_by_score([])

    @pytest.mark.parametrize("fraction", [0.1, 0.25, 0.5, 0.75, 0.9, 1.0])
    def test_kept_count_lower_bound(self, fraction):
        rng = random.Random(1234)
        for n in range(1, 25):
            scores = [rng.random() for _ in range(n)]
            _, keep = select_by_score(scores, min_score=0.99, min_fraction=fraction)
            assert sum(keep) >= max(1, math.ceil(n * fraction - 1e-9))

    def test_rank_value(self):
        scores = [0.5, 0.1, 0.9, 0.3]
        assert rank_value(scores, 1.0) == pytest.approx(0.1)
        assert rank_value(scores, 0.5) == pytest.approx(0.5)
        assert rank_value(scores, 0.25) == pytest.approx(0.9)


def bar_class_with_disk(bars=5):
    samples = [Sample(make_bar(width=4, height=30, pad=2), "1") for _ in range(bars)]
    samples.append(Sample(make_disk(30), "1"))
    return samples


class TestRemoveOutliers:
    """Outlier removal on real samples"""

    def test_empty_input(self):
        with pytest.raises(EmptyClass):
            remove_outliers([])

    def test_removes_odd_sample(self):
        samples = bar_class_with_disk()
        result = remove_outliers(samples, collect_removed=True)
        assert len(result.kept) == 5
        assert len(result.removed) == 1
        assert result.removed[0].image.shape == (30, 30)
        assert result.removed_scores[0] < 0.75

    def test_kept_samples_are_unscaled_originals(self):
        samples = bar_class_with_disk()
        result = remove_outliers(samples)
        for sample in result.kept:
            assert sample.label == "1"
            assert np.array_equal(sample.image, samples[0].image)
            assert sample.image is not samples[0].image

    def test_removed_not_collected_by_default(self):
        result = remove_outliers(bar_class_with_disk())
        assert result.removed == []
        assert result.removed_scores == []

    def test_classes_filtered_independently(self, digit_samples):
        samples = bar_class_with_disk() + digit_samples
        result = remove_outliers(samples, min_score=0.01)
        assert sorted({s.label for s in result.kept}) == list("0123456789")
        # A tiny minimum score keeps everything
        assert len(result.kept) == len(samples)

    def test_out_of_range_parameters_are_clamped(self):
        samples = [Sample(make_bar(), "1") for _ in range(4)]
        # min_score > 1 is clamped to 1.0; identical samples score 1.0
        result = remove_outliers(samples, min_score=5.0, min_fraction=-1.0)
        assert len(result.kept) == 4

    def test_diagnostics_receive_removed(self):
        diagnostics = DiagnosticsContext()
        result = remove_outliers(bar_class_with_disk(), diagnostics=diagnostics)
        assert "outliers" in diagnostics.images
        assert result.removed == []
