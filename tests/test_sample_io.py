"""
Tests for sample directory I/O and training settings
"""

import cv2
import numpy as np
import pytest

from conftest import make_bar
from symbol_recognition import Sample
from symbol_recognition.sample_io import (
    label_to_filename,
    load_labeled_samples,
    load_unlabeled_images,
    parse_label,
    save_templates,
)
from symbol_recognition.settings import TrainingSettings


class TestFileNames:
    """Labels encoded in file names"""

    @pytest.mark.parametrize("stem,label", [
        ("upper_A_1a2b3c4d", "A"),
        ("lower_a_1a2b3c4d", "a"),
        ("7_1a2b3c4d", "7"),
        ("7", "7"),
        ("code_2f_1a2b3c4d", "/"),
        ("code_zz_1a2b3c4d", None),
        ("upper__x", None),
    ])
    def test_parse_label(self, stem, label):
        assert parse_label(stem) == label

    @pytest.mark.parametrize("label", ["A", "a", "7", "/", "€"])
    def test_filename_roundtrip(self, label):
        name = label_to_filename(label, b"pixels")
        assert name.endswith(".png")
        assert parse_label(name[:-4]) == label

    def test_hash_depends_on_content(self):
        assert label_to_filename("7", b"one") != label_to_filename("7", b"two")


class TestSampleDirectories:
    """Loading and saving labeled samples"""

    def test_save_and_load(self, tmp_path, digit_samples):
        written = save_templates(digit_samples, tmp_path)
        assert written == 30
        loaded = load_labeled_samples(tmp_path)
        assert len(loaded) == 30
        assert sorted(s.label for s in loaded) == sorted(s.label for s in digit_samples)

    def test_saved_images_are_dark_on_white(self, tmp_path):
        save_templates([Sample(make_bar(), "1")], tmp_path)
        path = next(tmp_path.glob("*.png"))
        image = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
        assert image[0, 0] == 255
        assert image[10, 4] == 0

    def test_loaded_images_are_bit_images(self, tmp_path):
        save_templates([Sample(make_bar(), "1")], tmp_path)
        loaded = load_labeled_samples(tmp_path)
        assert np.array_equal(loaded[0].image, make_bar())

    def test_unlabeled_samples_are_not_written(self, tmp_path):
        assert save_templates([Sample(make_bar())], tmp_path) == 0

    def test_identical_samples_share_one_file(self, tmp_path):
        samples = [Sample(make_bar(), "1"), Sample(make_bar(), "1"), Sample(make_bar(width=5), "1")]
        assert save_templates(samples, tmp_path) == 2
        assert len(list(tmp_path.glob("*.png"))) == 2

    def test_missing_directory(self, tmp_path):
        assert load_labeled_samples(tmp_path / "nope") == []

    def test_load_unlabeled(self, tmp_path):
        cv2.imwrite(str(tmp_path / "scan_001.png"), np.full((10, 10), 255, dtype=np.uint8))
        cv2.imwrite(str(tmp_path / "scan_002.png"), np.full((10, 10), 20, dtype=np.uint8))
        loaded = load_unlabeled_images(tmp_path)
        assert len(loaded) == 2
        assert all(s.label is None for s in loaded)
        assert int(loaded[1].image.sum()) == 100


class TestTrainingSettings:
    """config.ini overrides"""

    def test_defaults_without_file(self, tmp_path):
        settings = TrainingSettings.load(tmp_path / "config.ini")
        assert settings == TrainingSettings()
        assert settings.scale_h == 40
        assert settings.outlier_min_score == pytest.approx(0.75)

    def test_overrides(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[Recognizer]\nscale_h = 32\nline_w = 3\noutlier_min_fraction = 0.6\n",
                        encoding="utf-8")
        settings = TrainingSettings.load(path)
        assert settings.scale_h == 32
        assert settings.line_w == 3
        assert settings.outlier_min_fraction == pytest.approx(0.6)
        assert settings.threshold == 128

    def test_invalid_values_are_ignored(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[Recognizer]\nscale_h = tall\nthreshold = 100\n", encoding="utf-8")
        settings = TrainingSettings.load(path)
        assert settings.scale_h == 40
        assert settings.threshold == 100

    def test_other_sections_are_ignored(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[General]\nscale_h = 12\n", encoding="utf-8")
        assert TrainingSettings.load(path).scale_h == 40

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "sub" / "config.ini"
        TrainingSettings(scale_h=24, boot_min_score=0.8).save(path)
        loaded = TrainingSettings.load(path)
        assert loaded.scale_h == 24
        assert loaded.boot_min_score == pytest.approx(0.8)

    def test_default_location_is_user_data_dir(self, isolated_data_dir):
        TrainingSettings(max_y_shift=2).save()
        assert (isolated_data_dir / "config.ini").exists()
        assert TrainingSettings.load().max_y_shift == 2
