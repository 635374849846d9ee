"""Tests for image preprocessing."""

import cv2
import numpy as np

from idscan.preprocessing.contrast import (
    calculate_contrast,
    contrast_stretch,
    to_grayscale,
)
from idscan.preprocessing.pipeline import ImagePreprocessor, decode_image
from idscan.progress import ProgressReporter
from idscan.utils.config import PreprocessingConfig


class TestToGrayscale:
    """Tests for grayscale conversion."""

    def test_color_to_grayscale(self, sample_color_image: np.ndarray) -> None:
        gray = to_grayscale(sample_color_image)
        assert gray.ndim == 2
        assert gray.shape == sample_color_image.shape[:2]

    def test_grayscale_passthrough(self, sample_image: np.ndarray) -> None:
        assert to_grayscale(sample_image) is sample_image

    def test_bgra_input(self) -> None:
        image = np.full((10, 10, 4), 200, dtype=np.uint8)
        assert to_grayscale(image).shape == (10, 10)

    def test_luminance_weights(self) -> None:
        # Pure green in BGR order.
        image = np.zeros((1, 1, 3), dtype=np.uint8)
        image[0, 0] = (0, 255, 0)
        assert int(to_grayscale(image)[0, 0]) == 150


class TestContrastStretch:
    """Tests for the linear contrast stretch."""

    def test_values(self) -> None:
        image = np.array([[0, 100, 128, 200, 255]], dtype=np.uint8)
        result = contrast_stretch(image, factor=1.5, midpoint=128)
        assert result.tolist() == [[0, 86, 128, 236, 255]]

    def test_preserves_shape_and_dtype(self, sample_color_image: np.ndarray) -> None:
        result = contrast_stretch(sample_color_image)
        assert result.shape == sample_color_image.shape
        assert result.dtype == np.uint8

    def test_identity_factor(self, sample_image: np.ndarray) -> None:
        result = contrast_stretch(sample_image, factor=1.0)
        np.testing.assert_array_equal(result, sample_image)

    def test_increases_contrast(self) -> None:
        image = np.array([[100, 156] * 10] * 10, dtype=np.uint8)
        assert calculate_contrast(contrast_stretch(image)) > calculate_contrast(
            image
        )


class TestCalculateContrast:
    """Tests for the contrast metric."""

    def test_uniform_image(self) -> None:
        image = np.full((10, 10), 128, dtype=np.uint8)
        assert calculate_contrast(image) == 0.0

    def test_color_image(self, sample_color_image: np.ndarray) -> None:
        assert calculate_contrast(sample_color_image) > 0


class TestDecodeImage:
    """Tests for decoding encoded image bytes."""

    def test_decodes_png(self, png_bytes: bytes) -> None:
        decoded = decode_image(png_bytes)
        assert decoded is not None
        assert decoded.shape == (200, 300, 3)

    def test_empty_bytes(self) -> None:
        assert decode_image(b"") is None

    def test_garbage_bytes(self) -> None:
        assert decode_image(b"definitely not an image") is None


class TestImagePreprocessor:
    """Tests for the preprocessing pipeline."""

    def test_produces_grayscale_png(self, png_bytes: bytes) -> None:
        output = ImagePreprocessor(PreprocessingConfig()).preprocess(png_bytes)
        assert output.startswith(b"\x89PNG")
        decoded = cv2.imdecode(
            np.frombuffer(output, dtype=np.uint8), cv2.IMREAD_UNCHANGED
        )
        assert decoded.ndim == 2

    def test_undecodable_returns_input(self) -> None:
        data = b"not an image"
        assert ImagePreprocessor(PreprocessingConfig()).preprocess(data) is data

    def test_wrong_type_returns_input(self) -> None:
        data = "not bytes"
        assert ImagePreprocessor(PreprocessingConfig()).preprocess(data) is data

    def test_disabled_returns_input(self, png_bytes: bytes) -> None:
        config = PreprocessingConfig(enabled=False)
        assert ImagePreprocessor(config).preprocess(png_bytes) is png_bytes

    def test_reports_progress(self, png_bytes: bytes) -> None:
        seen: list[int] = []
        ImagePreprocessor(PreprocessingConfig()).preprocess(
            png_bytes, ProgressReporter(seen.append)
        )
        assert seen == [20, 40]

    def test_reports_progress_on_failure(self) -> None:
        seen: list[int] = []
        ImagePreprocessor(PreprocessingConfig()).preprocess(
            b"", ProgressReporter(seen.append)
        )
        assert seen == [20, 40]
