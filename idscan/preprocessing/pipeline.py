"""Image preprocessing for the local OCR engine.

Remote providers normalize images themselves and receive the original
bytes; only the local engine sees the output of this module.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from idscan.progress import PREPROCESS_STARTED, PREPROCESSED, ProgressReporter
from idscan.utils.config import PreprocessingConfig
from idscan.utils.logger import get_logger

from .contrast import calculate_contrast, contrast_stretch, to_grayscale

logger = get_logger(__name__)


@dataclass
class QualityMetrics:
    """Contrast measured before and after preprocessing."""

    contrast_before: float
    contrast_after: float


def decode_image(image: bytes) -> np.ndarray | None:
    """Decode encoded image bytes into a BGR pixel buffer.

    Args:
        image: Encoded image (PNG, JPEG, ...).

    Returns:
        Decoded image, or ``None`` if the bytes are not a decodable image.
    """
    buffer = np.frombuffer(image, dtype=np.uint8)
    if buffer.size == 0:
        return None
    return cv2.imdecode(buffer, cv2.IMREAD_COLOR)


class ImagePreprocessor:
    """Contrast stretch followed by grayscale conversion.

    :meth:`preprocess` never raises: if anything goes wrong the input is
    returned unchanged.

    Args:
        config: Preprocessing configuration.
    """

    def __init__(self, config: PreprocessingConfig) -> None:
        self.config = config

    def preprocess(
        self, image: bytes, progress: ProgressReporter | None = None
    ) -> bytes:
        """Normalize an encoded image for local OCR.

        Args:
            image: Encoded input image.
            progress: Optional progress channel for the current request.

        Returns:
            PNG-encoded grayscale image, or ``image`` itself on any failure.
        """
        if progress is not None:
            progress.update(PREPROCESS_STARTED)
        try:
            return self._process(image)
        except Exception:
            logger.warning("Preprocessing failed, using original image", exc_info=True)
            return image
        finally:
            if progress is not None:
                progress.update(PREPROCESSED)

    def _process(self, image: bytes) -> bytes:
        if not self.config.enabled:
            return image

        decoded = decode_image(image)
        if decoded is None:
            logger.warning("Could not decode image, using original image")
            return image

        stretched = contrast_stretch(
            decoded,
            factor=self.config.contrast_factor,
            midpoint=self.config.contrast_midpoint,
        )
        gray = to_grayscale(stretched)

        ok, encoded = cv2.imencode(".png", gray)
        if not ok:
            logger.warning("Could not re-encode image, using original image")
            return image

        metrics = QualityMetrics(
            contrast_before=calculate_contrast(decoded),
            contrast_after=calculate_contrast(gray),
        )
        logger.info(
            "Preprocessing complete: %dx%d, contrast %.1f->%.1f",
            gray.shape[1],
            gray.shape[0],
            metrics.contrast_before,
            metrics.contrast_after,
        )
        return encoded.tobytes()
