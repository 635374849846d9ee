"""Contrast and grayscale transforms applied before local OCR."""

import cv2
import numpy as np

from idscan.utils.logger import get_logger

logger = get_logger(__name__)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert a BGR image to grayscale using luminance weights.

    OpenCV weights channels as 0.299 R + 0.587 G + 0.114 B.

    Args:
        image: Input image (BGR, BGRA or grayscale).

    Returns:
        Grayscale image.
    """
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def contrast_stretch(
    image: np.ndarray,
    factor: float = 1.5,
    midpoint: int = 128,
) -> np.ndarray:
    """Apply a linear contrast stretch around a midpoint, per channel.

    Each value becomes ``(v - midpoint) * factor + midpoint``, rounded and
    clamped to [0, 255].

    Args:
        image: Input ``uint8`` image, any number of channels.
        factor: Contrast multiplier.
        midpoint: Intensity that stays fixed.

    Returns:
        Contrast-stretched ``uint8`` image of the same shape.
    """
    stretched = (image.astype(np.float32) - midpoint) * factor + midpoint
    result = np.clip(np.rint(stretched), 0, 255).astype(np.uint8)
    logger.debug(
        "Applied contrast stretch (factor=%.2f, midpoint=%d)", factor, midpoint
    )
    return result


def calculate_contrast(image: np.ndarray) -> float:
    """Calculate contrast as the standard deviation of gray intensities.

    Args:
        image: Input image (BGR or grayscale).

    Returns:
        Contrast score (higher means more contrast).
    """
    return float(to_grayscale(image).std())
