"""Shared test fixtures for the identity document scanner test suite."""

from pathlib import Path

import cv2
import numpy as np
import pytest

from idscan.exceptions import ProviderUnavailable
from idscan.models import ProviderResult
from idscan.ocr.providers import OCRProvider
from idscan.progress import ProgressReporter


class FakeProvider(OCRProvider):
    """Provider returning canned text, or raising, and counting calls."""

    def __init__(
        self,
        provider_id: str,
        text: str | None = None,
        error: Exception | None = None,
        is_local: bool = False,
        confidence: float = 80.0,
    ) -> None:
        self.provider_id = provider_id
        self.is_local = is_local
        self.text = text
        self.error = error
        self.confidence = confidence
        self.calls = 0

    def recognize(self, image: bytes, progress: ProgressReporter) -> ProviderResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.text is None:
            raise ProviderUnavailable(self.provider_id, "no canned text")
        return ProviderResult(self.text, self.confidence, self.provider_id)


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.zeros((200, 300), dtype=np.uint8)
    image[50:150, 50:250] = 255
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic BGR test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (200, 150, 100)
    return image


@pytest.fixture
def png_bytes(sample_color_image: np.ndarray) -> bytes:
    """Encode the synthetic colour image as PNG."""
    ok, encoded = cv2.imencode(".png", sample_color_image)
    assert ok
    return encoded.tobytes()


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"


@pytest.fixture
def aadhaar_text() -> str:
    return (
        "GOVERNMENT OF INDIA\n"
        "AADHAAR\n"
        "Name: RAVI KUMAR\n"
        "DOB: 01/01/1990\n"
        "1234 5678 9012\n"
    )


@pytest.fixture
def passport_text() -> str:
    return (
        "REPUBLIC OF INDIA\n"
        "Type P Country Code IND\n"
        "J = $3879331\n"
        "Surname\n"
        "SHARMA\n"
        "Given Name(s)\n"
        "RAHUL\n"
        "Nationality INDIAN Sex M\n"
        "Date of Birth 15/03/1985\n"
        "Place of Birth\n"
        "MUMBAI\n"
        "Place of Issue\n"
        "DELHI\n"
        "Date of Issue 10/05/2015\n"
        "Date of Expiry 09/05/2025\n"
        "P<INDSHARMA<<RAHUL<<<<<<<<<<<<<<<<<<<<<<<<<<\n"
    )
