"""Recognition providers: one abstract capability, several backends.

Every provider turns encoded image bytes into a :class:`ProviderResult`
or raises a :class:`ProviderError`. The remote providers here talk to
hosted OCR services over HTTP; the local engine lives in
:mod:`idscan.ocr.local_provider`.
"""

import base64
from abc import ABC, abstractmethod
from typing import Any

import httpx

from idscan.exceptions import ProviderResponseInvalid, ProviderUnavailable
from idscan.models import ProviderResult
from idscan.progress import ProgressReporter
from idscan.utils.config import GoogleVisionConfig, OCRSpaceConfig
from idscan.utils.logger import get_logger

logger = get_logger(__name__)

# OCR.space reports no confidence; this is a fixed estimate.
OCRSPACE_CONFIDENCE = 95.0
GOOGLE_VISION_DEFAULT_CONFIDENCE = 90.0

_MAGIC_FILETYPES: tuple[tuple[bytes, str], ...] = (
    (b"\xff\xd8\xff", "JPG"),
    (b"\x89PNG\r\n\x1a\n", "PNG"),
    (b"GIF8", "GIF"),
    (b"BM", "BMP"),
    (b"II*\x00", "TIF"),
    (b"MM\x00*", "TIF"),
)


def guess_filetype(image: bytes) -> str:
    """Guess the OCR.space ``filetype`` parameter from magic bytes.

    Args:
        image: Encoded image bytes.

    Returns:
        File type code, ``JPG`` when unknown.
    """
    for magic, filetype in _MAGIC_FILETYPES:
        if image.startswith(magic):
            return filetype
    return "JPG"


class OCRProvider(ABC):
    """A text recognition backend.

    Attributes:
        provider_id: Stable identifier used in logs and results.
        is_local: Whether this provider works without network access.
    """

    provider_id: str = "provider"
    is_local: bool = False

    @abstractmethod
    def recognize(self, image: bytes, progress: ProgressReporter) -> ProviderResult:
        """Recognize text in an image.

        Args:
            image: Encoded image bytes, unmodified.
            progress: Progress channel of the current request.

        Returns:
            Recognized text with confidence.

        Raises:
            ProviderUnavailable: On transport or credential failures.
            ProviderResponseInvalid: On malformed or empty responses.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.provider_id!r})"


def _decode_json(provider_id: str, response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise ProviderResponseInvalid(
            provider_id,
            "response is not JSON",
            {"status_code": response.status_code},
        ) from exc
    if not isinstance(payload, dict):
        raise ProviderResponseInvalid(provider_id, "response is not a JSON object")
    return payload


class OCRSpaceProvider(OCRProvider):
    """OCR.space parse API.

    Args:
        config: Endpoint, key, and request settings.
        transport: Optional ``httpx`` transport, used by tests.
    """

    provider_id = "ocrspace"

    def __init__(
        self,
        config: OCRSpaceConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def recognize(self, image: bytes, progress: ProgressReporter) -> ProviderResult:
        data = {
            "language": self.config.language,
            "isOverlayRequired": "false",
            "detectOrientation": "true",
            "scale": "true",
            "OCREngine": str(self.config.engine),
            "filetype": guess_filetype(image),
        }
        files = {"file": ("document", image, "application/octet-stream")}

        try:
            with httpx.Client(
                timeout=self.config.timeout_s, transport=self._transport
            ) as client:
                response = client.post(
                    self.config.endpoint,
                    data=data,
                    files=files,
                    headers={"apikey": self.config.api_key},
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(self.provider_id, str(exc)) from exc

        payload = _decode_json(self.provider_id, response)

        exit_code = payload.get("OCRExitCode")
        results = payload.get("ParsedResults") or []
        if exit_code != 1 or not results:
            message = payload.get("ErrorMessage") or "unknown error"
            if isinstance(message, list):
                message = "; ".join(str(m) for m in message)
            raise ProviderResponseInvalid(
                self.provider_id,
                f"exit code {exit_code}: {message}",
            )

        text = results[0].get("ParsedText") or ""
        if not text.strip():
            raise ProviderResponseInvalid(self.provider_id, "no text detected")

        logger.info("OCR.space returned %d characters", len(text))
        return ProviderResult(
            raw_text=text,
            confidence=OCRSPACE_CONFIDENCE,
            provider_id=self.provider_id,
        )


class GoogleVisionProvider(OCRProvider):
    """Google Cloud Vision ``images:annotate`` with document text detection.

    Args:
        config: Endpoint, key, and language hints.
        transport: Optional ``httpx`` transport, used by tests.
    """

    provider_id = "google_vision"

    def __init__(
        self,
        config: GoogleVisionConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def _build_request(self, image: bytes) -> dict[str, Any]:
        return {
            "requests": [
                {
                    "image": {"content": base64.b64encode(image).decode("ascii")},
                    "features": [{"type": "DOCUMENT_TEXT_DETECTION", "maxResults": 1}],
                    "imageContext": {"languageHints": self.config.language_hints},
                }
            ]
        }

    def recognize(self, image: bytes, progress: ProgressReporter) -> ProviderResult:
        if not self.config.api_key:
            raise ProviderUnavailable(self.provider_id, "API key not configured")

        try:
            with httpx.Client(
                timeout=self.config.timeout_s, transport=self._transport
            ) as client:
                response = client.post(
                    self.config.endpoint,
                    params={"key": self.config.api_key},
                    json=self._build_request(image),
                )
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(self.provider_id, str(exc)) from exc

        payload = _decode_json(self.provider_id, response)

        if "error" in payload:
            error = payload["error"]
            if isinstance(error, dict):
                error = error.get("message", error)
            raise ProviderUnavailable(
                self.provider_id,
                str(error),
                {"status_code": response.status_code},
            )
        if response.is_error:
            raise ProviderUnavailable(
                self.provider_id, f"HTTP {response.status_code}"
            )

        responses = payload.get("responses") or [{}]
        first = responses[0] or {}
        if "error" in first:
            raise ProviderResponseInvalid(self.provider_id, str(first["error"]))

        annotation = first.get("fullTextAnnotation") or {}
        text = annotation.get("text") or ""
        if not text.strip():
            raise ProviderResponseInvalid(self.provider_id, "no text detected")

        logger.info("Google Vision returned %d characters", len(text))
        return ProviderResult(
            raw_text=text,
            confidence=self._confidence(annotation),
            provider_id=self.provider_id,
        )

    @staticmethod
    def _confidence(annotation: dict[str, Any]) -> float:
        """Mean page confidence on a 0-100 scale, or a fixed estimate."""
        scores = [
            page["confidence"]
            for page in annotation.get("pages", [])
            if isinstance(page, dict) and "confidence" in page
        ]
        if not scores:
            return GOOGLE_VISION_DEFAULT_CONFIDENCE
        return 100.0 * sum(scores) / len(scores)
