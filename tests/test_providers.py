"""Tests for the remote OCR providers (mocked HTTP)."""

import base64
import json

import httpx
import pytest

from idscan.exceptions import ProviderResponseInvalid, ProviderUnavailable
from idscan.ocr.providers import (
    GoogleVisionProvider,
    OCRSpaceProvider,
    guess_filetype,
)
from idscan.progress import ProgressReporter
from idscan.utils.config import GoogleVisionConfig, OCRSpaceConfig

PNG_MAGIC = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def _transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


class TestGuessFiletype:
    """Tests for magic-byte sniffing."""

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            (b"\xff\xd8\xff\xe0rest", "JPG"),
            (PNG_MAGIC, "PNG"),
            (b"GIF89a", "GIF"),
            (b"BMxxxx", "BMP"),
            (b"II*\x00rest", "TIF"),
            (b"unknown", "JPG"),
        ],
    )
    def test_detects_type(self, data: bytes, expected: str) -> None:
        assert guess_filetype(data) == expected


class TestOCRSpaceProvider:
    """Tests for the OCR.space provider."""

    def test_success(self) -> None:
        captured: dict[str, httpx.Request] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(
                200,
                json={
                    "OCRExitCode": 1,
                    "ParsedResults": [{"ParsedText": "AADHAAR\n1234 5678 9012"}],
                },
            )

        provider = OCRSpaceProvider(OCRSpaceConfig(api_key="k"), _transport(handler))
        result = provider.recognize(PNG_MAGIC, ProgressReporter())

        assert result.raw_text == "AADHAAR\n1234 5678 9012"
        assert result.confidence == 95.0
        assert result.provider_id == "ocrspace"

        request = captured["request"]
        assert request.method == "POST"
        assert request.headers["apikey"] == "k"
        body = request.read()
        assert b'name="OCREngine"' in body
        assert b'name="filetype"' in body
        assert b"PNG" in body

    def test_error_exit_code_is_invalid(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"OCRExitCode": 3, "ErrorMessage": ["File failed validation"]},
            )

        provider = OCRSpaceProvider(OCRSpaceConfig(), _transport(handler))
        with pytest.raises(ProviderResponseInvalid, match="exit code 3"):
            provider.recognize(PNG_MAGIC, ProgressReporter())

    def test_blank_text_is_invalid(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"OCRExitCode": 1, "ParsedResults": [{"ParsedText": " "}]}
            )

        provider = OCRSpaceProvider(OCRSpaceConfig(), _transport(handler))
        with pytest.raises(ProviderResponseInvalid):
            provider.recognize(PNG_MAGIC, ProgressReporter())

    def test_non_json_is_invalid(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>busy</html>")

        provider = OCRSpaceProvider(OCRSpaceConfig(), _transport(handler))
        with pytest.raises(ProviderResponseInvalid, match="not JSON"):
            provider.recognize(PNG_MAGIC, ProgressReporter())

    def test_http_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="unavailable")

        provider = OCRSpaceProvider(OCRSpaceConfig(), _transport(handler))
        with pytest.raises(ProviderUnavailable):
            provider.recognize(PNG_MAGIC, ProgressReporter())

    def test_transport_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        provider = OCRSpaceProvider(OCRSpaceConfig(), _transport(handler))
        with pytest.raises(ProviderUnavailable, match="ocrspace"):
            provider.recognize(PNG_MAGIC, ProgressReporter())


class TestGoogleVisionProvider:
    """Tests for the Google Cloud Vision provider."""

    def test_missing_key_is_unavailable(self) -> None:
        provider = GoogleVisionProvider(GoogleVisionConfig(api_key=None))
        with pytest.raises(ProviderUnavailable, match="API key"):
            provider.recognize(PNG_MAGIC, ProgressReporter())

    def test_success_with_page_confidence(self) -> None:
        captured: dict[str, httpx.Request] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(
                200,
                json={
                    "responses": [
                        {
                            "fullTextAnnotation": {
                                "text": "INCOME TAX DEPARTMENT",
                                "pages": [{"confidence": 0.8}, {"confidence": 0.9}],
                            }
                        }
                    ]
                },
            )

        provider = GoogleVisionProvider(
            GoogleVisionConfig(api_key="secret"), _transport(handler)
        )
        result = provider.recognize(PNG_MAGIC, ProgressReporter())

        assert result.raw_text == "INCOME TAX DEPARTMENT"
        assert result.confidence == pytest.approx(85.0)
        assert result.provider_id == "google_vision"

        request = captured["request"]
        assert request.url.params["key"] == "secret"
        body = json.loads(request.read())
        first = body["requests"][0]
        assert first["features"][0]["type"] == "DOCUMENT_TEXT_DETECTION"
        assert first["imageContext"]["languageHints"] == ["en", "hi"]
        assert base64.b64decode(first["image"]["content"]) == PNG_MAGIC

    def test_default_confidence_without_pages(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"responses": [{"fullTextAnnotation": {"text": "PAN"}}]}
            )

        provider = GoogleVisionProvider(
            GoogleVisionConfig(api_key="secret"), _transport(handler)
        )
        assert provider.recognize(PNG_MAGIC, ProgressReporter()).confidence == 90.0

    def test_top_level_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                403, json={"error": {"code": 403, "message": "API key not valid"}}
            )

        provider = GoogleVisionProvider(
            GoogleVisionConfig(api_key="bad"), _transport(handler)
        )
        with pytest.raises(ProviderUnavailable, match="API key not valid"):
            provider.recognize(PNG_MAGIC, ProgressReporter())

    def test_response_error_is_invalid(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"responses": [{"error": {"message": "Bad image data"}}]}
            )

        provider = GoogleVisionProvider(
            GoogleVisionConfig(api_key="secret"), _transport(handler)
        )
        with pytest.raises(ProviderResponseInvalid):
            provider.recognize(PNG_MAGIC, ProgressReporter())

    def test_missing_annotation_is_invalid(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"responses": [{}]})

        provider = GoogleVisionProvider(
            GoogleVisionConfig(api_key="secret"), _transport(handler)
        )
        with pytest.raises(ProviderResponseInvalid):
            provider.recognize(PNG_MAGIC, ProgressReporter())
