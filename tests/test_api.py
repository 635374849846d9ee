"""Tests for the FastAPI REST endpoints."""

import asyncio
import threading
from unittest.mock import MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from idscan.api.app import app
from idscan.exceptions import AllProvidersExhausted
from idscan.models import DocumentType, ExtractedRecord


@pytest.fixture
def client() -> TestClient:
    """Create a FastAPI test client."""
    return TestClient(app)


def _make_record() -> ExtractedRecord:
    return ExtractedRecord(
        document_type=DocumentType.AADHAAR,
        raw_text="AADHAAR\n1234 5678 9012",
        fields={"aadhaarNumber": "1234 5678 9012"},
        confidence=95.0,
        provider_id="ocrspace",
    )


def _mock_scanner(record: ExtractedRecord | None = None) -> MagicMock:
    scanner = MagicMock()
    scanner.scan.return_value = record or _make_record()
    scanner.router.provider_ids = ["ocrspace", "tesseract"]
    return scanner


class TestHealthEndpoint:
    """Tests for the /health endpoint."""

    @patch("idscan.api.app._get_components")
    def test_health_returns_ok(
        self, mock_components: MagicMock, client: TestClient
    ) -> None:
        mock_components.return_value = _mock_scanner()
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert isinstance(data["tesseract_available"], bool)
        assert data["providers"] == ["ocrspace", "tesseract"]


class TestDocumentTypesEndpoint:
    """Tests for the /document-types endpoint."""

    def test_list_document_types(self, client: TestClient) -> None:
        response = client.get("/document-types")
        assert response.status_code == 200
        types = {t["name"]: t for t in response.json()["document_types"]}
        assert set(types) == {t.value for t in DocumentType}
        assert "aadhaarNumber" in types["aadhaar"]["supported_fields"]
        assert "expiryDate" in types["passport"]["supported_fields"]
        assert types["other"]["supported_fields"] == []


class TestScanEndpoint:
    """Tests for the /scan endpoint."""

    @patch("idscan.api.app._get_components")
    def test_scan_image(
        self, mock_components: MagicMock, client: TestClient, png_bytes: bytes
    ) -> None:
        scanner = _mock_scanner()
        mock_components.return_value = scanner

        response = client.post(
            "/scan",
            files={"file": ("card.png", png_bytes, "image/png")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["document_type"] == "aadhaar"
        assert data["fields"] == {"aadhaarNumber": "1234 5678 9012"}
        assert data["provider_id"] == "ocrspace"
        assert data["confidence"] == 95.0
        assert data["processing_time_ms"] >= 0
        scanner.scan.assert_called_once_with(png_bytes)

    def test_scan_unsupported_type(self, client: TestClient) -> None:
        response = client.post(
            "/scan",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400
        assert "Unsupported" in response.json()["detail"]

    @patch("idscan.api.app._get_components")
    def test_scan_providers_exhausted(
        self, mock_components: MagicMock, client: TestClient, png_bytes: bytes
    ) -> None:
        scanner = _mock_scanner()
        scanner.scan.side_effect = AllProvidersExhausted(
            [("ocrspace", "ocrspace: timeout"), ("tesseract", "tesseract: missing")]
        )
        mock_components.return_value = scanner

        response = client.post(
            "/scan",
            files={"file": ("card.png", png_bytes, "image/png")},
        )

        assert response.status_code == 503
        assert "All OCR providers failed" in response.json()["detail"]

    @patch("idscan.api.app._get_components")
    def test_scan_unexpected_error(
        self, mock_components: MagicMock, client: TestClient, png_bytes: bytes
    ) -> None:
        scanner = _mock_scanner()
        scanner.scan.side_effect = RuntimeError("boom")
        mock_components.return_value = scanner

        response = client.post(
            "/scan",
            files={"file": ("card.png", png_bytes, "image/png")},
        )

        assert response.status_code == 500


class TestBatchEndpoint:
    """Tests for the /scan/batch endpoint."""

    @patch("idscan.api.app._get_components")
    def test_batch_scan(
        self, mock_components: MagicMock, client: TestClient, png_bytes: bytes
    ) -> None:
        mock_components.return_value = _mock_scanner()

        response = client.post(
            "/scan/batch",
            files=[
                ("files", ("front.png", png_bytes, "image/png")),
                ("files", ("back.png", png_bytes, "image/png")),
            ],
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total_documents"] == 2
        assert data["successful"] == 2
        assert data["failed"] == 0
        assert [r["filename"] for r in data["results"]] == ["front.png", "back.png"]

    @patch("idscan.api.app._get_components")
    def test_batch_with_rejected_file(
        self, mock_components: MagicMock, client: TestClient, png_bytes: bytes
    ) -> None:
        mock_components.return_value = _mock_scanner()

        response = client.post(
            "/scan/batch",
            files=[
                ("files", ("front.png", png_bytes, "image/png")),
                ("files", ("notes.txt", b"hello", "text/plain")),
            ],
        )

        data = response.json()
        assert data["successful"] == 1
        assert data["failed"] == 1
        assert data["results"][1]["result"] is None
        assert "Unsupported" in data["results"][1]["error"]


class TestConcurrentScans:
    """Scans run off the event loop."""

    @patch("idscan.api.app._get_components")
    def test_two_scans_in_flight_together(
        self, mock_components: MagicMock, png_bytes: bytes
    ) -> None:
        # Each scan waits until the other one has started.
        both_started = threading.Barrier(2, timeout=5)

        def slow_scan(content: bytes) -> ExtractedRecord:
            both_started.wait()
            return _make_record()

        scanner = _mock_scanner()
        scanner.scan.side_effect = slow_scan
        mock_components.return_value = scanner

        async def post_both() -> list[httpx.Response]:
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(
                transport=transport, base_url="http://testserver"
            ) as http:
                return await asyncio.gather(
                    http.post(
                        "/scan", files={"file": ("front.png", png_bytes, "image/png")}
                    ),
                    http.post(
                        "/scan", files={"file": ("back.png", png_bytes, "image/png")}
                    ),
                )

        responses = asyncio.run(post_both())

        assert [r.status_code for r in responses] == [200, 200]
        assert scanner.scan.call_count == 2
