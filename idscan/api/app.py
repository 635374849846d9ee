"""FastAPI application for the identity document scanner.

Provides REST endpoints for scanning single documents and batches,
listing supported document types, and health checks.
"""

import shutil
import time
import uuid
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from idscan.exceptions import AllProvidersExhausted
from idscan.extraction.extractors import build_extractors
from idscan.pipeline import DocumentScanner
from idscan.utils.config import load_config
from idscan.utils.logger import get_logger

from .schemas import (
    BatchItemResponse,
    BatchScanResponse,
    DocumentTypeInfo,
    DocumentTypesResponse,
    HealthResponse,
    ScanResponse,
)

logger = get_logger(__name__)

_VERSION = "1.0.0"

app = FastAPI(
    title="Identity Document Scanner API",
    description="Recognize, classify, and extract fields from Indian ID documents",
    version=_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_components() -> DocumentScanner:
    """Build the scanner from the current configuration.

    Returns:
        A scanner with the configured provider chain.
    """
    config = load_config()
    return DocumentScanner(config)


_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/bmp",
    "image/webp",
    "application/octet-stream",
}


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status and the configured provider chain."""
    scanner = _get_components()
    return HealthResponse(
        status="healthy",
        version=_VERSION,
        tesseract_available=shutil.which("tesseract") is not None,
        providers=scanner.router.provider_ids,
    )


@app.post("/scan", response_model=ScanResponse)
async def scan_document(
    file: Annotated[UploadFile, File(...)],
) -> ScanResponse:
    """Scan an uploaded identity document image.

    Args:
        file: Uploaded image (PNG, JPEG, TIFF, BMP, or WebP).

    Returns:
        Document type, extracted fields, and recognized text.
    """
    start_time = time.time()

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    try:
        scanner = _get_components()
        content = await file.read()
        # Providers block on network and subprocess I/O.
        record = await run_in_threadpool(scanner.scan, content)
    except AllProvidersExhausted as exc:
        logger.error("Scan failed, no provider available: %s", exc)
        raise HTTPException(status_code=503, detail=exc.message) from exc
    except Exception as exc:
        logger.error("Scan failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    processing_time = (time.time() - start_time) * 1000
    return ScanResponse.from_record(record, str(uuid.uuid4()), processing_time)


@app.post("/scan/batch", response_model=BatchScanResponse)
async def scan_batch(
    files: Annotated[list[UploadFile], File(...)],
) -> BatchScanResponse:
    """Scan multiple uploaded documents, e.g. the front and back of a card.

    Args:
        files: List of uploaded images.

    Returns:
        Per-file outcomes.
    """
    results: list[BatchItemResponse] = []
    successful = 0

    for file in files:
        try:
            result = await scan_document(file)
            results.append(
                BatchItemResponse(filename=file.filename or "unknown", result=result)
            )
            successful += 1
        except HTTPException as exc:
            results.append(
                BatchItemResponse(filename=file.filename or "unknown", error=exc.detail)
            )

    return BatchScanResponse(
        success=successful > 0,
        total_documents=len(files),
        successful=successful,
        failed=len(files) - successful,
        results=results,
    )


@app.get("/document-types", response_model=DocumentTypesResponse)
async def list_document_types() -> DocumentTypesResponse:
    """List supported document types and the fields extracted from each."""
    extractors = build_extractors()
    return DocumentTypesResponse(
        document_types=[
            DocumentTypeInfo(
                name=document_type,
                supported_fields=[str(f) for f in extractor.fields],
            )
            for document_type, extractor in extractors.items()
        ]
    )
