"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel

from idscan.models import DocumentType, ExtractedRecord


class ScanResponse(BaseModel):
    """Response schema for a single scan."""

    success: bool
    document_id: str
    document_type: DocumentType
    fields: dict[str, str]
    raw_text: str
    confidence: float
    provider_id: str
    processing_time_ms: float

    @classmethod
    def from_record(
        cls, record: ExtractedRecord, document_id: str, processing_time_ms: float
    ) -> "ScanResponse":
        return cls(
            success=True,
            document_id=document_id,
            document_type=record.document_type,
            fields=dict(record.fields),
            raw_text=record.raw_text,
            confidence=record.confidence,
            provider_id=record.provider_id,
            processing_time_ms=processing_time_ms,
        )


class BatchItemResponse(BaseModel):
    """Response schema for a single item in a batch scan."""

    filename: str
    result: ScanResponse | None = None
    error: str | None = None


class BatchScanResponse(BaseModel):
    """Response schema for a batch scan of multiple documents."""

    success: bool
    total_documents: int
    successful: int
    failed: int
    results: list[BatchItemResponse]


class DocumentTypeInfo(BaseModel):
    """A supported document type and the fields extracted from it."""

    name: DocumentType
    supported_fields: list[str]


class DocumentTypesResponse(BaseModel):
    """Response schema listing supported document types."""

    document_types: list[DocumentTypeInfo]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
    providers: list[str]
