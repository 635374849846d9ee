"""Core data types shared by every stage of the scan pipeline."""

import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any


class DocumentType(StrEnum):
    """Supported identity document types."""

    AADHAAR = "aadhaar"
    PASSPORT = "passport"
    PAN = "pan"
    DRIVING_LICENSE = "driving_license"
    VOTER_ID = "voter_id"
    OTHER = "other"


class FieldName(StrEnum):
    """Names of extracted fields, as they appear in output records."""

    NAME = "name"
    AADHAAR_NUMBER = "aadhaarNumber"
    PAN_NUMBER = "panNumber"
    PASSPORT_NUMBER = "passportNumber"
    ID_NUMBER = "idNumber"
    DATE_OF_BIRTH = "dateOfBirth"
    GENDER = "gender"
    ADDRESS = "address"
    FATHER_NAME = "fatherName"
    HUSBAND_NAME = "husbandName"
    NATIONALITY = "nationality"
    ISSUE_DATE = "issueDate"
    EXPIRY_DATE = "expiryDate"
    PLACE_OF_ISSUE = "placeOfIssue"
    PLACE_OF_BIRTH = "placeOfBirth"
    DISTRICT = "district"
    STATE = "state"
    PINCODE = "pincode"
    CONSTITUENCY = "constituency"


DATE_FIELDS = frozenset(
    {FieldName.DATE_OF_BIRTH, FieldName.ISSUE_DATE, FieldName.EXPIRY_DATE}
)

ProgressSink = Callable[[int], None]


@dataclass
class RecognitionRequest:
    """One scan attempt: the image and where to report progress."""

    image: bytes
    progress_sink: ProgressSink | None = None
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])


@dataclass(frozen=True)
class ProviderResult:
    """Text produced by exactly one successful provider attempt.

    ``confidence`` is on a 0-100 scale and is clamped into that range.
    """

    raw_text: str
    confidence: float
    provider_id: str

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "confidence", float(min(100.0, max(0.0, self.confidence)))
        )


@dataclass(frozen=True)
class ExtractedRecord:
    """Final output of the pipeline. ``fields`` is read-only."""

    document_type: DocumentType
    raw_text: str
    fields: Mapping[str, str]
    confidence: float
    provider_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape handed to persistence collaborators."""
        return {
            "documentType": self.document_type.value,
            "rawText": self.raw_text,
            "fields": dict(self.fields),
            "confidence": self.confidence,
            "providerId": self.provider_id,
        }
