"""Document-type classification from recognized text.

Rules are evaluated in a fixed order and the first match wins. The
order is a tuning policy: identifier formats overlap (a grouped digit
run can look like several documents' numbers), so the most distinctive
signal, the passport machine-readable zone, is checked first and the
most generic one, the voter EPIC number, last.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from idscan.models import DocumentType
from idscan.utils.logger import get_logger

logger = get_logger(__name__)

_ARTIFACT_SPACES = re.compile(r"[<>]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Normalize recognized text for matching.

    Replaces ``<`` and ``>`` with spaces, drops ``$``, collapses
    whitespace runs, and upper-cases.

    Args:
        text: Raw recognized text.

    Returns:
        Normalized text.
    """
    text = _ARTIFACT_SPACES.sub(" ", text).replace("$", "")
    return _WHITESPACE.sub(" ", text).strip().upper()


def keyword_pattern(keyword: str) -> re.Pattern[str]:
    """Compile a keyword check.

    Latin keywords must match on word boundaries so that ``PAN`` does not
    fire inside ``COMPANY``. Devanagari vowel signs are not word
    characters to ``re``, so those keywords use plain containment.

    Args:
        keyword: Upper-case keyword.

    Returns:
        Compiled pattern.
    """
    if keyword.isascii():
        return re.compile(rf"\b{re.escape(keyword)}\b")
    return re.compile(re.escape(keyword))


@dataclass(frozen=True)
class ClassificationRule:
    """Evidence for one document type.

    Attributes:
        document_type: Type returned when the rule matches.
        keywords: Upper-case keywords checked against normalized text.
        patterns: Structural regexes checked against normalized text.
        raw_patterns: Structural regexes checked against the raw text,
            for signals that normalization removes.
    """

    document_type: DocumentType
    keywords: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()
    raw_patterns: tuple[str, ...] = ()
    _compiled: tuple[re.Pattern[str], ...] = field(
        init=False, repr=False, compare=False
    )
    _compiled_raw: tuple[re.Pattern[str], ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        compiled = [keyword_pattern(k) for k in self.keywords]
        compiled.extend(re.compile(p) for p in self.patterns)
        object.__setattr__(self, "_compiled", tuple(compiled))
        object.__setattr__(
            self, "_compiled_raw", tuple(re.compile(p) for p in self.raw_patterns)
        )

    def matches(self, normalized: str, raw: str) -> bool:
        """Return whether any keyword or structural check fires."""
        return any(p.search(normalized) for p in self._compiled) or any(
            p.search(raw) for p in self._compiled_raw
        )


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        DocumentType.PASSPORT,
        keywords=("PASSPORT", "पासपोर्ट", "REPUBLIC OF INDIA"),
        patterns=(r"\b[A-Z]\d{7}\b",),
        raw_patterns=(r"P<[A-Z]{3}", r"\$\s?\d{7,8}\b"),
    ),
    ClassificationRule(
        DocumentType.AADHAAR,
        keywords=(
            "AADHAAR",
            "AADHAR",
            "UNIQUE IDENTIFICATION AUTHORITY",
            "आधार",
        ),
        patterns=(r"\b\d{4} ?\d{4} ?\d{4}\b",),
    ),
    ClassificationRule(
        DocumentType.PAN,
        keywords=(
            "PERMANENT ACCOUNT NUMBER",
            "INCOME TAX",
            "PAN",
            "पैन",
            "आयकर",
        ),
        patterns=(r"\b[A-Z]{5}\d{4}[A-Z]\b",),
    ),
    ClassificationRule(
        DocumentType.DRIVING_LICENSE,
        keywords=(
            "DRIVING LICENSE",
            "DRIVING LICENCE",
            "DL NO",
            "ड्राइविंग लाइसेंस",
        ),
        patterns=(r"\b[A-Z]{2}[- ]?\d{2}[- ]?\d{4}[- ]?\d{7}\b",),
    ),
    ClassificationRule(
        DocumentType.VOTER_ID,
        keywords=(
            "VOTER",
            "EPIC",
            "ELECTOR",
            "ELECTION COMMISSION",
            "मतदाता",
            "निर्वाचन",
        ),
        patterns=(r"\b[A-Z]{3}\d{7}\b",),
    ),
)


class DocumentClassifier:
    """Maps recognized text to a :class:`DocumentType`.

    Args:
        rules: Ordered rules; the first match wins. Defaults to the
            standard passport > aadhaar > pan > driving licence > voter
            precedence.
    """

    def __init__(self, rules: Sequence[ClassificationRule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def classify(self, raw_text: str) -> DocumentType:
        """Classify recognized text. Always returns a type.

        Args:
            raw_text: Verbatim provider output.

        Returns:
            The first matching type, or ``DocumentType.OTHER``.
        """
        normalized = normalize_text(raw_text)
        for rule in self.rules:
            if rule.matches(normalized, raw_text):
                logger.info("Classified document as %s", rule.document_type)
                return rule.document_type

        logger.info("No classification rule matched, using %s", DocumentType.OTHER)
        return DocumentType.OTHER
