"""Field extraction dispatch."""

from collections.abc import Mapping

from idscan.models import DocumentType
from idscan.utils.config import ExtractionConfig
from idscan.utils.logger import get_logger

from .dates import DatePool
from .extractors import DocumentExtractor, build_extractors
from .rules import TextViews

logger = get_logger(__name__)


class FieldExtractionEngine:
    """Runs the extraction table of a document type over recognized text.

    Extraction is best-effort: a rule that fails is logged and skipped,
    and whatever was found is returned. ``extract`` never raises.

    Args:
        config: Extraction settings used to build the default tables.
        extractors: Optional pre-built tables, keyed by document type.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        extractors: Mapping[DocumentType, DocumentExtractor] | None = None,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.extractors = dict(extractors or build_extractors(self.config))

    def extract(
        self, raw_text: str, document_type: DocumentType | str
    ) -> dict[str, str]:
        """Extract the fields of ``document_type`` from ``raw_text``.

        Args:
            raw_text: Verbatim recognized text.
            document_type: Type chosen by the classifier.

        Returns:
            Mapping of camelCase field name to value. Fields that were not
            found are absent.
        """
        fields: dict[str, str] = {}
        try:
            extractor = self.extractors.get(DocumentType(document_type))
            if extractor is None or not raw_text:
                return fields

            views = TextViews.of(raw_text)
            for rule in extractor.rules:
                if rule.field in fields:
                    continue
                try:
                    value = rule.first(views)
                except Exception as exc:
                    logger.warning(
                        "Rule for %s failed on %s: %s", rule.field, document_type, exc
                    )
                    continue
                if value is not None:
                    fields[rule.field] = value

            if extractor.date_rules:
                pool = DatePool(raw_text)
                try:
                    fields.update(pool.assign(extractor.date_rules))
                except Exception as exc:
                    logger.warning("Date assignment failed: %s", exc)
        except Exception as exc:
            logger.error("Field extraction aborted for %s: %s", document_type, exc)

        logger.info("Extracted %d fields for %s", len(fields), document_type)
        return {str(name): value for name, value in fields.items()}
