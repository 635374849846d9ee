"""End-to-end scan pipeline.

Orchestrates the stages of one scan: text recognition through the
provider chain, document classification, and field extraction.
"""

import time

from idscan.classification.classifier import DocumentClassifier
from idscan.extraction.engine import FieldExtractionEngine
from idscan.models import ExtractedRecord, ProgressSink, RecognitionRequest
from idscan.ocr.router import ProviderRouter, build_providers
from idscan.progress import PipelineStage, ProgressReporter
from idscan.utils.config import AppConfig
from idscan.utils.logger import get_request_logger


class DocumentScanner:
    """Turns an image of an identity document into an :class:`ExtractedRecord`.

    Args:
        config: Application configuration.
        router: Provider router; built from ``config`` if omitted.
        classifier: Document classifier; the default rule table if omitted.
        extraction_engine: Field extraction engine; built from ``config``
            if omitted.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        router: ProviderRouter | None = None,
        classifier: DocumentClassifier | None = None,
        extraction_engine: FieldExtractionEngine | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.router = router or ProviderRouter(build_providers(self.config))
        self.classifier = classifier or DocumentClassifier()
        self.extraction_engine = extraction_engine or FieldExtractionEngine(
            self.config.extraction
        )

    def scan(
        self, image: bytes, on_progress: ProgressSink | None = None
    ) -> ExtractedRecord:
        """Scan one image.

        Args:
            image: Encoded image bytes (PNG, JPEG, ...).
            on_progress: Optional callback receiving progress percentages.

        Returns:
            The extracted record.

        Raises:
            AllProvidersExhausted: If no provider could recognize any text.
        """
        request = RecognitionRequest(image=image, progress_sink=on_progress)
        log = get_request_logger(__name__, request.request_id)
        progress = ProgressReporter(request.progress_sink)
        start_time = time.time()

        log.info("Scanning image (%d bytes)", len(request.image))
        result = self.router.recognize(request.image, progress)

        progress.enter(PipelineStage.CLASSIFYING)
        document_type = self.classifier.classify(result.raw_text)

        progress.enter(PipelineStage.EXTRACTING)
        fields = self.extraction_engine.extract(result.raw_text, document_type)

        progress.enter(PipelineStage.DONE)
        elapsed_ms = (time.time() - start_time) * 1000
        log.info(
            "Scan complete: %s via %s, %d fields in %.1f ms",
            document_type,
            result.provider_id,
            len(fields),
            elapsed_ms,
        )
        return ExtractedRecord(
            document_type=document_type,
            raw_text=result.raw_text,
            fields=fields,
            confidence=result.confidence,
            provider_id=result.provider_id,
        )
