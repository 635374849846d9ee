"""Ordered provider fallback.

Providers are tried one after another in priority order. Each try is an
:class:`Attempt` that either holds a result or the error that ended it;
the router walks the chain lazily and stops at the first success. The
last link is always the local engine, so a result is possible without
any network access.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import httpx

from idscan.exceptions import (
    AllProvidersExhausted,
    ProviderError,
    ProviderResponseInvalid,
    ProviderUnavailable,
)
from idscan.models import ProgressSink, ProviderResult
from idscan.preprocessing.pipeline import ImagePreprocessor
from idscan.progress import SUBMITTED, PipelineStage, ProgressReporter, as_reporter
from idscan.utils.config import AppConfig
from idscan.utils.logger import get_logger

from .local_provider import LocalEngineProvider
from .providers import GoogleVisionProvider, OCRProvider, OCRSpaceProvider

logger = get_logger(__name__)


@dataclass(frozen=True)
class Attempt:
    """Outcome of trying one provider: a result or an error, never both."""

    provider_id: str
    result: ProviderResult | None = None
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None


def attempt(
    provider: OCRProvider, image: bytes, progress: ProgressReporter
) -> Attempt:
    """Run one provider and capture its outcome.

    Args:
        provider: Provider to try.
        image: Encoded image bytes.
        progress: Progress channel of the current request.

    Returns:
        The attempt outcome. Never raises for provider failures.
    """
    try:
        result = provider.recognize(image, progress)
    except ProviderError as exc:
        return Attempt(provider.provider_id, error=exc)
    except Exception as exc:
        return Attempt(
            provider.provider_id,
            error=ProviderUnavailable(
                provider.provider_id, f"{type(exc).__name__}: {exc}"
            ),
        )

    if not result.raw_text or not result.raw_text.strip():
        return Attempt(
            provider.provider_id,
            error=ProviderResponseInvalid(provider.provider_id, "empty text"),
        )
    return Attempt(provider.provider_id, result=result)


class ProviderRouter:
    """Tries providers in priority order until one produces text.

    Args:
        providers: Priority-ordered providers. The last one must be local.

    Raises:
        ValueError: If the chain is empty or does not end in a local provider.
    """

    def __init__(self, providers: Sequence[OCRProvider]) -> None:
        if not providers:
            raise ValueError("At least one OCR provider is required")
        if not providers[-1].is_local:
            raise ValueError(
                f"The last OCR provider must be local, got {providers[-1]!r}"
            )
        self.providers = tuple(providers)

    @property
    def provider_ids(self) -> list[str]:
        return [p.provider_id for p in self.providers]

    def attempts(self, image: bytes, progress: ProgressReporter) -> Iterator[Attempt]:
        """Lazily yield one attempt per provider, in priority order.

        Args:
            image: Encoded image bytes.
            progress: Progress channel of the current request.
        """
        for provider in self.providers:
            if not provider.is_local:
                progress.enter(PipelineStage.RECOGNIZING)
                progress.update(SUBMITTED)
            outcome = attempt(provider, image, progress)
            progress.enter(PipelineStage.RECOGNIZING)
            yield outcome

    def recognize(
        self,
        image: bytes,
        progress: ProgressReporter | ProgressSink | None = None,
    ) -> ProviderResult:
        """Recognize text using the first provider that succeeds.

        Args:
            image: Encoded image bytes.
            progress: Progress reporter or bare callback.

        Returns:
            The first successful provider result.

        Raises:
            AllProvidersExhausted: If every provider failed.
        """
        reporter = as_reporter(progress)
        failures: list[tuple[str, str]] = []
        last_error: ProviderError | None = None

        for outcome in self.attempts(image, reporter):
            if outcome.result is not None:
                logger.info(
                    "Recognized text with %s (confidence %.1f)",
                    outcome.provider_id,
                    outcome.result.confidence,
                )
                reporter.complete()
                return outcome.result

            last_error = outcome.error
            failures.append((outcome.provider_id, str(outcome.error)))
            logger.warning("Provider %s failed: %s", outcome.provider_id, outcome.error)

        reporter.enter(PipelineStage.FAILED)
        reporter.fail()
        logger.error("All %d OCR providers failed", len(failures))
        raise AllProvidersExhausted(failures, last_error)


def build_providers(
    config: AppConfig,
    transport: httpx.BaseTransport | None = None,
) -> list[OCRProvider]:
    """Build the provider chain described by the configuration.

    Remote providers without credentials are skipped. The local engine is
    always placed last, whether or not the configuration lists it.

    Args:
        config: Application configuration.
        transport: Optional ``httpx`` transport shared by remote providers.

    Returns:
        Priority-ordered providers ending in the local engine.
    """
    providers: list[OCRProvider] = []
    for name in config.ocr.providers:
        if name == "ocrspace":
            providers.append(OCRSpaceProvider(config.ocr.ocrspace, transport))
        elif name == "google_vision":
            if not config.ocr.google_vision.api_key:
                logger.info("Google Vision API key not set, skipping provider")
                continue
            providers.append(GoogleVisionProvider(config.ocr.google_vision, transport))
        elif name == "tesseract":
            continue
        else:
            logger.warning("Unknown OCR provider '%s' ignored", name)

    if config.ocr.providers and config.ocr.providers[-1] != "tesseract":
        logger.info("Local tesseract engine appended as last-resort provider")

    providers.append(
        LocalEngineProvider(
            config.ocr.tesseract,
            ImagePreprocessor(config.preprocessing),
        )
    )
    return providers
