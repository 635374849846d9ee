"""Local Tesseract provider: the fallback that needs no network.

The engine is acquired per request and released on every exit path, so
no engine state can leak from one scan into another.
"""

import io
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import numpy as np
from PIL import Image, UnidentifiedImageError

from idscan.exceptions import ProviderResponseInvalid, ProviderUnavailable
from idscan.models import ProviderResult
from idscan.preprocessing.pipeline import ImagePreprocessor
from idscan.progress import PipelineStage, ProgressReporter
from idscan.utils.config import TesseractConfig
from idscan.utils.logger import get_logger

from .providers import OCRProvider
from .tesseract_engine import TesseractEngine

logger = get_logger(__name__)

EngineFactory = Callable[[], TesseractEngine]


class LocalEngineProvider(OCRProvider):
    """Preprocess, then recognize with a request-scoped Tesseract engine.

    Args:
        config: Tesseract settings.
        preprocessor: Preprocessor applied to the image first.
        engine_factory: Builds a fresh engine; defaults to one built from
            ``config``.
    """

    provider_id = "tesseract"
    is_local = True

    def __init__(
        self,
        config: TesseractConfig,
        preprocessor: ImagePreprocessor,
        engine_factory: EngineFactory | None = None,
    ) -> None:
        self.config = config
        self.preprocessor = preprocessor
        self._engine_factory = engine_factory or self._default_engine

    def _default_engine(self) -> TesseractEngine:
        return TesseractEngine(
            tesseract_cmd=self.config.tesseract_cmd,
            languages=self.config.languages,
            timeout_s=self.config.timeout_s,
        )

    @contextmanager
    def acquire_engine(self) -> Iterator[TesseractEngine]:
        """Yield a fresh engine and close it however the block exits."""
        engine = self._engine_factory()
        try:
            yield engine
        finally:
            engine.close()

    def recognize(self, image: bytes, progress: ProgressReporter) -> ProviderResult:
        progress.enter(PipelineStage.PREPROCESSING)
        processed = self.preprocessor.preprocess(image, progress)
        progress.enter(PipelineStage.RECOGNIZING)

        pixels = self._load_pixels(processed)

        try:
            with self.acquire_engine() as engine:
                result = engine.extract_text(
                    pixels, psm=self.config.psm, on_progress=progress.update
                )
        except (OSError, RuntimeError) as exc:
            # TesseractError and timeouts are RuntimeError,
            # TesseractNotFoundError is an OSError.
            raise ProviderUnavailable(self.provider_id, str(exc)) from exc

        if not result.text.strip():
            raise ProviderResponseInvalid(self.provider_id, "no text detected")

        return ProviderResult(
            raw_text=result.text,
            confidence=result.confidence * 100.0,
            provider_id=self.provider_id,
        )

    def _load_pixels(self, image: bytes) -> np.ndarray:
        try:
            with Image.open(io.BytesIO(image)) as pil_image:
                return np.array(pil_image.convert("L"))
        except (UnidentifiedImageError, OSError, TypeError, ValueError) as exc:
            raise ProviderResponseInvalid(
                self.provider_id, f"image could not be decoded: {exc}"
            ) from exc
