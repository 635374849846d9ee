"""Tesseract OCR engine wrapper used as the local fallback provider.

An engine instance belongs to exactly one scan request: it is created
when the request reaches the local path and closed when the request is
done with it, after which it refuses further work.
"""

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
import pytesseract
from PIL import Image

from idscan.utils.logger import get_logger

logger = get_logger(__name__)

# Step progress reported by the engine itself.
TEXT_PASS_DONE = 60
DATA_PASS_DONE = 90


@dataclass
class OCRWord:
    """A single recognized word with its confidence (0-1)."""

    text: str
    confidence: float
    line_num: int


@dataclass
class OCRResult:
    """Text and word-level confidence for one image."""

    text: str
    words: list[OCRWord]
    language: str
    confidence: float


class TesseractEngine:
    """Wrapper around Tesseract OCR for identity document text.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        languages: Tesseract language models, ``+``-joined.
        timeout_s: Per-call timeout; 0 disables it.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        languages: str = "eng+hin",
        timeout_s: float = 0,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.languages = languages
        self.timeout_s = timeout_s
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether the engine has been released."""
        return self._closed

    def close(self) -> None:
        """Release the engine. Further calls to :meth:`extract_text` fail."""
        if not self._closed:
            logger.debug("Released tesseract engine (%s)", self.languages)
        self._closed = True

    def extract_text(
        self,
        image: np.ndarray,
        psm: int = 6,
        on_progress: Callable[[int], None] | None = None,
    ) -> OCRResult:
        """Extract text from an image along with word confidences.

        Args:
            image: Input image as a numpy array.
            psm: Tesseract page segmentation mode.
            on_progress: Receives the engine's own step progress.

        Returns:
            OCRResult containing full text, words, and mean confidence.

        Raises:
            RuntimeError: If the engine has been closed, or Tesseract timed out.
        """
        if self._closed:
            raise RuntimeError("Tesseract engine used after release")

        config = f"--psm {psm}"
        pil_image = Image.fromarray(image)

        text = pytesseract.image_to_string(
            pil_image, lang=self.languages, config=config, timeout=self.timeout_s
        )
        if on_progress is not None:
            on_progress(TEXT_PASS_DONE)

        data = pytesseract.image_to_data(
            pil_image,
            lang=self.languages,
            config=config,
            timeout=self.timeout_s,
            output_type=pytesseract.Output.DICT,
        )
        if on_progress is not None:
            on_progress(DATA_PASS_DONE)

        words: list[OCRWord] = []
        for i in range(len(data["text"])):
            conf = float(data["conf"][i])
            word_text = str(data["text"][i]).strip()
            if conf > 0 and word_text:
                words.append(
                    OCRWord(
                        text=word_text,
                        confidence=conf / 100.0,
                        line_num=int(data["line_num"][i]),
                    )
                )

        avg_conf = sum(w.confidence for w in words) / len(words) if words else 0.0

        logger.info(
            "Tesseract extracted %d words with average confidence %.2f",
            len(words),
            avg_conf,
        )
        return OCRResult(
            text=text,
            words=words,
            language=self.languages,
            confidence=avg_conf,
        )
