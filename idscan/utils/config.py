"""Configuration management for the identity document scanner.

Loads and validates YAML configuration with defaults for preprocessing,
the OCR provider chain, and field extraction. Provider credentials may be
supplied through environment variables instead of the file.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

_ENV_PROVIDERS = "IDSCAN_OCR_PROVIDERS"
_ENV_OCRSPACE_KEY = "IDSCAN_OCRSPACE_API_KEY"
_ENV_GOOGLE_KEY = "IDSCAN_GOOGLE_VISION_API_KEY"


class PreprocessingConfig(BaseModel):
    """Configuration for local-engine image preprocessing."""

    enabled: bool = True
    contrast_factor: float = 1.5
    contrast_midpoint: int = 128


class OCRSpaceConfig(BaseModel):
    """Configuration for the OCR.space remote provider."""

    endpoint: str = "https://api.ocr.space/parse/image"
    api_key: str = "helloworld"
    language: str = "eng"
    engine: int = 2
    timeout_s: float = 30.0


class GoogleVisionConfig(BaseModel):
    """Configuration for the Google Cloud Vision remote provider."""

    endpoint: str = "https://vision.googleapis.com/v1/images:annotate"
    api_key: str | None = None
    language_hints: list[str] = Field(default_factory=lambda: ["en", "hi"])
    timeout_s: float = 30.0


class TesseractConfig(BaseModel):
    """Configuration for the local Tesseract engine."""

    tesseract_cmd: str | None = None
    languages: str = "eng+hin"
    psm: int = 6
    timeout_s: float = 60.0


class OCRConfig(BaseModel):
    """Provider priority list and per-provider settings."""

    providers: list[str] = Field(
        default_factory=lambda: ["ocrspace", "google_vision", "tesseract"]
    )
    ocrspace: OCRSpaceConfig = Field(default_factory=OCRSpaceConfig)
    google_vision: GoogleVisionConfig = Field(default_factory=GoogleVisionConfig)
    tesseract: TesseractConfig = Field(default_factory=TesseractConfig)


class ExtractionConfig(BaseModel):
    """Year buckets and thresholds for field extraction."""

    birth_years: tuple[int, int] = (1900, 2010)
    issue_years: tuple[int, int] = (2000, 2020)
    expiry_years: tuple[int, int] = (2020, 2100)
    min_address_length: int = 10

    @field_validator("birth_years", "issue_years", "expiry_years")
    @classmethod
    def _ordered(cls, value: tuple[int, int]) -> tuple[int, int]:
        if value[0] > value[1]:
            raise ValueError(f"year range {value} is reversed")
        return value


class ServerConfig(BaseModel):
    """Bind address of the HTTP service."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Overlay provider settings taken from environment variables.

    Args:
        raw: Parsed YAML mapping (may be empty).

    Returns:
        The same mapping with environment overrides applied.
    """
    ocr = raw.get("ocr") or {}
    raw["ocr"] = ocr

    providers = os.environ.get(_ENV_PROVIDERS)
    if providers:
        ocr["providers"] = [p.strip() for p in providers.split(",") if p.strip()]

    ocrspace_key = os.environ.get(_ENV_OCRSPACE_KEY)
    if ocrspace_key:
        # An empty YAML section parses as None.
        ocr["ocrspace"] = {**(ocr.get("ocrspace") or {}), "api_key": ocrspace_key}

    google_key = os.environ.get(_ENV_GOOGLE_KEY)
    if google_key:
        ocr["google_vision"] = {
            **(ocr.get("google_vision") or {}),
            "api_key": google_key,
        }

    return raw


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    raw: dict[str, Any] = {}
    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    else:
        logger.info("No config file found at %s, using defaults", path)

    return AppConfig(**_apply_env_overrides(raw))
