"""Exception hierarchy for the identity document scanner.

Hierarchy:
    DocumentScanError
    ├── ProviderError
    │   ├── ProviderUnavailable
    │   └── ProviderResponseInvalid
    └── AllProvidersExhausted

Provider errors never leave the provider router; only
``AllProvidersExhausted`` is visible to callers of the pipeline.
"""

from typing import Any


class DocumentScanError(Exception):
    """Base exception for all scanner errors.

    Attributes:
        message: Human-readable error message.
        details: Additional context for diagnostics.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ProviderError(DocumentScanError):
    """A single recognition provider failed."""

    def __init__(
        self,
        provider_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.provider_id = provider_id
        super().__init__(f"{provider_id}: {message}", details)


class ProviderUnavailable(ProviderError):
    """Transport, credential, or engine failure of one provider."""


class ProviderResponseInvalid(ProviderError):
    """A provider answered, but with malformed or empty output."""


class AllProvidersExhausted(DocumentScanError):
    """Every configured provider, including the local engine, failed.

    Attributes:
        attempts: Ordered ``(provider_id, error message)`` pairs.
        last_error: The error raised by the final attempt.
    """

    def __init__(
        self,
        attempts: list[tuple[str, str]],
        last_error: BaseException | None = None,
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        last_message = str(last_error) if last_error else "no providers configured"
        super().__init__(
            f"All OCR providers failed; last error: {last_message}",
            {"attempted": [provider_id for provider_id, _ in attempts]},
        )


__all__ = [
    "AllProvidersExhausted",
    "DocumentScanError",
    "ProviderError",
    "ProviderResponseInvalid",
    "ProviderUnavailable",
]
