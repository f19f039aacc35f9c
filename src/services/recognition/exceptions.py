"""Failure taxonomy for the recognition pipeline.

None of these escape the pipeline: each is caught at the stage that raised it
and degraded to "no new information this cycle". They exist so the stages can
log a stable ``error_code`` and so tests can assert on the degrade path.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False)
class RecognitionError(Exception):
    """Base class for recognition pipeline errors."""

    message: str
    error_code: str

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


class ExtractionFailure(RecognitionError):
    def __init__(self, message: str = "Field extractor failed or returned nothing") -> None:
        super().__init__(message=message, error_code="extraction_failed")


class LookupFailure(RecognitionError):
    def __init__(self, message: str = "Reference store lookup failed") -> None:
        super().__init__(message=message, error_code="lookup_failed")


class DictionaryReloadFailure(RecognitionError):
    def __init__(self, message: str = "Failed to reload jargon mapping") -> None:
        super().__init__(message=message, error_code="jargon_reload_failed")


class MalformedInput(RecognitionError):
    def __init__(self, message: str = "Recognition text missing or too short") -> None:
        super().__init__(message=message, error_code="malformed_input")
