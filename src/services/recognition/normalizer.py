from __future__ import annotations

from services.recognition.exceptions import MalformedInput
from services.recognition.jargon import JargonDictionary


DEFAULT_MIN_TEXT_LENGTH = 2


class TextNormalizer:
    """Trim recognized text, reject noise, and rewrite slang terms.

    Raises MalformedInput for missing text or text shorter than
    ``min_length`` after trimming; such input must never reach the cache or
    the extractor.
    """

    def __init__(
        self, jargon: JargonDictionary, min_length: int = DEFAULT_MIN_TEXT_LENGTH
    ) -> None:
        self._jargon = jargon
        self._min_length = min_length

    def normalize(self, raw: str | None) -> str:
        if raw is None:
            raise MalformedInput("No recognition text")
        text = raw.strip()
        if len(text) < self._min_length:
            raise MalformedInput(f"Text shorter than {self._min_length} characters")
        return self._jargon.translate(text)
