"""Stateless recognition pipeline: normalize -> cache -> extract -> enrich."""

from __future__ import annotations

import asyncio
import logging
import threading
import time

from core.observability import get_tracer
from schemas.recognition import ExtractionFragment
from services.recognition.cache import ExtractionCache
from services.recognition.enricher import ReferenceEnricher
from services.recognition.exceptions import ExtractionFailure, MalformedInput
from services.recognition.interfaces import FieldExtractorProtocol
from services.recognition.normalizer import TextNormalizer


logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class ExtractionStats:
    """Call count and latency of extractor invocations (diagnostic only)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.total_calls = 0
        self.total_time_ms = 0.0

    def record(self, elapsed_ms: float) -> tuple[int, float]:
        """Record one call; returns (total calls, average ms)."""
        with self._lock:
            self.total_calls += 1
            self.total_time_ms += elapsed_ms
            return self.total_calls, self.total_time_ms / self.total_calls

    @property
    def average_time_ms(self) -> float:
        with self._lock:
            return self.total_time_ms / self.total_calls if self.total_calls else 0.0


class RecognitionPipeline:
    """Turn one piece of raw recognition text into an enriched fragment.

    Expected failures never leave this class: short or missing text and
    extractor errors produce an empty fragment, lookup errors mark the entity
    as not found. Every extractor answer is cached, including one with no
    fields; failures are not, so the next identical text retries.
    """

    def __init__(
        self,
        normalizer: TextNormalizer,
        cache: ExtractionCache,
        extractor: FieldExtractorProtocol,
        enricher: ReferenceEnricher,
        extraction_timeout: float | None = None,
    ) -> None:
        self.normalizer = normalizer
        self.cache = cache
        self.extractor = extractor
        self.enricher = enricher
        self.stats = ExtractionStats()
        self._timeout = extraction_timeout or None

    async def _extract(self, text: str) -> ExtractionFragment:
        with tracer.start_as_current_span("order_extraction") as span:
            span.set_attribute("text.length", len(text))
            start = time.perf_counter()
            try:
                parsed = await asyncio.wait_for(
                    self.extractor.extract(text), timeout=self._timeout
                )
            except TimeoutError as exc:
                raise ExtractionFailure(
                    f"Extractor timed out after {self._timeout}s"
                ) from exc
            except Exception as exc:
                raise ExtractionFailure(f"Extractor raised {exc!r}") from exc
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                calls, average = self.stats.record(elapsed_ms)
                logger.info(
                    "Extractor call took %.0fms (calls=%d, avg=%.2fms)",
                    elapsed_ms,
                    calls,
                    average,
                )
            if parsed is None:
                raise ExtractionFailure("Extractor returned no result")
            return parsed.to_fragment()

    async def parse(self, raw: str | None) -> ExtractionFragment:
        try:
            text = self.normalizer.normalize(raw)
        except MalformedInput as exc:
            logger.debug("Skipping recognition text: %s", exc)
            return ExtractionFragment()

        fragment = self.cache.get(text)
        if fragment is not None:
            logger.debug("Extraction cache hit (len=%d)", len(text))
        else:
            try:
                fragment = await self._extract(text)
            except ExtractionFailure as exc:
                logger.warning("%s", exc, exc_info=exc.__cause__ is not None)
                return ExtractionFragment()
            self.cache.put(text, fragment)

        return await self.enricher.enrich(fragment)
