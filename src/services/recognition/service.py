"""Composition root for the recognition engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from core.config import Settings, get_settings
from schemas.recognition import RecognitionStats
from services.recognition.cache import ExtractionCache
from services.recognition.enricher import ReferenceEnricher
from services.recognition.events import JargonUpdateEvent, JargonUpdateNotifier
from services.recognition.interfaces import (
    FieldExtractorProtocol,
    JargonSourceProtocol,
    ReferenceLookupProtocol,
)
from services.recognition.jargon import JargonDictionary
from services.recognition.normalizer import TextNormalizer
from services.recognition.pipeline import RecognitionPipeline
from services.recognition.sessions import SessionRegistry


logger = logging.getLogger(__name__)


@dataclass
class RecognitionService:
    """Process-wide recognition state shared by HTTP and WebSocket routes."""

    jargon: JargonDictionary
    cache: ExtractionCache
    pipeline: RecognitionPipeline
    sessions: SessionRegistry
    notifier: JargonUpdateNotifier

    async def startup(self) -> None:
        await self.jargon.reload()

    async def _on_jargon_update(self, event: JargonUpdateEvent) -> None:
        await self.jargon.reload()

    def stats(self) -> RecognitionStats:
        pipeline_stats = self.pipeline.stats
        return RecognitionStats(
            total_calls=pipeline_stats.total_calls,
            total_time_ms=round(pipeline_stats.total_time_ms, 2),
            average_time_ms=round(pipeline_stats.average_time_ms, 2),
            cache_size=self.cache.size(),
            jargon_entries=len(self.jargon),
            active_sessions=len(self.sessions),
        )


def build_recognition_service(
    *,
    extractor: FieldExtractorProtocol,
    lookup: ReferenceLookupProtocol,
    jargon_source: JargonSourceProtocol,
    settings: Settings | None = None,
) -> RecognitionService:
    settings = settings or get_settings()
    jargon = JargonDictionary(jargon_source)
    cache = ExtractionCache(max_entries=settings.EXTRACTION_CACHE_MAX_ENTRIES)
    pipeline = RecognitionPipeline(
        normalizer=TextNormalizer(jargon, min_length=settings.MIN_TEXT_LENGTH),
        cache=cache,
        extractor=extractor,
        enricher=ReferenceEnricher(lookup, timeout=settings.LOOKUP_TIMEOUT_SECONDS),
        extraction_timeout=settings.EXTRACTION_TIMEOUT_SECONDS,
    )
    service = RecognitionService(
        jargon=jargon,
        cache=cache,
        pipeline=pipeline,
        sessions=SessionRegistry(pipeline),
        notifier=JargonUpdateNotifier(),
    )
    service.notifier.subscribe(service._on_jargon_update)
    return service


# FastAPI DI provider (used by API layer via Depends)
@lru_cache
def get_recognition_service() -> RecognitionService:
    from dependencies.db import AsyncSessionLocal
    from services.recognition.adapters import SqlJargonSource, SqlReferenceLookup
    from services.recognition.extractor import OrderFieldExtractor

    logger.info("Building recognition service")
    return build_recognition_service(
        extractor=OrderFieldExtractor(),
        lookup=SqlReferenceLookup(AsyncSessionLocal),
        jargon_source=SqlJargonSource(AsyncSessionLocal),
    )
