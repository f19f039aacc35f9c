"""Bounded cache of extraction results keyed by normalized text."""

from __future__ import annotations

import logging
import threading

from schemas.recognition import ExtractionFragment


logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1000


class ExtractionCache:
    """Normalized text -> extraction fragment.

    Eviction is all-or-nothing: the ``put`` that takes the size past
    ``max_entries`` stores its entry and then clears everything, that entry
    included. Fragments are copied on the way in and out so callers can
    enrich what they get back without touching the cached value.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self._max_entries = max_entries
        self._entries: dict[str, ExtractionFragment] = {}
        self._lock = threading.Lock()
        self.generation = 0

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def get(self, key: str) -> ExtractionFragment | None:
        with self._lock:
            fragment = self._entries.get(key)
        return fragment.model_copy(deep=True) if fragment is not None else None

    def put(self, key: str, fragment: ExtractionFragment) -> None:
        stored = fragment.model_copy(deep=True)
        with self._lock:
            self._entries[key] = stored
            if len(self._entries) <= self._max_entries:
                return
            self._entries.clear()
            self.generation += 1
        logger.info(
            "Extraction cache exceeded %d entries, cleared (generation %d)",
            self._max_entries,
            self.generation,
        )

    def size(self) -> int:
        with self._lock:
            return len(self._entries)
