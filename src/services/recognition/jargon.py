"""Hot-swappable slang dictionary applied to recognized text."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from schemas.recognition import JargonEntry
from services.recognition.exceptions import DictionaryReloadFailure
from services.recognition.interfaces import JargonSourceProtocol


logger = logging.getLogger(__name__)


class JargonDictionary:
    """Slang term -> canonical term mapping shared by all sessions.

    The mapping is held as an immutable tuple of pairs and replaced as a whole
    on reload, so a ``translate`` call always works on one snapshot even while
    a reload is in flight. Reloads are serialized among themselves.

    Replacement order is the order the source returned the entries in; if the
    store's order changes between reloads, overlapping terms may translate
    differently.
    """

    def __init__(
        self,
        source: JargonSourceProtocol,
        entries: Iterable[JargonEntry] = (),
    ) -> None:
        self._source = source
        self._pairs: tuple[tuple[str, str], ...] = self._freeze(entries)
        self._reload_lock = asyncio.Lock()

    @staticmethod
    def _freeze(entries: Iterable[JargonEntry]) -> tuple[tuple[str, str], ...]:
        # Later duplicates win, first-seen position is kept
        mapping: dict[str, str] = {}
        for entry in entries:
            if entry.slang_term:
                mapping[entry.slang_term] = entry.canonical_term
        return tuple(mapping.items())

    def __len__(self) -> int:
        return len(self._pairs)

    def snapshot(self) -> dict[str, str]:
        return dict(self._pairs)

    def translate(self, text: str) -> str:
        pairs = self._pairs
        for slang, canonical in pairs:
            text = text.replace(slang, canonical)
        return text

    async def reload(self) -> bool:
        """Replace the mapping from the source.

        Returns False (and keeps the previous mapping) when loading fails.
        """
        async with self._reload_lock:
            try:
                pairs = self._freeze(await self._source.load_all())
            except Exception as exc:
                failure = DictionaryReloadFailure(str(exc) or exc.__class__.__name__)
                logger.error(
                    "Jargon reload failed (%s), keeping %d existing entries",
                    failure,
                    len(self._pairs),
                    exc_info=True,
                )
                return False
            self._pairs = pairs
        logger.info("Loaded %d jargon mappings", len(pairs))
        return True
