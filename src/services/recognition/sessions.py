"""Per-connection order drafts and their lifecycle."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from schemas.recognition import OrderDraft
from services.recognition.merge import merge_fragment
from services.recognition.pipeline import RecognitionPipeline


logger = logging.getLogger(__name__)


@dataclass
class RecognitionSession:
    """Draft owned by one connection plus the lock that orders its messages."""

    session_id: str
    draft: OrderDraft = field(default_factory=OrderDraft)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    messages: int = 0


class SessionRegistry:
    """Connection id -> RecognitionSession.

    Messages of one session are processed strictly one after another, each
    merging into the draft left by the previous one. Different sessions
    never share state and run concurrently.
    """

    def __init__(self, pipeline: RecognitionPipeline) -> None:
        self._pipeline = pipeline
        self._sessions: dict[str, RecognitionSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def on_open(self, session_id: str) -> OrderDraft:
        session = RecognitionSession(session_id=session_id)
        if self._sessions.setdefault(session_id, session) is not session:
            logger.warning("Session %s opened twice; keeping existing draft", session_id)
        else:
            logger.info("Recognition session opened: %s", session_id)
        return self._sessions[session_id].draft.model_copy(deep=True)

    def on_close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info(
                "Recognition session closed: %s after %d messages",
                session_id,
                session.messages,
            )

    async def on_message(self, session_id: str, raw_text: str | None) -> OrderDraft:
        """Run the pipeline for one message and return a copy of the merged draft."""
        session = self._sessions.get(session_id)
        if session is None:
            logger.warning("Message for unknown session %s; opening it", session_id)
            self.on_open(session_id)
            session = self._sessions[session_id]

        async with session.lock:
            fragment = await self._pipeline.parse(raw_text)
            if fragment.is_empty():
                logger.debug("No order fields in message for session %s", session_id)
            else:
                merge_fragment(session.draft, fragment)
            session.messages += 1
            return session.draft.model_copy(deep=True)

    async def reset(self, session_id: str) -> OrderDraft | None:
        """Clear a live session's draft; None if the session is unknown."""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        async with session.lock:
            session.draft = OrderDraft()
            logger.info("Recognition session reset: %s", session_id)
            return session.draft.model_copy(deep=True)

    def draft(self, session_id: str) -> OrderDraft | None:
        session = self._sessions.get(session_id)
        return session.draft.model_copy(deep=True) if session is not None else None
