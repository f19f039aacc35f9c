"""Recognition endpoints: one-shot parsing, session socket, diagnostics."""

from __future__ import annotations

import logging
import uuid
from typing import Annotated

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Request,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from core.error_handler import set_correlation_id, structured_logger
from schemas.api import ApiResponse
from schemas.recognition import ExtractionFragment, OrderDraft, RecognitionStats
from services.recognition import RecognitionService, get_recognition_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recognition", tags=["recognition"])
ws_router = APIRouter(tags=["recognition"])

SESSION_HEADER = b"x-session-id"

RecognitionDep = Annotated[RecognitionService, Depends(get_recognition_service)]


@router.post(
    "/process",
    summary="Parse one recognition text",
    response_model=ApiResponse[ExtractionFragment],
    description=(
        "Run normalization, cached extraction and reference enrichment on a "
        "raw text body (text/plain, UTF-8) without touching any session."
    ),
    responses={
        200: {"description": "Fragment extracted (possibly empty)"},
        500: {"description": "Unexpected failure"},
    },
)
async def process_recognition_text(
    request: Request, service: RecognitionDep
) -> ApiResponse[ExtractionFragment]:
    body = await request.body()
    text = body.decode("utf-8", errors="replace")
    structured_logger.info("Recognition text received", text_length=len(text))
    fragment = await service.pipeline.parse(text)
    return ApiResponse(data=fragment, message="Recognition text processed")


@router.post(
    "/reset",
    summary="Reset a session draft",
    response_model=ApiResponse[OrderDraft],
)
async def reset_session(
    service: RecognitionDep,
    session_id: Annotated[str, Query(min_length=1)],
) -> ApiResponse[OrderDraft]:
    draft = await service.sessions.reset(session_id)
    if draft is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        )
    return ApiResponse(data=draft, message="Session reset")


@router.get(
    "/stats",
    summary="Recognition diagnostics",
    response_model=ApiResponse[RecognitionStats],
)
def recognition_stats(service: RecognitionDep) -> ApiResponse[RecognitionStats]:
    return ApiResponse(data=service.stats(), message="Recognition stats")


@ws_router.websocket("/ws/recognition")
async def recognition_socket(
    websocket: WebSocket,
    service: RecognitionDep,
    session_id: Annotated[str | None, Query(min_length=1, max_length=64)] = None,
) -> None:
    """One session per connection: each text frame is answered with the draft.

    The client may name its session with ``?session_id=``; otherwise a UUID
    is assigned. Either way the id is returned in the ``x-session-id`` accept
    header so the client can call ``POST /recognition/reset``. An id that is
    already live is refused, and a binary frame closes the socket with 1003.
    """
    session_id = session_id or str(uuid.uuid4())
    if session_id in service.sessions:
        logger.warning("Refusing second connection for live session %s", session_id)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    set_correlation_id(session_id)
    service.sessions.on_open(session_id)
    try:
        await websocket.accept(headers=[(SESSION_HEADER, session_id.encode())])
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.debug(
                    "Recognition socket %s disconnected (%s)",
                    session_id,
                    message.get("code"),
                )
                return
            text = message.get("text")
            if text is None:
                structured_logger.warning("Binary frame on recognition socket")
                await websocket.close(code=status.WS_1003_UNSUPPORTED_DATA)
                return
            try:
                draft = await service.sessions.on_message(session_id, text)
            except Exception as exc:  # noqa: BLE001
                structured_logger.exception(
                    "Recognition message failed", exception_type=type(exc).__name__
                )
                draft = service.sessions.draft(session_id) or OrderDraft()
            await websocket.send_json(draft.to_wire())
    except WebSocketDisconnect as exc:
        logger.debug("Recognition socket %s disconnected (%s)", session_id, exc.code)
    finally:
        service.sessions.on_close(session_id)
