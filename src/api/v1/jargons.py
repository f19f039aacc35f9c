"""Jargon mapping management; every mutation triggers a dictionary reload."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from crud.jargons import jargon_crud
from dependencies.db import DbSession
from schemas.api import ApiResponse
from schemas.recognition import JargonCreate, JargonRead
from services.recognition import RecognitionService, get_recognition_service
from services.recognition.events import JargonUpdateEvent


router = APIRouter(prefix="/jargons", tags=["jargons"])

RecognitionDep = Annotated[RecognitionService, Depends(get_recognition_service)]


@router.get("", response_model=ApiResponse[list[JargonRead]])
async def list_jargons(db: DbSession) -> ApiResponse[list[JargonRead]]:
    rows = await jargon_crud.list_all(db)
    return ApiResponse(data=[JargonRead.model_validate(row) for row in rows])


@router.post(
    "",
    response_model=ApiResponse[JargonRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_jargon(
    data: JargonCreate, db: DbSession, service: RecognitionDep
) -> ApiResponse[JargonRead]:
    jargon = await jargon_crud.create(db, data)
    service.notifier.publish(JargonUpdateEvent("jargon created"))
    return ApiResponse(data=JargonRead.model_validate(jargon), message="Jargon created")


@router.put("/{jargon_id}", response_model=ApiResponse[JargonRead])
async def update_jargon(
    jargon_id: int, data: JargonCreate, db: DbSession, service: RecognitionDep
) -> ApiResponse[JargonRead]:
    jargon = await jargon_crud.update(db, jargon_id, data)
    service.notifier.publish(JargonUpdateEvent("jargon updated"))
    return ApiResponse(data=JargonRead.model_validate(jargon), message="Jargon updated")


@router.delete("/{jargon_id}", response_model=ApiResponse[None])
async def delete_jargon(
    jargon_id: int, db: DbSession, service: RecognitionDep
) -> ApiResponse[None]:
    await jargon_crud.delete(db, jargon_id)
    service.notifier.publish(JargonUpdateEvent("jargon deleted"))
    return ApiResponse(message="Jargon deleted")


@router.post("/refresh", response_model=ApiResponse[dict[str, int]])
async def refresh_jargons(service: RecognitionDep) -> ApiResponse[dict[str, int]]:
    """Reload the dictionary now and report the outcome."""
    if not await service.jargon.reload():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Jargon mapping could not be reloaded",
        )
    return ApiResponse(data={"entries": len(service.jargon)}, message="Jargon reloaded")
