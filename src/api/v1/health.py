from typing import Annotated, Any

from fastapi import APIRouter, Depends

from schemas.api import ApiResponse
from services.recognition import RecognitionService, get_recognition_service


router = APIRouter()


@router.get("/health", response_model=ApiResponse[dict[str, Any]])
def health_check(
    service: Annotated[RecognitionService, Depends(get_recognition_service)],
) -> ApiResponse[dict[str, Any]]:
    """Health check endpoint for monitoring and load balancer health checks."""
    return ApiResponse(
        success=True,
        data={
            "status": "healthy",
            "message": "Voice order API is running",
            "active_sessions": len(service.sessions),
        },
        message="Health check successful",
    )
