from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from .config import settings
from .models import (
    CheckVideoResponse,
    ErrorResponse,
    GenerateVideoRequest,
    GenerateVideoResponse,
    ProviderStatus,
)
from .providers.base import VideoProvider
from .providers.factory import build_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

MISSING_ID_MESSAGE = "Missing prediction ID"
GENERATE_FAILED_MESSAGE = "Failed to start video generation"
CHECK_FAILED_MESSAGE = "Failed to check video status"


@lru_cache
def get_provider() -> VideoProvider:
    return build_provider(settings.provider_backend)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.post(
    "/generate-video",
    response_model=GenerateVideoResponse,
    responses={500: {"model": ErrorResponse}},
)
async def generate_video(request: Request, provider: VideoProvider = Depends(get_provider)):
    # The body is parsed by hand so that malformed input maps to the same
    # 500 {"error": ...} shape as any other submission failure.
    try:
        payload = GenerateVideoRequest.model_validate(await request.json())
        prediction_id = await provider.create_prediction(payload)
    except Exception:
        logger.exception("Error generating video")
        return _error(500, GENERATE_FAILED_MESSAGE)

    return GenerateVideoResponse(prediction_id=prediction_id, status=ProviderStatus.processing)


@router.get(
    "/check-video",
    response_model=CheckVideoResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def check_video(
    prediction_id: str | None = Query(None, alias="id"),
    provider: VideoProvider = Depends(get_provider),
):
    if not prediction_id:
        return _error(400, MISSING_ID_MESSAGE)

    try:
        return await provider.get_prediction(prediction_id)
    except Exception:
        logger.exception("Error checking video status for %s", prediction_id)
        return _error(500, CHECK_FAILED_MESSAGE)
