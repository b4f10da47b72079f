from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class GenerationMode(str, Enum):
    text_to_video = "text-to-video"
    image_to_video = "image-to-video"


class ProviderStatus(str, Enum):
    processing = "processing"
    succeeded = "succeeded"
    failed = "failed"


class JobStatus(str, Enum):
    processing = "processing"
    completed = "completed"
    failed = "failed"


class GenerateVideoRequest(BaseModel):
    prompt: str = ""
    type: GenerationMode = GenerationMode.text_to_video
    image: str | None = None


class GenerateVideoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prediction_id: str = Field(alias="predictionId")
    status: ProviderStatus = ProviderStatus.processing


class CheckVideoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: ProviderStatus
    video_url: str | None = Field(default=None, alias="videoUrl")
    error: str | None = None


class StatusReport(BaseModel):
    """Client-side view of a status body.

    ``status`` is kept as a plain string so that values outside
    :class:`ProviderStatus` reach the poller instead of failing validation.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    status: str | None = None
    video_url: str | None = Field(default=None, alias="videoUrl")
    error: str | None = None


class ErrorResponse(BaseModel):
    error: str
