from __future__ import annotations

from typing import Protocol

from ..models import CheckVideoResponse, GenerateVideoRequest


class VideoProvider(Protocol):
    name: str

    async def create_prediction(self, request: GenerateVideoRequest) -> str: ...

    async def get_prediction(self, prediction_id: str) -> CheckVideoResponse: ...
