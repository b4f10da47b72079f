from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from .config import settings
from .models import GenerateVideoRequest, GenerateVideoResponse, GenerationMode, StatusReport

logger = logging.getLogger(__name__)


class VideoServiceError(Exception):
    """A call to the video service failed: transport, HTTP status or body parsing."""

    def __init__(self, message: str, *, detail: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.detail = detail
        self.status_code = status_code


class StudioClient:
    """
    Async client for the generate/check endpoints.

    Pass ``http`` to reuse an existing :class:`httpx.AsyncClient` (tests use
    this to plug in a mock or ASGI transport); the client then does not own
    it and will not close it.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        http: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.request_timeout_seconds,
        )

    async def __aenter__(self) -> StudioClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def generate_video(
        self,
        prompt: str,
        mode: GenerationMode = GenerationMode.text_to_video,
        image: str | None = None,
    ) -> GenerateVideoResponse:
        body = GenerateVideoRequest(prompt=prompt, type=mode, image=image).model_dump(mode="json")
        data = await self._request("POST", "/api/generate-video", json=body)
        return self._parse(GenerateVideoResponse, data)

    async def check_video(self, prediction_id: str) -> StatusReport:
        data = await self._request("GET", "/api/check-video", params={"id": prediction_id})
        return self._parse(StatusReport, data)

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            res = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise VideoServiceError(f"{method} {path} failed: {e!r}") from e

        try:
            data = res.json()
        except ValueError as e:
            raise VideoServiceError(
                f"{method} {path} returned a non-JSON body", status_code=res.status_code
            ) from e

        if not isinstance(data, dict):
            raise VideoServiceError(
                f"{method} {path} returned a non-object body", status_code=res.status_code
            )

        if res.is_error:
            detail = data.get("error")
            raise VideoServiceError(
                f"{method} {path} returned HTTP {res.status_code}",
                detail=detail if isinstance(detail, str) else None,
                status_code=res.status_code,
            )
        return data

    @staticmethod
    def _parse(model: type[BaseModel], data: dict[str, Any]) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise VideoServiceError(f"Unexpected response body: {data!r}") from e
