from __future__ import annotations

import logging
import re
import secrets
import string
import time
from typing import Callable

from ..config import settings
from ..models import CheckVideoResponse, GenerateVideoRequest, ProviderStatus

logger = logging.getLogger(__name__)

PREDICTION_PREFIX = "mock"
SUFFIX_LENGTH = 9
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_PREDICTION_RE = re.compile(rf"^{PREDICTION_PREFIX}_(\d+)(?:_|$)")


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def new_prediction_id(created_ms: int) -> str:
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{PREDICTION_PREFIX}_{created_ms}_{suffix}"


def parse_prediction_timestamp(prediction_id: str) -> int | None:
    """Return the creation time (epoch ms) embedded in a mock prediction id, if any."""
    match = _PREDICTION_RE.match(prediction_id)
    if not match:
        return None
    return int(match.group(1))


class MockVideoProvider:
    """
    Stateless stand-in for a hosted video model.

    The prediction id carries its own creation timestamp, so a status check
    only has to compare it with the current time: nothing is stored between
    requests. A real provider would look the prediction up by id instead.
    """

    name = "mock"

    def __init__(
        self,
        *,
        ready_after_ms: int | None = None,
        result_url: str | None = None,
        clock_ms: Callable[[], int] = _now_ms,
    ) -> None:
        self.ready_after_ms = settings.mock_ready_after_ms if ready_after_ms is None else ready_after_ms
        self.result_url = result_url or settings.mock_result_url
        self._clock_ms = clock_ms

    async def create_prediction(self, request: GenerateVideoRequest) -> str:
        prediction_id = new_prediction_id(self._clock_ms())
        logger.info(
            "Created mock prediction %s (%s, image=%s): %.50s",
            prediction_id,
            request.type.value,
            request.image is not None,
            request.prompt,
        )
        return prediction_id

    async def get_prediction(self, prediction_id: str) -> CheckVideoResponse:
        created_ms = parse_prediction_timestamp(prediction_id)
        if created_ms is None:
            # Unknown ids are never an error: report them as still running.
            return CheckVideoResponse(status=ProviderStatus.processing)

        elapsed = self._clock_ms() - created_ms
        if elapsed > self.ready_after_ms:
            return CheckVideoResponse(status=ProviderStatus.succeeded, video_url=self.result_url)
        return CheckVideoResponse(status=ProviderStatus.processing)
