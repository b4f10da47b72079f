from __future__ import annotations

from typing import Callable

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from video_studio.api import get_provider
from video_studio.client import StudioClient
from video_studio.jobs import Job
from video_studio.main import create_app
from video_studio.models import JobStatus
from video_studio.providers.mock import MockVideoProvider

START_MS = 1_700_000_000_000
RESULT_URL = "https://videos.example/result.mp4"


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now_ms: int = START_MS) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


class RecordingSleep:
    """Replacement for ``asyncio.sleep`` that returns at once and remembers delays."""

    def __init__(self, on_sleep: Callable[[float], None] | None = None) -> None:
        self.delays: list[float] = []
        self._on_sleep = on_sleep

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self._on_sleep is not None:
            self._on_sleep(delay)


def assert_job_consistent(job: Job) -> None:
    if job.status is JobStatus.processing:
        assert job.result_url is None and job.error is None
    elif job.status is JobStatus.completed:
        assert job.result_url and job.error is None
    else:
        assert job.error and job.result_url is None


def mock_transport_client(handler: Callable[[httpx.Request], httpx.Response]) -> StudioClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://studio.test")
    return StudioClient(http=http)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def provider(clock: FakeClock) -> MockVideoProvider:
    return MockVideoProvider(ready_after_ms=5000, result_url=RESULT_URL, clock_ms=clock)


@pytest.fixture
def app(provider: MockVideoProvider) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_provider] = lambda: provider
    return app


@pytest.fixture
def client(app: FastAPI):
    with TestClient(app) as c:
        yield c
