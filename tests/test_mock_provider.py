from __future__ import annotations

import re

import pytest

from video_studio.models import GenerateVideoRequest, ProviderStatus
from video_studio.providers.factory import build_provider
from video_studio.providers.mock import MockVideoProvider, new_prediction_id, parse_prediction_timestamp

from .conftest import RESULT_URL, START_MS, FakeClock

pytestmark = pytest.mark.anyio


def test_new_prediction_id_format():
    prediction_id = new_prediction_id(1234)
    assert re.fullmatch(r"mock_1234_[a-z0-9]{9}", prediction_id)


@pytest.mark.parametrize(
    ("prediction_id", "expected"),
    [
        ("mock_1700000000000_abc123xyz", 1700000000000),
        ("mock_42", 42),
        ("mock_", None),
        ("mock_abc_def", None),
        ("mock_12x_def", None),
        ("other_123_abc", None),
        ("", None),
    ],
)
def test_parse_prediction_timestamp(prediction_id: str, expected: int | None):
    assert parse_prediction_timestamp(prediction_id) == expected


@pytest.mark.parametrize(
    ("elapsed_ms", "status"),
    [
        (0, ProviderStatus.processing),
        (4999, ProviderStatus.processing),
        (5000, ProviderStatus.processing),
        (5001, ProviderStatus.succeeded),
        (60_000, ProviderStatus.succeeded),
    ],
)
async def test_status_depends_on_elapsed_time(
    provider: MockVideoProvider, clock: FakeClock, elapsed_ms: int, status: ProviderStatus
):
    prediction_id = await provider.create_prediction(GenerateVideoRequest(prompt="waves"))
    clock.advance(elapsed_ms)

    result = await provider.get_prediction(prediction_id)

    assert result.status is status
    if status is ProviderStatus.succeeded:
        assert result.video_url == RESULT_URL
    else:
        assert result.video_url is None


async def test_prediction_embeds_creation_time(provider: MockVideoProvider):
    prediction_id = await provider.create_prediction(GenerateVideoRequest(prompt=""))
    assert parse_prediction_timestamp(prediction_id) == START_MS


async def test_unrecognized_id_is_processing(provider: MockVideoProvider, clock: FakeClock):
    clock.advance(10**9)
    result = await provider.get_prediction("not-a-mock-id")
    assert result.status is ProviderStatus.processing


def test_build_provider():
    assert isinstance(build_provider("mock"), MockVideoProvider)
    assert isinstance(build_provider(" MOCK "), MockVideoProvider)
    with pytest.raises(ValueError):
        build_provider("runway")
