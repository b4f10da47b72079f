from __future__ import annotations

from .base import VideoProvider
from .mock import MockVideoProvider


def build_provider(backend_name: str) -> VideoProvider:
    name = (backend_name or "mock").strip().lower()
    if name == "mock":
        return MockVideoProvider()
    raise ValueError(f"Unknown provider backend: {backend_name!r}")
