"""Pytest configuration and fixtures."""

import base64
import io
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image

from calorie_api.api.dependencies import get_food_log_store
from calorie_api.main import app
from calorie_api.services.food_analysis import FoodAnalysisHandler, get_food_analysis_handler
from calorie_api.services.food_analysis.base import VisionCompletionClient
from calorie_api.services.food_log import FoodLogStore


# Sample test image (1x1 red pixel PNG)
TINY_PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8DwHwAFBQIAX8jx0gAAAABJRU5ErkJggg=="
)
TINY_PNG_DATA_URI = f"data:image/png;base64,{TINY_PNG_BASE64}"


class FakeVisionClient(VisionCompletionClient):
    """Completion client returning a canned reply or raising a canned error."""

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str]] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    async def complete(self, prompt: str, image_url: str) -> str:
        self.calls.append((prompt, image_url))
        if self.error is not None:
            raise self.error
        return self.reply


def make_image_bytes(
    size: tuple[int, int] = (64, 48),
    fmt: str = "PNG",
    mode: str = "RGB",
    noise: bool = True,
) -> bytes:
    """Render an image to bytes; noise keeps it above the 1000-byte floor."""
    if noise:
        image = Image.frombytes(mode, size, _noise(size, len(mode)))
    else:
        image = Image.new(mode, size, (200, 30, 30, 128)[: len(mode)])
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


def _noise(size: tuple[int, int], channels: int) -> bytes:
    # Deterministic pseudo-random bytes (LCG) so PNGs do not compress away
    width, height = size
    state = 12345
    out = bytearray()
    for _ in range(width * height * channels):
        state = (1103515245 * state + 12345) & 0x7FFFFFFF
        out.append(state >> 23 & 0xFF)
    return bytes(out)


def decode_data_uri(data_uri: str) -> bytes:
    return base64.b64decode(data_uri.split(",", 1)[1])


@pytest.fixture
def fake_client() -> FakeVisionClient:
    return FakeVisionClient(reply='{"name": "Apple", "calories": 95, "analysis": "Medium apple"}')


@pytest.fixture
def handler(fake_client: FakeVisionClient) -> FoodAnalysisHandler:
    return FoodAnalysisHandler(api_key="sk-test", client=fake_client)


@pytest.fixture
def store(tmp_path) -> FoodLogStore:
    return FoodLogStore(tmp_path / "food_log.json")


@pytest.fixture
async def client(handler, store) -> AsyncGenerator[AsyncClient, None]:
    """
    Create async test client with the upstream model and log file faked.

    Usage:
        async def test_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    app.dependency_overrides[get_food_analysis_handler] = lambda: handler
    app.dependency_overrides[get_food_log_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
