"""Shared test fixtures."""

import json
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest

from calorie_snap.adapters.recognition_api import HttpxRecognitionApi
from calorie_snap.config import Settings
from calorie_snap.containers import AppContainer
from calorie_snap.services.gateway import RecognitionGateway, VisionClient
from calorie_snap.services.records import InMemoryStorage, RecordStore

APPLE_REPLY: dict[str, object] = {
    "food_name": "apple",
    "calorie_estimate": 52,
    "confidence": 0.95,
    "health_tips": "Rich in fiber.",
    "nutrition": {
        "protein": "0.3g",
        "carbs": "14g",
        "fat": "0.2g",
        "calories": "52kcal",
    },
}


@dataclass
class FakeVisionClient(VisionClient):
    """Fake vision client returning a fixed reply and recording calls."""

    reply: str = field(default_factory=lambda: json.dumps(APPLE_REPLY))
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str,
        food_name_hint: str | None = None,
    ) -> str:
        self.calls.append(
            {
                "model": model,
                "prompt": prompt,
                "image_data_url": image_data_url,
                "food_name_hint": food_name_hint,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


@dataclass
class FailingStorage:
    """Storage whose reads and writes always fail."""

    def get(self, key: str) -> str | None:
        raise OSError("storage unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError("storage unavailable")


async def _no_sleep(delay: float) -> None:
    return None


@dataclass
class RecordingSleep:
    """Awaitable sleep replacement that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def gateway_api(
    handler, endpoint: str = "http://gateway.test/api/image/analyze"
) -> HttpxRecognitionApi:
    """Build a recognition API backed by an httpx mock transport."""
    transport = httpx.MockTransport(handler)
    return HttpxRecognitionApi(
        endpoint=endpoint,
        http_client=httpx.AsyncClient(transport=transport),
    )


def success_body(data: dict[str, object] | None = None) -> dict[str, object]:
    return {"success": True, "data": data if data is not None else APPLE_REPLY}


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        dashscope_api_key="test-key",
        records_dir=tmp_path / "records",
        environment="test",
    )


@pytest.fixture
def vision_client() -> FakeVisionClient:
    return FakeVisionClient()


@pytest.fixture
def record_store() -> RecordStore:
    return RecordStore(InMemoryStorage())


@pytest.fixture
def container(settings: Settings, vision_client: FakeVisionClient) -> AppContainer:
    gateway = RecognitionGateway(
        client=vision_client,
        model=settings.provider_model,
        expose_debug=True,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        gateway=gateway,
        close_resources=close_resources,
    )
