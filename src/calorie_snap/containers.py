"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from urllib.parse import urlsplit

from calorie_snap.adapters.json_file_storage import JsonFileStorage
from calorie_snap.adapters.mock_vision_client import MockVisionClient
from calorie_snap.adapters.openai_vision_client import OpenAIVisionClient
from calorie_snap.config import Settings
from calorie_snap.services.connectivity import (
    ConnectivityProbe,
    SocketConnectivity,
    StaticConnectivity,
)
from calorie_snap.services.gateway import RecognitionGateway, VisionClient
from calorie_snap.services.image_codec import ImageCodec
from calorie_snap.services.recognition import RecognitionClient
from calorie_snap.services.records import RecordStore
from calorie_snap.services.workflow import RecognitionWorkflow


@dataclass
class AppContainer:
    """Holds server-side dependencies."""

    settings: Settings
    gateway: RecognitionGateway
    close_resources: Callable[[], Awaitable[None]]


@dataclass
class ClientContainer:
    """Holds client-side dependencies for the capture flow."""

    settings: Settings
    recognition_client: RecognitionClient
    record_store: RecordStore
    workflow: RecognitionWorkflow
    close_resources: Callable[[], Awaitable[None]]


def build_vision_client(settings: Settings) -> VisionClient | None:
    """Create the provider client, or None when no usable key is configured."""
    if settings.calorie_snap_mock_provider:
        return MockVisionClient()
    if not settings.api_key_configured or settings.dashscope_api_key is None:
        return None
    return OpenAIVisionClient.create(
        api_key=settings.dashscope_api_key,
        base_url=settings.provider_base_url,
    )


def build_connectivity(settings: Settings) -> ConnectivityProbe:
    """Probe the recognition server unless another host is configured."""
    if not settings.connectivity_check:
        return StaticConnectivity()
    target = urlsplit(settings.recognition_endpoint)
    default_port = 443 if target.scheme == "https" else 80
    return SocketConnectivity(
        host=settings.connectivity_host or target.hostname or "localhost",
        port=settings.connectivity_port or target.port or default_port,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default server container."""
    resolved_settings = settings or Settings()
    vision_client = build_vision_client(resolved_settings)
    gateway = RecognitionGateway(
        client=vision_client,
        model=resolved_settings.provider_model,
        expose_debug=not resolved_settings.is_production,
    )

    async def close_resources() -> None:
        if isinstance(vision_client, OpenAIVisionClient):
            await vision_client.close()

    return AppContainer(
        settings=resolved_settings,
        gateway=gateway,
        close_resources=close_resources,
    )


def build_client_container(settings: Settings | None = None) -> ClientContainer:
    """Create the client-side container used by the command line."""
    resolved_settings = settings or Settings()
    recognition_client = RecognitionClient.create(
        resolved_settings.recognition_endpoint,
        connectivity=build_connectivity(resolved_settings),
    )
    record_store = RecordStore(JsonFileStorage(resolved_settings.records_dir))
    workflow = RecognitionWorkflow(
        codec=ImageCodec(),
        client=recognition_client,
        store=record_store,
    )

    async def close_resources() -> None:
        await recognition_client.close()

    return ClientContainer(
        settings=resolved_settings,
        recognition_client=recognition_client,
        record_store=record_store,
        workflow=workflow,
        close_resources=close_resources,
    )
