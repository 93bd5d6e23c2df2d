"""Client-side food recognition with timeout, retry and error mapping."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import httpx
from pydantic import ValidationError

from calorie_snap.adapters.recognition_api import HttpxRecognitionApi, RecognitionApi
from calorie_snap.domain.errors import ErrorCategory, RecognitionError
from calorie_snap.domain.nutrition import NutritionRecord
from calorie_snap.services.connectivity import ConnectivityProbe, StaticConnectivity
from calorie_snap.services.image_codec import to_data_url

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

_MESSAGES = {
    ErrorCategory.OFFLINE: "You appear to be offline. Check your connection and retry.",
    ErrorCategory.INVALID_INPUT: "The selected image could not be read.",
    ErrorCategory.NETWORK: "Network error while contacting the recognition service.",
    ErrorCategory.TIMEOUT: "The recognition request timed out. Please try again.",
    ErrorCategory.SERVER: "The recognition service failed. Please try again later.",
    ErrorCategory.UNKNOWN: "Food recognition failed. Please try again later.",
}

_logger = logging.getLogger(__name__)


@dataclass
class RecognitionClient:
    """Sends images to the gateway and maps the reply to a NutritionRecord."""

    api: RecognitionApi
    connectivity: ConnectivityProbe = field(default_factory=StaticConnectivity)
    timeout_seconds: float = 30
    max_retries: int = 2
    base_delay_seconds: float = 1.0
    backoff_multiplier: float = 2.0
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    @classmethod
    def create(
        cls,
        endpoint: str,
        connectivity: ConnectivityProbe | None = None,
        **options: float,
    ) -> "RecognitionClient":
        """Create a client talking to the gateway at ``endpoint``."""
        timeout = options.get("timeout_seconds", 30)
        api = HttpxRecognitionApi.create(endpoint, timeout_seconds=timeout)
        return cls(
            api=api,
            connectivity=connectivity or StaticConnectivity(),
            **options,  # type: ignore[arg-type]
        )

    async def recognize_food(
        self, image: bytes, food_name_hint: str | None = None
    ) -> NutritionRecord:
        """Recognize the food in ``image``.

        Raises RecognitionError with a user-facing category. Transport
        failures, timeouts and HTTP 429/5xx are retried with exponential
        backoff; other failures are raised on the first attempt.
        """
        if not self.connectivity.is_online():
            raise RecognitionError(
                ErrorCategory.OFFLINE, _MESSAGES[ErrorCategory.OFFLINE]
            )
        if not isinstance(image, bytes | bytearray) or not image:
            raise RecognitionError(
                ErrorCategory.INVALID_INPUT, _MESSAGES[ErrorCategory.INVALID_INPUT]
            )

        payload: dict[str, object] = {"image": to_data_url(bytes(image))}
        if food_name_hint:
            payload["foodName"] = food_name_hint

        body = await self._post_with_retry(payload)
        if not isinstance(body, dict):
            _logger.warning("Unexpected recognition response: %r", body)
            raise RecognitionError(
                ErrorCategory.UNKNOWN, _MESSAGES[ErrorCategory.UNKNOWN]
            )
        if not body.get("success"):
            message = str(body.get("error") or "Food recognition failed.")
            raise RecognitionError(ErrorCategory.SERVER, message)
        data = body.get("data")
        try:
            return NutritionRecord.model_validate(
                data if isinstance(data, dict) else {}
            )
        except ValidationError as exc:
            raise RecognitionError(
                ErrorCategory.UNKNOWN, _MESSAGES[ErrorCategory.UNKNOWN]
            ) from exc

    async def health(self) -> dict[str, object]:
        """Return the gateway health document."""
        return await self.api.health()

    async def close(self) -> None:
        """Release the underlying HTTP session, if any."""
        close = getattr(self.api, "close", None)
        if close is not None:
            await close()

    async def _post_with_retry(self, payload: dict[str, object]) -> dict[str, object]:
        attempt = 0
        delay = self.base_delay_seconds
        while True:
            attempt += 1
            try:
                return await asyncio.wait_for(
                    self.api.analyze(payload), timeout=self.timeout_seconds
                )
            except Exception as exc:
                error = self._map_error(exc, attempt)
                retryable = _is_retryable(error)
                _logger.warning(
                    "Recognition attempt %s/%s failed (category=%s): %s",
                    attempt,
                    self.max_retries + 1,
                    error.category,
                    exc,
                )
                if not retryable or attempt > self.max_retries:
                    raise error from exc
            await self.sleep(delay)
            delay *= self.backoff_multiplier

    def _map_error(self, exc: Exception, attempt: int) -> RecognitionError:
        """Pick a category: connectivity, timeout, HTTP, then unknown."""
        if isinstance(exc, httpx.TransportError) and not self.connectivity.is_online():
            category = ErrorCategory.NETWORK
        elif isinstance(exc, TimeoutError | httpx.TimeoutException):
            category = ErrorCategory.TIMEOUT
        elif isinstance(exc, httpx.TransportError):
            category = ErrorCategory.NETWORK
        elif isinstance(exc, httpx.HTTPStatusError):
            status_code = exc.response.status_code
            return RecognitionError(
                ErrorCategory.SERVER,
                _server_message(exc.response),
                status_code=status_code,
                attempts=attempt,
            )
        elif isinstance(exc, ValueError):
            category = ErrorCategory.SERVER
        else:
            category = ErrorCategory.UNKNOWN
        return RecognitionError(category, _MESSAGES[category], attempts=attempt)


def _is_retryable(error: RecognitionError) -> bool:
    if error.category in {ErrorCategory.NETWORK, ErrorCategory.TIMEOUT}:
        return True
    return error.status_code in RETRYABLE_STATUS_CODES


def _server_message(response: httpx.Response) -> str:
    """Prefer the gateway's JSON error text over a generic message."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"{_MESSAGES[ErrorCategory.SERVER]} (HTTP {response.status_code})"
