"""Server-side recognition: prompt the vision model and normalize its reply."""

import json
import logging
from dataclasses import dataclass
from typing import Protocol

import openai

from calorie_snap.domain.errors import ErrorCategory, GatewayError
from calorie_snap.domain.nutrition import PLACEHOLDER_RECORD, NutritionRecord
from calorie_snap.services.image_codec import ensure_data_url

RECOGNITION_PROMPT = (
    "Identify the food in the image and return the food name, estimated "
    "calories, GI value, whether it is suitable for people with diabetes, "
    "health advice and a detailed nutrition breakdown. Reply strictly with a "
    "JSON object in the following format and no other text: "
    '{"food_name": "food name", "calorie_estimate": "calorie value", '
    '"confidence": 0.95, "health_tips": "health advice", "gi_value": 50, '
    '"suitable_for_diabetes": "suitable/moderate/unsuitable", '
    '"nutrition": {"protein": "protein amount", "carbs": "carbohydrate amount", '
    '"fat": "fat amount", "calories": "total calories"}}'
)

_logger = logging.getLogger(__name__)


class VisionClient(Protocol):
    """Interface for a multimodal model provider."""

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str,
        food_name_hint: str | None = None,
    ) -> str:
        """Return the model's free-form reply to the prompt and image."""


@dataclass
class RecognitionGateway:
    """Turns an encoded image into a NutritionRecord via the vision model.

    ``client`` is None when no provider key is configured; every call then
    fails with a configuration error instead of reaching the provider.
    """

    client: VisionClient | None
    model: str
    expose_debug: bool = False

    @property
    def client_initialized(self) -> bool:
        """Return True when a provider client is available."""
        return self.client is not None

    async def analyze(
        self, image: str | None, food_name_hint: str | None = None
    ) -> NutritionRecord:
        """Recognize the food in a base64 image or data URL."""
        if not image or not image.strip():
            raise GatewayError(
                ErrorCategory.INVALID_INPUT,
                "Missing image data; please upload a valid food image.",
                status_code=400,
            )
        if self.client is None:
            raise GatewayError(
                ErrorCategory.CONFIGURATION,
                "Configuration error: the provider API key is not configured.",
                status_code=400,
            )

        _logger.info("Recognition request received (image length=%s)", len(image))
        try:
            reply = await self.client.complete(
                model=self.model,
                prompt=RECOGNITION_PROMPT,
                image_data_url=ensure_data_url(image),
                food_name_hint=food_name_hint,
            )
        except Exception as exc:
            raise self._provider_error(exc) from exc

        record = normalize_reply(reply)
        _logger.info("Recognition succeeded: %s", record.food_name)
        return record

    def _provider_error(self, exc: Exception) -> GatewayError:
        debug = str(exc) if self.expose_debug else None
        if isinstance(exc, openai.AuthenticationError):
            _logger.error("Vision provider rejected credentials: %s", exc)
            return GatewayError(
                ErrorCategory.PROVIDER_AUTH,
                "AI recognition service rejected the configured API key.",
                debug=debug,
            )
        if isinstance(exc, openai.APIConnectionError | TimeoutError):
            _logger.error("Vision provider unreachable: %s", exc)
            return GatewayError(
                ErrorCategory.PROVIDER_UNAVAILABLE,
                "AI recognition service is temporarily unavailable; "
                "please retry later.",
                debug=debug,
            )
        _logger.exception("Vision provider call failed")
        return GatewayError(
            ErrorCategory.INTERNAL,
            "AI recognition failed; please retry later.",
            debug=debug,
        )


def normalize_reply(reply: str) -> NutritionRecord:
    """Parse a model reply, defaulting each missing or malformed field.

    Replies without a parseable JSON object yield the placeholder record.
    """
    data = parse_reply(reply)
    if data is None:
        _logger.warning(
            "Could not parse model reply (category=%s); using placeholder record",
            ErrorCategory.PARSE,
        )
        return PLACEHOLDER_RECORD
    return NutritionRecord.model_validate(data)


def parse_reply(reply: str) -> dict[str, object] | None:
    """Return the first top-level JSON object in ``reply``, if any."""
    json_str = extract_json_object(reply)
    if json_str is None:
        return None
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def extract_json_object(text: str) -> str | None:
    """Locate the first balanced ``{...}`` span, skipping braces inside strings."""
    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None
