"""Capture flow: compress, recognize and record a food photo."""

import logging
from dataclasses import dataclass

from calorie_snap.domain.nutrition import NutritionRecord
from calorie_snap.domain.records import CalorieRecord
from calorie_snap.services.image_codec import ImageCodec
from calorie_snap.services.recognition import RecognitionClient
from calorie_snap.services.records import RecordStore

_logger = logging.getLogger(__name__)


@dataclass
class RecognitionWorkflow:
    """Runs one recognition and appends its history entry."""

    codec: ImageCodec
    client: RecognitionClient
    store: RecordStore

    async def capture(
        self,
        image: bytes,
        *,
        image_path: str | None = None,
        constrained: bool = False,
        food_name_hint: str | None = None,
    ) -> tuple[NutritionRecord, CalorieRecord]:
        """Recognize ``image`` and store the result.

        Nothing is stored when recognition raises.
        """
        compressed = self.codec.compress(image, constrained=constrained)
        if len(compressed) != len(image):
            _logger.info(
                "Image compressed from %s to %s bytes", len(image), len(compressed)
            )
        result = await self.client.recognize_food(
            compressed, food_name_hint=food_name_hint
        )
        record = CalorieRecord.from_recognition(result, image_path=image_path)
        self.store.append(record)
        return result, record
