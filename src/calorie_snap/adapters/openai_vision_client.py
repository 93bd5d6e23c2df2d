"""OpenAI-compatible chat completions client for vision prompts."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from calorie_snap.services.gateway import VisionClient


@dataclass
class OpenAIVisionClient(VisionClient):
    """Vision client backed by an OpenAI-compatible chat completions API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, base_url: str | None = None) -> "OpenAIVisionClient":
        """Create a vision client; ``base_url`` selects a compatible provider."""
        return cls(client=AsyncOpenAI(api_key=api_key, base_url=base_url))

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str,
        food_name_hint: str | None = None,
    ) -> str:
        """Send the prompt and image; return the model's raw reply text."""
        completion = await self.client.chat.completions.create(
            model=model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": image_data_url}},
                    ],
                }
            ],
            response_format={"type": "json_object"},
        )
        return completion.choices[0].message.content or ""

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
