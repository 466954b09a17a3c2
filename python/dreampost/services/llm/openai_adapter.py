"""OpenAI LLM adapter implementation.

Chat completions:
- Endpoint: POST {base_url}/chat/completions
- Audio is attached as an "input_audio" content part next to the text
- text = choices[0].message.content

Request body (audio turn):
{
  "model": "gpt-4o-audio-preview",
  "messages": [
    {"role": "system", "content": "..."},
    {"role": "user", "content": [
      {"type": "text", "text": "..."},
      {"type": "input_audio", "input_audio": {"data": "<base64>", "format": "wav"}}
    ]}
  ],
  "max_tokens": 150
}

Image generations:
- Endpoint: POST {base_url}/images/generations
- url = data[0].url

- provider_request_id = response header x-request-id or body id
"""

import httpx

from dreampost.services.llm.adapter import LLMAdapter
from dreampost.services.llm.errors import LLMError, LLMErrorClass
from dreampost.services.llm.types import (
    ImageRequest,
    ImageResponse,
    LLMRequest,
    LLMResponse,
    LLMUsage,
    Turn,
)

OPENAI_BASE_URL = "https://api.openai.com/v1"


class OpenAIAdapter(LLMAdapter):
    """OpenAI API adapter for chat completions and image generation."""

    def __init__(self, client: httpx.AsyncClient, *, base_url: str = OPENAI_BASE_URL):
        super().__init__(client, base_url=base_url)

    @property
    def chat_url(self) -> str:
        return f"{self._base_url}/chat/completions"

    @property
    def images_url(self) -> str:
        return f"{self._base_url}/images/generations"

    async def generate(
        self,
        req: LLMRequest,
        *,
        api_key: str,
        timeout_s: int,
    ) -> LLMResponse:
        """Non-streaming chat completion."""
        response = await self._client.post(
            self.chat_url,
            headers=self._build_headers(api_key),
            json=self._build_chat_body(req),
            timeout=httpx.Timeout(timeout_s, connect=10.0),
        )
        response.raise_for_status()

        return self._parse_chat_response(response.json(), response.headers)

    async def generate_image(
        self,
        req: ImageRequest,
        *,
        api_key: str,
        timeout_s: int,
    ) -> ImageResponse:
        """Generate one image and return its URL."""
        body = {
            "model": req.model_name,
            "prompt": req.prompt,
            "n": 1,
            "size": req.size,
            "quality": req.quality,
        }

        response = await self._client.post(
            self.images_url,
            headers=self._build_headers(api_key),
            json=body,
            timeout=httpx.Timeout(timeout_s, connect=10.0),
        )
        response.raise_for_status()

        return self._parse_image_response(response.json(), response.headers)

    def _build_headers(self, api_key: str) -> dict[str, str]:
        """Build request headers."""
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def _build_chat_body(self, req: LLMRequest) -> dict:
        """Build request body from LLMRequest."""
        body: dict = {
            "model": req.model_name,
            "messages": [self._turn_to_message(turn) for turn in req.messages],
            "max_tokens": req.max_tokens,
        }

        if req.temperature is not None:
            body["temperature"] = req.temperature

        return body

    def _turn_to_message(self, turn: Turn) -> dict:
        """Convert Turn to OpenAI message format.

        Plain turns use a string content; audio turns use content parts.
        """
        if turn.audio is None:
            return {"role": turn.role, "content": turn.content}

        return {
            "role": turn.role,
            "content": [
                {"type": "text", "text": turn.content},
                {
                    "type": "input_audio",
                    "input_audio": {"data": turn.audio.data, "format": turn.audio.format},
                },
            ],
        }

    def _parse_chat_response(self, data: dict, headers: httpx.Headers) -> LLMResponse:
        """Parse non-streaming chat response."""
        choices = data.get("choices", [])
        if not choices:
            raise LLMError(LLMErrorClass.PROVIDER_DOWN, "OpenAI response missing choices")

        # content is null when the model refuses or returns audio only
        text = choices[0].get("message", {}).get("content") or ""

        usage = None
        usage_data = data.get("usage")
        if usage_data:
            usage = LLMUsage(
                prompt_tokens=usage_data.get("prompt_tokens"),
                completion_tokens=usage_data.get("completion_tokens"),
                total_tokens=usage_data.get("total_tokens"),
            )

        return LLMResponse(
            text=text,
            usage=usage,
            provider_request_id=headers.get("x-request-id") or data.get("id"),
        )

    def _parse_image_response(self, data: dict, headers: httpx.Headers) -> ImageResponse:
        """Parse image generation response."""
        images = data.get("data", [])
        if not images:
            raise LLMError(LLMErrorClass.PROVIDER_DOWN, "OpenAI response missing image data")

        first = images[0]
        return ImageResponse(
            url=first.get("url") or "",
            revised_prompt=first.get("revised_prompt"),
            provider_request_id=headers.get("x-request-id"),
        )
