"""Abstract base class for LLM adapters.

- Async adapters with httpx.AsyncClient
- No retries inside adapters
- No logging of request/response bodies
- Raw provider errors bubble up to the client for classification
"""

from abc import ABC, abstractmethod

import httpx

from dreampost.services.llm.types import ImageRequest, ImageResponse, LLMRequest, LLMResponse


class LLMAdapter(ABC):
    """Abstract base class for LLM provider adapters."""

    def __init__(self, client: httpx.AsyncClient, *, base_url: str):
        """Initialize adapter with shared HTTP client.

        Args:
            client: Shared httpx.AsyncClient for connection pooling.
            base_url: Provider API root, without trailing slash.
        """
        self._client = client
        self._base_url = base_url.rstrip("/")

    @abstractmethod
    async def generate(
        self,
        req: LLMRequest,
        *,
        api_key: str,
        timeout_s: int,
    ) -> LLMResponse:
        """Non-streaming chat completion.

        Raises:
            httpx.HTTPStatusError: On non-2xx HTTP response.
            httpx.TimeoutException: On request timeout.
            httpx.NetworkError: On network failure.
            LLMError: If the response body is unusable.
        """
        pass

    @abstractmethod
    async def generate_image(
        self,
        req: ImageRequest,
        *,
        api_key: str,
        timeout_s: int,
    ) -> ImageResponse:
        """Single image generation.

        Raises:
            httpx.HTTPStatusError: On non-2xx HTTP response.
            httpx.TimeoutException: On request timeout.
            httpx.NetworkError: On network failure.
            LLMError: If the response body is unusable.
        """
        pass
