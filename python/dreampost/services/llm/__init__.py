"""LLM adapter layer for the postcard generator.

This module wraps the OpenAI HTTP API behind a small, testable interface:

- Provider adapter (async, shared httpx.AsyncClient)
- Client with error classification and structured logging
- Prompt rendering for the audio analysis, caption and image steps

Usage:
    from dreampost.services.llm import LLMClient, LLMRequest, OpenAIAdapter, Turn

    client = LLMClient(OpenAIAdapter(httpx_client), api_key="sk-...")
    request = LLMRequest(
        model_name="gpt-4o",
        messages=[Turn(role="user", content="Hello!")],
        max_tokens=100,
    )
    response = await client.generate(request, operation=LLMOperation.CAPTION)

- No retries inside adapters or the client
- No logging of request/response bodies
"""

from dreampost.services.llm.adapter import LLMAdapter
from dreampost.services.llm.client import LLMClient
from dreampost.services.llm.errors import LLMError, LLMErrorClass, classify_provider_error
from dreampost.services.llm.openai_adapter import OPENAI_BASE_URL, OpenAIAdapter
from dreampost.services.llm.prompt import (
    render_audio_analysis,
    render_caption,
    render_image_prompt,
)
from dreampost.services.llm.types import (
    AudioInput,
    ImageRequest,
    ImageResponse,
    LLMOperation,
    LLMRequest,
    LLMResponse,
    LLMUsage,
    Turn,
)

__all__ = [
    # Core types
    "AudioInput",
    "Turn",
    "LLMRequest",
    "LLMResponse",
    "LLMUsage",
    "LLMOperation",
    "ImageRequest",
    "ImageResponse",
    # Adapters
    "LLMAdapter",
    "OpenAIAdapter",
    "OPENAI_BASE_URL",
    # Client
    "LLMClient",
    # Errors
    "LLMError",
    "LLMErrorClass",
    "classify_provider_error",
    # Prompt rendering
    "render_audio_analysis",
    "render_caption",
    "render_image_prompt",
]
