"""Shared type definitions for the LLM adapter layer.

- Turn: One chat message, optionally carrying an audio attachment
- LLMRequest / LLMResponse: Chat completion call and result
- ImageRequest / ImageResponse: Image generation call and result
- LLMOperation: Which pipeline step issued the call (for logs)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal


class LLMOperation(str, Enum):
    """Pipeline step that issued a provider call."""

    AUDIO_ANALYSIS = "audio_analysis"
    CAPTION = "caption"
    IMAGE = "image"


@dataclass(frozen=True)
class AudioInput:
    """Base64-encoded audio attached to a user turn.

    Attributes:
        data: Base64 payload without any data: URL prefix
        format: Container format understood by the provider ("wav" or "mp3")
    """

    data: str
    format: Literal["wav", "mp3"] = "wav"


@dataclass(frozen=True)
class Turn:
    """Provider-agnostic conversation turn.

    Attributes:
        role: One of "system", "user", or "assistant"
        content: The text content of the turn
        audio: Optional audio clip sent alongside the text (user turns only)
    """

    role: Literal["system", "user", "assistant"]
    content: str
    audio: AudioInput | None = None


@dataclass(frozen=True)
class LLMUsage:
    """Token usage from provider response.

    All fields are optional as not all responses include usage data.
    """

    prompt_tokens: int | None
    completion_tokens: int | None
    total_tokens: int | None


@dataclass(frozen=True)
class LLMRequest:
    """Chat completion request.

    Attributes:
        model_name: The model identifier (e.g., "gpt-4o")
        messages: List of Turn objects (system turn first if present)
        max_tokens: Maximum tokens in the completion
        temperature: Sampling temperature, None uses provider default
    """

    model_name: str
    messages: list[Turn]
    max_tokens: int
    temperature: float | None = None


@dataclass(frozen=True)
class LLMResponse:
    """Complete chat completion result.

    Attributes:
        text: The generated text content (may be empty)
        usage: Token usage information (may be None)
        provider_request_id: Provider's request ID for debugging (may be None)
    """

    text: str
    usage: LLMUsage | None
    provider_request_id: str | None


@dataclass(frozen=True)
class ImageRequest:
    """Image generation request."""

    model_name: str
    prompt: str
    size: str = "1024x1024"
    quality: str = "standard"


@dataclass(frozen=True)
class ImageResponse:
    """Image generation result.

    Attributes:
        url: Location of the rendered image (may be empty if the provider omitted it)
        revised_prompt: Prompt the provider actually used, when reported
        provider_request_id: Provider's request ID for debugging (may be None)
    """

    url: str
    revised_prompt: str | None
    provider_request_id: str | None
