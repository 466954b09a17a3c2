"""Caption and image generation for postcards.

The generator never raises to its caller. Any provider failure (missing key,
timeout, HTTP error, empty completion) is replaced by fixed fallback content.
Results carry an is_fallback flag and every substitution is logged as
generator.fallback_used, so fallback content stays distinguishable
server-side even though API responses look the same.
"""

from dataclasses import dataclass

import httpx

from dreampost.config import Settings
from dreampost.logging import get_logger
from dreampost.services.llm import (
    AudioInput,
    ImageRequest,
    LLMClient,
    LLMError,
    LLMOperation,
    LLMRequest,
    OpenAIAdapter,
    render_audio_analysis,
    render_caption,
    render_image_prompt,
)
from dreampost.services.llm.prompt import AUDIO_ANALYSIS_MAX_TOKENS, CAPTION_MAX_TOKENS
from dreampost.services.redact import safe_kv

logger = get_logger(__name__)

FALLBACK_CAPTION = "Whispers of dreamscapes, echoing through the corridors of sleep"
FALLBACK_IMAGE_URL = (
    "https://images.unsplash.com/photo-1499678329028-101435549a4e"
    "?ixlib=rb-4.0.3&auto=format&fit=crop&w=800&h=400"
)

IMAGE_SIZE = "1024x1024"
IMAGE_QUALITY = "standard"


@dataclass(frozen=True)
class GeneratedCaption:
    text: str
    is_fallback: bool = False


@dataclass(frozen=True)
class GeneratedImage:
    url: str
    is_fallback: bool = False


def strip_data_url(audio_data: str) -> str:
    """Drop a "data:<mime>;base64," prefix if the client left one on."""
    if audio_data.startswith("data:") and "," in audio_data:
        return audio_data.split(",", 1)[1]
    return audio_data


class PostcardGenerator:
    """Turns an audio clip into a caption and a caption into an image URL."""

    def __init__(
        self,
        llm_client: LLMClient | None,
        *,
        audio_model: str = "gpt-4o-audio-preview",
        caption_model: str = "gpt-4o",
        image_model: str = "dall-e-3",
    ):
        """Initialize generator.

        Args:
            llm_client: Provider client, or None to always serve fallback content.
            audio_model: Model for the audio analysis completion.
            caption_model: Model for the caption completion.
            image_model: Model for image generation.
        """
        self._llm = llm_client
        self._audio_model = audio_model
        self._caption_model = caption_model
        self._image_model = image_model

    async def generate_caption(self, audio_data: str) -> GeneratedCaption:
        """Analyze the audio, then write a caption from the analysis."""
        if self._llm is None:
            return self._fallback_caption("no_api_key")

        audio = AudioInput(data=strip_data_url(audio_data))
        try:
            analysis = await self._llm.generate(
                LLMRequest(
                    model_name=self._audio_model,
                    messages=render_audio_analysis(audio),
                    max_tokens=AUDIO_ANALYSIS_MAX_TOKENS,
                ),
                operation=LLMOperation.AUDIO_ANALYSIS,
            )
            caption = await self._llm.generate(
                LLMRequest(
                    model_name=self._caption_model,
                    messages=render_caption(analysis.text),
                    max_tokens=CAPTION_MAX_TOKENS,
                ),
                operation=LLMOperation.CAPTION,
            )
        except LLMError as e:
            return self._fallback_caption(e.error_class.value)

        text = caption.text.strip()
        if not text:
            return self._fallback_caption("empty_completion")
        return GeneratedCaption(text=text)

    async def generate_image(self, caption: str) -> GeneratedImage:
        """Render the caption as an image and return its URL."""
        if self._llm is None:
            return self._fallback_image("no_api_key")

        try:
            image = await self._llm.generate_image(
                ImageRequest(
                    model_name=self._image_model,
                    prompt=render_image_prompt(caption),
                    size=IMAGE_SIZE,
                    quality=IMAGE_QUALITY,
                )
            )
        except LLMError as e:
            return self._fallback_image(e.error_class.value)

        if not image.url:
            return self._fallback_image("empty_url")
        return GeneratedImage(url=image.url)

    def _fallback_caption(self, reason: str) -> GeneratedCaption:
        logger.warning("generator.fallback_used", **safe_kv(step="caption", reason=reason))
        return GeneratedCaption(text=FALLBACK_CAPTION, is_fallback=True)

    def _fallback_image(self, reason: str) -> GeneratedImage:
        logger.warning("generator.fallback_used", **safe_kv(step="image", reason=reason))
        return GeneratedImage(url=FALLBACK_IMAGE_URL, is_fallback=True)


def build_generator(settings: Settings, http_client: httpx.AsyncClient) -> PostcardGenerator:
    """Build a generator from settings; no API key means fallback-only."""
    llm_client = None
    if settings.openai_api_key:
        adapter = OpenAIAdapter(http_client, base_url=settings.openai_base_url)
        llm_client = LLMClient(
            adapter,
            settings.openai_api_key,
            timeout_s=settings.llm_timeout_s,
        )
    else:
        logger.warning("generator.no_api_key")

    return PostcardGenerator(
        llm_client,
        audio_model=settings.audio_analysis_model,
        caption_model=settings.caption_model,
        image_model=settings.image_model,
    )
