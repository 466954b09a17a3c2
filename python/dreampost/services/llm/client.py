"""LLM client: error normalization and observability around the adapter.

- Wraps adapter calls with error normalization (one place, not per call site)
- Emits llm.request.started / llm.request.finished / llm.request.failed
- All events use safe_kv() to prevent prompt or key leakage

Error handling:
- Provider 401/403 → E_LLM_INVALID_KEY
- Provider 429 → E_LLM_RATE_LIMIT
- Timeout → E_LLM_TIMEOUT
- Other → E_LLM_PROVIDER_DOWN
"""

import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from dreampost.logging import get_logger
from dreampost.services.llm.adapter import LLMAdapter
from dreampost.services.llm.errors import LLMError, LLMErrorClass, classify_provider_error
from dreampost.services.llm.types import (
    ImageRequest,
    ImageResponse,
    LLMOperation,
    LLMRequest,
    LLMResponse,
)
from dreampost.services.redact import safe_kv

logger = get_logger(__name__)

# Default timeout for provider requests in seconds
DEFAULT_TIMEOUT_S = 45

T = TypeVar("T")


class LLMClient:
    """Calls the provider adapter and normalizes every failure into LLMError."""

    def __init__(
        self,
        adapter: LLMAdapter,
        api_key: str,
        *,
        timeout_s: int = DEFAULT_TIMEOUT_S,
    ):
        """Initialize client.

        Args:
            adapter: Provider adapter sharing the app's httpx.AsyncClient.
            api_key: Provider API key.
            timeout_s: Request timeout in seconds.
        """
        self._adapter = adapter
        self._api_key = api_key
        self._timeout_s = timeout_s

    async def generate(self, req: LLMRequest, *, operation: LLMOperation) -> LLMResponse:
        """Chat completion with error normalization.

        Raises:
            LLMError: With normalized error class on failure.
        """
        base = {
            "llm_operation": operation.value,
            "model_name": req.model_name,
            "message_chars": sum(len(m.content) for m in req.messages),
            "audio_chars": sum(len(m.audio.data) for m in req.messages if m.audio),
        }
        response = await self._call(
            base,
            lambda: self._adapter.generate(req, api_key=self._api_key, timeout_s=self._timeout_s),
        )
        logger.info(
            "llm.request.finished",
            **safe_kv(
                **base,
                outcome="success",
                tokens_input=response.usage.prompt_tokens if response.usage else None,
                tokens_output=response.usage.completion_tokens if response.usage else None,
                provider_request_id=response.provider_request_id,
            ),
        )
        return response

    async def generate_image(
        self, req: ImageRequest, *, operation: LLMOperation = LLMOperation.IMAGE
    ) -> ImageResponse:
        """Image generation with error normalization.

        Raises:
            LLMError: With normalized error class on failure.
        """
        base = {
            "llm_operation": operation.value,
            "model_name": req.model_name,
            "prompt_chars": len(req.prompt),
            "size": req.size,
        }
        response = await self._call(
            base,
            lambda: self._adapter.generate_image(
                req, api_key=self._api_key, timeout_s=self._timeout_s
            ),
        )
        logger.info(
            "llm.request.finished",
            **safe_kv(
                **base,
                outcome="success",
                provider_request_id=response.provider_request_id,
            ),
        )
        return response

    async def _call(self, base: dict, invoke: Callable[[], Awaitable[T]]) -> T:
        """Run one adapter call, converting failures into LLMError."""
        logger.info("llm.request.started", **safe_kv(**base))
        start = time.monotonic()

        try:
            return await invoke()

        except httpx.TimeoutException as e:
            self._log_failure(base, LLMErrorClass.TIMEOUT, start)
            raise LLMError(LLMErrorClass.TIMEOUT, "Request timed out") from e

        except httpx.HTTPStatusError as e:
            json_body = self._safe_parse_json(e.response)
            error_class = classify_provider_error(e.response.status_code, json_body)
            self._log_failure(
                base,
                error_class,
                start,
                status_code=e.response.status_code,
                provider_request_id=e.response.headers.get("x-request-id"),
            )
            raise LLMError(
                error_class, f"Provider returned HTTP {e.response.status_code}"
            ) from e

        except httpx.NetworkError as e:
            self._log_failure(base, LLMErrorClass.PROVIDER_DOWN, start)
            raise LLMError(LLMErrorClass.PROVIDER_DOWN, "Network error") from e

        except LLMError as e:
            # Adapter already classified it (e.g. unusable response body)
            self._log_failure(base, e.error_class, start)
            raise

        except Exception as e:
            self._log_failure(base, LLMErrorClass.PROVIDER_DOWN, start)
            raise LLMError(
                LLMErrorClass.PROVIDER_DOWN, f"Unexpected error: {type(e).__name__}"
            ) from e

    def _log_failure(
        self, base: dict, error_class: LLMErrorClass, start: float, **extra
    ) -> None:
        logger.error(
            "llm.request.failed",
            **safe_kv(
                **base,
                outcome="error",
                error_class=error_class.value,
                latency_ms=int((time.monotonic() - start) * 1000),
                **extra,
            ),
        )

    @staticmethod
    def _safe_parse_json(response: httpx.Response) -> dict | None:
        """Parse an error body without raising."""
        try:
            body = response.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None
