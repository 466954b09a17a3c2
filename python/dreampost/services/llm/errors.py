"""LLM error classification and normalization.

Classifies OpenAI errors into normalized error classes. Called by the
client after catching adapter exceptions.

Error classes:
- E_LLM_INVALID_KEY: Authentication failure (401/403)
- E_LLM_RATE_LIMIT: Rate limit or quota exceeded (429)
- E_LLM_CONTENT_REJECTED: Prompt refused by the safety system (400)
- E_LLM_TIMEOUT: Request timed out
- E_LLM_PROVIDER_DOWN: Provider unavailable (5xx, network error, bad body)
- E_MODEL_NOT_AVAILABLE: Model not found or disabled
"""

from enum import Enum


class LLMErrorClass(str, Enum):
    """Normalized LLM error classifications."""

    INVALID_KEY = "E_LLM_INVALID_KEY"
    RATE_LIMIT = "E_LLM_RATE_LIMIT"
    CONTENT_REJECTED = "E_LLM_CONTENT_REJECTED"
    TIMEOUT = "E_LLM_TIMEOUT"
    PROVIDER_DOWN = "E_LLM_PROVIDER_DOWN"
    MODEL_NOT_AVAILABLE = "E_MODEL_NOT_AVAILABLE"


class LLMError(Exception):
    """Exception for LLM-related errors.

    Attributes:
        error_class: The normalized error classification
        message: Human-readable error message
    """

    def __init__(self, error_class: LLMErrorClass, message: str):
        self.error_class = error_class
        self.message = message
        super().__init__(message)


def classify_provider_error(status_code: int | None, json_body: dict | None) -> LLMErrorClass:
    """Classify a provider HTTP error response into a normalized error class.

    Timeouts and network failures never reach here; LLMClient maps those
    from the httpx exception type.

    - No status → PROVIDER_DOWN
    - 401 or 403 → INVALID_KEY
    - 429 → RATE_LIMIT
    - 404, or 400 mentioning a missing model → MODEL_NOT_AVAILABLE
    - 400 + error.code == "content_policy_violation" → CONTENT_REJECTED
    - 5xx and anything else → PROVIDER_DOWN
    """
    if status_code is None:
        return LLMErrorClass.PROVIDER_DOWN

    if status_code in (401, 403):
        return LLMErrorClass.INVALID_KEY

    if status_code == 429:
        return LLMErrorClass.RATE_LIMIT

    if status_code == 404:
        return LLMErrorClass.MODEL_NOT_AVAILABLE

    if status_code >= 500:
        return LLMErrorClass.PROVIDER_DOWN

    if status_code == 400 and json_body:
        error = json_body.get("error") or {}
        error_code = error.get("code") or ""
        error_message = (error.get("message") or "").lower()

        if error_code == "content_policy_violation":
            return LLMErrorClass.CONTENT_REJECTED
        if "model" in error_message and "does not exist" in error_message:
            return LLMErrorClass.MODEL_NOT_AVAILABLE

    return LLMErrorClass.PROVIDER_DOWN
