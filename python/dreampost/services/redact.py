"""Redaction, hashing, and log guard utilities.

Never-log policy:
- API keys
- User passwords
- Raw audio payloads
- Rendered prompts and generated captions

Allowed (with suffix):
- _chars, _length: length of text
- _sha256, _hash: hash of text
- Token counts, provider request ID
"""

import hashlib
import os

FORBIDDEN_KEYS = frozenset(
    {
        "prompt",
        "content",
        "caption",
        "audio",
        "audio_data",
        "api_key",
        "bearer",
        "password",
        "secret",
    }
)

REDACTED_SUFFIXES = ("_sha256", "_hash", "_length", "_chars")


def hash_text(value: str) -> str:
    """SHA-256 hex digest of a string.

    Stable: same input always produces same output.
    Used for log correlation without exposing content.
    """
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def _has_redacted_suffix(key: str) -> bool:
    """Check if key ends with a recognized redacted suffix."""
    return any(key.endswith(suffix) for suffix in REDACTED_SUFFIXES)


def safe_kv(*, _env: str | None = None, **kwargs) -> dict:
    """Validate that no forbidden keys are present unless already redacted.

    Raises ValueError in local/test environments if a forbidden key is used
    without a redacted suffix. In staging/prod, logs a warning instead.

    Usage:
        logger.info("llm.request.started", **safe_kv(
            model_name="gpt-4o",
            prompt_chars=1234,        # OK: _chars suffix
            # caption="...",          # BLOCKED: forbidden key
        ))

    Args:
        _env: Override for DREAMPOST_ENV (test-only). If None, reads from env.
        **kwargs: Keyword arguments to validate and return.

    Returns:
        The same kwargs dict, after validation.

    Raises:
        ValueError: In local/test, if a forbidden key is used without redacted suffix.
    """
    violations = [key for key in kwargs if key in FORBIDDEN_KEYS and not _has_redacted_suffix(key)]

    if violations:
        msg = f"Forbidden log keys without redacted suffix: {violations}"
        env = _env or os.environ.get("DREAMPOST_ENV", "local")
        if env in ("local", "test"):
            raise ValueError(msg)
        else:
            import structlog

            _logger = structlog.get_logger("dreampost.services.redact")
            _logger.warning("safe_kv_violation", forbidden_keys=violations)

    return kwargs
