"""Tests for the LLM adapter layer.

Test coverage:
- OpenAIAdapter: chat body (including input_audio parts), image body, parsing
- Raw HTTP failures bubble out of the adapter unclassified
- LLMClient: normalization of every failure into LLMError
- classify_provider_error decision table
- Prompt rendering

Explicitly Forbidden:
- Live provider calls
- Real API keys anywhere in test code
- Flaky tests depending on network

These are pure unit tests. They use respx to mock HTTP requests.
"""

import json

import httpx
import pytest
import respx

from dreampost.services.llm import (
    AudioInput,
    ImageRequest,
    LLMClient,
    LLMError,
    LLMErrorClass,
    LLMOperation,
    LLMRequest,
    OpenAIAdapter,
    Turn,
    classify_provider_error,
    render_audio_analysis,
    render_caption,
    render_image_prompt,
)

CHAT_URL = "https://api.openai.com/v1/chat/completions"
IMAGES_URL = "https://api.openai.com/v1/images/generations"

CHAT_SUCCESS = {
    "id": "chatcmpl-123",
    "object": "chat.completion",
    "choices": [
        {
            "index": 0,
            "message": {"role": "assistant", "content": "Hello! How can I help you today?"},
            "finish_reason": "stop",
        }
    ],
    "usage": {"prompt_tokens": 10, "completion_tokens": 8, "total_tokens": 18},
}

IMAGE_SUCCESS = {
    "created": 1700000000,
    "data": [
        {
            "url": "https://images.example.test/generated.png",
            "revised_prompt": "A dreamy postcard",
        }
    ],
}


# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def httpx_client():
    """Create an httpx AsyncClient for testing."""
    return httpx.AsyncClient()


@pytest.fixture
def llm_request():
    """Create a basic LLM request for testing."""
    return LLMRequest(
        model_name="test-model",
        messages=[
            Turn(role="system", content="You are helpful."),
            Turn(role="user", content="Hello!"),
        ],
        max_tokens=100,
        temperature=0.7,
    )


@pytest.fixture
def image_request():
    return ImageRequest(model_name="dall-e-3", prompt="A quiet night")


# =============================================================================
# OpenAI Adapter Tests
# =============================================================================


class TestOpenAIAdapter:
    """Tests for OpenAI adapter."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_openai_chat_success(self, httpx_client, llm_request):
        """Happy path chat completion."""
        respx.post(CHAT_URL).respond(
            200, json=CHAT_SUCCESS, headers={"x-request-id": "req-test-123"}
        )

        adapter = OpenAIAdapter(httpx_client)
        response = await adapter.generate(llm_request, api_key="sk-test", timeout_s=30)

        assert response.text == "Hello! How can I help you today?"
        assert response.usage is not None
        assert response.usage.prompt_tokens == 10
        assert response.usage.completion_tokens == 8
        assert response.usage.total_tokens == 18
        assert response.provider_request_id == "req-test-123"

    @pytest.mark.asyncio
    @respx.mock
    async def test_openai_request_body_and_auth(self, httpx_client, llm_request):
        route = respx.post(CHAT_URL).respond(200, json=CHAT_SUCCESS)

        adapter = OpenAIAdapter(httpx_client)
        await adapter.generate(llm_request, api_key="sk-test", timeout_s=30)

        sent = route.calls.last.request
        body = json.loads(sent.content)
        assert sent.headers["Authorization"] == "Bearer sk-test"
        assert body["model"] == "test-model"
        assert body["max_tokens"] == 100
        assert body["temperature"] == 0.7
        assert body["messages"] == [
            {"role": "system", "content": "You are helpful."},
            {"role": "user", "content": "Hello!"},
        ]

    @pytest.mark.asyncio
    @respx.mock
    async def test_openai_audio_turn_uses_input_audio_part(self, httpx_client):
        route = respx.post(CHAT_URL).respond(200, json=CHAT_SUCCESS)
        req = LLMRequest(
            model_name="gpt-4o-audio-preview",
            messages=[Turn(role="user", content="Listen", audio=AudioInput(data="UklGRg=="))],
            max_tokens=150,
        )

        adapter = OpenAIAdapter(httpx_client)
        await adapter.generate(req, api_key="sk-test", timeout_s=30)

        body = json.loads(route.calls.last.request.content)
        assert "temperature" not in body
        assert body["messages"][0]["content"] == [
            {"type": "text", "text": "Listen"},
            {"type": "input_audio", "input_audio": {"data": "UklGRg==", "format": "wav"}},
        ]

    @pytest.mark.asyncio
    @respx.mock
    async def test_openai_null_content_becomes_empty_text(self, httpx_client, llm_request):
        respx.post(CHAT_URL).respond(
            200, json={"id": "x", "choices": [{"message": {"content": None}}]}
        )

        adapter = OpenAIAdapter(httpx_client)
        response = await adapter.generate(llm_request, api_key="sk-test", timeout_s=30)

        assert response.text == ""
        assert response.usage is None
        assert response.provider_request_id == "x"

    @pytest.mark.asyncio
    @respx.mock
    async def test_openai_missing_choices_raises_provider_down(self, httpx_client, llm_request):
        respx.post(CHAT_URL).respond(200, json={"choices": []})

        adapter = OpenAIAdapter(httpx_client)
        with pytest.raises(LLMError) as exc_info:
            await adapter.generate(llm_request, api_key="sk-test", timeout_s=30)

        assert exc_info.value.error_class == LLMErrorClass.PROVIDER_DOWN

    @pytest.mark.asyncio
    @respx.mock
    async def test_openai_image_success(self, httpx_client, image_request):
        route = respx.post(IMAGES_URL).respond(
            200, json=IMAGE_SUCCESS, headers={"x-request-id": "img-req-1"}
        )

        adapter = OpenAIAdapter(httpx_client)
        response = await adapter.generate_image(image_request, api_key="sk-test", timeout_s=30)

        assert response.url == "https://images.example.test/generated.png"
        assert response.revised_prompt == "A dreamy postcard"
        assert response.provider_request_id == "img-req-1"
        body = json.loads(route.calls.last.request.content)
        assert body == {
            "model": "dall-e-3",
            "prompt": "A quiet night",
            "n": 1,
            "size": "1024x1024",
            "quality": "standard",
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_openai_image_missing_data_raises(self, httpx_client, image_request):
        respx.post(IMAGES_URL).respond(200, json={"data": []})

        adapter = OpenAIAdapter(httpx_client)
        with pytest.raises(LLMError):
            await adapter.generate_image(image_request, api_key="sk-test", timeout_s=30)

    @pytest.mark.asyncio
    @respx.mock
    async def test_openai_custom_base_url(self, httpx_client, llm_request):
        route = respx.post("https://proxy.example.test/v1/chat/completions").respond(
            200, json=CHAT_SUCCESS
        )

        adapter = OpenAIAdapter(httpx_client, base_url="https://proxy.example.test/v1/")
        await adapter.generate(llm_request, api_key="sk-test", timeout_s=30)

        assert route.called

    @pytest.mark.asyncio
    @respx.mock
    async def test_openai_invalid_key_401(self, httpx_client, llm_request):
        """401 response should raise HTTPStatusError."""
        respx.post(CHAT_URL).respond(
            401, json={"error": {"message": "Incorrect API key", "code": "invalid_api_key"}}
        )

        adapter = OpenAIAdapter(httpx_client)
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await adapter.generate(llm_request, api_key="sk-invalid", timeout_s=30)

        assert exc_info.value.response.status_code == 401

    @pytest.mark.asyncio
    @respx.mock
    async def test_openai_timeout(self, httpx_client, llm_request):
        """Timeout should raise TimeoutException."""
        respx.post(CHAT_URL).mock(side_effect=httpx.ReadTimeout("Read timed out"))

        adapter = OpenAIAdapter(httpx_client)
        with pytest.raises(httpx.TimeoutException):
            await adapter.generate(llm_request, api_key="sk-test", timeout_s=1)


# =============================================================================
# LLM Client Tests
# =============================================================================


class TestLLMClient:
    """Tests for LLMClient error normalization."""

    @pytest.fixture
    def llm_client(self, httpx_client):
        return LLMClient(OpenAIAdapter(httpx_client), "sk-test", timeout_s=5)

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_passes_response_through(self, llm_client, llm_request):
        respx.post(CHAT_URL).respond(200, json=CHAT_SUCCESS)

        response = await llm_client.generate(llm_request, operation=LLMOperation.CAPTION)

        assert response.text == "Hello! How can I help you today?"

    @pytest.mark.asyncio
    @respx.mock
    @pytest.mark.parametrize(
        "status,body,expected",
        [
            (401, {"error": {"code": "invalid_api_key"}}, LLMErrorClass.INVALID_KEY),
            (429, {"error": {"code": "rate_limit_exceeded"}}, LLMErrorClass.RATE_LIMIT),
            (500, {"error": {"message": "server error"}}, LLMErrorClass.PROVIDER_DOWN),
            (404, {"error": {"code": "model_not_found"}}, LLMErrorClass.MODEL_NOT_AVAILABLE),
        ],
    )
    async def test_http_errors_are_classified(
        self, llm_client, llm_request, status, body, expected
    ):
        respx.post(CHAT_URL).respond(status, json=body)

        with pytest.raises(LLMError) as exc_info:
            await llm_client.generate(llm_request, operation=LLMOperation.CAPTION)

        assert exc_info.value.error_class == expected

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_is_classified(self, llm_client, llm_request):
        respx.post(CHAT_URL).mock(side_effect=httpx.ReadTimeout("Read timed out"))

        with pytest.raises(LLMError) as exc_info:
            await llm_client.generate(llm_request, operation=LLMOperation.AUDIO_ANALYSIS)

        assert exc_info.value.error_class == LLMErrorClass.TIMEOUT

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_is_provider_down(self, llm_client, image_request):
        respx.post(IMAGES_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(LLMError) as exc_info:
            await llm_client.generate_image(image_request)

        assert exc_info.value.error_class == LLMErrorClass.PROVIDER_DOWN

    @pytest.mark.asyncio
    @respx.mock
    async def test_content_policy_rejection(self, llm_client, image_request):
        respx.post(IMAGES_URL).respond(
            400,
            json={"error": {"code": "content_policy_violation", "message": "rejected"}},
        )

        with pytest.raises(LLMError) as exc_info:
            await llm_client.generate_image(image_request)

        assert exc_info.value.error_class == LLMErrorClass.CONTENT_REJECTED

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_json_error_body(self, llm_client, llm_request):
        respx.post(CHAT_URL).respond(502, content=b"<html>bad gateway</html>")

        with pytest.raises(LLMError) as exc_info:
            await llm_client.generate(llm_request, operation=LLMOperation.CAPTION)

        assert exc_info.value.error_class == LLMErrorClass.PROVIDER_DOWN


# =============================================================================
# Error Classification Tests
# =============================================================================


class TestClassifyProviderError:
    """Tests for classify_provider_error."""

    def test_no_status_is_provider_down(self):
        assert classify_provider_error(None, None) == LLMErrorClass.PROVIDER_DOWN

    def test_forbidden_is_invalid_key(self):
        assert classify_provider_error(403, None) == LLMErrorClass.INVALID_KEY

    def test_missing_model_message(self):
        body = {"error": {"message": "The model `gpt-9` does not exist"}}
        assert classify_provider_error(400, body) == LLMErrorClass.MODEL_NOT_AVAILABLE

    def test_content_policy_is_rejected(self):
        body = {"error": {"code": "content_policy_violation", "message": "refused"}}
        assert classify_provider_error(400, body) == LLMErrorClass.CONTENT_REJECTED

    def test_plain_400_is_provider_down(self):
        assert classify_provider_error(400, {"error": {}}) == LLMErrorClass.PROVIDER_DOWN


# =============================================================================
# Prompt Rendering Tests
# =============================================================================


class TestPromptRendering:
    """Tests for prompt rendering."""

    def test_audio_analysis_attaches_audio_to_user_turn(self):
        audio = AudioInput(data="UklGRg==")

        turns = render_audio_analysis(audio)

        assert [t.role for t in turns] == ["system", "user"]
        assert turns[0].audio is None
        assert turns[1].audio == audio

    def test_caption_quotes_analysis(self):
        turns = render_caption("soft rain on a tin roof")

        assert turns[0].role == "system"
        assert "under 100 characters" in turns[0].content
        assert '"soft rain on a tin roof"' in turns[1].content

    def test_image_prompt_quotes_caption(self):
        prompt = render_image_prompt("Moonlit tides")

        assert '"Moonlit tides"' in prompt
        assert "pastel gradients" in prompt
