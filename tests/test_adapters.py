"""Unit tests for the Gemini and OpenAI adapters."""

import json
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import httpx
import pytest

from src.generator import (
    GeminiAdapter,
    GenerationConfig,
    GenerationMode,
    LLMAuthenticationError,
    LLMConnectionError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
    OpenAIAdapter,
)

SINGLE_CONFIG = GenerationConfig.for_mode(GenerationMode.SINGLE_REPLY)

GEMINI_BODY = {
    "candidates": [{"content": {"parts": [{"text": "Summary: a\nReply: b"}]}}],
}


def _gemini(handler, **kwargs) -> GeminiAdapter:
    return GeminiAdapter(api_key="test-key", transport=httpx.MockTransport(handler), **kwargs)


class TestGeminiAdapter:
    """Tests for GeminiAdapter with a mocked HTTP transport."""

    def test_missing_api_key_raises(self):
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(LLMAuthenticationError) as exc_info:
                GeminiAdapter()
            assert "API key not provided" in str(exc_info.value)

    def test_settings_from_env(self):
        env = {
            "GEMINI_API_KEY": "env-key",
            "GEMINI_MODEL": "gemini-2.5-pro",
            "GEMINI_API_URL": "https://example.test/v1/",
            "GEMINI_TIMEOUT_SECONDS": "12.5",
        }
        with patch.dict("os.environ", env, clear=True):
            adapter = GeminiAdapter()
        assert adapter._api_key == "env-key"
        assert adapter.model_name == "gemini-2.5-pro"
        assert adapter._base_url == "https://example.test/v1"
        assert adapter._timeout == 12.5

    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            adapter = GeminiAdapter(api_key="test-key")
        assert adapter.model_name == "gemini-2.5-flash"
        assert adapter._timeout == 30.0
        assert adapter.provider_name == "Gemini"

    def test_lazy_client_init(self):
        adapter = GeminiAdapter(api_key="test-key")
        assert adapter._client is None
        client = adapter._get_client()
        assert isinstance(client, httpx.Client)
        assert client.timeout.read == adapter._timeout
        adapter.close()
        assert adapter._client is None

    def test_generate_sends_prompt_and_config(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=GEMINI_BODY)

        adapter = _gemini(handler, model="gemini-test", base_url="https://gemini.test/v1beta")
        envelope = adapter.generate("the prompt", SINGLE_CONFIG)

        assert json.loads(envelope) == GEMINI_BODY
        assert captured["url"] == "https://gemini.test/v1beta/models/gemini-test:generateContent"
        assert captured["headers"]["x-goog-api-key"] == "test-key"
        assert "key=" not in captured["url"]
        assert captured["body"] == {
            "contents": [{"parts": [{"text": "the prompt"}]}],
            "generationConfig": SINGLE_CONFIG.to_dict(),
        }

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(LLMTimeoutError) as exc_info:
            _gemini(handler, timeout=5).generate("p", SINGLE_CONFIG)
        assert "5s" in str(exc_info.value)

    def test_timeout_is_connection_error(self):
        assert issubclass(LLMTimeoutError, LLMConnectionError)

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(LLMConnectionError) as exc_info:
            _gemini(handler).generate("p", SINGLE_CONFIG)
        assert not isinstance(exc_info.value, LLMTimeoutError)

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_error(self, status):
        adapter = _gemini(lambda request: httpx.Response(status, json={"error": {"message": "bad key"}}))
        with pytest.raises(LLMAuthenticationError):
            adapter.generate("p", SINGLE_CONFIG)

    def test_rate_limit_with_retry_after(self):
        adapter = _gemini(lambda request: httpx.Response(429, headers={"retry-after": "7"}))
        with pytest.raises(LLMRateLimitError) as exc_info:
            adapter.generate("p", SINGLE_CONFIG)
        assert exc_info.value.retry_after == 7.0

    def test_rate_limit_without_retry_after(self):
        adapter = _gemini(lambda request: httpx.Response(429))
        with pytest.raises(LLMRateLimitError) as exc_info:
            adapter.generate("p", SINGLE_CONFIG)
        assert exc_info.value.retry_after is None

    def test_server_error_keeps_body(self):
        adapter = _gemini(lambda request: httpx.Response(503, text="overloaded"))
        with pytest.raises(LLMResponseError) as exc_info:
            adapter.generate("p", SINGLE_CONFIG)
        assert "503" in str(exc_info.value)
        assert exc_info.value.raw_response == "overloaded"

    def test_undecodable_body(self):
        adapter = _gemini(
            lambda request: httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not-gzip")
        )
        with pytest.raises(LLMConnectionError) as exc_info:
            adapter.generate("p", SINGLE_CONFIG)
        assert isinstance(exc_info.value.__cause__, httpx.DecodingError)

    def test_redirect_loop(self):
        def handler(request):
            return httpx.Response(302, headers={"location": str(request.url)})

        adapter = _gemini(handler)
        client = adapter._get_client()
        client.follow_redirects = True
        client.max_redirects = 2
        with pytest.raises(LLMConnectionError) as exc_info:
            adapter.generate("p", SINGLE_CONFIG)
        assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)

    def test_invalid_timeout(self):
        with pytest.raises(ValueError) as exc_info:
            GeminiAdapter(api_key="test-key", timeout="soon")
        assert "Invalid Gemini timeout" in str(exc_info.value)

    def test_concurrent_first_use_creates_one_client(self):
        adapter = GeminiAdapter(api_key="test-key")
        real_client = httpx.Client

        def slow_client(**kwargs):
            time.sleep(0.01)
            return real_client(**kwargs)

        with patch("src.generator.gemini_adapter.httpx.Client", side_effect=slow_client) as mock_client:
            with ThreadPoolExecutor(max_workers=8) as pool:
                clients = list(pool.map(lambda _: adapter._get_client(), range(8)))

        assert mock_client.call_count == 1
        assert all(client is clients[0] for client in clients)
        adapter.close()


class TestOpenAIAdapter:
    """Tests for OpenAIAdapter with mocked OpenAI client."""

    def test_missing_api_key_raises(self):
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(LLMAuthenticationError) as exc_info:
                OpenAIAdapter()
            assert "API key not provided" in str(exc_info.value)

    def test_api_key_from_env(self):
        with patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"}):
            adapter = OpenAIAdapter()
            assert adapter._api_key == "test-key"

    def test_model_name_default(self):
        with patch.dict("os.environ", {}, clear=True):
            adapter = OpenAIAdapter(api_key="test-key")
        assert adapter.model_name == "gpt-4o-mini"
        assert adapter.provider_name == "OpenAI"

    def test_model_name_custom(self):
        adapter = OpenAIAdapter(api_key="test-key", model="gpt-4o")
        assert adapter.model_name == "gpt-4o"

    def test_generate_wraps_output_envelope(self):
        adapter = OpenAIAdapter(api_key="test-key")

        mock_response = MagicMock()
        mock_response.choices = [MagicMock(message=MagicMock(content="Summary: a\nReply: b"))]
        mock_response.usage = None

        with patch.object(adapter, "_get_client") as mock_get_client:
            mock_client = MagicMock()
            mock_client.chat.completions.create.return_value = mock_response
            mock_get_client.return_value = mock_client

            envelope = adapter.generate("the prompt", SINGLE_CONFIG)

            assert json.loads(envelope) == {"output": "Summary: a\nReply: b"}
            call_kwargs = mock_client.chat.completions.create.call_args[1]
            assert call_kwargs["messages"] == [{"role": "user", "content": "the prompt"}]
            assert call_kwargs["temperature"] == 0.7
            assert call_kwargs["max_tokens"] == 1024
            assert call_kwargs["top_p"] == 0.8

    def test_generate_empty_choices_raises(self):
        adapter = OpenAIAdapter(api_key="test-key")

        mock_response = MagicMock()
        mock_response.choices = []

        with patch.object(adapter, "_get_client") as mock_get_client:
            mock_client = MagicMock()
            mock_client.chat.completions.create.return_value = mock_response
            mock_get_client.return_value = mock_client

            with pytest.raises(LLMResponseError) as exc_info:
                adapter.generate("p", SINGLE_CONFIG)
            assert "No choices" in str(exc_info.value)

    def test_lazy_client_init(self):
        adapter = OpenAIAdapter(api_key="test-key", timeout=9)
        assert adapter._client is None

        with patch("src.generator.openai_adapter.OpenAI") as mock_openai:
            mock_openai.return_value = MagicMock()
            client = adapter._get_client()
            assert client is not None
            mock_openai.assert_called_once()
            assert mock_openai.call_args[1]["timeout"] == 9.0
