"""Tests for provider clients and the provider factory, with mocked SDKs."""

from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest
from ollama import ResponseError

from baassist.core.chat_client import PROVIDER_PRESETS, ChatCompletionClient
from baassist.core.config import Config
from baassist.core.errors import ProviderError
from baassist.core.llm_base import SYSTEM_INSTRUCTION
from baassist.core.llm_client import OllamaClient
from baassist.core.llm_wrapper import ResilientCompletionClient
from baassist.core.provider_factory import create_client, create_client_from_config, detect_provider

GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"


def _status_error(cls, status):
    response = httpx.Response(status, request=httpx.Request("POST", GROQ_URL))
    return cls("request failed", response=response, body=None)


def _completion(content):
    choice = MagicMock()
    choice.message.content = content
    response = MagicMock()
    response.choices = [choice]
    return response


@pytest.fixture
def clean_env(monkeypatch):
    """Remove provider credentials from the environment."""
    for preset in PROVIDER_PRESETS.values():
        monkeypatch.delenv(preset.api_key_env, raising=False)
        monkeypatch.delenv(preset.model_env, raising=False)
    monkeypatch.delenv("OLLAMA_BASE_URL", raising=False)
    monkeypatch.delenv("OLLAMA_MODEL", raising=False)


@pytest.mark.usefixtures("clean_env")
class TestChatCompletionClient:
    """Test the OpenAI-compatible client."""

    @patch("baassist.core.chat_client.OpenAI")
    def test_groq_preset(self, mock_openai):
        """Groq is the default preset and quotes are stripped from the key."""
        client = ChatCompletionClient(api_key='"gsk_test"')

        mock_openai.assert_called_once_with(
            api_key="gsk_test", base_url="https://api.groq.com/openai/v1"
        )
        assert client.provider == "groq"
        assert client.model == "llama-3.3-70b-versatile"

    @patch("baassist.core.chat_client.OpenAI")
    def test_key_and_model_from_env(self, mock_openai, monkeypatch):
        """Keys and models fall back to the preset's environment variables."""
        monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")
        monkeypatch.setenv("OPENROUTER_MODEL", "meta-llama/llama-3-70b")

        client = ChatCompletionClient(provider="openrouter")

        assert mock_openai.call_args.kwargs["api_key"] == "or-key"
        assert client.model == "meta-llama/llama-3-70b"

    def test_missing_key(self):
        """A missing key is a configuration error."""
        with pytest.raises(ValueError, match="GROQ_API_KEY"):
            ChatCompletionClient(provider="groq")

    def test_unknown_provider(self):
        """Unknown presets are rejected."""
        with pytest.raises(ValueError, match="Unknown provider"):
            ChatCompletionClient(provider="nope", api_key="k")

    @patch("baassist.core.chat_client.OpenAI")
    def test_complete(self, mock_openai):
        """One system and one user message are sent, without streaming."""
        sdk = mock_openai.return_value
        sdk.chat.completions.create.return_value = _completion('{"srs": "A"}')
        client = ChatCompletionClient(api_key="k", temperature=0.1, max_tokens=4096, top_p=1.0)

        assert client.complete("Write the SRS") == '{"srs": "A"}'

        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["messages"] == [
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {"role": "user", "content": "Write the SRS"},
        ]
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 4096
        assert kwargs["top_p"] == 1.0
        assert kwargs["stream"] is False

    @pytest.mark.parametrize(
        "error_cls,status,retryable",
        [
            (openai.RateLimitError, 429, True),
            (openai.InternalServerError, 503, True),
            (openai.AuthenticationError, 401, False),
            (openai.BadRequestError, 400, False),
        ],
    )
    @patch("baassist.core.chat_client.OpenAI")
    def test_status_errors(self, mock_openai, error_cls, status, retryable):
        """HTTP failures map to ProviderError; 429 and 5xx are retryable."""
        mock_openai.return_value.chat.completions.create.side_effect = _status_error(error_cls, status)
        client = ChatCompletionClient(api_key="k")

        with pytest.raises(ProviderError) as exc_info:
            client.complete("x")
        assert exc_info.value.status == status
        assert exc_info.value.retryable is retryable

    @patch("baassist.core.chat_client.OpenAI")
    def test_connection_error(self, mock_openai):
        """Network failures are retryable."""
        mock_openai.return_value.chat.completions.create.side_effect = openai.APIConnectionError(
            request=httpx.Request("POST", GROQ_URL)
        )
        client = ChatCompletionClient(api_key="k")

        with pytest.raises(ProviderError) as exc_info:
            client.complete("x")
        assert exc_info.value.retryable is True

    @patch("baassist.core.chat_client.OpenAI")
    def test_no_choices(self, mock_openai):
        """An empty choice list is a provider failure."""
        empty = MagicMock()
        empty.choices = []
        mock_openai.return_value.chat.completions.create.return_value = empty
        client = ChatCompletionClient(api_key="k")

        with pytest.raises(ProviderError, match="no choices"):
            client.complete("x")


@pytest.mark.usefixtures("clean_env")
class TestOllamaClient:
    """Test the Ollama client."""

    @patch("baassist.core.llm_client.Client")
    def test_complete(self, mock_client_class):
        """The chat API is used with the configured options."""
        mock_client_class.return_value.chat.return_value = {"message": {"content": '{"a": 1}'}}
        client = OllamaClient(model="llama3.1", temperature=0.1, max_tokens=512)

        assert client.complete("prompt") == '{"a": 1}'
        kwargs = mock_client_class.return_value.chat.call_args.kwargs
        assert kwargs["model"] == "llama3.1"
        assert kwargs["messages"][0] == {"role": "system", "content": SYSTEM_INSTRUCTION}
        assert kwargs["options"] == {"temperature": 0.1, "num_predict": 512, "top_p": 1.0}
        mock_client_class.assert_called_once_with(host="http://localhost:11434", timeout=120)

    @patch("baassist.core.llm_client.Client")
    def test_model_not_found(self, mock_client_class):
        """A missing model is not retryable."""
        mock_client_class.return_value.chat.side_effect = ResponseError("model not found", 404)
        client = OllamaClient()

        with pytest.raises(ProviderError, match="ollama pull") as exc_info:
            client.complete("x")
        assert exc_info.value.retryable is False

    @patch("baassist.core.llm_client.Client")
    def test_server_error_retryable(self, mock_client_class):
        """5xx responses are retryable."""
        mock_client_class.return_value.chat.side_effect = ResponseError("overloaded", 503)

        with pytest.raises(ProviderError) as exc_info:
            OllamaClient().complete("x")
        assert exc_info.value.retryable is True

    @patch("baassist.core.llm_client.Client")
    def test_connection_error(self, mock_client_class):
        """An unreachable server is retryable."""
        mock_client_class.return_value.chat.side_effect = httpx.ConnectError("refused")

        with pytest.raises(ProviderError) as exc_info:
            OllamaClient().complete("x")
        assert exc_info.value.retryable is True


@pytest.mark.usefixtures("clean_env")
class TestProviderFactory:
    """Test provider detection and client creation."""

    def test_detect_prefers_groq(self, monkeypatch):
        """Hosted providers are detected in preset order."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk")
        monkeypatch.setenv("GROQ_API_KEY", "gsk")
        assert detect_provider() == "groq"

    @patch("baassist.core.provider_factory.check_ollama_available", return_value=True)
    def test_detect_ollama_fallback(self, mock_check):
        """Ollama is used when no key is set and it is running."""
        assert detect_provider() == "ollama"

    @patch("baassist.core.provider_factory.check_ollama_available", return_value=False)
    def test_detect_nothing(self, mock_check):
        """No provider is a configuration error."""
        with pytest.raises(ValueError, match="No completion provider available"):
            detect_provider()

    @patch("baassist.core.provider_factory.requests.get")
    def test_check_ollama_unreachable(self, mock_get):
        """Connection errors mean Ollama is unavailable."""
        import requests

        from baassist.core.provider_factory import check_ollama_available

        mock_get.side_effect = requests.ConnectionError("refused")
        assert check_ollama_available() is False

    @patch("baassist.core.llm_client.Client")
    def test_create_ollama(self, mock_client_class):
        """The ollama provider creates an OllamaClient."""
        client = create_client(provider="ollama", model="mistral")
        assert isinstance(client, OllamaClient)
        assert client.model == "mistral"

    def test_create_unknown(self):
        """Unknown providers are rejected."""
        with pytest.raises(ValueError, match="Unknown provider"):
            create_client(provider="bard")

    @patch("baassist.core.chat_client.OpenAI")
    def test_from_config_wraps_client(self, mock_openai):
        """Config values reach the wrapper and its circuit breaker."""
        config = Config()
        config.provider = "groq"
        config.api_key = "gsk"
        config.max_retries = 4
        config.circuit_failure_threshold = 7

        client = create_client_from_config(config)

        assert isinstance(client, ResilientCompletionClient)
        assert isinstance(client.client, ChatCompletionClient)
        assert client.circuit_breaker.failure_threshold == 7
        assert client.circuit_breaker.expected_exception is ProviderError
