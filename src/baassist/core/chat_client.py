"""Chat-completion client for OpenAI-compatible providers (Groq, OpenRouter, OpenAI)."""

import os
from dataclasses import dataclass
from typing import Optional

import openai
from openai import OpenAI

from baassist.core.errors import ProviderError
from baassist.core.llm_base import SYSTEM_INSTRUCTION


@dataclass(frozen=True)
class ProviderPreset:
    """Endpoint, credentials variable and default model of a provider."""

    base_url: str
    api_key_env: str
    default_model: str
    model_env: str


PROVIDER_PRESETS = {
    "groq": ProviderPreset(
        base_url="https://api.groq.com/openai/v1",
        api_key_env="GROQ_API_KEY",
        default_model="llama-3.3-70b-versatile",
        model_env="GROQ_MODEL",
    ),
    "openrouter": ProviderPreset(
        base_url="https://openrouter.ai/api/v1",
        api_key_env="OPENROUTER_API_KEY",
        default_model="openai/gpt-4o-mini",
        model_env="OPENROUTER_MODEL",
    ),
    "openai": ProviderPreset(
        base_url="https://api.openai.com/v1",
        api_key_env="OPENAI_API_KEY",
        default_model="gpt-4o-mini",
        model_env="OPENAI_MODEL",
    ),
}


class ChatCompletionClient:
    """
    Client for OpenAI-compatible chat completion endpoints.

    Implements CompletionClient. One attempt per call; retries belong to
    ResilientCompletionClient.
    """

    def __init__(
        self,
        provider: str = "groq",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: int = 4096,
        top_p: float = 1.0,
        timeout: int = 120,
    ):
        """
        Initialize chat completion client.

        Args:
            provider: Preset name ("groq", "openrouter" or "openai")
            api_key: API key (defaults to the preset's env var)
            base_url: Override for the preset endpoint
            model: Model name (defaults to the preset's model env var, then its default)
            temperature: Sampling temperature
            max_tokens: Output length bound
            top_p: Nucleus sampling parameter
            timeout: Request timeout in seconds
        """
        if provider not in PROVIDER_PRESETS:
            raise ValueError(
                f"Unknown provider: {provider}. Supported: {', '.join(PROVIDER_PRESETS)}"
            )
        preset = PROVIDER_PRESETS[provider]

        api_key = api_key or os.getenv(preset.api_key_env)
        # Quotes are a common leftover from shell exports.
        api_key = (api_key or "").strip().strip('"').strip("'")
        if not api_key:
            raise ValueError(
                f"{preset.api_key_env} environment variable is required for {provider} provider. "
                "Set it or pass api_key parameter."
            )

        self.provider = provider
        self.base_url = base_url or preset.base_url
        self.model = model or os.getenv(preset.model_env, preset.default_model)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_p = top_p
        self.timeout = timeout
        self.client = OpenAI(api_key=api_key, base_url=self.base_url)

    def complete(self, instruction: str) -> str:
        """
        Send one instruction and return the raw completion text.

        Raises:
            ProviderError: On transport failure, a non-success status or an
                empty choice list
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTION},
                    {"role": "user", "content": instruction},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                top_p=self.top_p,
                stream=False,
                timeout=self.timeout,
            )
        except openai.APIStatusError as e:
            status = e.status_code
            raise ProviderError(
                f"{self.provider} API returned HTTP {status}: {e.message}",
                retryable=status == 429 or status >= 500,
                status=status,
            ) from e
        except openai.APIConnectionError as e:
            raise ProviderError(
                f"Network error connecting to {self.provider} API at {self.base_url}: {e}",
                retryable=True,
            ) from e
        except openai.OpenAIError as e:
            raise ProviderError(f"{self.provider} API error: {e}") from e

        if not response.choices:
            raise ProviderError(f"{self.provider} API returned no choices", retryable=True)
        return response.choices[0].message.content or ""

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        self.client.close()
