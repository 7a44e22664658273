"""Ollama completion client for locally hosted models."""

import os
from typing import Optional

import httpx
from ollama import Client, ResponseError

from baassist.core.errors import ProviderError
from baassist.core.llm_base import SYSTEM_INSTRUCTION


class OllamaClient:
    """
    Client for interacting with a local Ollama server.

    Implements CompletionClient.
    """

    provider = "ollama"

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: int = 4096,
        top_p: float = 1.0,
        timeout: int = 120,
    ):
        """
        Initialize Ollama client.

        Args:
            base_url: Base URL for Ollama API (defaults to http://localhost:11434)
            model: Model name to use (default: llama3.1)
            temperature: Sampling temperature
            max_tokens: Output length bound (Ollama's num_predict)
            top_p: Nucleus sampling parameter
            timeout: Request timeout in seconds
        """
        self.base_url = base_url or os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
        self.model = model or os.getenv("OLLAMA_MODEL", "llama3.1")
        self.options = {
            "temperature": temperature,
            "num_predict": max_tokens,
            "top_p": top_p,
        }
        self.client = Client(host=self.base_url, timeout=timeout)

    def complete(self, instruction: str) -> str:
        """
        Send one instruction and return the raw completion text.

        Raises:
            ProviderError: If the server is unreachable or answers with an error
        """
        try:
            response = self.client.chat(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTION},
                    {"role": "user", "content": instruction},
                ],
                options=self.options,
                stream=False,
            )
        except ResponseError as e:
            if e.status_code == 404:
                raise ProviderError(
                    f"Model '{self.model}' not found. "
                    f"Pull it with 'ollama pull {self.model}'. Original error: {e.error}",
                    status=404,
                ) from e
            raise ProviderError(
                f"Ollama returned HTTP {e.status_code}: {e.error}",
                retryable=e.status_code >= 500,
                status=e.status_code,
            ) from e
        except (httpx.HTTPError, ConnectionError) as e:
            raise ProviderError(
                f"Network error connecting to Ollama at {self.base_url}: {e}",
                retryable=True,
            ) from e

        return response["message"]["content"] or ""
