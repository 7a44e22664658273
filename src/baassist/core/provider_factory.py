"""Factory for creating completion clients with auto-detection."""

import os
from typing import Optional

import requests

from baassist.core.chat_client import PROVIDER_PRESETS, ChatCompletionClient
from baassist.core.config import Config
from baassist.core.errors import ProviderError
from baassist.core.llm_base import CompletionClient
from baassist.core.llm_client import OllamaClient
from baassist.core.llm_wrapper import ResilientCompletionClient
from baassist.core.retry import CircuitBreaker

SUPPORTED_PROVIDERS = ("auto", "ollama", *PROVIDER_PRESETS)


def check_ollama_available(base_url: Optional[str] = None) -> bool:
    """
    Check if Ollama is available and running.

    Args:
        base_url: Ollama base URL to check

    Returns:
        True if Ollama is available, False otherwise
    """
    base_url = base_url or os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    try:
        response = requests.get(f"{base_url}/api/tags", timeout=2)
        return response.status_code == 200
    except requests.RequestException:
        return False


def detect_provider(base_url: Optional[str] = None) -> str:
    """
    Pick a provider from the environment.

    Hosted providers with an API key set win, in preset order (Groq first);
    a reachable Ollama server is the fallback.

    Raises:
        ValueError: If no provider is available
    """
    for name, preset in PROVIDER_PRESETS.items():
        if os.getenv(preset.api_key_env):
            return name
    if check_ollama_available(base_url):
        return "ollama"
    keys = ", ".join(preset.api_key_env for preset in PROVIDER_PRESETS.values())
    raise ValueError(
        f"No completion provider available. Set one of {keys}, or ensure Ollama is running."
    )


def create_client(
    provider: str = "auto",
    model: Optional[str] = None,
    temperature: float = 0.1,
    max_tokens: int = 4096,
    top_p: float = 1.0,
    timeout: int = 120,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
) -> CompletionClient:
    """
    Create a bare completion client for the specified provider.

    Args:
        provider: "groq", "openrouter", "openai", "ollama" or "auto"
        model: Model name (provider-specific)
        temperature: Sampling temperature
        max_tokens: Output length bound
        top_p: Nucleus sampling parameter
        timeout: Request timeout in seconds
        base_url: Endpoint override
        api_key: API key for hosted providers

    Returns:
        Completion client instance

    Raises:
        ValueError: If provider is invalid or not available
    """
    if provider == "auto":
        provider = detect_provider(base_url)

    if provider == "ollama":
        return OllamaClient(
            base_url=base_url,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            top_p=top_p,
            timeout=timeout,
        )

    if provider in PROVIDER_PRESETS:
        return ChatCompletionClient(
            provider=provider,
            api_key=api_key,
            base_url=base_url,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            top_p=top_p,
            timeout=timeout,
        )

    raise ValueError(
        f"Unknown provider: {provider}. Supported providers: {', '.join(SUPPORTED_PROVIDERS)}"
    )


def create_client_from_config(config: Config) -> ResilientCompletionClient:
    """Create a completion client wrapped with retry, circuit breaker and logging."""
    client = create_client(
        provider=config.provider,
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        top_p=config.top_p,
        timeout=config.timeout,
        base_url=config.base_url,
        api_key=config.api_key,
    )
    return ResilientCompletionClient(
        client,
        max_retries=config.max_retries,
        initial_delay=config.retry_initial_delay,
        max_delay=config.retry_max_delay,
        circuit_breaker=CircuitBreaker(
            failure_threshold=config.circuit_failure_threshold,
            recovery_timeout=config.circuit_recovery_timeout,
            expected_exception=ProviderError,
        ),
    )
