"""Completion client interface."""

from typing import Protocol

# Fixed single-turn system instruction sent with every completion request.
SYSTEM_INSTRUCTION = (
    "You are a helpful assistant that always responds with valid JSON. "
    "Never include any text outside the JSON structure. "
    "Never include XML-like tags. "
    "Always use double quotes for keys and string values. "
    "Never include markdown formatting."
)


class CompletionClient(Protocol):
    """
    Protocol/interface for completion providers.

    A provider is a plain ``str -> str`` function behind this port, so it can
    be swapped or mocked in tests.
    """

    provider: str
    model: str

    def complete(self, instruction: str) -> str:
        """
        Send one instruction and return the raw completion text.

        Args:
            instruction: Rendered user prompt

        Returns:
            Raw completion text

        Raises:
            ProviderError: On transport failure or a non-success response
        """
        ...
