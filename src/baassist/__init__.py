"""Business-analyst assistant: LLM document, research and task pipeline."""

__version__ = "0.1.0"
