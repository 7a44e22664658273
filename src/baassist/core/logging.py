"""Structured logging for the generation pipeline."""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

ROOT_LOGGER_NAME = "baassist"

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

PREVIEW_CHARS = 200

Context = Optional[dict[str, Any]]


class LogLevel(str, Enum):
    """Accepted names for ``configure_logging(level=...)``."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


_STAGE_LEVELS = {
    "started": logging.DEBUG,
    "completed": logging.INFO,
    "failed": logging.ERROR,
}


def _preview(text: str) -> str:
    if len(text) <= PREVIEW_CHARS:
        return text
    return text[:PREVIEW_CHARS] + "..."


def _make_formatter(json_output: bool) -> logging.Formatter:
    if json_output:
        return jsonlogger.JsonFormatter(JSON_FORMAT)
    return logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


class StructuredLogger:
    """
    Logger with context fields attached to each record.

    Records go through the standard ``logging`` hierarchy under the
    ``baassist`` root, so handlers configured once by ``configure_logging``
    apply to every module logger. With JSON output enabled the context fields
    become top-level keys of each JSON line.
    """

    def __init__(self, name: str = ROOT_LOGGER_NAME):
        self.name = name
        self.logger = logging.getLogger(name)

    def log(self, level: int, message: str, context: Context = None, exc_info: bool = False, **fields: Any) -> None:
        """Emit ``message`` with ``context`` and ``fields`` merged into the record."""
        extra = {**(context or {}), **fields}
        self.logger.log(level, message, extra=extra or None, exc_info=exc_info)

    def debug(self, message: str, context: Context = None, **fields: Any) -> None:
        self.log(logging.DEBUG, message, context, **fields)

    def info(self, message: str, context: Context = None, **fields: Any) -> None:
        self.log(logging.INFO, message, context, **fields)

    def warning(self, message: str, context: Context = None, **fields: Any) -> None:
        self.log(logging.WARNING, message, context, **fields)

    def error(self, message: str, context: Context = None, **fields: Any) -> None:
        self.log(logging.ERROR, message, context, **fields)

    def exception(self, message: str, context: Context = None, **fields: Any) -> None:
        """Log at ERROR with the active exception's traceback."""
        self.log(logging.ERROR, message, context, exc_info=True, **fields)

    def log_llm_call(
        self,
        provider: str,
        model: str,
        prompt: str,
        response: str,
        latency_ms: Optional[float] = None,
        attempt: Optional[int] = None,
        **fields: Any,
    ) -> None:
        """
        Record one completion round trip.

        Instruction and completion are logged as length plus a truncated
        preview, never in full.

        Args:
            provider: Provider name (e.g., "groq", "ollama")
            model: Model name
            prompt: Instruction text
            response: Raw completion text
            latency_ms: Round-trip time in milliseconds
            attempt: Attempt number when retries are enabled
            **fields: Extra context
        """
        context: dict[str, Any] = {
            "event_type": "llm_call",
            "provider": provider,
            "model": model,
            "prompt_length": len(prompt),
            "response_length": len(response),
            "prompt_preview": _preview(prompt),
            "response_preview": _preview(response),
        }
        if latency_ms is not None:
            context["latency_ms"] = round(latency_ms, 1)
        if attempt is not None:
            context["attempt"] = attempt
        self.info(f"LLM call: {provider}/{model}", context, **fields)

    def log_pipeline_stage(
        self,
        stage: str,
        status: str,
        duration_ms: Optional[float] = None,
        **fields: Any,
    ) -> None:
        """
        Record a dispatcher stage transition.

        ``started`` logs at DEBUG, ``completed`` at INFO and ``failed`` at
        ERROR.

        Args:
            stage: "prompt", "completion", "normalize" or "validate"
            status: "started", "completed" or "failed"
            duration_ms: Time spent in the stage
            **fields: Extra context (task kind, error details)
        """
        context: dict[str, Any] = {"event_type": "pipeline_stage", "stage": stage, "status": status}
        if duration_ms is not None:
            context["duration_ms"] = round(duration_ms, 1)
        level = _STAGE_LEVELS.get(status, logging.INFO)
        self.log(level, f"Pipeline stage {stage} {status}", context, **fields)


_loggers: dict[str, StructuredLogger] = {}


def get_logger(name: str = ROOT_LOGGER_NAME) -> StructuredLogger:
    """
    Return the shared StructuredLogger for ``name``.

    Names outside the ``baassist`` namespace are nested under it, so they
    pick up the handlers installed by ``configure_logging``.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name)
    return _loggers[name]


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
) -> StructuredLogger:
    """
    Install stderr (and optionally file) handlers on the ``baassist`` logger.

    Calling it again replaces the previous handlers.

    Args:
        level: One of the LogLevel names, case-insensitive
        json_output: Emit one JSON object per line via python-json-logger
        log_file: Also append records to this path

    Returns:
        The root StructuredLogger
    """
    formatter = _make_formatter(json_output)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(LogLevel[level.upper()].value)
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    return get_logger(ROOT_LOGGER_NAME)
