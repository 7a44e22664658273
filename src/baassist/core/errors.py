"""Error taxonomy for the generation pipeline.

Every error maps to an HTTP status and a JSON error body. The dispatcher
catches these at the route boundary; nothing is retried or defaulted here.
"""

from typing import Optional

from baassist.schemas.documents import ErrorResponse


class BAAssistError(Exception):
    """Base class for all pipeline errors."""

    status_code: int = 500
    public_message: str = "Internal error"

    def to_response(self) -> ErrorResponse:
        """Convert the error to a wire-level error body."""
        return ErrorResponse(
            error=self.public_message,
            details=str(self),
            status_code=self.status_code,
        )


class MissingInputError(BAAssistError):
    """The caller omitted a field the task requires."""

    status_code = 400

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} is required")

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=str(self), status_code=self.status_code)


class ProviderError(BAAssistError):
    """The completion provider call failed."""

    public_message = "Completion provider request failed"

    def __init__(self, message: str, retryable: bool = False, status: Optional[int] = None):
        self.retryable = retryable
        self.status = status
        super().__init__(message)


class MalformedJSONError(BAAssistError):
    """Normalized completion text is not valid JSON."""

    public_message = "Failed to parse AI response"
    raw_text: Optional[str] = None

    def __init__(self, message: str, text: str):
        self.message = message
        self.text = text
        super().__init__(f"Invalid JSON in response: {message}")

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=self.public_message,
            details=self.message,
            rawResponse=self.raw_text or self.text,
            status_code=self.status_code,
        )


class ShapeMismatchError(BAAssistError):
    """Parsed JSON is missing a required key or has the wrong kind."""

    public_message = "Invalid response structure from AI"
    raw_text: Optional[str] = None

    def __init__(self, key: str, reason: str, text: Optional[str] = None):
        self.key = key
        self.reason = reason
        self.text = text
        super().__init__(f"'{key}': {reason}")

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=self.public_message,
            details=str(self),
            rawResponse=self.raw_text or self.text,
            status_code=self.status_code,
        )
