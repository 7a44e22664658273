"""Route dispatcher: runs one request through the generation pipeline."""

import time
from typing import Any, Callable, Mapping, Optional, TypeVar, Union

from baassist.assembler.prompt_builder import PromptBuilder
from baassist.core.errors import BAAssistError, MalformedJSONError, ShapeMismatchError
from baassist.core.llm_base import CompletionClient
from baassist.core.logging import get_logger
from baassist.core.normalizer import normalize
from baassist.core.validator import validate
from baassist.schemas.documents import ErrorResponse, ValidatedDocument
from baassist.schemas.requests import GenerationRequest, TaskKind
from baassist.schemas.shapes import RootKind, shape_for

T = TypeVar("T")


class RouteDispatcher:
    """
    Maps each task kind to its prompt template and expected shape.

    Sequence: Prompt Builder -> Completion Client -> Normalizer -> Validator,
    stopping at the first failure. The dispatcher owns its completion client;
    call ``close()`` at process shutdown. No state is kept between requests.
    """

    def __init__(
        self,
        client: CompletionClient,
        bounds_policy: str = "clamp",
        prompt_builder: Optional[PromptBuilder] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            client: Completion client (usually a ResilientCompletionClient)
            bounds_policy: Numeric bounds policy passed to the validator
            prompt_builder: Template renderer (defaults to packaged templates)
        """
        self.client = client
        self.bounds_policy = bounds_policy
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.logger = get_logger("baassist.dispatcher")

    def _stage(self, stage: str, task_kind: TaskKind, func: Callable[..., T], *args: Any) -> T:
        start = time.time()
        self.logger.log_pipeline_stage(stage, "started", task_kind=task_kind.value)
        try:
            result = func(*args)
        except BAAssistError as e:
            self.logger.log_pipeline_stage(
                stage,
                "failed",
                duration_ms=(time.time() - start) * 1000,
                task_kind=task_kind.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        self.logger.log_pipeline_stage(
            stage,
            "completed",
            duration_ms=(time.time() - start) * 1000,
            task_kind=task_kind.value,
        )
        return result

    def dispatch(self, request: GenerationRequest) -> ValidatedDocument:
        """
        Run a request through the pipeline.

        Returns:
            ValidatedDocument for the request's task kind

        Raises:
            MissingInputError: If a template input is missing
            ProviderError: If the completion call failed
            MalformedJSONError: If the completion is not valid JSON
            ShapeMismatchError: If the completion lacks a required key
        """
        kind = request.task_kind
        shape = shape_for(kind)

        instruction = self._stage("prompt", kind, self.prompt_builder.build, kind, request.inputs)
        raw_text = self._stage("completion", kind, self.client.complete, instruction)
        normalized = self._stage(
            "normalize", kind, normalize, raw_text, shape.root == RootKind.SEQUENCE
        )
        try:
            return self._stage("validate", kind, validate, normalized, shape, self.bounds_policy)
        except (MalformedJSONError, ShapeMismatchError) as e:
            e.raw_text = raw_text
            raise

    def handle(
        self, task_kind: TaskKind, inputs: Mapping[str, Any]
    ) -> Union[ValidatedDocument, ErrorResponse]:
        """
        Run a request and convert pipeline errors into an ErrorResponse.

        Args:
            task_kind: Kind of generation
            inputs: Named request inputs

        Returns:
            ValidatedDocument on success, ErrorResponse otherwise
        """
        try:
            return self.dispatch(GenerationRequest(task_kind=task_kind, inputs=dict(inputs)))
        except BAAssistError as e:
            return e.to_response()

    def close(self) -> None:
        """Release the completion client."""
        close = getattr(self.client, "close", None)
        if callable(close):
            close()
