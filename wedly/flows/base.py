"""
Flow plumbing: a Flow is a named generative-AI call with pydantic input and
output models. Gemini is reached through the google-genai client, created
lazily from GEMINI_API_KEY / GOOGLE_API_KEY.
"""
import logging
import os
from typing import Any, Callable, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from ..constants import TEXT_MODEL
from ..errors import AppError, ConfigurationError, ErrorCategory

logger = logging.getLogger("wedly")

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)

_client = None


class FlowError(AppError):
    def __init__(self, message: str, status_code: int = 502, retryable: bool = False, **context: Any):
        super().__init__(
            message,
            ErrorCategory.EXTERNAL_SERVICE,
            status_code,
            "AI service error. Please try again.",
            retryable=retryable,
            **context,
        )


def get_genai_client():
    """Gemini client (lazy init)."""
    global _client
    if _client is None:
        from google import genai

        api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY or GOOGLE_API_KEY is required for AI flows")
        _client = genai.Client(api_key=api_key)
    return _client


def reset_genai_client():
    global _client
    _client = None


def _map_genai_error(exc: Exception) -> FlowError:
    from google.genai import errors as genai_errors

    if isinstance(exc, genai_errors.ServerError):
        return FlowError(f"Gemini server error: {exc}", 503, retryable=True)
    if isinstance(exc, genai_errors.ClientError) and getattr(exc, "code", None) == 429:
        return FlowError(f"Gemini rate limit: {exc}", 429, retryable=True)
    return FlowError(f"Gemini request failed: {exc}")


def generate_content(model: str, contents: Any, config: Any = None):
    """Call Gemini, turning SDK errors into FlowError."""
    from google.genai import errors as genai_errors

    client = get_genai_client()
    try:
        return client.models.generate_content(model=model, contents=contents, config=config)
    except genai_errors.APIError as e:
        raise _map_genai_error(e) from e


def generate_structured(
    prompt: str,
    output_model: Type[OutputT],
    system: Optional[str] = None,
    model: str = TEXT_MODEL,
) -> OutputT:
    """Run a prompt and parse the JSON reply into output_model."""
    from google.genai import types

    config = types.GenerateContentConfig(
        system_instruction=system,
        response_mime_type="application/json",
        response_schema=output_model,
    )
    response = generate_content(model, prompt, config)

    parsed = getattr(response, "parsed", None)
    if isinstance(parsed, output_model):
        return parsed
    text = getattr(response, "text", None)
    if not text:
        raise FlowError("Model returned no output")
    try:
        return output_model.model_validate_json(text)
    except ValidationError as e:
        raise FlowError(f"Model output did not match {output_model.__name__}: {e}") from e


class Flow(Generic[InputT, OutputT]):
    """
    A named flow. Calling it validates the input dict, runs the handler and
    validates what the handler returns.
    """

    def __init__(
        self,
        name: str,
        input_model: Type[InputT],
        output_model: Type[OutputT],
        handler: Callable[[InputT], OutputT],
        premium: bool = False,
    ):
        self.name = name
        self.input_model = input_model
        self.output_model = output_model
        self.handler = handler
        self.premium = premium

    def parse_input(self, data: Dict[str, Any]) -> InputT:
        try:
            return self.input_model.model_validate(data)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise AppError(
                f"Invalid input for {self.name}: {errors}",
                ErrorCategory.VALIDATION,
                400,
                f"Invalid request: {'; '.join(errors)}",
            ) from e

    def run(self, flow_input: InputT) -> OutputT:
        logger.info(f"[FLOW] {self.name} started")
        output = self.handler(flow_input)
        if not isinstance(output, self.output_model):
            output = self.output_model.model_validate(output)
        logger.info(f"[FLOW] {self.name} finished")
        return output

    def __call__(self, data: Dict[str, Any]) -> OutputT:
        return self.run(self.parse_input(data))


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
