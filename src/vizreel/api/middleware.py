"""Error handling middleware."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from vizreel.models.errors import (
    ErrorResponse,
    PipelineError,
    ResourceError,
    ValidationError,
    VizreelError,
)

logger = logging.getLogger(__name__)


async def vizreel_error_handler(request: Request, exc: VizreelError) -> JSONResponse:
    """Handle VizreelError exceptions."""
    response = ErrorResponse.from_exception(
        exc, guidance=_get_guidance(exc), retry=_is_retryable(exc)
    )
    status_code = _get_status_code(exc)
    if status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


def _root_cause(exc: VizreelError) -> VizreelError:
    return exc.cause if isinstance(exc, PipelineError) else exc


def _get_status_code(exc: VizreelError) -> int:
    """Map error type to HTTP status code."""
    cause = _root_cause(exc)
    if isinstance(cause, ValidationError):
        # The request was fine but the generated script was not
        return 422 if isinstance(exc, PipelineError) else 400
    if isinstance(cause, ResourceError):
        return 409
    return 500


def _get_guidance(exc: VizreelError) -> str:
    """Generate actionable guidance based on error type."""
    cause = _root_cause(exc)
    if isinstance(exc, PipelineError) and isinstance(cause, ValidationError):
        return "The generated scene was incomplete. Rephrase or refine your prompt."
    if isinstance(cause, ValidationError):
        return "Check the request parameters."
    if isinstance(cause, ResourceError):
        return "A job with this id is already running. Wait for it to finish."
    return "Please try again or contact support."


def _is_retryable(exc: VizreelError) -> bool:
    """Resubmitting the whole job may succeed; nothing is retried internally."""
    return isinstance(_root_cause(exc), ResourceError) or isinstance(exc, PipelineError)
