"""Error hierarchy and error response models."""

from pydantic import BaseModel, Field


class VizreelError(Exception):
    """Base error for all Vizreel errors."""

    def __init__(self, message: str, component: str = "", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}


class ValidationError(VizreelError):
    """Input or script validation errors. The script is never executed."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="validation", details=details)


class SandboxError(VizreelError):
    """The script threw or timed out during setup or a frame advance."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="sandbox", details=details)


class CaptureError(VizreelError):
    """A sandbox error detected mid-sequence, or a frame could not be stored."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="capture", details=details)


class EncodeError(VizreelError):
    """The encoding subprocess failed or produced no output."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="encoding", details=details)


class ResourceError(VizreelError):
    """Resource-related errors (busy workspace, disk, external services)."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="resource", details=details)


class GenerationError(VizreelError):
    """The code generator could not produce a script."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="generation", details=details)


class PipelineError(VizreelError):
    """Umbrella error returned to callers of the render pipeline.

    Carries the stage that failed and the stage error that caused it.
    """

    def __init__(
        self,
        stage: str,
        cause: VizreelError,
        job_id: str | None = None,
    ):
        super().__init__(
            f"Render failed during {stage}: {cause.message}",
            component="pipeline",
            details={"stage": stage, "cause": type(cause).__name__, **cause.details},
        )
        self.stage = stage
        self.cause = cause
        self.job_id = job_id


class ErrorResponse(BaseModel):
    """Standardized error response for API."""

    error_type: str = Field(..., description="Error category")
    component: str = Field(default="", description="Component that raised the error")
    message: str = Field(..., description="Human-readable error message")
    stage: str | None = Field(default=None, description="Pipeline stage that failed")
    details: dict = Field(default_factory=dict)
    actionable_guidance: str = Field(default="", description="Suggested user action")
    retry_possible: bool = Field(default=False)

    @classmethod
    def from_exception(
        cls, exc: VizreelError, guidance: str = "", retry: bool = False
    ) -> "ErrorResponse":
        return cls(
            error_type=type(exc).__name__,
            component=exc.component,
            message=exc.message,
            stage=getattr(exc, "stage", None),
            details=exc.details,
            actionable_guidance=guidance,
            retry_possible=retry,
        )
