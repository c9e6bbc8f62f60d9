"""Data models for Vizreel."""

from vizreel.models.errors import (
    CaptureError,
    EncodeError,
    ErrorResponse,
    GenerationError,
    PipelineError,
    ResourceError,
    SandboxError,
    ValidationError,
    VizreelError,
)
from vizreel.models.frames import FrameSequence, frame_filename, frame_pattern
from vizreel.models.pipeline import PipelineStage, RenderJob
from vizreel.models.render import VideoArtifact
from vizreel.models.request import RenderMode, RenderRequest, Script, compute_frame_count
from vizreel.models.validation import ValidationResult

__all__ = [
    "CaptureError",
    "EncodeError",
    "ErrorResponse",
    "FrameSequence",
    "GenerationError",
    "PipelineError",
    "PipelineStage",
    "RenderJob",
    "RenderMode",
    "RenderRequest",
    "ResourceError",
    "SandboxError",
    "Script",
    "ValidationError",
    "ValidationResult",
    "VideoArtifact",
    "VizreelError",
    "compute_frame_count",
    "frame_filename",
    "frame_pattern",
]
