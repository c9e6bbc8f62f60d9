"""Render job state and stage models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from vizreel.models.render import VideoArtifact
from vizreel.models.request import RenderRequest


class PipelineStage(StrEnum):
    """Stages of a render job, in order."""

    CREATED = "created"
    GENERATING = "generating"
    PREPARING = "preparing"
    VALIDATING = "validating"
    EXECUTING = "executing"
    CAPTURING = "capturing"
    ENCODING = "encoding"
    CLEANING = "cleaning"
    COMPLETE = "complete"
    FAILED = "failed"


TERMINAL_STAGES = frozenset({PipelineStage.COMPLETE, PipelineStage.FAILED})


class RenderJob(BaseModel):
    """Current state of a render job."""

    job_id: str = Field(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    request: RenderRequest | None = None
    stage: PipelineStage = Field(default=PipelineStage.CREATED)
    progress: float = Field(default=0.0, ge=0, le=1)
    message: str = Field(default="")
    started_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None
    failed_stage: str | None = None
    artifact: VideoArtifact | None = None

    @property
    def is_finished(self) -> bool:
        return self.stage in TERMINAL_STAGES
