"""Render request and script data models."""

import math
from enum import StrEnum

from pydantic import BaseModel, Field


class RenderMode(StrEnum):
    """Library set the script is written against."""

    BASIC = "basic"
    ADVANCED = "advanced"
    PRO = "pro"


def compute_frame_count(duration_minutes: float, fps: int) -> int:
    """Total frames for a job; at least one second of frames for short durations."""
    seconds = max(duration_minutes * 60, 1)
    # Rounding first absorbs float noise such as 0.1 * 60 == 6.000000000000001
    return max(math.ceil(round(seconds * fps, 6)), 1)


class RenderRequest(BaseModel):
    """A request to turn a prompt into a fixed-length video."""

    model_config = {"frozen": True}

    prompt: str = Field(..., min_length=1, max_length=4000)
    duration: float = Field(default=1.0, gt=0, description="Duration in minutes")
    mode: RenderMode = Field(default=RenderMode.BASIC)
    width: int = Field(default=640, gt=0, le=3840)
    height: int = Field(default=480, gt=0, le=2160)
    fps: int = Field(default=30, gt=0, le=120)

    @property
    def frame_count(self) -> int:
        return compute_frame_count(self.duration, self.fps)

    @property
    def expected_duration_seconds(self) -> float:
        return self.frame_count / self.fps


class Script(BaseModel):
    """Visualization script text produced by the code generator.

    ``validated`` is only ever set by the scene validator, which returns a new
    instance instead of mutating this one.
    """

    model_config = {"frozen": True}

    code: str
    mode: RenderMode = Field(default=RenderMode.BASIC)
    source: str = Field(default="llm", description="llm, template or user")
    validated: bool = False
