"""Frame sequence data models."""

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

FRAME_PREFIX = "frame_"
FRAME_SUFFIX = ".png"
MIN_INDEX_WIDTH = 6


def index_width(frame_count: int) -> int:
    """Zero-pad width that keeps lexical order equal to frame order."""
    return max(MIN_INDEX_WIDTH, len(str(max(frame_count - 1, 0))))


def frame_filename(index: int, frame_count: int) -> str:
    return f"{FRAME_PREFIX}{index:0{index_width(frame_count)}d}{FRAME_SUFFIX}"


def frame_pattern(frame_count: int) -> str:
    """printf-style pattern matching :func:`frame_filename`, as ffmpeg expects."""
    return f"{FRAME_PREFIX}%0{index_width(frame_count)}d{FRAME_SUFFIX}"


class FrameSequence(BaseModel):
    """Ordered, gap-free frames on disk, one per index in [0, frame_count)."""

    directory: str = Field(..., description="Workspace directory holding the frames")
    frame_count: int = Field(..., gt=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    paths: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_complete(self) -> "FrameSequence":
        if len(self.paths) != self.frame_count:
            raise ValueError(
                f"Frame sequence has {len(self.paths)} frames, expected {self.frame_count}"
            )
        for index, path in enumerate(self.paths):
            expected = frame_filename(index, self.frame_count)
            if Path(path).name != expected:
                raise ValueError(f"Frame {index} is named {Path(path).name}, expected {expected}")
        return self

    @property
    def pattern(self) -> str:
        return str(Path(self.directory) / frame_pattern(self.frame_count))
