"""Video artifact data models."""

from pathlib import Path

from pydantic import BaseModel, Field


class VideoArtifact(BaseModel):
    """Final encoded video produced on full pipeline success."""

    path: str = Field(..., description="Path to the encoded video file")
    fps: int = Field(..., gt=0)
    frame_count: int = Field(..., gt=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    pixel_format: str = Field(default="yuv420p")
    video_codec: str = Field(default="h264")
    container_format: str = Field(default="mp4")
    file_size_bytes: int = Field(default=0, ge=0)

    @property
    def duration(self) -> float:
        """Declared playback length, derived from the frame count."""
        return self.frame_count / self.fps

    @property
    def file_size_mb(self) -> float:
        return self.file_size_bytes / (1024 * 1024)

    @property
    def output_file(self) -> Path:
        return Path(self.path)


def partial_path_for(output_path: Path) -> Path:
    """Hidden sibling the encoder writes to before the artifact is complete."""
    return output_path.with_name(f".{output_path.stem}.partial{output_path.suffix}")
