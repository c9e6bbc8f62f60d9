"""Per-job workspace and artifact path management."""

import logging
import re
import shutil
import threading
import time
from dataclasses import dataclass
from pathlib import Path

from vizreel.config import get_settings
from vizreel.models.errors import ResourceError, ValidationError
from vizreel.models.render import partial_path_for

logger = logging.getLogger(__name__)

_JOB_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def validate_job_id(job_id: str) -> str:
    """Reject identifiers that could escape the workspace root."""
    if not isinstance(job_id, str) or not _JOB_ID_RE.match(job_id):
        raise ValidationError(
            f"Invalid job id: {job_id!r}",
            details={"allowed": "letters, digits, '-' and '_' (max 64)"},
        )
    return job_id


@dataclass(frozen=True)
class JobPaths:
    """Filesystem locations owned by a single job."""

    job_id: str
    frames_dir: Path
    artifact_path: Path

    @property
    def partial_artifact_path(self) -> Path:
        return partial_path_for(self.artifact_path)


class WorkspaceManager:
    """Hands out job-private frame directories and artifact paths.

    Paths are derived from the job id, and a job id can be held by only one
    live job at a time.
    """

    def __init__(self, workspace_dir: Path | None = None, output_dir: Path | None = None):
        settings = get_settings()
        self.workspace_dir = workspace_dir or settings.workspace_dir
        self.output_dir = output_dir or settings.output_dir
        self.workspace_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._active: set[str] = set()
        self._lock = threading.Lock()

    def paths_for(self, job_id: str) -> JobPaths:
        validate_job_id(job_id)
        return JobPaths(
            job_id=job_id,
            frames_dir=self.workspace_dir / job_id / "frames",
            artifact_path=self.output_dir / f"{job_id}.mp4",
        )

    def is_active(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._active

    def claim(self, job_id: str) -> JobPaths:
        """Take exclusive ownership of a job's paths; release with :meth:`release`."""
        paths = self.paths_for(job_id)
        with self._lock:
            if job_id in self._active:
                raise ResourceError(
                    f"Job {job_id} already owns its workspace",
                    details={"job_id": job_id},
                )
            self._active.add(job_id)
        return paths

    def release(self, job_id: str) -> None:
        with self._lock:
            self._active.discard(job_id)

    def prepare(self, paths: JobPaths) -> Path:
        """Remove any stale artifact and frames, then create an empty frame directory."""
        self.discard_artifact(paths)
        self.cleanup_frames(paths)
        try:
            paths.frames_dir.mkdir(parents=True, exist_ok=False)
        except OSError as e:
            raise ResourceError(
                f"Could not create workspace for job {paths.job_id}: {e}",
                details={"path": str(paths.frames_dir)},
            )
        return paths.frames_dir

    def cleanup_frames(self, paths: JobPaths) -> None:
        """Delete the job's whole workspace directory."""
        job_dir = paths.frames_dir.parent
        if job_dir.exists():
            shutil.rmtree(job_dir, ignore_errors=True)
            if job_dir.exists():
                logger.warning(f"Workspace for job {paths.job_id} could not be fully removed")
            else:
                logger.info(f"Cleaned up workspace for job {paths.job_id}")

    def discard_artifact(self, paths: JobPaths) -> None:
        """Delete the final and partial artifact files, if present."""
        for path in (paths.artifact_path, paths.partial_artifact_path):
            path.unlink(missing_ok=True)

    def delete_job_data(self, job_id: str) -> None:
        """Delete everything stored for a job, including a finished artifact."""
        paths = self.paths_for(job_id)
        self.cleanup_frames(paths)
        self.discard_artifact(paths)

    def sweep_stale(self, ttl_seconds: int | None = None) -> int:
        """Remove workspaces left behind by jobs that are no longer running."""
        ttl = ttl_seconds if ttl_seconds is not None else get_settings().workspace_ttl_seconds
        now = time.time()
        cleaned = 0
        for job_dir in self.workspace_dir.iterdir():
            if not job_dir.is_dir() or self.is_active(job_dir.name):
                continue
            if now - job_dir.stat().st_mtime > ttl:
                shutil.rmtree(job_dir, ignore_errors=True)
                cleaned += 1
        if cleaned:
            logger.info(f"Swept {cleaned} stale workspaces")
        return cleaned
