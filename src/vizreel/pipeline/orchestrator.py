"""Render pipeline: validate, execute, capture and encode one job.

Each job moves through ``preparing → validating → executing → capturing →
encoding → cleaning → complete``. Any stage can fail; every failure path tears
down the sandbox and deletes the workspace and any partial artifact before a
PipelineError is raised. A cancelled render stops FFmpeg and gets the same
cleanup before the job id is released.
"""

import asyncio
import logging
import threading
import uuid
from collections.abc import Callable
from pathlib import Path

from vizreel.capture.capturer import FrameCapturer
from vizreel.models.errors import (
    CaptureError,
    EncodeError,
    PipelineError,
    ResourceError,
    SandboxError,
    ValidationError,
    VizreelError,
)
from vizreel.models.frames import FrameSequence
from vizreel.models.pipeline import PipelineStage
from vizreel.models.render import VideoArtifact
from vizreel.models.request import RenderRequest, Script
from vizreel.rendering.encoder import VideoEncoder
from vizreel.sandbox.base import Sandbox
from vizreel.sandbox.browser import BrowserSandbox
from vizreel.storage.workspace import WorkspaceManager
from vizreel.validation.scene_validator import SceneValidator

logger = logging.getLogger(__name__)

SandboxFactory = Callable[[RenderRequest], Sandbox]
StageCallback = Callable[[PipelineStage, float, str], None]

# Error type used when a stage fails with something other than a VizreelError
_STAGE_ERRORS: dict[PipelineStage, type[VizreelError]] = {
    PipelineStage.PREPARING: ResourceError,
    PipelineStage.VALIDATING: ValidationError,
    PipelineStage.EXECUTING: SandboxError,
    PipelineStage.CAPTURING: CaptureError,
    PipelineStage.ENCODING: EncodeError,
    PipelineStage.CLEANING: ResourceError,
}

# Overall progress at the start of each stage
_STAGE_PROGRESS = {
    PipelineStage.PREPARING: 0.02,
    PipelineStage.VALIDATING: 0.04,
    PipelineStage.EXECUTING: 0.06,
    PipelineStage.CAPTURING: 0.1,
    PipelineStage.ENCODING: 0.8,
    PipelineStage.CLEANING: 0.97,
    PipelineStage.COMPLETE: 1.0,
}


class RenderPipeline:
    """Owns a render job end to end and guarantees cleanup on every exit."""

    def __init__(
        self,
        workspace: WorkspaceManager | None = None,
        validator: SceneValidator | None = None,
        capturer: FrameCapturer | None = None,
        encoder: VideoEncoder | None = None,
        sandbox_factory: SandboxFactory | None = None,
    ):
        self.workspace = workspace or WorkspaceManager()
        self.validator = validator or SceneValidator()
        self.capturer = capturer or FrameCapturer()
        self.encoder = encoder or VideoEncoder()
        self.sandbox_factory = sandbox_factory or BrowserSandbox.for_request

    async def render(
        self,
        request: RenderRequest,
        script: Script | None,
        job_id: str | None = None,
        on_stage: StageCallback | None = None,
    ) -> VideoArtifact:
        """Render ``script`` for ``request``; raise PipelineError on any failure.

        ``script`` may be None when no valid script could be produced; that is
        reported as a validation failure.
        """
        job_id = job_id or uuid.uuid4().hex
        frame_count = request.frame_count

        def notify(stage: PipelineStage, progress: float | None = None, message: str = ""):
            if on_stage:
                on_stage(stage, _STAGE_PROGRESS[stage] if progress is None else progress, message)

        def on_capture_progress(p: float):
            notify(PipelineStage.CAPTURING, 0.1 + 0.7 * p, f"Captured {p * 100:.0f}% of frames")

        def on_encode_progress(p: float):
            notify(PipelineStage.ENCODING, 0.8 + 0.17 * p, f"Encoding: {p * 100:.0f}%")

        try:
            paths = self.workspace.claim(job_id)
        except VizreelError as e:
            raise PipelineError(PipelineStage.PREPARING, e, job_id) from e

        stage = PipelineStage.PREPARING
        sandbox: Sandbox | None = None
        succeeded = False
        try:
            notify(stage, message="Preparing workspace")
            self.workspace.prepare(paths)

            stage = PipelineStage.VALIDATING
            notify(stage, message="Validating script")
            validated = self.validator.require_valid(script)

            stage = PipelineStage.EXECUTING
            notify(stage, message="Starting sandbox")
            sandbox = self.sandbox_factory(request)
            started = await sandbox.start(validated)
            if not started.ok:
                raise SandboxError(started.error or "Sandbox failed to start")

            stage = PipelineStage.CAPTURING
            notify(stage, message=f"Capturing {frame_count} frames")
            frames = await self.capturer.capture(
                sandbox,
                frame_count,
                paths.frames_dir,
                request.width,
                request.height,
                on_capture_progress,
            )
            await sandbox.close()

            stage = PipelineStage.ENCODING
            notify(stage, message="Encoding video")
            artifact = await self._encode(
                frames, request.fps, paths.artifact_path, on_encode_progress
            )

            stage = PipelineStage.CLEANING
            notify(stage, message="Removing frames")
            self.workspace.cleanup_frames(paths)

            succeeded = True
            notify(PipelineStage.COMPLETE, message="Render complete")
            logger.info(f"Job {job_id} rendered {frame_count} frames to {artifact.path}")
            return artifact

        except VizreelError as e:
            logger.warning(f"Job {job_id} failed during {stage}: {e.message}")
            raise PipelineError(stage, e, job_id) from e
        except Exception as e:
            logger.exception(f"Job {job_id} failed unexpectedly during {stage}")
            cause = _STAGE_ERRORS[stage](f"{type(e).__name__}: {e}")
            raise PipelineError(stage, cause, job_id) from e
        finally:
            if sandbox is not None:
                await sandbox.close()
            if not succeeded:
                self.workspace.cleanup_frames(paths)
                self.workspace.discard_artifact(paths)
            self.workspace.release(job_id)

    async def _encode(
        self,
        frames: FrameSequence,
        fps: int,
        output_path: Path,
        on_progress: Callable[[float], None],
    ) -> VideoArtifact:
        """Run the blocking encoder in a worker thread.

        If the caller is cancelled, FFmpeg is killed and the thread is awaited
        before the cancellation propagates, so cleanup never races the encoder.
        """
        cancel = threading.Event()
        encoding = asyncio.ensure_future(
            asyncio.to_thread(self.encoder.encode, frames, fps, output_path, on_progress, cancel)
        )
        try:
            return await asyncio.shield(encoding)
        except asyncio.CancelledError:
            cancel.set()
            await asyncio.wait({encoding})
            if not encoding.cancelled() and encoding.exception() is not None:
                logger.info(f"Encoder stopped after cancellation: {encoding.exception()}")
            raise
