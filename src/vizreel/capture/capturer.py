"""Drives a sandbox frame by frame and stores each snapshot."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from vizreel.models.errors import CaptureError, SandboxError
from vizreel.models.frames import FrameSequence, frame_filename
from vizreel.sandbox.base import Sandbox

logger = logging.getLogger(__name__)


class FrameCapturer:
    """Captures ``frame_count`` frames strictly in order, failing fast.

    Either every frame is written and a complete FrameSequence is returned,
    or a CaptureError is raised and the sandbox is closed.
    """

    def __init__(self, progress_every: int = 30):
        self.progress_every = max(1, progress_every)

    async def capture(
        self,
        sandbox: Sandbox,
        frame_count: int,
        frames_dir: Path,
        width: int,
        height: int,
        progress_callback: Callable[[float], None] | None = None,
    ) -> FrameSequence:
        if frame_count <= 0:
            raise CaptureError(f"Frame count must be positive, got {frame_count}")

        paths: list[str] = []
        for index in range(frame_count):
            result = await sandbox.advance_frame(index)
            if not result.ok:
                await self._abort(sandbox, index)
                raise CaptureError(
                    f"Sandbox error at frame {index}: {result.error}",
                    details={"frame": index, "sandbox_error": result.error},
                ) from SandboxError(result.error or "unknown sandbox error")

            try:
                image = await sandbox.snapshot()
            except SandboxError as e:
                await self._abort(sandbox, index)
                raise CaptureError(
                    f"Snapshot failed at frame {index}: {e.message}",
                    details={"frame": index, "sandbox_error": e.message},
                ) from e
            if not image:
                await self._abort(sandbox, index)
                raise CaptureError(f"Snapshot at frame {index} was empty", details={"frame": index})

            frame_path = frames_dir / frame_filename(index, frame_count)
            try:
                await asyncio.to_thread(frame_path.write_bytes, image)
            except OSError as e:
                await self._abort(sandbox, index)
                raise CaptureError(
                    f"Could not store frame {index}: {e}",
                    details={"frame": index, "path": str(frame_path)},
                ) from e
            paths.append(str(frame_path))

            done = index + 1
            if progress_callback and (done % self.progress_every == 0 or done == frame_count):
                progress_callback(done / frame_count)

        logger.info("Captured %d frames into %s", frame_count, frames_dir)
        return FrameSequence(
            directory=str(frames_dir),
            frame_count=frame_count,
            width=width,
            height=height,
            paths=paths,
        )

    async def _abort(self, sandbox: Sandbox, index: int) -> None:
        logger.warning("Aborting capture at frame %d", index)
        await sandbox.close()
