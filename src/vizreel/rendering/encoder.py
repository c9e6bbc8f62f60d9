"""Video encoder — turns a captured frame sequence into an mp4 using FFmpeg."""

import json
import logging
import os
import subprocess
import threading
import time
from collections.abc import Callable
from pathlib import Path

from vizreel.config import Settings, get_settings
from vizreel.models.errors import EncodeError
from vizreel.models.frames import FrameSequence
from vizreel.models.render import VideoArtifact, partial_path_for
from vizreel.rendering.ffmpeg_builder import FFmpegCommandBuilder
from vizreel.rendering.progress import FFmpegProgressMonitor

logger = logging.getLogger(__name__)

_CODEC_NAMES = {"libx264": "h264", "libx265": "hevc", "libvpx-vp9": "vp9"}

# How often the FFmpeg watchdog checks for cancellation and the deadline
_WATCH_INTERVAL = 0.05


class VideoEncoder:
    """Encodes an ordered FrameSequence at a fixed frame rate.

    Output is written to a hidden partial file next to the target and only
    renamed into place once FFmpeg succeeds, so a failed encode never leaves
    a file at the target path.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.builder = FFmpegCommandBuilder(
            ffmpeg_binary=self.settings.ffmpeg_binary,
            video_codec=self.settings.output_video_codec,
            pixel_format=self.settings.output_pixel_format,
            crf=self.settings.output_crf,
            preset=self.settings.output_preset,
        )

    def encode(
        self,
        frames: FrameSequence,
        fps: int,
        output_path: Path,
        progress_callback: Callable[[float], None] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> VideoArtifact:
        """Encode ``frames`` to ``output_path``; raise EncodeError on any failure.

        Setting ``cancel_event`` kills FFmpeg; the call then raises and nothing
        is moved into ``output_path``.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        partial_path = partial_path_for(output_path)
        partial_path.unlink(missing_ok=True)

        cmd = self.builder.build_encode_command(
            frames.pattern, frames.frame_count, fps, partial_path
        )
        try:
            self._run(cmd, frames.frame_count, progress_callback, cancel_event)
            if not partial_path.exists() or partial_path.stat().st_size == 0:
                raise EncodeError("FFmpeg produced no output", details={"command": " ".join(cmd)})
            if self.settings.probe_output:
                self.validate_output(partial_path)
            if cancel_event is not None and cancel_event.is_set():
                raise EncodeError("Encoding cancelled", details={"output": str(output_path)})
            os.replace(partial_path, output_path)
        except Exception:
            partial_path.unlink(missing_ok=True)
            raise

        if progress_callback:
            progress_callback(1.0)

        # Odd sizes are padded by one pixel in the encode filter
        codec = self.settings.output_video_codec
        artifact = VideoArtifact(
            path=str(output_path),
            fps=fps,
            frame_count=frames.frame_count,
            width=frames.width + frames.width % 2,
            height=frames.height + frames.height % 2,
            pixel_format=self.settings.output_pixel_format,
            video_codec=_CODEC_NAMES.get(codec, codec),
            file_size_bytes=output_path.stat().st_size,
        )
        logger.info(
            "Encoded %d frames at %d fps (%.3fs) to %s",
            artifact.frame_count,
            fps,
            artifact.duration,
            output_path,
        )
        return artifact

    def _run(
        self,
        cmd: list[str],
        frame_count: int,
        progress_callback: Callable[[float], None] | None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        monitor = FFmpegProgressMonitor(frame_count, progress_callback)
        timeout = self.settings.encode_timeout_seconds
        if cancel_event is not None and cancel_event.is_set():
            raise EncodeError("Encoding cancelled", details={"command": cmd[0]})
        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError:
            raise EncodeError(
                "FFmpeg not found. Please install FFmpeg.",
                details={"command": cmd[0]},
            )
        except OSError as e:
            raise EncodeError(f"Could not start FFmpeg: {e}", details={"command": cmd[0]})

        finished = threading.Event()
        kill_reason: list[str] = []
        deadline = time.monotonic() + timeout

        def _watch():
            while not finished.wait(_WATCH_INTERVAL):
                if cancel_event is not None and cancel_event.is_set():
                    kill_reason.append("cancelled")
                elif time.monotonic() >= deadline:
                    kill_reason.append("timeout")
                else:
                    continue
                logger.warning("Killing FFmpeg (%s)", kill_reason[0])
                process.kill()
                return

        watchdog = threading.Thread(target=_watch, name="ffmpeg-watchdog", daemon=True)
        watchdog.start()
        stderr_lines = []
        try:
            for line in process.stderr:
                stderr_lines.append(line)
                monitor.parse_line(line)
            process.wait()
        finally:
            finished.set()
            watchdog.join()

        stderr_text = "".join(stderr_lines[-30:])
        if kill_reason == ["cancelled"]:
            raise EncodeError("Encoding cancelled", details={"stderr": stderr_text})
        if kill_reason == ["timeout"]:
            raise EncodeError(
                f"FFmpeg timed out after {timeout:g}s",
                details={"stderr": stderr_text},
            )
        if process.returncode != 0:
            logger.error("FFmpeg failed (code %d): %s", process.returncode, stderr_text)
            raise EncodeError(
                f"FFmpeg exited with code {process.returncode}",
                details={"stderr": stderr_text, "command": " ".join(cmd)},
            )

    def validate_output(self, path: Path) -> dict:
        """Check with ffprobe that the encoded file holds a video stream."""
        cmd = self.builder.build_probe_command(self.settings.ffprobe_binary, path)
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=30)
            probe = json.loads(result.stdout)
        except FileNotFoundError:
            raise EncodeError(
                "ffprobe not found. Please install FFmpeg.",
                details={"command": self.settings.ffprobe_binary},
            )
        except (subprocess.TimeoutExpired, json.JSONDecodeError) as e:
            raise EncodeError(f"Failed to validate output: {e}", details={"output": str(path)})

        has_video = any(s.get("codec_type") == "video" for s in probe.get("streams", []))
        if result.returncode != 0 or not has_video:
            raise EncodeError(
                "Encoded file has no readable video stream",
                details={"output": str(path), "stderr": (result.stderr or "")[:500]},
            )
        return probe
