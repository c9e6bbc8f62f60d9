"""Tests for the video encoder, with FFmpeg replaced by a fake process."""

import json
import subprocess
import threading
from types import SimpleNamespace

import pytest

from vizreel.models.errors import EncodeError
from vizreel.models.frames import FrameSequence, frame_filename
from vizreel.rendering.encoder import VideoEncoder


@pytest.fixture
def frames(tmp_path):
    frames_dir = tmp_path / "frames"
    frames_dir.mkdir()
    paths = []
    for i in range(10):
        path = frames_dir / frame_filename(i, 10)
        path.write_bytes(b"png")
        paths.append(str(path))
    return FrameSequence(
        directory=str(frames_dir), frame_count=10, width=64, height=48, paths=paths
    )


@pytest.fixture
def target(tmp_path):
    return tmp_path / "output" / "job-1.mp4"


class TestVideoEncoder:
    def test_encode_success(self, test_settings, fake_ffmpeg, frames, target):
        progress = []
        artifact = VideoEncoder(test_settings).encode(frames, 10, target, progress.append)

        assert target.exists()
        assert not (target.parent / ".job-1.partial.mp4").exists()
        assert artifact.path == str(target)
        assert artifact.frame_count == 10
        assert artifact.duration == 1.0
        assert artifact.video_codec == "h264"
        assert artifact.file_size_bytes == target.stat().st_size
        assert progress[-1] == 1.0

        cmd = fake_ffmpeg.calls[0]
        assert cmd[cmd.index("-i") + 1] == frames.pattern
        # FFmpeg writes to the hidden partial file, never straight to the target
        assert cmd[-1].endswith(".job-1.partial.mp4")

    def test_nonzero_exit_leaves_no_artifact(self, test_settings, failing_ffmpeg, frames, target):
        with pytest.raises(EncodeError, match="exited with code 1") as exc_info:
            VideoEncoder(test_settings).encode(frames, 10, target)
        assert "frame_000042" in exc_info.value.details["stderr"]
        assert not target.exists()
        assert list(target.parent.iterdir()) == []

    def test_no_output(self, test_settings, fake_ffmpeg, frames, target):
        fake_ffmpeg.write_output = False
        with pytest.raises(EncodeError, match="no output"):
            VideoEncoder(test_settings).encode(frames, 10, target)
        assert not target.exists()

    def test_ffmpeg_missing(self, test_settings, monkeypatch, frames, target):
        def _missing(*args, **kwargs):
            raise FileNotFoundError("ffmpeg")

        monkeypatch.setattr("vizreel.rendering.encoder.subprocess.Popen", _missing)
        with pytest.raises(EncodeError, match="FFmpeg not found"):
            VideoEncoder(test_settings).encode(frames, 10, target)

    def test_hung_ffmpeg_is_killed(self, test_settings, hanging_ffmpeg, frames, target):
        settings = test_settings.model_copy(update={"encode_timeout_seconds": 0.1})
        with pytest.raises(EncodeError, match="timed out after 0.1s"):
            VideoEncoder(settings).encode(frames, 10, target)
        assert hanging_ffmpeg.processes[0].killed.is_set()
        assert not target.exists()
        assert list(target.parent.iterdir()) == []

    def test_cancel_kills_ffmpeg(self, test_settings, hanging_ffmpeg, frames, target):
        cancel = threading.Event()
        threading.Timer(0.1, cancel.set).start()
        with pytest.raises(EncodeError, match="cancelled"):
            VideoEncoder(test_settings).encode(frames, 10, target, cancel_event=cancel)
        assert hanging_ffmpeg.processes[0].killed.is_set()
        assert not target.exists()
        assert list(target.parent.iterdir()) == []

    def test_cancelled_before_start(self, test_settings, fake_ffmpeg, frames, target):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(EncodeError, match="cancelled"):
            VideoEncoder(test_settings).encode(frames, 10, target, cancel_event=cancel)
        assert fake_ffmpeg.calls == []
        assert not target.exists()

    def test_odd_dimensions_report_padded_size(self, test_settings, fake_ffmpeg, tmp_path, target):
        frames_dir = tmp_path / "odd"
        frames_dir.mkdir()
        path = frames_dir / frame_filename(0, 1)
        path.write_bytes(b"png")
        odd = FrameSequence(
            directory=str(frames_dir), frame_count=1, width=65, height=49, paths=[str(path)]
        )
        artifact = VideoEncoder(test_settings).encode(odd, 10, target)
        assert (artifact.width, artifact.height) == (66, 50)

    def test_even_dimensions_unchanged(self, test_settings, fake_ffmpeg, frames, target):
        artifact = VideoEncoder(test_settings).encode(frames, 10, target)
        assert (artifact.width, artifact.height) == (64, 48)

    def test_stale_target_replaced(self, test_settings, fake_ffmpeg, frames, target):
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(b"old video")
        VideoEncoder(test_settings).encode(frames, 10, target)
        assert target.read_bytes() != b"old video"


class TestValidateOutput:
    def _settings(self, test_settings):
        return test_settings.model_copy(update={"probe_output": True})

    def _probe(self, monkeypatch, returncode=0, streams=None):
        stdout = json.dumps({"streams": streams if streams is not None else []})

        def _run(cmd, **kwargs):
            return SimpleNamespace(returncode=returncode, stdout=stdout, stderr="")

        monkeypatch.setattr("vizreel.rendering.encoder.subprocess.run", _run)

    def test_probe_accepts_video_stream(
        self, test_settings, monkeypatch, fake_ffmpeg, frames, target
    ):
        self._probe(monkeypatch, streams=[{"codec_type": "video", "codec_name": "h264"}])
        artifact = VideoEncoder(self._settings(test_settings)).encode(frames, 10, target)
        assert artifact.output_file.exists()

    def test_probe_rejects_file_without_video(
        self, test_settings, monkeypatch, fake_ffmpeg, frames, target
    ):
        self._probe(monkeypatch, streams=[{"codec_type": "audio"}])
        with pytest.raises(EncodeError, match="no readable video stream"):
            VideoEncoder(self._settings(test_settings)).encode(frames, 10, target)
        assert not target.exists()
        assert list(target.parent.iterdir()) == []

    def test_probe_timeout(self, test_settings, monkeypatch, tmp_path):
        def _run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, 30)

        monkeypatch.setattr("vizreel.rendering.encoder.subprocess.run", _run)
        with pytest.raises(EncodeError, match="Failed to validate output"):
            VideoEncoder(test_settings).validate_output(tmp_path / "a.mp4")
