"""Shared test fixtures, sample scripts and fakes for the sandbox and FFmpeg."""

import threading
from pathlib import Path

import pytest

from vizreel.config import Settings
from vizreel.generation.generator import CodeGenerator
from vizreel.models.errors import SandboxError
from vizreel.models.request import RenderMode, RenderRequest, Script
from vizreel.pipeline.manager import PipelineManager
from vizreel.pipeline.orchestrator import RenderPipeline
from vizreel.rendering.encoder import VideoEncoder
from vizreel.sandbox.base import FrameResult, Sandbox
from vizreel.storage.workspace import WorkspaceManager

# Smallest valid PNG header; the fakes never decode it
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16

MINIMAL_THREE_SCRIPT = """
const scene = new THREE.Scene();
const camera = new THREE.PerspectiveCamera(75, 640 / 480, 0.1, 1000);
const renderer = new THREE.WebGLRenderer({ preserveDrawingBuffer: true });
renderer.setSize(640, 480);
document.body.appendChild(renderer.domElement);
const cube = new THREE.Mesh(new THREE.BoxGeometry(), new THREE.MeshBasicMaterial());
scene.add(cube);
camera.position.z = 5;
renderer.render(scene, camera);
window.renderFrame = function (frame) {};
"""

MINIMAL_BABYLON_SCRIPT = """
const canvas = document.createElement('canvas');
document.body.appendChild(canvas);
const engine = new BABYLON.Engine(canvas, true, { preserveDrawingBuffer: true });
const scene = new BABYLON.Scene(engine);
const camera = new BABYLON.FreeCamera('cam', new BABYLON.Vector3(0, 0, -5), scene);
const box = BABYLON.MeshBuilder.CreateBox('box', {}, scene);
window.renderFrame = (frame) => {
  box.rotation.y = frame * 0.01;
  scene.render();
};
"""


class FakeSandbox(Sandbox):
    """In-memory sandbox that can be told to fail at a given point."""

    def __init__(
        self,
        fail_at: int | None = None,
        start_error: str | None = None,
        snapshot_error_at: int | None = None,
        image: bytes = PNG_BYTES,
    ):
        super().__init__()
        self.fail_at = fail_at
        self.start_error = start_error
        self.snapshot_error_at = snapshot_error_at
        self.image = image
        self.started_with: Script | None = None
        self.advanced: list[int] = []
        self.snapshots = 0
        self.close_calls = 0

    async def start(self, script: Script) -> FrameResult:
        self.started_with = script
        if self.start_error:
            return self._record_error(self.start_error)
        return FrameResult.success()

    async def advance_frame(self, index: int) -> FrameResult:
        if self._error is not None:
            return FrameResult.failure(self._error)
        self.advanced.append(index)
        if self.fail_at is not None and index == self.fail_at:
            return self._record_error(f"TypeError: cannot read property of undefined ({index})")
        return FrameResult.success()

    async def snapshot(self) -> bytes:
        if self.snapshot_error_at is not None and self.advanced[-1] == self.snapshot_error_at:
            self._record_error("Snapshot failed: target closed")
            raise SandboxError(self._error)
        self.snapshots += 1
        return self.image

    async def close(self) -> None:
        self.close_calls += 1
        self._closed = True


class SandboxRecorder:
    """Sandbox factory that records every sandbox it creates."""

    def __init__(self, **sandbox_kwargs):
        self.sandbox_kwargs = sandbox_kwargs
        self.created: list[FakeSandbox] = []

    def __call__(self, request: RenderRequest) -> FakeSandbox:
        sandbox = FakeSandbox(**self.sandbox_kwargs)
        self.created.append(sandbox)
        return sandbox

    @property
    def last(self) -> FakeSandbox:
        return self.created[-1]


class _FakeProcess:
    def __init__(self, returncode: int, stderr_lines: list[str], hang_seconds: float = 0.0):
        self.returncode = returncode
        self.stderr = iter(stderr_lines)
        self.hang_seconds = hang_seconds
        self.killed = threading.Event()

    def wait(self, timeout=None):
        # A hanging process only exits early when killed
        if self.hang_seconds:
            self.killed.wait(self.hang_seconds)
        return self.returncode

    def kill(self):
        self.returncode = -9
        self.killed.set()


class FakeFFmpeg:
    """Stands in for subprocess.Popen when the encoder runs FFmpeg."""

    def __init__(
        self,
        returncode: int = 0,
        write_output: bool = True,
        stderr_lines: list[str] | None = None,
        hang_seconds: float = 0.0,
    ):
        self.returncode = returncode
        self.write_output = write_output
        self.stderr_lines = stderr_lines or [
            "frame=   10 fps=30 q=28.0 size=1kB time=00:00:00.33\n"
        ]
        self.hang_seconds = hang_seconds
        self.calls: list[list[str]] = []
        self.processes: list[_FakeProcess] = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(cmd)
        if self.write_output:
            Path(cmd[-1]).write_bytes(b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 64)
        process = _FakeProcess(self.returncode, list(self.stderr_lines), self.hang_seconds)
        self.processes.append(process)
        return process


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        workspace_dir=tmp_path / "workspace",
        output_dir=tmp_path / "output",
        probe_output=False,
        openai_api_key="",
    )


@pytest.fixture
def workspace(test_settings):
    return WorkspaceManager(test_settings.workspace_dir, test_settings.output_dir)


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    fake = FakeFFmpeg()
    monkeypatch.setattr("vizreel.rendering.encoder.subprocess.Popen", fake)
    return fake


@pytest.fixture
def failing_ffmpeg(monkeypatch):
    fake = FakeFFmpeg(returncode=1, stderr_lines=["Error while decoding frame_000042.png\n"])
    monkeypatch.setattr("vizreel.rendering.encoder.subprocess.Popen", fake)
    return fake


@pytest.fixture
def hanging_ffmpeg(monkeypatch):
    """FFmpeg that writes its output and then never exits unless killed."""
    fake = FakeFFmpeg(hang_seconds=5.0)
    monkeypatch.setattr("vizreel.rendering.encoder.subprocess.Popen", fake)
    return fake


@pytest.fixture
def sandboxes():
    return SandboxRecorder()


@pytest.fixture
def pipeline(workspace, test_settings, sandboxes):
    return RenderPipeline(
        workspace=workspace,
        encoder=VideoEncoder(test_settings),
        sandbox_factory=sandboxes,
    )


@pytest.fixture
def three_script():
    return Script(code=MINIMAL_THREE_SCRIPT, mode=RenderMode.BASIC)


@pytest.fixture
def babylon_script():
    return Script(code=MINIMAL_BABYLON_SCRIPT, mode=RenderMode.ADVANCED)


@pytest.fixture
def short_request():
    """Sub-minute request: one second of frames at 10 fps."""
    return RenderRequest(prompt="spinning cube", duration=0.01, fps=10, width=64, height=48)


@pytest.fixture
def make_pipeline(workspace, test_settings):
    """Build a pipeline whose sandboxes behave as configured."""

    def _make(**sandbox_kwargs) -> tuple[RenderPipeline, SandboxRecorder]:
        recorder = SandboxRecorder(**sandbox_kwargs)
        pipeline = RenderPipeline(
            workspace=workspace,
            encoder=VideoEncoder(test_settings),
            sandbox_factory=recorder,
        )
        return pipeline, recorder

    return _make


@pytest.fixture
def make_sandbox():
    return FakeSandbox


@pytest.fixture
def manager(pipeline, monkeypatch):
    """PipelineManager wired to the fake sandbox, rendering built-in templates."""
    monkeypatch.setenv("VIZREEL_OPENAI_API_KEY", "")
    return PipelineManager(pipeline=pipeline, generator=CodeGenerator(template_fallback=True))
