"""Tests for PipelineManager job tracking."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from vizreel.generation.generator import CodeGenerator
from vizreel.generation.templates import BOUNCING_BALL
from vizreel.models.errors import GenerationError, PipelineError, ResourceError, ValidationError
from vizreel.models.pipeline import PipelineStage
from vizreel.models.request import RenderRequest, Script
from vizreel.pipeline.manager import PipelineManager


class TestCreateJob:
    def test_create_job(self, manager, short_request):
        job = manager.create_job(short_request, job_id="job-1")
        assert job.stage == PipelineStage.CREATED
        assert job.started_at is not None
        assert manager.get_job("job-1") is job

    def test_generated_id(self, manager, short_request):
        job = manager.create_job(short_request)
        assert manager.get_job(job.job_id) is job

    def test_duration_limit(self, manager):
        with pytest.raises(ValidationError, match="exceeds"):
            manager.create_job(RenderRequest(prompt="x", duration=31))

    def test_invalid_job_id(self, manager, short_request):
        with pytest.raises(ValidationError):
            manager.create_job(short_request, job_id="../../tmp")

    def test_running_job_cannot_be_replaced(self, manager, short_request):
        manager.create_job(short_request, job_id="job-1")
        manager._update_state("job-1", PipelineStage.CAPTURING, 0.5)
        with pytest.raises(ResourceError, match="still running"):
            manager.create_job(short_request, job_id="job-1")

    def test_unknown_job(self, manager):
        assert manager.get_job("missing") is None


class TestProcess:
    @pytest.mark.asyncio
    async def test_generate_and_render(self, manager, sandboxes, fake_ffmpeg):
        request = RenderRequest(
            prompt="a bouncing ball", duration=0.01, fps=10, width=64, height=48
        )
        job = await manager.generate_and_render(request, job_id="job-1")

        assert job.stage == PipelineStage.COMPLETE
        assert job.progress == 1.0
        assert job.artifact.frame_count == 10
        assert job.completed_at is not None
        assert job.error is None
        assert sandboxes.last.started_with.code == BOUNCING_BALL
        assert sandboxes.last.started_with.source == "template"

    @pytest.mark.asyncio
    async def test_supplied_script_skips_generation(
        self, manager, sandboxes, fake_ffmpeg, three_script, short_request
    ):
        manager.generator = MagicMock()
        manager.create_job(short_request, job_id="job-1")
        job = await manager.process("job-1", script=three_script)
        assert job.stage == PipelineStage.COMPLETE
        manager.generator.generate.assert_not_called()
        assert sandboxes.last.started_with.code == three_script.code

    @pytest.mark.asyncio
    async def test_render_failure_recorded(self, manager, fake_ffmpeg, short_request):
        manager.create_job(short_request, job_id="job-1")
        with pytest.raises(PipelineError):
            await manager.process("job-1", script=Script(code="console.log('no scene');"))

        job = manager.get_job("job-1")
        assert job.stage == PipelineStage.FAILED
        assert job.failed_stage == "validating"
        assert job.error.startswith("Script must")
        assert job.artifact is None
        assert job.is_finished

    @pytest.mark.asyncio
    async def test_generation_failure_recorded(self, manager, short_request):
        client = MagicMock()
        client.chat.completions.create.side_effect = RuntimeError("quota exceeded")
        manager.generator = CodeGenerator(client=client, template_fallback=False)
        manager.create_job(short_request, job_id="job-1")

        with pytest.raises(PipelineError) as exc_info:
            await manager.process("job-1")

        assert exc_info.value.stage == PipelineStage.GENERATING
        assert isinstance(exc_info.value.cause, GenerationError)
        job = manager.get_job("job-1")
        assert job.stage == PipelineStage.FAILED
        assert job.failed_stage == "generating"
        assert "quota exceeded" in job.error

    @pytest.mark.asyncio
    async def test_process_unknown_job(self, manager):
        with pytest.raises(ValidationError):
            await manager.process("missing")

    @pytest.mark.asyncio
    async def test_failed_job_can_be_resubmitted(
        self, manager, fake_ffmpeg, three_script, short_request
    ):
        manager.create_job(short_request, job_id="job-1")
        with pytest.raises(PipelineError):
            await manager.process("job-1", script=Script(code=""))

        manager.create_job(short_request, job_id="job-1")
        job = await manager.process("job-1", script=three_script)
        assert job.stage == PipelineStage.COMPLETE


class TestDeleteJobData:
    @pytest.mark.asyncio
    async def test_delete_finished_job(self, manager, fake_ffmpeg, three_script, short_request):
        manager.create_job(short_request, job_id="job-1")
        job = await manager.process("job-1", script=three_script)
        assert job.artifact.output_file.exists()

        manager.delete_job_data("job-1")

        assert not job.artifact.output_file.exists()
        assert manager.get_job("job-1") is None

    def test_delete_running_job_rejected(self, manager, short_request):
        manager.create_job(short_request, job_id="job-1")
        manager._update_state("job-1", PipelineStage.ENCODING, 0.8)
        with pytest.raises(ResourceError, match="still running"):
            manager.delete_job_data("job-1")


class TestSweepExpired:
    @pytest.mark.asyncio
    async def test_old_finished_jobs_removed(
        self, manager, fake_ffmpeg, three_script, short_request
    ):
        manager.create_job(short_request, job_id="old-job")
        old = await manager.process("old-job", script=three_script)
        old.completed_at = datetime.now(UTC) - timedelta(hours=2)
        manager.create_job(short_request, job_id="running-job")

        assert manager.sweep_expired(ttl_seconds=3600) == 1
        assert manager.get_job("old-job") is None
        assert not old.artifact.output_file.exists()
        assert manager.get_job("running-job") is not None

    @pytest.mark.asyncio
    async def test_recent_jobs_kept(self, manager, fake_ffmpeg, three_script, short_request):
        manager.create_job(short_request, job_id="job-1")
        job = await manager.process("job-1", script=three_script)

        assert manager.sweep_expired(ttl_seconds=3600) == 0
        assert job.artifact.output_file.exists()

    @pytest.mark.asyncio
    async def test_create_job_sweeps(self, manager, fake_ffmpeg, three_script, short_request):
        manager.create_job(short_request, job_id="old-job")
        old = await manager.process("old-job", script=three_script)
        ttl = manager.settings.workspace_ttl_seconds
        old.completed_at = datetime.now(UTC) - timedelta(seconds=ttl + 60)

        manager.create_job(short_request, job_id="job-2")
        assert manager.get_job("old-job") is None
        assert not old.artifact.output_file.exists()


def test_default_collaborators(monkeypatch, tmp_path):
    monkeypatch.setenv("VIZREEL_OPENAI_API_KEY", "")
    monkeypatch.setenv("VIZREEL_WORKSPACE_DIR", str(tmp_path / "workspace"))
    monkeypatch.setenv("VIZREEL_OUTPUT_DIR", str(tmp_path / "output"))
    manager = PipelineManager()
    assert manager.pipeline.workspace.workspace_dir == tmp_path / "workspace"
    assert manager.generator.client is None
