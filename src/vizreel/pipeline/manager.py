"""Pipeline manager — tracks render jobs from prompt to finished video."""

import asyncio
import logging
import uuid
from datetime import UTC, datetime, timedelta

from vizreel.config import get_settings
from vizreel.generation.generator import CodeGenerator
from vizreel.generation.knowledge import KnowledgeBase
from vizreel.generation.prompts import build_prompt_context
from vizreel.models.errors import PipelineError, ResourceError, ValidationError, VizreelError
from vizreel.models.pipeline import PipelineStage, RenderJob
from vizreel.models.request import RenderRequest, Script
from vizreel.pipeline.orchestrator import RenderPipeline
from vizreel.storage.workspace import validate_job_id

logger = logging.getLogger(__name__)


class PipelineManager:
    """Manages render jobs: generation, rendering and per-job state."""

    def __init__(
        self,
        pipeline: RenderPipeline | None = None,
        generator: CodeGenerator | None = None,
        knowledge: KnowledgeBase | None = None,
    ):
        self.settings = get_settings()
        self.pipeline = pipeline or RenderPipeline()
        self.generator = generator or CodeGenerator()
        self.knowledge = knowledge or KnowledgeBase()
        self._jobs: dict[str, RenderJob] = {}

    def create_job(self, request: RenderRequest, job_id: str | None = None) -> RenderJob:
        """Register a new render job for an accepted request."""
        if request.duration > self.settings.max_duration_minutes:
            raise ValidationError(
                f"Duration {request.duration:g} min exceeds the "
                f"{self.settings.max_duration_minutes:g} min limit",
                details={"max_duration_minutes": self.settings.max_duration_minutes},
            )
        job_id = validate_job_id(job_id) if job_id else uuid.uuid4().hex
        existing = self._jobs.get(job_id)
        if existing and not existing.is_finished:
            raise ResourceError(f"Job {job_id} is still running", details={"job_id": job_id})

        self.sweep_expired()
        now = datetime.now(UTC)
        job = RenderJob(job_id=job_id, request=request, started_at=now, updated_at=now)
        self._jobs[job_id] = job
        return job

    def get_job(self, job_id: str) -> RenderJob | None:
        return self._jobs.get(job_id)

    def generate_script(self, request: RenderRequest) -> Script:
        """Ask the code generator for a script, with domain context appended."""
        context = build_prompt_context(
            request.prompt, request.duration, request.mode, self.knowledge.summary()
        )
        return self.generator.generate(context, request.duration, request.mode, request.fps)

    async def process(self, job_id: str, script: Script | None = None) -> RenderJob:
        """Run a created job to completion.

        Generates a script first when none is supplied. Raises PipelineError on
        failure after recording it on the job.
        """
        job = self._jobs.get(job_id)
        if job is None or job.request is None:
            raise ValidationError(f"Job {job_id} not found")
        request = job.request

        if script is None:
            self._update_state(job_id, PipelineStage.GENERATING, 0.01, "Generating script...")
            try:
                script = await asyncio.to_thread(self.generate_script, request)
            except VizreelError as e:
                error = PipelineError(PipelineStage.GENERATING, e, job_id)
                self._fail(job_id, error)
                raise error from e

        def on_stage(stage: PipelineStage, progress: float, message: str):
            self._update_state(job_id, stage, progress, message)

        try:
            artifact = await self.pipeline.render(request, script, job_id=job_id, on_stage=on_stage)
        except PipelineError as e:
            self._fail(job_id, e)
            raise

        job = self._jobs[job_id]
        job.artifact = artifact
        job.completed_at = datetime.now(UTC)
        return job

    async def generate_and_render(
        self, request: RenderRequest, job_id: str | None = None
    ) -> RenderJob:
        """Create a job, generate its script and render it."""
        job = self.create_job(request, job_id)
        return await self.process(job.job_id)

    def delete_job_data(self, job_id: str) -> None:
        """Delete the job record, workspace and artifact."""
        job = self._jobs.get(job_id)
        if job and not job.is_finished:
            raise ResourceError(f"Job {job_id} is still running", details={"job_id": job_id})
        self.pipeline.workspace.delete_job_data(job_id)
        self._jobs.pop(job_id, None)

    def sweep_expired(self, ttl_seconds: int | None = None) -> int:
        """Forget finished jobs older than the TTL and delete their files."""
        ttl = ttl_seconds if ttl_seconds is not None else self.settings.workspace_ttl_seconds
        cutoff = datetime.now(UTC) - timedelta(seconds=ttl)
        expired = [
            job_id
            for job_id, job in self._jobs.items()
            if job.is_finished and job.completed_at and job.completed_at < cutoff
        ]
        for job_id in expired:
            self.delete_job_data(job_id)
        self.pipeline.workspace.sweep_stale(ttl)
        if expired:
            logger.info(f"Expired {len(expired)} finished jobs")
        return len(expired)

    def _update_state(
        self, job_id: str, stage: PipelineStage, progress: float | None = None, message: str = ""
    ):
        """Update job state."""
        if job_id in self._jobs:
            job = self._jobs[job_id]
            job.stage = stage
            if progress is not None:
                job.progress = min(1.0, max(0.0, progress))
            job.message = message
            job.updated_at = datetime.now(UTC)

    def _fail(self, job_id: str, error: PipelineError):
        self._update_state(job_id, PipelineStage.FAILED, message=error.message)
        job = self._jobs.get(job_id)
        if job:
            job.error = error.cause.message
            job.failed_stage = str(error.stage)
            job.completed_at = datetime.now(UTC)
        logger.info(f"Job {job_id} failed at {error.stage}: {error.cause.message}")
