"""Celery task definitions."""

import asyncio

from celery import Celery

from vizreel.config import get_settings
from vizreel.models.request import RenderRequest

settings = get_settings()

celery_app = Celery(
    "vizreel",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    # Render jobs are never retried automatically; callers resubmit
    task_acks_late=False,
)


@celery_app.task(bind=True, name="vizreel.render_video")
def render_video_task(self, request: dict, job_id: str | None = None):
    """Celery task wrapping PipelineManager.generate_and_render()."""
    from vizreel.models.errors import VizreelError
    from vizreel.pipeline.manager import PipelineManager

    manager = PipelineManager()
    render_request = RenderRequest(**request)
    job_id = job_id or self.request.id

    try:
        job = asyncio.run(manager.generate_and_render(render_request, job_id=job_id))
        return {
            "job_id": job.job_id,
            "status": job.stage.value,
            "output_path": job.artifact.path if job.artifact else None,
            "duration": job.artifact.duration if job.artifact else None,
        }
    except VizreelError as e:
        return {
            "job_id": job_id,
            "status": "failed",
            "stage": getattr(e, "stage", None),
            "error": e.message,
        }
