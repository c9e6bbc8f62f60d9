"""Status endpoint."""

from fastapi import APIRouter, Depends

from vizreel.api.dependencies import get_pipeline_manager
from vizreel.models.errors import ValidationError
from vizreel.pipeline.manager import PipelineManager

router = APIRouter(prefix="/api/v1", tags=["status"])


@router.get("/status/{job_id}")
async def get_status(
    job_id: str,
    manager: PipelineManager = Depends(get_pipeline_manager),
):
    """Get the render status of a job."""
    job = manager.get_job(job_id)
    if not job:
        raise ValidationError(f"Job {job_id} not found")

    return {
        "job_id": job.job_id,
        "stage": job.stage.value,
        "progress": job.progress,
        "message": job.message,
        "started_at": job.started_at.isoformat() if job.started_at else None,
        "updated_at": job.updated_at.isoformat() if job.updated_at else None,
        "completed_at": job.completed_at.isoformat() if job.completed_at else None,
        "error": job.error,
        "failed_stage": job.failed_stage,
        "output_path": job.artifact.path if job.artifact else None,
        "duration": job.artifact.duration if job.artifact else None,
    }
