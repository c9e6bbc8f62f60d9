"""Background render job endpoints."""

from fastapi import APIRouter, BackgroundTasks, Depends

from vizreel.api.dependencies import get_pipeline_manager
from vizreel.models.errors import PipelineError, ValidationError
from vizreel.models.request import RenderRequest
from vizreel.pipeline.manager import PipelineManager

router = APIRouter(prefix="/api/v1", tags=["jobs"])


async def _run_job(manager: PipelineManager, job_id: str) -> None:
    try:
        await manager.process(job_id)
    except PipelineError:
        # Recorded on the job; clients read it from /status
        pass


@router.post("/jobs")
async def submit_job(
    request: RenderRequest,
    background_tasks: BackgroundTasks,
    manager: PipelineManager = Depends(get_pipeline_manager),
):
    """Accept a render request and process it in the background."""
    job = manager.create_job(request)
    background_tasks.add_task(_run_job, manager, job.job_id)
    return {
        "job_id": job.job_id,
        "status": job.stage.value,
        "frame_count": request.frame_count,
        "message": "Render started",
    }


@router.delete("/jobs/{job_id}")
async def delete_job(
    job_id: str,
    manager: PipelineManager = Depends(get_pipeline_manager),
):
    """Delete a finished job and its video."""
    if manager.get_job(job_id) is None:
        raise ValidationError(f"Job {job_id} not found")
    manager.delete_job_data(job_id)
    return {"job_id": job_id, "status": "deleted"}
