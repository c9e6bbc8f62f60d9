"""Download endpoint."""

from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from vizreel.api.dependencies import get_pipeline_manager
from vizreel.models.errors import ValidationError
from vizreel.models.pipeline import PipelineStage
from vizreel.pipeline.manager import PipelineManager

router = APIRouter(prefix="/api/v1", tags=["download"])


@router.get("/download/{job_id}")
async def download_output(
    job_id: str,
    manager: PipelineManager = Depends(get_pipeline_manager),
):
    """Download the rendered video."""
    job = manager.get_job(job_id)
    if not job:
        raise ValidationError(f"Job {job_id} not found")

    if job.stage != PipelineStage.COMPLETE:
        raise ValidationError(f"Job is not complete (current stage: {job.stage.value})")

    if not job.artifact or not Path(job.artifact.path).exists():
        raise ValidationError("Output file not found")

    return FileResponse(
        path=job.artifact.path,
        media_type="video/mp4",
        filename=f"vizreel_{job_id}.mp4",
    )
