"""Synchronous generate-and-download endpoint."""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from vizreel.api.dependencies import get_pipeline_manager
from vizreel.models.request import RenderRequest
from vizreel.pipeline.manager import PipelineManager

router = APIRouter(prefix="/api/v1", tags=["video"])


@router.post("/video/generate")
async def generate_video(
    request: RenderRequest,
    manager: PipelineManager = Depends(get_pipeline_manager),
):
    """Generate a script for the prompt, render it and return the mp4.

    The video is deleted once it has been sent.
    """
    job = await manager.generate_and_render(request)
    return FileResponse(
        path=job.artifact.path,
        media_type="video/mp4",
        filename=f"vizreel_{job.job_id}.mp4",
        headers={
            "X-Job-Id": job.job_id,
            "X-Frame-Count": str(job.artifact.frame_count),
            "X-Duration-Seconds": f"{job.artifact.duration:g}",
        },
        background=BackgroundTask(manager.delete_job_data, job.job_id),
    )
