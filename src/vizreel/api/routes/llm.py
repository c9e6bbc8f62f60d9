"""Script generation endpoint."""

from fastapi import APIRouter, Depends

from vizreel.api.dependencies import get_pipeline_manager, get_scene_validator
from vizreel.models.request import RenderRequest
from vizreel.pipeline.manager import PipelineManager
from vizreel.validation.scene_validator import SceneValidator

router = APIRouter(prefix="/api/v1", tags=["llm"])


@router.post("/llm/generate")
def generate_script(
    request: RenderRequest,
    manager: PipelineManager = Depends(get_pipeline_manager),
    validator: SceneValidator = Depends(get_scene_validator),
):
    """Return the generated script and whether it passes validation, without rendering."""
    script = manager.generate_script(request)
    result = validator.validate(script)
    return {
        "code": script.code,
        "mode": script.mode.value,
        "source": script.source,
        "validation": result.model_dump(),
    }
