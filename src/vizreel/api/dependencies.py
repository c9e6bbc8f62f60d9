"""Dependency injection providers for FastAPI."""

from functools import lru_cache

from vizreel.config import Settings, get_settings
from vizreel.pipeline.manager import PipelineManager
from vizreel.validation.scene_validator import SceneValidator


@lru_cache
def get_pipeline_manager() -> PipelineManager:
    return PipelineManager()


@lru_cache
def get_scene_validator() -> SceneValidator:
    return SceneValidator()


def get_app_settings() -> Settings:
    return get_settings()
