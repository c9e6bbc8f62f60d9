"""Application configuration using Pydantic BaseSettings."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Vizreel configuration loaded from environment variables."""

    model_config = {"env_prefix": "VIZREEL_", "env_file": ".env", "extra": "ignore"}

    # LLM
    openai_api_key: str = ""
    openai_model: str = "gpt-4"
    openai_temperature: float = 0.4
    generator_template_fallback: bool = True

    # Redis / Celery
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/1"

    # Request limits
    max_duration_minutes: float = 30.0

    # Directories
    workspace_dir: Path = Path("/tmp/vizreel/workspace")
    output_dir: Path = Path("/tmp/vizreel/output")
    workspace_ttl_seconds: int = 3600

    # Sandbox
    sandbox_init_timeout_seconds: float = 60.0
    sandbox_frame_timeout_seconds: float = 10.0
    sandbox_snapshot_timeout_seconds: float = 10.0
    sandbox_browser_args: list[str] = ["--no-sandbox", "--use-gl=swiftshader"]
    sandbox_allow_network: bool = False
    library_urls: dict[str, list[str]] = {
        "basic": [
            "https://cdn.jsdelivr.net/npm/three@0.155.0/build/three.min.js",
        ],
        "advanced": [
            "https://cdn.babylonjs.com/babylon.js",
        ],
        "pro": [
            "https://cdn.jsdelivr.net/npm/three@0.155.0/build/three.min.js",
            "https://cdn.jsdelivr.net/npm/gsap@3.12.5/dist/gsap.min.js",
            "https://cdn.jsdelivr.net/npm/ccapture.js@1.1.0/build/CCapture.all.min.js",
            "https://cdn.jsdelivr.net/npm/troika-three-text@0.47.0/dist/troika-three-text.umd.min.js",  # noqa: E501
        ],
    }

    # Encoding
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"
    output_video_codec: str = "libx264"
    output_pixel_format: str = "yuv420p"
    output_crf: int = 23
    output_preset: str = "medium"
    encode_timeout_seconds: float = 1800.0
    probe_output: bool = True

    # Logging
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
