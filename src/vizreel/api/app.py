"""FastAPI application factory."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vizreel import __version__
from vizreel.api.middleware import vizreel_error_handler
from vizreel.api.routes import download, jobs, llm, status, video
from vizreel.config import get_settings
from vizreel.models.errors import VizreelError


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Vizreel",
        description="Prompt-to-video rendering of generated 3D visualizations",
        version=__version__,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Job-Id", "X-Frame-Count", "X-Duration-Seconds"],
    )

    # Error handlers
    app.add_exception_handler(VizreelError, vizreel_error_handler)

    # Routes
    app.include_router(video.router)
    app.include_router(llm.router)
    app.include_router(jobs.router)
    app.include_router(status.router)
    app.include_router(download.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
