"""FastAPI web server for the Flowstate board."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from ..board.engine import BoardEngine
from .board_api import create_board_router


def create_app(
    project_dir: Optional[Path] = None,
    enable_cors: bool = True,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        project_dir: Default project directory holding `.flowstate/`.
        enable_cors: Whether to enable CORS.

    Returns:
        Configured FastAPI app.
    """
    app = FastAPI(
        title="Flowstate Kanban",
        description="Task board with filtering, stage statistics and a persisted local copy",
        version="1.0.0",
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.default_project_dir = project_dir
    app.state.engines = {}

    def _get_project_dir(project_dir_param: Optional[str] = None) -> Path:
        if project_dir_param:
            return Path(project_dir_param).expanduser().resolve()
        if app.state.default_project_dir is not None:
            return Path(app.state.default_project_dir).resolve()
        return Path.cwd().resolve()

    def _get_engine(project_dir_param: Optional[str] = None) -> BoardEngine:
        path = _get_project_dir(project_dir_param)
        engine = app.state.engines.get(path)
        if engine is None:
            logger.info("Opening board for {}", path)
            engine = BoardEngine.open(path)
            app.state.engines[path] = engine
        return engine

    app.include_router(create_board_router(_get_engine))

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
