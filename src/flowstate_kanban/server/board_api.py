"""Board API endpoints.

This module provides a FastAPI router exposing the board views and every
mutation.  Drag-and-drop clients deliver drops through ``/move``.  It is
mounted under ``/api/board`` by :func:`create_app`.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Optional

from fastapi import APIRouter, HTTPException, Query
from loguru import logger
from pydantic import BaseModel

from ..board.engine import BoardEngine
from ..board.filters import FilterCriteria
from ..board.model import Priority, Stage, Task
from ..board.mutations import Direction, TaskDraft
from ..constants import FILTER_ALL


# ---------------------------------------------------------------------------
# Pydantic request / response models
# ---------------------------------------------------------------------------

class CreateTaskRequest(BaseModel):
    title: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    assignee: str = ""
    stage: Stage = Stage.BACKLOG
    tags: str = ""
    due_date: Optional[str] = None


class UpdateTaskRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    assignee: Optional[str] = None
    tags: Optional[str] = None
    due_date: Optional[date] = None


class MoveRequest(BaseModel):
    stage: Stage


class StepRequest(BaseModel):
    direction: Direction


class TaskResponse(BaseModel):
    task: dict[str, Any]


class DeleteResponse(BaseModel):
    deleted: bool
    task_id: str


class StageStatResponse(BaseModel):
    stage: str
    title: str
    description: str
    count: int
    percentage: int
    display_value: int


class BoardResponse(BaseModel):
    columns: dict[str, list[dict[str, Any]]]
    stats: list[StageStatResponse]
    tags: list[str]
    assignees: list[str]
    visible: int
    total: int


class EventsResponse(BaseModel):
    events: list[dict[str, Any]]


# ---------------------------------------------------------------------------
# Router factory
# ---------------------------------------------------------------------------

def create_board_router(get_engine: Callable[[Optional[str]], BoardEngine]) -> APIRouter:
    """Create the board API router.

    Parameters
    ----------
    get_engine:
        A callable ``(project_dir_param: str | None) -> BoardEngine`` that
        resolves the engine for the current request's project directory.
    """
    router = APIRouter(prefix="/api/board", tags=["board"])

    def _require(engine: BoardEngine, task_id: str) -> Task:
        task = engine.get_task(task_id)
        if task is None:
            raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
        return task

    def _board(engine: BoardEngine, criteria: Optional[FilterCriteria] = None) -> BoardResponse:
        return BoardResponse(**engine.view(criteria).to_dict())

    @router.get("", response_model=BoardResponse)
    async def get_board(
        project_dir: Optional[str] = Query(None),
        search: str = Query(""),
        priority: str = Query(FILTER_ALL),
        tag: str = Query(FILTER_ALL),
        assignee: str = Query(FILTER_ALL),
    ) -> BoardResponse:
        engine = get_engine(project_dir)
        criteria = FilterCriteria(search=search, priority=priority, tag=tag, assignee=assignee)
        return _board(engine, criteria)

    @router.post("/reset", response_model=BoardResponse)
    async def reset_board(project_dir: Optional[str] = Query(None)) -> BoardResponse:
        engine = get_engine(project_dir)
        engine.reset_board()
        return _board(engine)

    @router.get("/events", response_model=EventsResponse)
    async def get_events(
        project_dir: Optional[str] = Query(None),
        limit: int = Query(100, ge=1, le=1000),
    ) -> EventsResponse:
        engine = get_engine(project_dir)
        return EventsResponse(events=engine.recent_events(limit))

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    @router.post("/tasks", response_model=TaskResponse, status_code=201)
    async def create_task(
        body: CreateTaskRequest,
        project_dir: Optional[str] = Query(None),
    ) -> TaskResponse:
        engine = get_engine(project_dir)
        draft = TaskDraft(
            title=body.title,
            description=body.description,
            priority=body.priority,
            assignee=body.assignee,
            stage=body.stage,
            tags=body.tags,
            due_date=body.due_date or "",
        )
        task = engine.create_task(draft)
        if task is None:
            raise HTTPException(status_code=422, detail=draft.validate())
        return TaskResponse(task=task.to_dict())

    @router.get("/tasks/{task_id}", response_model=TaskResponse)
    async def get_task(task_id: str, project_dir: Optional[str] = Query(None)) -> TaskResponse:
        engine = get_engine(project_dir)
        return TaskResponse(task=_require(engine, task_id).to_dict())

    @router.patch("/tasks/{task_id}", response_model=TaskResponse)
    async def update_task(
        task_id: str,
        body: UpdateTaskRequest,
        project_dir: Optional[str] = Query(None),
    ) -> TaskResponse:
        engine = get_engine(project_dir)
        _require(engine, task_id)
        changes = body.model_dump(exclude_unset=True)
        task = engine.edit_task(task_id, changes)
        return TaskResponse(task=task.to_dict())

    @router.delete("/tasks/{task_id}", response_model=DeleteResponse)
    async def delete_task(task_id: str, project_dir: Optional[str] = Query(None)) -> DeleteResponse:
        engine = get_engine(project_dir)
        _require(engine, task_id)
        return DeleteResponse(deleted=engine.delete_task(task_id), task_id=task_id)

    @router.post("/tasks/{task_id}/move", response_model=TaskResponse)
    async def move_task(
        task_id: str,
        body: MoveRequest,
        project_dir: Optional[str] = Query(None),
    ) -> TaskResponse:
        engine = get_engine(project_dir)
        _require(engine, task_id)
        task = engine.move_task(task_id, body.stage)
        logger.debug("Drop of {} onto {}", task_id, body.stage.value)
        return TaskResponse(task=task.to_dict())

    @router.post("/tasks/{task_id}/step", response_model=TaskResponse)
    async def step_task(
        task_id: str,
        body: StepRequest,
        project_dir: Optional[str] = Query(None),
    ) -> TaskResponse:
        engine = get_engine(project_dir)
        _require(engine, task_id)
        task = engine.step_task(task_id, body.direction)
        return TaskResponse(task=task.to_dict())

    @router.post("/tasks/{task_id}/cycle-priority", response_model=TaskResponse)
    async def cycle_priority(task_id: str, project_dir: Optional[str] = Query(None)) -> TaskResponse:
        engine = get_engine(project_dir)
        _require(engine, task_id)
        task = engine.cycle_priority(task_id)
        return TaskResponse(task=task.to_dict())

    @router.post("/tasks/{task_id}/duplicate", response_model=TaskResponse, status_code=201)
    async def duplicate_task(task_id: str, project_dir: Optional[str] = Query(None)) -> TaskResponse:
        engine = get_engine(project_dir)
        _require(engine, task_id)
        copy = engine.duplicate_task(task_id)
        return TaskResponse(task=copy.to_dict())

    return router
