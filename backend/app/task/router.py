from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from app.common.responses import ApiResponse
from app.database import get_db
from app.task.schemas import TaskResponse, TaskWithLabelsResponse
from app.task.service import TaskService

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.post("")
def create_task(payload: Any = Body(default=None), db: Session = Depends(get_db)) -> dict:
    service = TaskService(db)
    task = service.create(payload)
    return TaskResponse.model_validate(task).to_json()


@router.get("")
def list_tasks(
    label: List[str] = Query(default=[]),
    status: List[str] = Query(default=[]),
    priority: List[str] = Query(default=[]),
    db: Session = Depends(get_db),
) -> list:
    service = TaskService(db)
    tasks = service.list_tasks(label_names=label, statuses=status, priorities=priority)
    return [TaskWithLabelsResponse.model_validate(task).to_json() for task in tasks]


@router.delete("", response_model=ApiResponse)
def delete_task(id: Optional[str] = Query(default=None), db: Session = Depends(get_db)) -> ApiResponse:
    service = TaskService(db)
    deleted = service.delete_by_raw_id(id)
    return ApiResponse.ok(deleted.to_json(), "Task deleted successfully")
