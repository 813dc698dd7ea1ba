from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.common.exceptions import ApiException, RecordNotFoundError, StorageError
from app.common.params import parse_datetime, parse_uuid
from app.config import get_settings
from app.label.models import Label
from app.label.service import LabelResolution, LabelService
from app.task.models import Task, TaskLabel
from app.task.schemas import TaskCreateRequest, TaskDefaults, TaskFilter, TaskResponse

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, db: Session, defaults: Optional[TaskDefaults] = None):
        self.db = db
        self.defaults = defaults or TaskDefaults.from_settings(get_settings())
        self.label_service = LabelService(db)

    def find_by_id(self, id: UUID) -> Task:
        task = self.db.query(Task).filter(Task.id == id).first()
        if not task:
            raise RecordNotFoundError(f"Task not found: {id}")
        return task

    def create(self, payload: Any) -> Task:
        """Validate a raw create payload and persist the task with its labels.

        The due date is checked up front and reported as a client error. Every
        later failure, including schema validation, rolls back the whole
        transaction and is reported as a generic server error.
        """
        raw_due_date = payload.get("dueDate") if isinstance(payload, dict) else None
        try:
            parse_datetime(raw_due_date)
        except ValueError:
            raise ApiException(status_code=400, message="Invalid due date format")

        try:
            task = self._create_in_transaction(payload)
        except Exception as exc:
            self.db.rollback()
            logger.exception("task_create_failed")
            raise ApiException(status_code=500, message="Failed to create task") from exc
        return task

    def _create_in_transaction(self, payload: Any) -> Task:
        request = TaskCreateRequest.model_validate(payload).normalize(self.defaults)

        task = Task(
            title=request.title,
            description=request.description,
            priority=request.priority,
            status=request.status,
            due_date=request.due_date,
        )
        self.db.add(task)
        self.db.flush()  # Ensure task.id is available for the associations below.

        resolutions: List[LabelResolution] = []
        for label in request.labels:
            resolution = self.label_service.resolve(label)
            self.db.add(TaskLabel(task_id=task.id, label_id=resolution.label_id))
            self.db.flush()
            resolutions.append(resolution)

        self.db.commit()
        self.db.refresh(task)
        logger.info(
            "task_created id=%s labels=%s",
            task.id,
            [type(resolution).__name__ for resolution in resolutions],
        )
        return task

    def search(self, criteria: TaskFilter) -> List[Task]:
        query = self.db.query(Task)

        if criteria.label_names:
            query = query.filter(
                Task.labels.any(TaskLabel.label.has(Label.name.in_(sorted(criteria.label_names))))
            )

        if criteria.statuses:
            query = query.filter(Task.status.in_(sorted(criteria.statuses)))

        if criteria.priorities:
            query = query.filter(Task.priority.in_(sorted(criteria.priorities)))

        return query.order_by(Task.due_date.asc()).all()

    def list_tasks(
        self,
        label_names: Iterable[str] = (),
        statuses: Iterable[str] = (),
        priorities: Iterable[str] = (),
    ) -> List[Task]:
        try:
            criteria = TaskFilter.from_query(label_names, statuses, priorities)
            return self.search(criteria)
        except Exception as exc:
            logger.exception("task_list_failed")
            raise ApiException(status_code=500, message="Failed to fetch tasks") from exc

    def delete(self, id: UUID) -> TaskResponse:
        """Delete a task and its label associations in one transaction.

        Returns a snapshot of the task as it was before deletion.
        """
        task = self.find_by_id(id)
        snapshot = TaskResponse.model_validate(task)
        try:
            # No cascade at the storage level: associations must go first.
            self.db.execute(delete(TaskLabel).where(TaskLabel.task_id == id))
            self.db.delete(task)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(str(exc)) from exc
        return snapshot

    def delete_by_raw_id(self, raw_id: Optional[str]) -> TaskResponse:
        if not raw_id:
            raise ApiException(status_code=400, message="Task ID is required")

        try:
            return self.delete(parse_uuid(raw_id))
        except Exception as exc:
            logger.exception("task_delete_failed id=%s", raw_id)
            raise ApiException(
                status_code=500,
                message="Failed to delete task",
                details=str(exc) or exc.__class__.__name__,
            ) from exc
