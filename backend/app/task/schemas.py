from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, FrozenSet, Iterable, List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.common.color_utils import HEX_COLOR_PATTERN
from app.common.params import parse_datetime
from app.common.schemas import CamelModel, OrmModel
from app.config import Settings
from app.label.schemas import LabelInput, LabelResponse
from app.label.service import NormalizedLabel
from app.task.models import TaskPriority, TaskStatus


class TaskDefaults(BaseModel):
    """Values filled in for fields a create request leaves out."""

    model_config = ConfigDict(frozen=True)

    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    label_color: str = Field(default="#3b82f6", pattern=HEX_COLOR_PATTERN)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TaskDefaults":
        return cls(
            priority=settings.default_task_priority,
            status=settings.default_task_status,
            label_color=settings.default_label_color,
        )


@dataclass(frozen=True)
class NormalizedTaskCreate:
    title: str
    description: Optional[str]
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[datetime]
    labels: Tuple[NormalizedLabel, ...]


class TaskCreateRequest(CamelModel):
    # Wire keys only: `due_date` must not bypass the `dueDate` pre-check.
    model_config = ConfigDict(populate_by_name=False)

    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None
    labels: Optional[List[LabelInput]] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value: Any) -> Optional[datetime]:
        return parse_datetime(value)

    def normalize(self, defaults: TaskDefaults) -> NormalizedTaskCreate:
        return NormalizedTaskCreate(
            title=self.title,
            description=self.description,
            priority=self.priority or defaults.priority,
            status=self.status or defaults.status,
            due_date=self.due_date,
            labels=tuple(
                NormalizedLabel(name=label.name, color=label.color or defaults.label_color)
                for label in (self.labels or [])
            ),
        )


class TaskResponse(OrmModel):
    id: UUID
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TaskLabelResponse(OrmModel):
    task_id: UUID
    label_id: UUID
    label: LabelResponse


class TaskWithLabelsResponse(TaskResponse):
    labels: List[TaskLabelResponse] = Field(default_factory=list)


class TaskFilter(BaseModel):
    """Conjunction of per-category membership tests; an empty category matches everything."""

    model_config = ConfigDict(frozen=True)

    label_names: FrozenSet[str] = frozenset()
    statuses: FrozenSet[TaskStatus] = frozenset()
    priorities: FrozenSet[TaskPriority] = frozenset()

    @classmethod
    def from_query(
        cls,
        label_names: Iterable[str] = (),
        statuses: Iterable[str] = (),
        priorities: Iterable[str] = (),
    ) -> "TaskFilter":
        return cls(
            label_names=frozenset(label_names),
            statuses=frozenset(statuses),
            priorities=frozenset(priorities),
        )

    def is_empty(self) -> bool:
        return not (self.label_names or self.statuses or self.priorities)
