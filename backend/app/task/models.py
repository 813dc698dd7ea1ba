from __future__ import annotations

import enum

from sqlalchemy import Column, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.common.models import TimestampMixin, UtcDateTime, UuidPrimaryKeyMixin
from app.database import Base
from app.label.models import Label


class TaskPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TaskStatus(str, enum.Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class Task(UuidPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "task"

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(Enum(TaskPriority), nullable=False, default=TaskPriority.MEDIUM)
    status = Column(Enum(TaskStatus), nullable=False, default=TaskStatus.TODO)
    due_date = Column(UtcDateTime(), nullable=True)

    # Read-only: association rows are written and removed explicitly through TaskLabel.
    labels = relationship("TaskLabel", lazy="selectin", viewonly=True)


class TaskLabel(Base):
    __tablename__ = "task_label"

    # No ondelete cascade: associations are removed explicitly before their task.
    task_id = Column(Uuid(as_uuid=True), ForeignKey("task.id"), primary_key=True)
    label_id = Column(Uuid(as_uuid=True), ForeignKey("label.id"), primary_key=True)

    # Relationships
    label = relationship(Label, lazy="joined")
