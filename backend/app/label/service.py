"""Label lookup-or-create used while attaching labels to a new task."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from app.label.models import Label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedLabel:
    """A label request with its color default already applied."""

    name: str
    color: str


@dataclass(frozen=True)
class Reused:
    """An existing label with the requested name was found and is used as-is."""

    label_id: UUID
    requested_color: str
    existing_color: str

    @property
    def color_ignored(self) -> bool:
        return self.requested_color.lower() != (self.existing_color or "").lower()


@dataclass(frozen=True)
class Created:
    """No label with the requested name existed, so one was inserted."""

    label_id: UUID


LabelResolution = Union[Reused, Created]


class LabelService:
    def __init__(self, db: Session):
        self.db = db

    def find_by_name(self, name: str) -> Optional[Label]:
        return (
            self.db.query(Label)
            .filter(Label.name == name)
            .order_by(Label.created_at.asc())
            .first()
        )

    def resolve(self, label: NormalizedLabel) -> LabelResolution:
        # Lookup is by name only; a differing requested color never updates or forks the label.
        existing = self.find_by_name(label.name)
        if existing is not None:
            result = Reused(label_id=existing.id, requested_color=label.color, existing_color=existing.color)
            if result.color_ignored:
                logger.info(
                    "label_color_ignored name=%s requested=%s existing=%s",
                    label.name,
                    label.color,
                    existing.color,
                )
            return result

        created = Label(name=label.name, color=label.color)
        self.db.add(created)
        self.db.flush()  # Make the new row visible to later lookups in the same transaction.
        return Created(label_id=created.id)
