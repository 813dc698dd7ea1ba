from __future__ import annotations

from sqlalchemy import Column, String, UniqueConstraint

from app.common.models import TimestampMixin, UuidPrimaryKeyMixin
from app.database import Base


class Label(UuidPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "label"
    __table_args__ = (UniqueConstraint("name", "color", name="uq_label_name_color"),)

    name = Column(String(128), nullable=False)
    color = Column(String(7), nullable=False, default="#3b82f6")
