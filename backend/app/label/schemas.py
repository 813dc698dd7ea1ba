from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import Field

from app.common.color_utils import HEX_COLOR_PATTERN
from app.common.schemas import CamelModel, OrmModel


class LabelInput(CamelModel):
    name: str
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)


class LabelResponse(OrmModel):
    id: UUID
    name: str
    color: str
