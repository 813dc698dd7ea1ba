from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

_datetime_adapter: TypeAdapter[datetime] = TypeAdapter(datetime)


def parse_datetime(value: Any) -> datetime | None:
    """Parse an optional date/time value into an aware UTC datetime.

    Accepts ISO 8601 date or date-time strings and unix timestamps. Missing
    values (``None`` or an empty string) yield ``None``. Naive values are
    taken to be UTC.

    Raises:
        ValueError: If the value is present but not a calendar date/time.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    if isinstance(value, bool):
        raise ValueError(f"Not a date/time: {value!r}")
    try:
        parsed = _datetime_adapter.validate_python(value)
    except ValidationError as exc:
        raise ValueError(f"Not a date/time: {value!r}") from exc
    try:
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except OverflowError as exc:
        # Parses, but the UTC equivalent falls outside year 1..9999.
        raise ValueError(f"Not a date/time: {value!r}") from exc


def parse_uuid(value: str | None) -> UUID:
    if value is None:
        raise ValueError("Missing identifier")
    return UUID(value.strip())
