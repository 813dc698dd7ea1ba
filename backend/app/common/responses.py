from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class ApiResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None

    @classmethod
    def ok(cls, data: Any = None, message: str = "OK") -> "ApiResponse":
        return cls(success=True, message=message, data=data)


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None

    @classmethod
    def of(cls, error: str, details: Any = None) -> "ErrorResponse":
        return cls(error=error, details=details)

    def to_content(self) -> dict[str, Any]:
        # `details` is only present on the wire when there is something to report.
        return self.model_dump(exclude_none=True)
