from __future__ import annotations

from contextvars import ContextVar, Token

from starlette.requests import Request

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(request_id: str | None) -> Token[str | None]:
    return _request_id_var.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    _request_id_var.reset(token)


def get_request_id() -> str | None:
    return _request_id_var.get()


def current_request_id(request: Request) -> str | None:
    """Request id from the context var, falling back to the one stored on the request."""
    return get_request_id() or getattr(request.state, "request_id", None)
