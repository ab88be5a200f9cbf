"""
web.py
-------

FastAPI helpers for routes that proxy an upstream API through the
dispatcher.  A route usually wants the decoded value on success and an
``HTTPException`` otherwise; ``unwrap_or_raise`` does exactly that.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException

from typed_dispatch.core.result import Err, Result

DEFAULT_ERROR_STATUS = 502


def error_status(error: Any, fallback: int = DEFAULT_ERROR_STATUS) -> int:
    """Status code for an error value: its own ``http_status()`` or ``status`` when it has one."""
    http_status = getattr(error, "http_status", None)
    if callable(http_status):
        return http_status(fallback)
    status = getattr(error, "status", None)
    if isinstance(status, int) and 400 <= status < 600:
        return status
    return fallback


def to_http_exception(error: Any, status_code: int | None = None) -> HTTPException:
    """Wrap an error value in an ``HTTPException`` whose detail is the error body."""
    return HTTPException(
        status_code=status_code or error_status(error),
        detail=error.model_dump(mode="json") if hasattr(error, "model_dump") else str(error),
    )


def unwrap_or_raise(result: Result, status_code: int | None = None) -> Any:
    """Return the ``Ok`` value or raise the ``Err`` value as an ``HTTPException``."""
    if isinstance(result, Err):
        raise to_http_exception(result.error, status_code)
    return result.value
