"""
schemas/errors.py
------------------

Pydantic error models that satisfy the dispatcher's error contract.

``ResponseError`` is the base class to inherit from when defining an
error shape for a particular upstream API: subclasses only declare
their fields and, if the stock behaviour does not fit, override the
construction hooks.  ``ApiErrors`` is the ``{"errors": [...]}`` envelope
returned by GraphQL servers and Directus-style REST backends.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

SYSTEM_ERROR = "System Error"


class ResponseError(BaseModel):
    """Base for caller error types.

    Subclasses must be constructible from the hooks below; the defaults
    assume a model with a single ``message`` field.  Declare the fields
    that identify the upstream error shape as required: a body missing
    them must fail validation so it reaches ``from_deserialization_error``
    instead of decoding into an empty error.  ``from_transport_error``
    returns :meth:`default` so the transport cause is only visible in
    the logs unless a subclass overrides it.
    """

    @classmethod
    def default(cls):
        return cls(message=SYSTEM_ERROR)

    @classmethod
    def from_deserialization_error(cls, message: str):
        return cls(message=message)

    @classmethod
    def from_read_error(cls, message: str):
        return cls(message=message)

    @classmethod
    def from_request_error(cls, message: str, status: int):
        return cls(message=message)

    @classmethod
    def from_transport_error(cls, exc: BaseException):
        return cls.default()


class ErrorExtension(BaseModel):
    code: str = ""
    reason: Optional[str] = None


class ApiError(BaseModel):
    message: str
    extensions: ErrorExtension = Field(default_factory=ErrorExtension)


class ApiErrors(ResponseError):
    """``{"errors": [{"message": ..., "extensions": {"code": ..., "reason": ...}}]}``."""

    errors: List[ApiError]

    @classmethod
    def single(cls, message: str, code: str = "500", reason: Optional[str] = None) -> "ApiErrors":
        return cls(errors=[ApiError(message=message, extensions=ErrorExtension(code=code, reason=reason))])

    @classmethod
    def default(cls) -> "ApiErrors":
        return cls.single(SYSTEM_ERROR)

    @classmethod
    def from_deserialization_error(cls, message: str) -> "ApiErrors":
        return cls.single(message)

    @classmethod
    def from_read_error(cls, message: str) -> "ApiErrors":
        return cls.single(message)

    @classmethod
    def from_request_error(cls, message: str, status: int) -> "ApiErrors":
        return cls.single(message, code=str(status), reason=message or None)

    @property
    def message(self) -> str:
        return "; ".join(e.message for e in self.errors if e.message)

    def http_status(self, fallback: int = 500) -> int:
        """Status suggested by the first error code, ``fallback`` if it is not numeric."""
        for error in self.errors:
            code = error.extensions.code
            if code.isdigit() and 400 <= int(code) < 600:
                return int(code)
        return fallback


class MessageError(ResponseError):
    """Minimal ``{"message": ...}`` error body."""

    message: str
    status: Optional[int] = None

    @classmethod
    def from_request_error(cls, message: str, status: int) -> "MessageError":
        return cls(message=message, status=status)
