"""
core/errors.py
---------------

Exceptions raised by the library and the capability contract that
caller-defined error types must satisfy.

The dispatcher never raises for network or decoding problems; it asks
the caller's error type to build a value describing the failure.  The
contract is expressed as a :class:`typing.Protocol` so any class with
the right classmethods qualifies.  :class:`typed_dispatch.schemas.errors.ResponseError`
is a ready-made pydantic implementation.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

E = TypeVar("E", bound="ResponseErrorProtocol")


class TypedDispatchError(Exception):
    """Base class for exceptions raised by this library."""


class PayloadRequiredError(TypedDispatchError, ValueError):
    """A body-carrying method was dispatched without a payload."""

    def __init__(self, method: str) -> None:
        super().__init__(f"{method} requests require a payload")
        self.method = method


class QueryEncodingError(TypedDispatchError, ValueError):
    """A payload could not be flattened into a query string."""


class DispatchError(TypedDispatchError):
    """Raised by ``Result.unwrap()`` when the result holds an error value."""

    def __init__(self, error: Any) -> None:
        super().__init__(repr(error))
        self.error = error


@runtime_checkable
class ResponseErrorProtocol(Protocol):
    """Construction hooks the dispatcher calls on the caller's error type.

    ``from_request_error`` and ``from_transport_error`` are optional;
    the dispatcher checks for them with ``hasattr`` and falls back to
    ``from_deserialization_error`` and ``default`` respectively.
    """

    @classmethod
    def default(cls: type[E]) -> E:
        ...

    @classmethod
    def from_deserialization_error(cls: type[E], message: str) -> E:
        ...

    @classmethod
    def from_read_error(cls: type[E], message: str) -> E:
        ...
