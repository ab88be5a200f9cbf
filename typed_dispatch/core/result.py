"""
core/result.py
---------------

Two-armed return value of the dispatch entry points.  ``Ok`` wraps a
decoded success payload, ``Err`` wraps a value of the caller's error
type.  Pattern matching works on both (``case Ok(value): ...``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from typed_dispatch.core.errors import DispatchError

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value

    def map(self, func: Callable[[T], U]) -> "Ok[U]":
        return Ok(func(self.value))


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Raise :class:`DispatchError` carrying the error value."""
        raise DispatchError(self.error)

    def unwrap_or(self, default: U) -> U:
        return default

    def map(self, func: Callable[[Any], Any]) -> "Err[E]":
        return self


Result = Union[Ok[T], Err[E]]
