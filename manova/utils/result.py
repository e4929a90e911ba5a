"""
Result type for calls that may fall back.

A provider call returns ``Result.success(value)`` or ``Result.failure(error)``;
the caller states its fallback with ``recover``.
"""
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from manova.errors import ManovaError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ManovaError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ManovaError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def map(self, fn: Callable[[T], Any]) -> "Result[Any]":
        """Apply fn to a success value; a ManovaError raised by fn becomes a failure."""
        if not self.ok:
            return self
        try:
            return Result.success(fn(self.value))
        except ManovaError as e:
            return Result.failure(e)

    def recover(self, fallback: Callable[[ManovaError], T]) -> T:
        """Return the value, or the fallback computed from the error."""
        if self.ok:
            return self.value
        return fallback(self.error)
