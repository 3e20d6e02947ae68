from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from rdl.domain.errors import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a ledger edit: the new value, or the rule it broke.

    On failure ``value`` holds the unchanged input so callers can keep
    rendering it.
    """

    value: T
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value)

    @classmethod
    def failure(cls, value: T, error: ValidationError) -> "Result[T]":
        return cls(value, error)
