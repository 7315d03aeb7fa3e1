"""
Typed success/failure values for expected business-rule outcomes.

Services return a Result instead of raising for conditions a caller is
expected to handle (missing vehicle, ownership violation, conflicting
energy types, ...). The API layer maps the error type to an HTTP status.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class ErrorType(str, Enum):
    """Category of a business error."""

    FAILURE = "Failure"
    VALIDATION = "Validation"
    PROBLEM = "Problem"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    UNAUTHORIZED = "Unauthorized"


@dataclass(frozen=True)
class Error:
    """Business error with a stable machine-readable code."""

    code: str
    description: str
    type: ErrorType

    @classmethod
    def failure(cls, code: str, description: str) -> "Error":
        return cls(code, description, ErrorType.FAILURE)

    @classmethod
    def validation(cls, code: str, description: str) -> "Error":
        return cls(code, description, ErrorType.VALIDATION)

    @classmethod
    def problem(cls, code: str, description: str) -> "Error":
        return cls(code, description, ErrorType.PROBLEM)

    @classmethod
    def not_found(cls, code: str, description: str) -> "Error":
        return cls(code, description, ErrorType.NOT_FOUND)

    @classmethod
    def conflict(cls, code: str, description: str) -> "Error":
        return cls(code, description, ErrorType.CONFLICT)

    @classmethod
    def unauthorized(cls, code: str, description: str) -> "Error":
        return cls(code, description, ErrorType.UNAUTHORIZED)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "description": self.description, "type": self.type.value}


Error.NONE = Error("", "", ErrorType.FAILURE)  # type: ignore[attr-defined]


@dataclass(frozen=True)
class ValidationError(Error):
    """Aggregate of several errors produced by one validation pass."""

    errors: Tuple[Error, ...] = field(default_factory=tuple)

    @classmethod
    def from_errors(cls, errors: List[Error]) -> "ValidationError":
        return cls(
            code="Validation.General",
            description="One or more validation errors occurred",
            type=ErrorType.VALIDATION,
            errors=tuple(errors),
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["errors"] = [e.to_dict() for e in self.errors]
        return data


class Result(Generic[T]):
    """
    Outcome of an operation: either a value or an Error.

    Accessing ``value`` on a failed result raises ValueError.
    """

    __slots__ = ("_value", "error")

    def __init__(self, value: Optional[T], error: Error) -> None:
        self._value = value
        self.error = error

    @property
    def is_success(self) -> bool:
        return self.error is Error.NONE  # type: ignore[attr-defined]

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    @property
    def value(self) -> T:
        if self.is_failure:
            raise ValueError("The value of a failure result can't be accessed.")
        return self._value  # type: ignore[return-value]

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value, Error.NONE)  # type: ignore[attr-defined]

    @classmethod
    def failure(cls, error: Error) -> "Result[T]":
        if error is Error.NONE:  # type: ignore[attr-defined]
            raise ValueError("A failure result requires an error.")
        return cls(None, error)

    # PUBLIC_INTERFACE
    @classmethod
    def combine(cls, *results: "Result[Any]") -> "Result[Any]":
        """
        Merge several results.

        All successful: the first result (or an empty success).
        Exactly one failure: that failure unchanged.
        Several failures: one ValidationError listing every error.
        """
        failures = [r.error for r in results if r.is_failure]
        if not failures:
            return results[0] if results else cls.success()
        if len(failures) == 1:
            return cls.failure(failures[0])
        return cls.failure(ValidationError.from_errors(failures))

    def __repr__(self) -> str:  # pragma: no cover
        if self.is_success:
            return f"Result.success({self._value!r})"
        return f"Result.failure({self.error.code!r})"
