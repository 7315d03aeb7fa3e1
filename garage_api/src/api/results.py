"""Translate service Result values into HTTP responses."""
from __future__ import annotations

from typing import Dict, TypeVar

from fastapi import HTTPException, status

from src.core.result import Error, ErrorType, Result

T = TypeVar("T")

STATUS_BY_ERROR_TYPE: Dict[ErrorType, int] = {
    ErrorType.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorType.PROBLEM: status.HTTP_400_BAD_REQUEST,
    ErrorType.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorType.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorType.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorType.FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


# PUBLIC_INTERFACE
def status_for(error: Error) -> int:
    return STATUS_BY_ERROR_TYPE.get(error.type, status.HTTP_500_INTERNAL_SERVER_ERROR)


# PUBLIC_INTERFACE
def problem(error: Error) -> HTTPException:
    """HTTPException whose detail carries the error code and description."""
    return HTTPException(status_code=status_for(error), detail=error.to_dict())


# PUBLIC_INTERFACE
def unwrap(result: Result[T]) -> T:
    """Return the value of a successful result or raise the matching HTTPException."""
    if result.is_failure:
        raise problem(result.error)
    return result.value
