# util/errors.py
from typing import Any, List
from fastapi import HTTPException, status

from util.enums import ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self, message: Any, http_status: int = status.HTTP_400_BAD_REQUEST
    ) -> None:
        super().__init__(status_code=http_status, detail=message)

    @classmethod
    def of(cls, error: ErrorMessage) -> "AppError":
        return cls(error.value.message, error.value.http_status)


class VerificationError(Exception):
    """
    A failure that stops a verification run before any decision is made.
    The pipeline attaches the audit steps recorded so far to `steps`.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.steps: List[Any] = []


class ConversionError(VerificationError):
    """PDF -> image rendering failed."""


class VisionServiceError(VerificationError):
    """Vision model unreachable, non-2xx, or its output is not a fact sheet."""
