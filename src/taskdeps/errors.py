"""Structured error taxonomy shared by the core, the CLI and direct envelopes."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    INPUT_VALIDATION_ERROR = "INPUT_VALIDATION_ERROR"
    INVALID_ID_FORMAT = "INVALID_ID_FORMAT"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    DEPENDENCY_NOT_FOUND = "DEPENDENCY_NOT_FOUND"
    PARENT_NOT_FOUND = "PARENT_NOT_FOUND"
    SUBTASK_NOT_FOUND = "SUBTASK_NOT_FOUND"
    SELF_DEPENDENCY = "SELF_DEPENDENCY"
    CIRCULAR_DEPENDENCY = "CIRCULAR_DEPENDENCY"
    INVALID_COLLECTION = "INVALID_COLLECTION"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    CORE_FUNCTION_ERROR = "CORE_FUNCTION_ERROR"


class DependencyError(Exception):
    """Raised when a dependency operation cannot proceed.

    Always raised before any mutation, so a collection that saw a
    ``DependencyError`` is unchanged.
    """

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code.value, "message": self.message}
