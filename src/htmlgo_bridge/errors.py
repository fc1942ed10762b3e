from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    EMPTY_INPUT = "EMPTY_INPUT"
    LOCAL_STRUCTURAL_DEFECT = "LOCAL_STRUCTURAL_DEFECT"
    NETWORK_FAILURE = "NETWORK_FAILURE"
    REMOTE_VALIDATION_ERROR = "REMOTE_VALIDATION_ERROR"
    REMOTE_UNSTRUCTURED_ERROR = "REMOTE_UNSTRUCTURED_ERROR"
    UNEXPECTED_EMPTY_PAYLOAD = "UNEXPECTED_EMPTY_PAYLOAD"


class ConversionError(RuntimeError):
    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code


class BuildError(ConversionError):
    """Raised when a request cannot be built from the source editor."""

    def __init__(self, code: ErrorCode, message: str, *, rule: str | None = None) -> None:
        super().__init__(code, message)
        self.rule = rule


class NetworkFailure(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.NETWORK_FAILURE, message)


__all__ = ["BuildError", "ConversionError", "ErrorCode", "NetworkFailure"]
