"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class EngineError(DomainError):
    """Raised when the audio engine rejects or fails a request."""

    def __init__(self, operation: str, message: str, status_code: int | None = None) -> None:
        super().__init__(message, code="ENGINE_ERROR")
        self.operation = operation
        self.status_code = status_code
