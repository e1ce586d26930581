"""Application-specific exceptions for consistent error handling."""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Application error with standardized error code."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        """Initialize application error."""
        super().__init__(
            status_code=status_code,
            detail={
                "code": code,
                "message": message,
                "details": details,
            },
        )
        self.code = code
        self.message = message
        self.details = details


class RecordNotFound(AppError):
    """Raised when a question id does not exist."""

    def __init__(self, message: str, question_id: int | None = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            code="QUESTION_NOT_FOUND",
            message=message,
            details={"question_id": question_id} if question_id is not None else None,
        )


class StorageWriteError(AppError):
    """Raised when the object store is unreachable or rejects a write."""

    def __init__(self, key: str, error: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code="STORAGE_WRITE_ERROR",
            message=f"Failed to upload image to storage: {error}",
            details={"key": key},
        )


class StorageDeleteError(AppError):
    """Raised when an object cannot be deleted from the store."""

    def __init__(self, key: str, error: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code="STORAGE_DELETE_ERROR",
            message=f"Failed to delete image from storage: {error}",
            details={"key": key},
        )


class DatabaseError(AppError):
    """Generic database failure; carries the underlying message."""

    def __init__(self, error: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code="DATABASE_ERROR",
            message=error,
        )
