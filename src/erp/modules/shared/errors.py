"""Base exception for service-layer errors."""

from fastapi import HTTPException


class ServiceError(Exception):
    """Base exception for service errors. Routers map it to an HTTP response."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException with the structured error body."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "error": self.error_code,
                "message": self.message,
            },
        )
