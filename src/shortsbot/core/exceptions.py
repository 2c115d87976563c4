"""
Custom exception classes for the ShortsBot application.

These exceptions provide structured error handling throughout the application
and are mapped to appropriate HTTP status codes in the API layer. Pipeline
stages raise them; the job orchestrator records their message on the job.
"""

from typing import Any


class ShortsBotException(Exception):
    """
    Base exception for all ShortsBot-specific errors.

    Provides a consistent interface for error handling with support for
    error codes, messages, and additional details.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code for client handling
        details: Additional error details (optional)
        status_code: HTTP status code to return (default: 500)
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error context
            status_code: HTTP status code
        """
        self.message = message
        self.code = code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary representation of the error
        """
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class NotFoundError(ShortsBotException):
    """
    Raised when a requested resource is not found.

    Maps to HTTP 404 Not Found.
    """

    def __init__(
        self,
        resource_type: str,
        resource_id: str | None = None,
        message: str | None = None,
    ) -> None:
        """
        Initialize NotFoundError.

        Args:
            resource_type: Type of resource (e.g., "Job")
            resource_id: ID of the resource that was not found
            message: Custom error message (optional)
        """
        if message is None:
            if resource_id:
                message = f"{resource_type} with ID '{resource_id}' not found"
            else:
                message = f"{resource_type} not found"

        super().__init__(
            message=message,
            code="NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id},
            status_code=404,
        )


class ValidationError(ShortsBotException):
    """
    Raised when input or configuration validation fails.

    Maps to HTTP 422 Unprocessable Entity.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize ValidationError.

        Args:
            message: Description of the validation error
            field: Name of the field that failed validation (optional)
            details: Additional validation context
        """
        error_details = details or {}
        if field:
            error_details["field"] = field

        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details=error_details,
            status_code=422,
        )


class ExternalServiceError(ShortsBotException):
    """
    Raised when an external service call fails.

    Maps to HTTP 502 Bad Gateway.

    Used for errors from YouTube, Google OAuth, OpenAI and ElevenLabs.
    """

    def __init__(
        self,
        service: str,
        message: str,
        original_error: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """
        Initialize ExternalServiceError.

        Args:
            service: Name of the external service
            message: Description of the error
            original_error: Original error body or message from the service
            status_code: HTTP status returned by the service, if any
        """
        details: dict[str, Any] = {"service": service}
        if original_error:
            details["original_error"] = original_error
        if status_code is not None:
            details["upstream_status"] = status_code

        super().__init__(
            message=message,
            code="EXTERNAL_SERVICE_ERROR",
            details=details,
            status_code=502,
        )


class RateLimitError(ShortsBotException):
    """
    Raised when an upstream rate limit is exceeded after retries.

    Maps to HTTP 429 Too Many Requests.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if retry_after:
            details["retry_after"] = retry_after

        super().__init__(
            message=message,
            code="RATE_LIMIT_EXCEEDED",
            details=details,
            status_code=429,
        )


class PipelineError(ShortsBotException):
    """
    Raised when a pipeline stage fails fatally.

    Maps to HTTP 500 Internal Server Error. The message is what ends up
    in ``Job.error``.
    """

    def __init__(
        self,
        message: str,
        stage: str,
        job_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize PipelineError.

        Args:
            message: Description of the pipeline error
            stage: Pipeline stage where the error occurred
            job_id: ID of the job being processed
            details: Additional error context
        """
        error_details = details or {}
        error_details["stage"] = stage
        if job_id:
            error_details["job_id"] = job_id

        super().__init__(
            message=message,
            code="PIPELINE_ERROR",
            details=error_details,
            status_code=500,
        )


class JobCancelledError(ShortsBotException):
    """Raised at a suspension point once a job's cancellation was requested."""

    def __init__(self, job_id: str | None = None) -> None:
        super().__init__(
            message="Job cancelled",
            code="JOB_CANCELLED",
            details={"job_id": job_id} if job_id else {},
            status_code=409,
        )
