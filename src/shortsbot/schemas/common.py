"""
Common schemas shared across multiple endpoints.

This module provides base schemas for error envelopes and health checks.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """
    Detailed error information.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        details: Additional error context
    """

    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional error context",
    )


class ErrorResponse(BaseModel):
    """
    Standard error response wrapper.

    All error responses follow this structure for consistent error handling.
    """

    error: ErrorDetail


class HealthResponse(BaseModel):
    """
    Health check response schema.

    Attributes:
        status: Overall health status
        version: Application version
        environment: Current environment
        timestamp: Server timestamp
        checks: Individual health check results
    """

    status: str = Field(description="Overall health status (healthy, degraded)")
    version: str = Field(description="Application version")
    environment: str = Field(description="Current environment")
    timestamp: datetime = Field(description="Server timestamp")
    checks: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Individual health check results",
    )
