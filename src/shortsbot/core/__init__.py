"""
ShortsBot Core Module.

This module contains the foundational components of the ShortsBot application:
- Configuration management
- Custom exceptions
- Dependency injection helpers
"""

from shortsbot.core.config import Settings, get_settings
from shortsbot.core.exceptions import (
    ExternalServiceError,
    JobCancelledError,
    NotFoundError,
    PipelineError,
    ShortsBotException,
    ValidationError,
)

__all__ = [
    "Settings",
    "get_settings",
    "ShortsBotException",
    "ExternalServiceError",
    "JobCancelledError",
    "NotFoundError",
    "PipelineError",
    "ValidationError",
]
