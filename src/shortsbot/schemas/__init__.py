"""
Pydantic schemas for domain records and API request/response validation.

This module exports all schemas used by the pipeline services and the
ShortsBot API endpoints.
"""

from shortsbot.schemas.account import (
    AuthUrl,
    AuthUrlResponse,
    ConnectionStatus,
    ExchangeResult,
    OAuthTokenRecord,
    OkResponse,
    UploadError,
    UploadResult,
    VideoMeta,
)
from shortsbot.schemas.common import ErrorDetail, ErrorResponse, HealthResponse
from shortsbot.schemas.job import (
    CancelResponse,
    Job,
    JobListResponse,
    RunOptions,
    RunRequest,
)
from shortsbot.schemas.media import SceneAudio, SceneImage, VideoArtifact
from shortsbot.schemas.script import (
    AvatarPreset,
    AvatarPresetListResponse,
    Script,
    ScriptScene,
    ShortsCharacter,
)
from shortsbot.schemas.topic import TrendListResponse, TrendTopic

__all__ = [
    # Account
    "AuthUrl",
    "AuthUrlResponse",
    "ConnectionStatus",
    "ExchangeResult",
    "OAuthTokenRecord",
    "OkResponse",
    "UploadError",
    "UploadResult",
    "VideoMeta",
    # Common
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    # Job
    "CancelResponse",
    "Job",
    "JobListResponse",
    "RunOptions",
    "RunRequest",
    # Media
    "SceneAudio",
    "SceneImage",
    "VideoArtifact",
    # Script
    "AvatarPreset",
    "AvatarPresetListResponse",
    "Script",
    "ScriptScene",
    "ShortsCharacter",
    # Topic
    "TrendListResponse",
    "TrendTopic",
]
