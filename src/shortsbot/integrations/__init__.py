"""
External API client integrations for ShortsBot.

This module provides clients for external services:
- YouTube: Trend search and video upload
- Google OAuth: Publishing account authorization
- OpenAI: Scene image generation
- ElevenLabs: Narration synthesis

All clients follow consistent patterns:
- Retry logic with exponential backoff
- Per-request timeouts
- Comprehensive logging
"""

from shortsbot.integrations.base_client import BaseHTTPClient, parse_retry_after
from shortsbot.integrations.elevenlabs_client import (
    ElevenLabsClient,
    SpeechResult,
    VoiceSettings,
    get_elevenlabs_client,
)
from shortsbot.integrations.google_oauth_client import (
    GoogleOAuthClient,
    TokenResponse,
    build_authorization_url,
)
from shortsbot.integrations.openai_client import (
    ImageResult,
    OpenAIImageClient,
    get_openai_image_client,
)
from shortsbot.integrations.youtube_client import (
    SearchPage,
    YouTubeSearchClient,
    YouTubeSearchItem,
    YouTubeUploadClient,
    build_multipart_body,
)

__all__ = [
    # Base client
    "BaseHTTPClient",
    "parse_retry_after",
    # ElevenLabs
    "ElevenLabsClient",
    "SpeechResult",
    "VoiceSettings",
    "get_elevenlabs_client",
    # Google OAuth
    "GoogleOAuthClient",
    "TokenResponse",
    "build_authorization_url",
    # OpenAI
    "ImageResult",
    "OpenAIImageClient",
    "get_openai_image_client",
    # YouTube
    "SearchPage",
    "YouTubeSearchClient",
    "YouTubeSearchItem",
    "YouTubeUploadClient",
    "build_multipart_body",
]
