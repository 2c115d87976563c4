"""
Business logic services for ShortsBot.

This module provides the pipeline stages and their coordinators:
- TopicCollector: Collect trend topics for keywords
- ScriptComposer: Compose a three-scene script from a topic
- SceneRenderer: Render one image per scene
- NarrationSynthesizer: Optional per-scene narration
- VideoAssembler: Assembly seam (stub implementation)
- AccountConnector: YouTube OAuth and upload
- JobOrchestrator: Stage sequencing and job state

All services are designed to be injectable via FastAPI Depends().
"""

from shortsbot.services.account import AccountConnector, build_upload_metadata
from shortsbot.services.assembly import StubVideoAssembler, VideoAssembler
from shortsbot.services.narration import NarrationSynthesizer
from shortsbot.services.orchestrator import (
    STUB_VIDEO_ID,
    STUB_VIDEO_URL,
    CancellationToken,
    JobOrchestrator,
)
from shortsbot.services.rendering import SceneRenderer, placeholder_image_url
from shortsbot.services.scripting import AVATAR_PRESETS, ScriptComposer, get_avatar_prompt_hint
from shortsbot.services.topics import TopicCollector

__all__ = [
    # Topics
    "TopicCollector",
    # Scripting
    "ScriptComposer",
    "AVATAR_PRESETS",
    "get_avatar_prompt_hint",
    # Media
    "SceneRenderer",
    "placeholder_image_url",
    "NarrationSynthesizer",
    "VideoAssembler",
    "StubVideoAssembler",
    # Account
    "AccountConnector",
    "build_upload_metadata",
    # Orchestration
    "JobOrchestrator",
    "CancellationToken",
    "STUB_VIDEO_ID",
    "STUB_VIDEO_URL",
]
