"""
Video assembly seam.

Encoding is outside this service; the pipeline talks to any object that
satisfies ``VideoAssembler``. ``StubVideoAssembler`` reports fixed paths
without producing a file, so a connected account will reject its output
at the upload size check.
"""

import os
import tempfile
from typing import Protocol

from shortsbot.core.config import Settings, get_settings
from shortsbot.schemas.media import SceneAudio, SceneImage, VideoArtifact
from shortsbot.schemas.script import Script

STUB_VIDEO_FILENAME = "shorts-stub.mp4"
STUB_THUMBNAIL_FILENAME = "shorts-stub-thumb.jpg"


class VideoAssembler(Protocol):
    """Turns a script and its media into a video file."""

    async def assemble(
        self,
        script: Script,
        scene_images: list[SceneImage],
        scene_audios: list[SceneAudio],
    ) -> VideoArtifact:
        """Return a descriptor whose duration equals the script's total duration."""
        ...


class StubVideoAssembler:
    """Assembler that describes a video without encoding one."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.output_dir = settings.video_output_dir or tempfile.gettempdir()

    async def assemble(
        self,
        script: Script,
        scene_images: list[SceneImage],
        scene_audios: list[SceneAudio],
    ) -> VideoArtifact:
        return VideoArtifact(
            video_path=os.path.join(self.output_dir, STUB_VIDEO_FILENAME),
            thumbnail_path=os.path.join(self.output_dir, STUB_THUMBNAIL_FILENAME),
            duration_seconds=script.total_duration_seconds,
        )
