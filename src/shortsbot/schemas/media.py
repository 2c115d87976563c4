"""
Pydantic schemas for intermediate media produced by the pipeline.
"""

from pydantic import BaseModel, ConfigDict, Field


class SceneImage(BaseModel):
    """Image reference for one scene."""

    model_config = ConfigDict(frozen=True)

    scene_index: int
    image_url: str
    from_api: bool = Field(default=False, description="False when a placeholder was used")


class SceneAudio(BaseModel):
    """Narration file for one scene; ``audio_path`` is None when synthesis was skipped."""

    model_config = ConfigDict(frozen=True)

    scene_index: int
    audio_path: str | None = None


class VideoArtifact(BaseModel):
    """
    Descriptor of an assembled video.

    Attributes:
        video_path: Stable filesystem path the uploader can reopen
        thumbnail_path: Thumbnail image path
        duration_seconds: Must equal the script's total duration
    """

    model_config = ConfigDict(frozen=True)

    video_path: str
    thumbnail_path: str
    duration_seconds: int
