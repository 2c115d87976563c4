"""
Pydantic schemas for Shorts scripts.

Defines the character, the per-scene breakdown and the full script.
Scripts validate their own invariants on construction: scene indexes are
1-based and contiguous, and the total duration is the sum of the scenes.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ShortsCharacter(BaseModel):
    """
    The on-screen character narrating a Short.

    Attributes:
        name: Character display name
        description: Visual description
        tone: Narration tone
        image_prompt_hint: Style hint prepended to every scene image prompt
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    tone: str
    image_prompt_hint: str


class ScriptScene(BaseModel):
    """
    A single scene of a script.

    Attributes:
        scene_index: 1-based position in the script
        text: Narration / caption text
        image_prompt: Prompt used to render the scene image
        duration_seconds: On-screen duration
    """

    model_config = ConfigDict(frozen=True)

    scene_index: int = Field(ge=1)
    text: str
    image_prompt: str
    duration_seconds: int = Field(gt=0)


class Script(BaseModel):
    """
    Full script for one Short.

    Attributes:
        topic_id: Id of the topic the script was written for
        topic_title: Title of that topic
        hook: Opening line
        character: Character used for all scenes
        scenes: Ordered scenes
        total_duration_seconds: Sum of scene durations
    """

    model_config = ConfigDict(frozen=True)

    topic_id: str
    topic_title: str
    hook: str
    character: ShortsCharacter
    scenes: list[ScriptScene]
    total_duration_seconds: int

    @model_validator(mode="after")
    def check_scene_invariants(self) -> "Script":
        """Reject scripts with gaps in scene indexes or a wrong total."""
        indexes = [scene.scene_index for scene in self.scenes]
        if indexes != list(range(1, len(self.scenes) + 1)):
            raise ValueError(f"scene indexes must be contiguous from 1, got {indexes}")
        total = sum(scene.duration_seconds for scene in self.scenes)
        if total != self.total_duration_seconds:
            raise ValueError(
                f"total_duration_seconds {self.total_duration_seconds} != sum of scenes {total}"
            )
        return self


class AvatarPreset(BaseModel):
    """
    A selectable character style.

    Attributes:
        id: Preset identifier used as the character hint
        name: Display name
        image_prompt_hint: Style hint for image prompts
        description: Short description
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    image_prompt_hint: str
    description: str | None = None


class AvatarPresetListResponse(BaseModel):
    """Response body for the avatar preset listing endpoint."""

    presets: list[AvatarPreset]
