"""
Script composition service for Shorts.

Expands one topic into a fixed three-scene script (hook, body,
call-to-action) by truncating the topic text. No model is called, so the
same topic and character always produce the same script.
"""

from shortsbot.schemas.script import AvatarPreset, Script, ScriptScene, ShortsCharacter
from shortsbot.schemas.topic import TrendTopic

HOOK_TITLE_MAX_LENGTH = 30
HOOK_SUFFIX = " is trending right now."
HOOK_PROMPT_TEXT_LENGTH = 20
BODY_MAX_LENGTH = 80
CTA_TEXT = "Check the link for the full story."
ELLIPSIS = "…"

HOOK_DURATION_SECONDS = 3
BODY_DURATION_SECONDS = 4
CTA_DURATION_SECONDS = 2

AVATAR_PRESETS: list[AvatarPreset] = [
    AvatarPreset(
        id="shortsbot",
        name="ShortsBot",
        image_prompt_hint="minimal flat illustration, friendly character, pastel background",
        description="Minimal illustration",
    ),
    AvatarPreset(
        id="vtuber",
        name="VTuber style",
        image_prompt_hint="anime style vtuber avatar, soft lighting, clean background",
        description="Anime style",
    ),
    AvatarPreset(
        id="3d",
        name="3D character",
        image_prompt_hint="3D render cute character, soft shadows, gradient background",
        description="3D render",
    ),
    AvatarPreset(
        id="comic",
        name="Comic character",
        image_prompt_hint="comic book style character, bold outlines, dynamic pose",
        description="Comic style",
    ),
]
DEFAULT_PRESET = AVATAR_PRESETS[0]


def get_avatar_prompt_hint(preset_id: str | None = None) -> str:
    """
    Resolve a character hint to its image prompt style.

    Args:
        preset_id: Avatar preset id; unknown or missing ids use the default

    Returns:
        Image prompt hint for the preset
    """
    if not preset_id:
        return DEFAULT_PRESET.image_prompt_hint
    for preset in AVATAR_PRESETS:
        if preset.id == preset_id:
            return preset.image_prompt_hint
    return DEFAULT_PRESET.image_prompt_hint


def truncate(text: str, limit: int, marker: str = "") -> str:
    """Cut ``text`` to ``limit`` characters, appending ``marker`` when cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + marker


class ScriptComposer:
    """Builds scripts from topics."""

    def compose(self, topic: TrendTopic, character_hint: str | None = None) -> Script:
        """
        Compose the three-scene script for a topic.

        Args:
            topic: Selected trend topic
            character_hint: Avatar preset id

        Returns:
            Script whose total duration is the sum of its scenes
        """
        character = ShortsCharacter(
            name=DEFAULT_PRESET.name,
            description="Minimal illustrated character, one-line summary tone",
            tone="friendly, casual",
            image_prompt_hint=get_avatar_prompt_hint(character_hint),
        )
        hint = character.image_prompt_hint

        hook = truncate(topic.title, HOOK_TITLE_MAX_LENGTH, ELLIPSIS) + HOOK_SUFFIX
        scenes = [
            ScriptScene(
                scene_index=1,
                text=hook,
                image_prompt=f'{hint}, text: "{hook[:HOOK_PROMPT_TEXT_LENGTH]}"',
                duration_seconds=HOOK_DURATION_SECONDS,
            ),
            ScriptScene(
                scene_index=2,
                text=truncate(topic.summary, BODY_MAX_LENGTH),
                image_prompt=f"{hint}, topic summary",
                duration_seconds=BODY_DURATION_SECONDS,
            ),
            ScriptScene(
                scene_index=3,
                text=CTA_TEXT,
                image_prompt=f"{hint}, CTA",
                duration_seconds=CTA_DURATION_SECONDS,
            ),
        ]

        return Script(
            topic_id=topic.id,
            topic_title=topic.title,
            hook=hook,
            character=character,
            scenes=scenes,
            total_duration_seconds=sum(scene.duration_seconds for scene in scenes),
        )
