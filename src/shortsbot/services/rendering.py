"""
Scene image rendering service.

Requests one image per scene from OpenAI when a key is configured and
falls back to a deterministic placeholder URL otherwise. Rendering never
raises: every failure becomes a placeholder for that scene.
"""

import logging
from urllib.parse import quote

from shortsbot.integrations.openai_client import OpenAIImageClient
from shortsbot.schemas.media import SceneImage
from shortsbot.schemas.script import Script
from shortsbot.services.scripting import get_avatar_prompt_hint

logger = logging.getLogger(__name__)

PLACEHOLDER_BASE_URL = "https://placehold.co/1080x1920/1a1a2e/eee"
PLACEHOLDER_TEXT_LENGTH = 50


def placeholder_image_url(prompt: str) -> str:
    """
    Build the placeholder image URL for a prompt.

    The prompt is cut to 50 characters and percent-encoded with the
    URI component reserved set.
    """
    text = quote(prompt[:PLACEHOLDER_TEXT_LENGTH], safe="!~*'()")
    return f"{PLACEHOLDER_BASE_URL}?text={text}"


def build_scene_prompt(hint: str, image_prompt: str) -> str:
    """Combine the character hint with a scene prompt."""
    return f"{hint}. Scene: {image_prompt}"


class SceneRenderer:
    """
    Renders scene images.

    Attributes:
        image_client: OpenAI image client, or None to always use placeholders
    """

    def __init__(self, image_client: OpenAIImageClient | None = None) -> None:
        self.image_client = image_client

    async def aclose(self) -> None:
        if self.image_client is not None:
            await self.image_client.aclose()

    async def _render_one(self, prompt: str) -> tuple[str, bool]:
        if self.image_client is None:
            return placeholder_image_url(prompt), False
        try:
            result = await self.image_client.generate_image(prompt)
        except Exception as e:
            logger.warning(
                "Image generation failed, using placeholder",
                extra={"error": str(e)},
            )
            return placeholder_image_url(prompt), False
        url = getattr(result, "url", None)
        if not url:
            logger.warning("Image response had no URL, using placeholder")
            return placeholder_image_url(prompt), False
        return url, True

    async def render(self, script: Script, character_hint: str | None = None) -> list[SceneImage]:
        """
        Render one image per scene, preserving scene order.

        Args:
            script: Script to illustrate
            character_hint: Avatar preset id; falls back to the script's character

        Returns:
            One SceneImage per scene
        """
        hint = (
            get_avatar_prompt_hint(character_hint)
            if character_hint
            else script.character.image_prompt_hint
        )
        images: list[SceneImage] = []
        for scene in script.scenes:
            url, from_api = await self._render_one(build_scene_prompt(hint, scene.image_prompt))
            images.append(SceneImage(scene_index=scene.scene_index, image_url=url, from_api=from_api))
        return images
