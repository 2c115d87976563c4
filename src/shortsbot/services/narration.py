"""
Narration synthesis service.

Optional pipeline stage: turns scene text into MP3 files with ElevenLabs.
A scene whose synthesis is skipped or fails gets ``audio_path=None``; the
stage itself never fails the job.
"""

import asyncio
import logging
import os
import tempfile

from shortsbot.core.config import Settings, get_settings
from shortsbot.integrations.elevenlabs_client import ElevenLabsClient
from shortsbot.schemas.media import SceneAudio
from shortsbot.schemas.script import ScriptScene

logger = logging.getLogger(__name__)

MAX_NARRATION_LENGTH = 500
TEMP_DIR_PREFIX = "shorts-tts-"


def _write_audio(data: bytes, scene_index: int) -> str:
    directory = tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX)
    path = os.path.join(directory, f"scene_{scene_index}.mp3")
    with open(path, "wb") as f:
        f.write(data)
    return path


class NarrationSynthesizer:
    """
    Synthesizes per-scene narration.

    Attributes:
        tts_client: ElevenLabs client, or None to skip every scene
    """

    def __init__(
        self,
        tts_client: ElevenLabsClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.tts_client = tts_client

    async def aclose(self) -> None:
        if self.tts_client is not None:
            await self.tts_client.aclose()

    async def _synthesize_one(self, scene: ScriptScene) -> str | None:
        text = scene.text.strip()[:MAX_NARRATION_LENGTH]
        if not text or self.tts_client is None:
            return None
        try:
            result = await self.tts_client.generate_speech(
                text,
                language_code=self._settings.tts_language,
            )
            return await asyncio.to_thread(_write_audio, result.audio_data, scene.scene_index)
        except Exception as e:
            logger.warning(
                "Narration failed for scene",
                extra={"scene_index": scene.scene_index, "error": str(e)},
            )
            return None

    async def synthesize(self, scenes: list[ScriptScene]) -> list[SceneAudio]:
        """
        Synthesize narration for each scene, in order.

        Args:
            scenes: Script scenes

        Returns:
            One SceneAudio per scene
        """
        audios: list[SceneAudio] = []
        for scene in scenes:
            path = await self._synthesize_one(scene)
            audios.append(SceneAudio(scene_index=scene.scene_index, audio_path=path))
        return audios
