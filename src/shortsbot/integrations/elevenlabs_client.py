"""
ElevenLabs API client for narration synthesis.

This module provides integration with the ElevenLabs text-to-speech API
used by the optional narration stage. Only speech generation is wrapped;
voice management is done in the ElevenLabs dashboard.

API Reference: https://elevenlabs.io/docs/api-reference
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, Field

from shortsbot.core.config import Settings, get_settings
from shortsbot.core.exceptions import ExternalServiceError, ValidationError
from shortsbot.integrations.base_client import BaseHTTPClient

logger = logging.getLogger(__name__)


class VoiceSettings(BaseModel):
    """
    Voice settings for ElevenLabs speech generation.

    Attributes:
        stability: Voice stability (0.0-1.0). Higher = more consistent
        similarity_boost: Speaker similarity boost (0.0-1.0). Higher = more similar
        style: Style exaggeration (0.0-1.0). Higher = more expressive
        use_speaker_boost: Enable speaker boost for clearer audio
    """

    stability: float = Field(default=0.5, ge=0.0, le=1.0)
    similarity_boost: float = Field(default=0.75, ge=0.0, le=1.0)
    style: float = Field(default=0.0, ge=0.0, le=1.0)
    use_speaker_boost: bool = Field(default=True)

    def to_api_format(self) -> dict[str, Any]:
        """Convert to ElevenLabs API format."""
        return {
            "stability": self.stability,
            "similarity_boost": self.similarity_boost,
            "style": self.style,
            "use_speaker_boost": self.use_speaker_boost,
        }


@dataclass
class SpeechResult:
    """
    Result container for speech generation.

    Attributes:
        audio_data: Generated audio as bytes
        content_type: Audio MIME type (typically audio/mpeg)
        character_count: Number of characters processed
        voice_id: Voice used for generation
        model_id: Model used for generation
    """

    audio_data: bytes
    content_type: str = "audio/mpeg"
    character_count: int = 0
    voice_id: str = ""
    model_id: str = ""

    @property
    def file_size_bytes(self) -> int:
        """Get audio file size in bytes."""
        return len(self.audio_data)


class ElevenLabsClient(BaseHTTPClient):
    """
    ElevenLabs API client for text-to-speech synthesis.

    Example:
        ```python
        client = ElevenLabsClient()
        result = await client.generate_speech(
            text="Hello, this is a test.",
            language_code="en",
        )
        Path("hello.mp3").write_bytes(result.audio_data)
        await client.aclose()
        ```
    """

    BASE_URL = "https://api.elevenlabs.io/v1"
    DEFAULT_MODEL = "eleven_turbo_v2_5"

    def __init__(
        self,
        api_key: str | None = None,
        settings: Settings | None = None,
        max_retries: int = 2,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the ElevenLabs client.

        Args:
            api_key: ElevenLabs API key (uses settings if not provided)
            settings: Application settings instance
            max_retries: Maximum number of attempts
            timeout: Request timeout in seconds (uses settings if not provided)
            transport: Optional httpx transport

        Raises:
            ValidationError: If no API key is available
        """
        settings = settings or get_settings()
        api_key = api_key or settings.elevenlabs_api_key

        if not api_key:
            raise ValidationError(
                message="ElevenLabs API key is required",
                field="elevenlabs_api_key",
            )

        super().__init__(
            base_url=self.BASE_URL,
            api_key=api_key,
            settings=settings,
            max_retries=max_retries,
            timeout=timeout or settings.tts_timeout_seconds,
            transport=transport,
        )

    @property
    def service_name(self) -> str:
        """Return service name for logging."""
        return "ElevenLabs"

    def _get_headers(self) -> dict[str, str]:
        """Return default headers for API requests."""
        return {
            "xi-api-key": self._api_key or "",
            "Content-Type": "application/json",
            "Accept": "audio/mpeg",
        }

    async def generate_speech(
        self,
        text: str,
        voice_id: str | None = None,
        model_id: str = DEFAULT_MODEL,
        language_code: str | None = None,
        voice_settings: VoiceSettings | None = None,
        output_format: str = "mp3_44100_128",
    ) -> SpeechResult:
        """
        Generate speech from text.

        Args:
            text: Text to convert to speech
            voice_id: Voice identifier (uses settings if not provided)
            model_id: Model to use for generation
            language_code: ISO 639-1 language to enforce, if any
            voice_settings: Voice settings (uses defaults if not provided)
            output_format: Output audio format

        Returns:
            SpeechResult with audio data and metadata

        Raises:
            ValidationError: If text is empty
            ExternalServiceError: If generation fails
        """
        if not text or not text.strip():
            raise ValidationError(
                message="Text cannot be empty",
                field="text",
            )

        voice_id = voice_id or self._settings.elevenlabs_voice_id
        voice_settings = voice_settings or VoiceSettings()

        payload: dict[str, Any] = {
            "text": text,
            "model_id": model_id,
            "voice_settings": voice_settings.to_api_format(),
        }
        if language_code:
            payload["language_code"] = language_code

        response = await self._request(
            "POST",
            f"text-to-speech/{voice_id}",
            json_data=payload,
            params={"output_format": output_format},
        )

        audio_data = response.content
        if not audio_data:
            raise ExternalServiceError(
                service=self.service_name,
                message="ElevenLabs returned an empty audio body",
            )

        logger.info(
            "Generated speech with ElevenLabs",
            extra={
                "voice_id": voice_id,
                "model_id": model_id,
                "character_count": len(text),
                "audio_size_bytes": len(audio_data),
            },
        )

        return SpeechResult(
            audio_data=audio_data,
            content_type="audio/mpeg" if output_format.startswith("mp3") else "audio/wav",
            character_count=len(text),
            voice_id=voice_id,
            model_id=model_id,
        )


def get_elevenlabs_client(settings: Settings | None = None) -> ElevenLabsClient | None:
    """
    Create an ElevenLabs client when an API key is configured.

    Args:
        settings: Optional settings override

    Returns:
        Configured client, or None when narration is not available
    """
    settings = settings or get_settings()
    if not settings.elevenlabs_api_key:
        return None
    return ElevenLabsClient(settings=settings)
