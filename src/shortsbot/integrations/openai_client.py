"""
OpenAI API client wrapper for scene image generation.

This module provides a wrapper around the OpenAI Python SDK with:
- Retry logic with exponential backoff
- Per-request timeouts
- Comprehensive error handling and logging
"""

import asyncio
import logging
import random
import time
from dataclasses import dataclass

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, RateLimitError

from shortsbot.core.config import Settings, get_settings
from shortsbot.core.exceptions import ExternalServiceError, RateLimitError as ShortsRateLimitError

logger = logging.getLogger(__name__)

# Portrait size closest to the 9:16 Shorts frame
SHORTS_IMAGE_SIZE = "1024x1792"
MAX_PROMPT_LENGTH = 4000


@dataclass
class ImageResult:
    """
    Result of an image generation call.

    Attributes:
        url: Hosted image URL, None when the response carried no URL
        model: Model used
        revised_prompt: Prompt as rewritten by the model, if any
    """

    url: str | None
    model: str
    revised_prompt: str | None = None


class OpenAIImageClient:
    """
    Async OpenAI images client.

    Example:
        ```python
        client = OpenAIImageClient()
        result = await client.generate_image("flat illustration of a robot")
        print(result.url)
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        settings: Settings | None = None,
        client: AsyncOpenAI | None = None,
        max_retries: int = 2,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
    ) -> None:
        """
        Initialize the OpenAI image client.

        Args:
            api_key: OpenAI API key (uses settings if not provided)
            settings: Application settings instance
            client: Preconfigured SDK client (used by tests)
            max_retries: Maximum number of attempts
            base_delay: Initial delay in seconds for exponential backoff
            max_delay: Maximum delay in seconds between retries
        """
        self._settings = settings or get_settings()
        self._api_key = api_key or self._settings.openai_api_key
        self._client = client or AsyncOpenAI(
            api_key=self._api_key,
            timeout=self._settings.image_timeout_seconds,
            # Retries are handled here so they are logged consistently
            max_retries=0,
        )
        self._max_retries = max(1, max_retries)
        self._base_delay = base_delay
        self._max_delay = max_delay

    def _calculate_backoff(self, attempt: int) -> float:
        """Calculate exponential backoff delay with jitter."""
        delay = min(self._base_delay * (2**attempt), self._max_delay)
        jitter = delay * (0.1 + 0.2 * random.random())
        return delay + jitter

    async def aclose(self) -> None:
        """Close the SDK client."""
        await self._client.close()

    async def generate_image(
        self,
        prompt: str,
        model: str | None = None,
        size: str = SHORTS_IMAGE_SIZE,
    ) -> ImageResult:
        """
        Generate one image for a prompt.

        Args:
            prompt: Image prompt (truncated to the API limit)
            model: Image model (defaults to settings.openai_image_model)
            size: Output size

        Returns:
            ImageResult with the hosted URL

        Raises:
            ExternalServiceError: If all attempts fail or the API rejects the request
            ShortsRateLimitError: If rate limit is exceeded after retries
        """
        model = model or self._settings.openai_image_model
        last_error: Exception | None = None

        for attempt in range(self._max_retries):
            try:
                start_time = time.time()
                response = await self._client.images.generate(
                    model=model,
                    prompt=prompt[:MAX_PROMPT_LENGTH],
                    n=1,
                    size=size,
                    quality="standard",
                    response_format="url",
                )
                elapsed_time = time.time() - start_time

                first = response.data[0] if response.data else None
                url = getattr(first, "url", None) if first else None

                logger.info(
                    "OpenAI image generation success",
                    extra={
                        "model": model,
                        "elapsed_seconds": round(elapsed_time, 2),
                        "has_url": bool(url),
                    },
                )
                return ImageResult(
                    url=url,
                    model=model,
                    revised_prompt=getattr(first, "revised_prompt", None) if first else None,
                )

            except RateLimitError as e:
                last_error = e
                delay = self._calculate_backoff(attempt)

                logger.warning(
                    "OpenAI rate limit hit, retrying",
                    extra={
                        "attempt": attempt + 1,
                        "max_retries": self._max_retries,
                        "delay_seconds": round(delay, 2),
                    },
                )

                if attempt < self._max_retries - 1:
                    await asyncio.sleep(delay)
                else:
                    raise ShortsRateLimitError(
                        message="OpenAI rate limit exceeded after retries",
                        retry_after=int(delay),
                    ) from e

            except APIConnectionError as e:
                last_error = e
                delay = self._calculate_backoff(attempt)

                logger.warning(
                    "OpenAI connection error, retrying",
                    extra={
                        "attempt": attempt + 1,
                        "max_retries": self._max_retries,
                        "delay_seconds": round(delay, 2),
                        "error": str(e),
                    },
                )

                if attempt < self._max_retries - 1:
                    await asyncio.sleep(delay)

            except APIStatusError as e:
                # Don't retry on 4xx errors (rate limit is handled above)
                if 400 <= e.status_code < 500:
                    logger.error(
                        "OpenAI API client error",
                        extra={"status_code": e.status_code, "error": str(e)},
                    )
                    raise ExternalServiceError(
                        service="OpenAI",
                        message=f"OpenAI API error: {e.message}",
                        original_error=str(e),
                        status_code=e.status_code,
                    ) from e

                last_error = e
                delay = self._calculate_backoff(attempt)

                logger.warning(
                    "OpenAI API error, retrying",
                    extra={
                        "attempt": attempt + 1,
                        "max_retries": self._max_retries,
                        "status_code": e.status_code,
                        "delay_seconds": round(delay, 2),
                    },
                )

                if attempt < self._max_retries - 1:
                    await asyncio.sleep(delay)

        error_msg = str(last_error) if last_error else "Unknown error"
        logger.error(
            "OpenAI image generation failed after all retries",
            extra={"max_retries": self._max_retries, "error": error_msg},
        )
        raise ExternalServiceError(
            service="OpenAI",
            message="OpenAI API call failed after retries",
            original_error=error_msg,
        )


def get_openai_image_client(settings: Settings | None = None) -> OpenAIImageClient | None:
    """
    Create an image client when an OpenAI key is configured.

    Args:
        settings: Optional settings override

    Returns:
        Configured client, or None when images fall back to placeholders
    """
    settings = settings or get_settings()
    if not settings.openai_api_key:
        return None
    return OpenAIImageClient(settings=settings)
