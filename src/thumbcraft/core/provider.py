"""Generative-image provider abstraction.

:class:`ImageProvider` is the seam between the request builder and the hosted
model.  The builder hands it an ordered list of :class:`ImagePart` and
:class:`TextPart` objects and receives a :class:`ProviderReply`, an
SDK-independent summary of the response.  Transport and API failures are
raised as typed :mod:`thumbcraft.core.errors` exceptions, never as raw SDK
errors.

:class:`GeminiImageProvider` is the production implementation on top of the
``google-genai`` SDK.  It is constructed explicitly (by the application
lifespan or by a test) and injected into the
:class:`~thumbcraft.core.generator.ThumbnailGenerator`; there is no module
level client.

Error mapping
-------------
``google.genai.errors.APIError`` carries the HTTP status of the failed call in
``code``.  It is mapped as follows:

=========  =============================
Code       Raised
=========  =============================
400        ProviderRejected
401, 403   ConfigurationError
404        ProviderUnavailable
429        ProviderQuotaExceeded
504        ProviderTimeout
other 5xx  ProviderUnavailable
other      UnknownError
=========  =============================
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from thumbcraft.core.config import ThumbcraftConfig
from thumbcraft.core.errors import (
    ConfigurationError,
    ProviderQuotaExceeded,
    ProviderRejected,
    ProviderTimeout,
    ProviderUnavailable,
    ThumbcraftError,
    UnknownError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImagePart:
    data: bytes
    mime_type: str


@dataclass(frozen=True)
class TextPart:
    text: str


RequestPart = ImagePart | TextPart


@dataclass(frozen=True)
class ProviderReply:
    """Normalised provider response.

    Attributes:
        image_data: Raw bytes of the first inline image, if any.
        mime_type: MIME type declared for ``image_data``.
        text: Concatenated text parts, if the model answered in words.
        block_reason: Prompt-level block reason (e.g. ``"SAFETY"``).
        block_reason_message: Provider explanation accompanying the block.
        finish_reason: Finish reason of the first candidate (e.g. ``"STOP"``).
    """

    image_data: bytes | None = None
    mime_type: str | None = None
    text: str | None = None
    block_reason: str | None = None
    block_reason_message: str | None = None
    finish_reason: str | None = None


class ImageProvider(ABC):
    """Interface every generation backend implements."""

    name: str = "provider"
    model: str = "unknown"

    @abstractmethod
    async def generate(
        self,
        parts: list[RequestPart],
        *,
        seed: int | None = None,
        aspect_ratio: str | None = None,
    ) -> ProviderReply:
        """Submit one generation request.

        Args:
            parts: Ordered image and text parts.
            seed: Optional deterministic seed.
            aspect_ratio: Target ratio label, passed through where the
                provider supports it natively.

        Returns:
            The normalised reply.

        Raises:
            ThumbcraftError: A classified transport or API failure.
        """

    async def aclose(self) -> None:
        """Release network resources.  No-op by default."""


def _enum_value(value) -> str | None:
    if value is None:
        return None
    text = str(getattr(value, "value", value))
    if not text or text.endswith("_UNSPECIFIED"):
        return None
    return text


def reply_from_response(response: types.GenerateContentResponse) -> ProviderReply:
    """Summarise a ``GenerateContentResponse`` as a :class:`ProviderReply`."""
    block_reason = None
    block_reason_message = None
    feedback = response.prompt_feedback
    if feedback is not None:
        block_reason = _enum_value(feedback.block_reason)
        block_reason_message = feedback.block_reason_message

    candidate = response.candidates[0] if response.candidates else None
    finish_reason = _enum_value(candidate.finish_reason) if candidate else None
    parts = []
    if candidate is not None and candidate.content is not None:
        parts = candidate.content.parts or []

    image_data = None
    mime_type = None
    texts: list[str] = []
    for part in parts:
        if image_data is None and part.inline_data is not None and part.inline_data.data:
            image_data = part.inline_data.data
            mime_type = part.inline_data.mime_type or "image/png"
        elif part.text and not part.thought:
            texts.append(part.text)

    return ProviderReply(
        image_data=image_data,
        mime_type=mime_type,
        text="".join(texts).strip() or None,
        block_reason=block_reason,
        block_reason_message=block_reason_message,
        finish_reason=finish_reason,
    )


def map_api_error(error: genai_errors.APIError) -> ThumbcraftError:
    """Translate an SDK ``APIError`` into the error taxonomy."""
    code = error.code or 0
    detail = error.message or str(error)
    status = f" ({error.status})" if error.status else ""
    message = f"Provider error {code}{status}: {detail}"

    if code == 429:
        return ProviderQuotaExceeded(message)
    if code == 400:
        return ProviderRejected(message)
    if code in (401, 403):
        return ConfigurationError(message)
    if code == 404:
        return ProviderUnavailable(message)
    if code == 504:
        return ProviderTimeout(message)
    if 500 <= code < 600:
        return ProviderUnavailable(message)
    return UnknownError(message)


class GeminiImageProvider(ImageProvider):
    """Gemini image model reached through ``google-genai``'s async client.

    Args:
        config: Application configuration (API key, model, timeout).
        client: Pre-built ``genai.Client``.  Built from ``config`` when omitted.

    Raises:
        ConfigurationError: If no client is given and no API key is configured.
    """

    name = "gemini"

    def __init__(self, config: ThumbcraftConfig, client: genai.Client | None = None) -> None:
        if client is None:
            if not config.gemini_api_key:
                raise ConfigurationError("Gemini API key not configured")
            client = genai.Client(api_key=config.gemini_api_key)
        self._client = client
        self.model = config.image_model
        self._timeout = config.request_timeout_seconds
        logger.info(f"Initialized {self.name} provider (model={self.model}, timeout={self._timeout}s)")

    @staticmethod
    def _to_sdk_part(part: RequestPart) -> types.Part:
        if isinstance(part, ImagePart):
            return types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
        return types.Part(text=part.text)

    def _build_config(self, seed: int | None, aspect_ratio: str | None) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_modalities=["IMAGE", "TEXT"],
            seed=seed,
            image_config=types.ImageConfig(aspect_ratio=aspect_ratio) if aspect_ratio else None,
        )

    async def generate(
        self,
        parts: list[RequestPart],
        *,
        seed: int | None = None,
        aspect_ratio: str | None = None,
    ) -> ProviderReply:
        contents = [self._to_sdk_part(part) for part in parts]
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=self._build_config(seed, aspect_ratio),
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"Gemini call timed out after {self._timeout}s")
            raise ProviderTimeout(
                f"The image model did not respond within {self._timeout:g} seconds"
            ) from e
        except genai_errors.APIError as e:
            logger.warning(f"Gemini API error {e.code}: {e.message}")
            raise map_api_error(e) from e

        return reply_from_response(response)

    async def aclose(self) -> None:
        await self._client.aio.aclose()
