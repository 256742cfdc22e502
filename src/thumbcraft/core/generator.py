"""Thumbnail generation request builder.

:class:`ThumbnailGenerator` turns one validated request into the ordered
multi-part payload the image model expects, submits it through an injected
:class:`~thumbcraft.core.provider.ImageProvider`, and interprets the reply.

Request anatomy
---------------
1. The blank reference PNG for the requested aspect ratio.  It always comes
   first and fixes the output canvas.
2. The user's image, when one was uploaded.  It informs content and style;
   the text tells the model to ignore its dimensions.
3. One text block from :func:`~thumbcraft.core.prompt_builder.build_generation_prompt`.

Every call produces exactly one :class:`GenerationResult` or raises exactly
one :class:`~thumbcraft.core.errors.ThumbcraftError`.  Nothing is retried and
no state is carried between calls, so one generator instance serves all
concurrent requests.

Known gap
---------
The reported width and height are the profile's, not the returned image's.
The generator reads the returned image size and logs a warning when the model
ignored the canvas, but it does not correct the result.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from thumbcraft.core.aspect_ratios import AspectRatioProfile, get_profile, load_reference_image
from thumbcraft.core.errors import ConfigurationError, ProviderBlocked, ProviderEmptyResponse
from thumbcraft.core.images import decode_image_payload, read_image_size, to_data_uri
from thumbcraft.core.prompt_builder import ArtDirection, build_generation_prompt
from thumbcraft.core.provider import ImagePart, ImageProvider, ProviderReply, RequestPart, TextPart

logger = logging.getLogger(__name__)

# Finish reasons that mean the model withheld output on policy grounds.
BLOCKING_FINISH_REASONS = frozenset(
    {
        "SAFETY",
        "PROHIBITED_CONTENT",
        "BLOCKLIST",
        "SPII",
        "RECITATION",
        "IMAGE_SAFETY",
        "IMAGE_PROHIBITED_CONTENT",
        "IMAGE_RECITATION",
    }
)


@dataclass(frozen=True)
class GenerationResult:
    """A successfully generated thumbnail.

    Attributes:
        image_url: ``data:<mime>;base64,...`` URI of the returned image.
        prompt: The user's prompt, echoed.
        width: Target width from the aspect ratio profile.
        height: Target height from the aspect ratio profile.
        aspect_ratio: The requested ratio label.
        platform: Platform label of the profile.
        seed: The seed, echoed when one was supplied.
        generated_at: UTC timestamp of the provider response.
        request_id: Identifier of this generation call.
        latency_ms: Wall-clock milliseconds from submission to response.
    """

    image_url: str
    prompt: str
    width: int
    height: int
    aspect_ratio: str
    platform: str
    seed: int | None
    generated_at: datetime
    request_id: str
    latency_ms: int


def interpret_reply(reply: ProviderReply) -> str:
    """Validate a provider reply and return the image as a data URI.

    Raises:
        ProviderBlocked: The prompt was blocked, or generation stopped for a
            safety-class reason.  The reason appears verbatim in the message.
        ProviderEmptyResponse: No image was returned for any other reason.
    """
    if reply.block_reason:
        message = f"Request was blocked. Reason: {reply.block_reason}."
        if reply.block_reason_message:
            message = f"{message} {reply.block_reason_message}"
        raise ProviderBlocked(message, reason=reply.block_reason)

    if reply.image_data:
        return to_data_uri(reply.image_data, reply.mime_type or "image/png")

    finish_reason = reply.finish_reason
    if finish_reason in BLOCKING_FINISH_REASONS:
        raise ProviderBlocked(
            f"Image generation was blocked. Reason: {finish_reason}.",
            reason=finish_reason,
        )

    message = "The AI model did not return an image."
    if finish_reason and finish_reason != "STOP":
        message = f"{message} Generation stopped unexpectedly. Reason: {finish_reason}."
    if reply.text:
        message = f'{message} The model responded with text: "{reply.text}"'
    else:
        message = f"{message} No image was produced; please try rephrasing your prompt."
    raise ProviderEmptyResponse(message)


class ThumbnailGenerator:
    """Builds, submits, and interprets thumbnail generation requests.

    Args:
        provider: The image provider, or ``None`` when no API key is
            configured.  In that case every call raises
            :class:`ConfigurationError` before doing any other work.
        reference_dir: Directory holding the blank reference PNGs.
        max_user_image_bytes: Upper bound on a decoded user image.
    """

    def __init__(
        self,
        provider: ImageProvider | None,
        reference_dir: Path,
        *,
        max_user_image_bytes: int | None = None,
    ) -> None:
        self._provider = provider
        self._reference_dir = reference_dir
        self._max_user_image_bytes = max_user_image_bytes

    @property
    def provider(self) -> ImageProvider | None:
        return self._provider

    def build_parts(
        self,
        *,
        prompt: str,
        profile: AspectRatioProfile,
        user_image: str | None = None,
        art_direction: ArtDirection | None = None,
    ) -> list[RequestPart]:
        """Assemble the ordered request parts for *profile*.

        Raises:
            ConfigurationError: The reference image for *profile* is missing.
            ValidationError: *user_image* is not a decodable image.
        """
        reference = load_reference_image(profile, self._reference_dir)
        parts: list[RequestPart] = [ImagePart(data=reference, mime_type="image/png")]

        if user_image:
            data, mime_type = decode_image_payload(
                user_image, max_bytes=self._max_user_image_bytes
            )
            parts.append(ImagePart(data=data, mime_type=mime_type))

        parts.append(
            TextPart(
                text=build_generation_prompt(
                    prompt,
                    profile.width,
                    profile.height,
                    has_user_image=bool(user_image),
                    art_direction=art_direction,
                )
            )
        )
        return parts

    async def generate(
        self,
        *,
        prompt: str,
        aspect_ratio: str,
        seed: int | None = None,
        user_image: str | None = None,
        art_direction: ArtDirection | None = None,
        request_id: str | None = None,
    ) -> GenerationResult:
        """Generate one thumbnail.

        Args:
            prompt: The user's description, passed to the model verbatim.
            aspect_ratio: One of the supported ratio labels.
            seed: Optional deterministic seed.
            user_image: Optional base64 image or data URI.
            art_direction: Optional stylistic hints.
            request_id: Identifier to report in metadata; generated if omitted.

        Returns:
            The :class:`GenerationResult`.

        Raises:
            ThumbcraftError: Any classified failure.  Configuration and
                validation errors are raised before the provider is called.
        """
        request_id = request_id or str(uuid.uuid4())

        if self._provider is None:
            raise ConfigurationError("Image provider API key not configured")

        profile = get_profile(aspect_ratio)
        parts = self.build_parts(
            prompt=prompt,
            profile=profile,
            user_image=user_image,
            art_direction=art_direction,
        )

        logger.info(
            f"[{request_id}] Sending {len(parts)} part(s) to {self._provider.name} "
            f"for a {profile.width}x{profile.height} image ({profile.ratio})"
        )
        started = time.perf_counter()
        reply = await self._provider.generate(parts, seed=seed, aspect_ratio=profile.ratio)
        latency_ms = int(round((time.perf_counter() - started) * 1000))

        image_url = interpret_reply(reply)
        self._warn_on_dimension_mismatch(request_id, reply, profile)

        logger.info(f"[{request_id}] Generation complete in {latency_ms}ms")
        return GenerationResult(
            image_url=image_url,
            prompt=prompt,
            width=profile.width,
            height=profile.height,
            aspect_ratio=profile.ratio,
            platform=profile.platform,
            seed=seed,
            generated_at=datetime.now(timezone.utc),
            request_id=request_id,
            latency_ms=latency_ms,
        )

    @staticmethod
    def _warn_on_dimension_mismatch(
        request_id: str, reply: ProviderReply, profile: AspectRatioProfile
    ) -> None:
        size = read_image_size(reply.image_data or b"")
        if size is not None and size != (profile.width, profile.height):
            logger.warning(
                f"[{request_id}] Model returned {size[0]}x{size[1]} instead of "
                f"{profile.width}x{profile.height} for {profile.ratio}"
            )
