"""Pydantic request and response models for the Thumbcraft API.

The JSON contract uses camelCase keys (``aspectRatio``, ``userImage``);
the Python attributes are snake_case.  Every model accepts either form on
input and the route handlers serialise with ``by_alias=True``.

Models
------
ImageGenerationRequest
    Payload for ``POST /api/image``.
ImageGenerationResponse / GenerationMetadata / GatewayMetadata
    Success body for ``POST /api/image``.
TemplateOptions / TemplateCreateRequest / Template
    Saved generation templates (``/api/templates``).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

AspectRatio = Literal["1:1", "16:9", "9:16", "4:3", "3:4"]
OutputFormat = Literal["jpeg", "png"]
TemplateQuality = Literal["standard", "high", "ultra"]

SEED_MAX = 2**31 - 1
PROMPT_MAX_LENGTH = 1000


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImageGenerationRequest(_CamelModel):
    """Request body for ``POST /api/image``.

    Attributes:
        prompt: Description of the thumbnail (1-1000 characters, not blank).
        aspect_ratio: One of ``1:1``, ``16:9``, ``9:16``, ``4:3``, ``3:4``.
        seed: Optional seed in ``[0, 2**31 - 1]``.
        output_format: ``"jpeg"`` or ``"png"``.  Accepted and echoed; the
            provider's own format is returned.
        output_quality: 10-100.  Accepted; not applied.
        cache_enabled: Accepted for client compatibility and ignored.
        user_image: Optional base64 image or data URI.
        template_id: Optional saved template whose options become
            art-direction hints.
        style: Optional style hint (overrides the template's).
        color_scheme: Optional colour scheme hint.
        lighting: Optional lighting hint.
        composition: Optional composition hint.
        effects: Optional effect hints.
    """

    prompt: str = Field(
        ...,
        min_length=1,
        max_length=PROMPT_MAX_LENGTH,
        description="Thumbnail description.",
    )
    aspect_ratio: AspectRatio = Field(
        ...,
        description="Target aspect ratio.",
    )
    seed: int | None = Field(
        default=None,
        ge=0,
        le=SEED_MAX,
        description="Optional generation seed.",
    )
    output_format: OutputFormat = Field(default="jpeg")
    output_quality: int = Field(default=80, ge=10, le=100)
    cache_enabled: bool = Field(default=True)
    user_image: str | None = Field(
        default=None,
        description="Base64 encoded image or data URI used for content and style.",
    )
    template_id: str | None = Field(default=None, description="Saved template to apply.")
    style: str | None = Field(default=None, max_length=100)
    color_scheme: str | None = Field(default=None, max_length=100)
    lighting: str | None = Field(default=None, max_length=100)
    composition: str | None = Field(default=None, max_length=100)
    effects: list[str] = Field(default_factory=list, max_length=10)

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Prompt is required")
        return value


class GatewayMetadata(_CamelModel):
    request_id: str
    latency: int = Field(..., description="Milliseconds from request receipt to response.")


class GenerationMetadata(_CamelModel):
    """Metadata attached to every ``POST /api/image`` response.

    On failure only the fields that were resolvable are populated.
    """

    prompt: str = ""
    width: int | None = None
    height: int | None = None
    aspect_ratio: str | None = None
    platform: str | None = None
    seed: int | None = None
    generated_at: str
    gateway_metadata: GatewayMetadata | None = None


class ImageGenerationResponse(_CamelModel):
    success: bool = True
    image_url: str
    metadata: GenerationMetadata


class TemplateOptions(_CamelModel):
    """Art-direction options stored in a template.

    ``aspect_ratio`` and ``quality`` are kept for the client to preselect its
    form controls.  Only the art-direction fields shape the generation text.
    """

    style: str = Field(default="realistic", max_length=100)
    aspect_ratio: AspectRatio = "16:9"
    quality: TemplateQuality = "high"
    color_scheme: str = Field(default="vibrant", max_length=100)
    lighting: str = Field(default="natural", max_length=100)
    composition: str = Field(default="center", max_length=100)
    effects: list[str] = Field(default_factory=list, max_length=10)
    custom_prompt: str = Field(default="", max_length=PROMPT_MAX_LENGTH)


class TemplateCreateRequest(_CamelModel):
    """Request body for ``POST /api/templates``."""

    name: str = Field(..., min_length=1, max_length=100)
    options: TemplateOptions = Field(default_factory=TemplateOptions)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Template name is required")
        return stripped


class Template(_CamelModel):
    id: str
    name: str
    options: TemplateOptions
    created_at: str
