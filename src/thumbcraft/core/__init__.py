"""Core generation logic for Thumbcraft.

Modules
-------
config
    Pydantic Settings configuration and the global ``config`` instance.
aspect_ratios
    Static aspect ratio profiles and reference image handling.
images
    User image decoding and Pillow checks.
prompt_builder
    Text instruction compilation.
provider
    Provider interface and the Gemini implementation.
generator
    The request builder that ties the pieces together.
errors
    Error taxonomy and the failure envelope.
"""

from thumbcraft.core.aspect_ratios import PROFILES, AspectRatioProfile, get_profile
from thumbcraft.core.errors import GenerationFailure, ThumbcraftError
from thumbcraft.core.generator import GenerationResult, ThumbnailGenerator
from thumbcraft.core.provider import GeminiImageProvider, ImageProvider, ProviderReply

__all__ = [
    "PROFILES",
    "AspectRatioProfile",
    "get_profile",
    "GenerationFailure",
    "ThumbcraftError",
    "GenerationResult",
    "ThumbnailGenerator",
    "GeminiImageProvider",
    "ImageProvider",
    "ProviderReply",
]
