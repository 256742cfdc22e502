"""Aspect ratio profiles and their blank reference images.

Every supported aspect ratio maps to an exact output size and to a blank PNG
of that size.  The blank PNG is sent to the provider as the first image of
every generation request; it is the only reliable way to pin the output
canvas, since the model otherwise picks its own dimensions.

Reference images live in :attr:`ThumbcraftConfig.reference_dir` and are read
from disk on every request.  :func:`render_reference_images` creates any that
are missing; the application runs it on startup and it is also exposed as the
``thumbcraft-references`` console script.

=====  =========  ============  =======================
Ratio  Size       File          Platform
=====  =========  ============  =======================
16:9   1024x576   ``16-9.png``  YouTube
9:16   576x1024   ``9-16.png``  Shorts / Reels / TikTok
4:3    1024x768   ``4-3.png``   Presentation
3:4    768x1024   ``3-4.png``   Pinterest
1:1    1024x1024  ``1-1.png``   Instagram
=====  =========  ============  =======================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from thumbcraft.core.errors import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AspectRatioProfile:
    """Static description of one supported aspect ratio.

    Attributes:
        ratio: Ratio label as accepted by the API (e.g. ``"16:9"``).
        width: Exact output width in pixels.
        height: Exact output height in pixels.
        filename: Name of the blank reference PNG inside the reference directory.
        platform: Human-readable label for the platform the ratio targets.
    """

    ratio: str
    width: int
    height: int
    filename: str
    platform: str

    def to_dict(self) -> dict:
        return {
            "ratio": self.ratio,
            "width": self.width,
            "height": self.height,
            "platform": self.platform,
        }


PROFILES: dict[str, AspectRatioProfile] = {
    profile.ratio: profile
    for profile in (
        AspectRatioProfile("16:9", 1024, 576, "16-9.png", "YouTube"),
        AspectRatioProfile("9:16", 576, 1024, "9-16.png", "Shorts / Reels / TikTok"),
        AspectRatioProfile("4:3", 1024, 768, "4-3.png", "Presentation"),
        AspectRatioProfile("3:4", 768, 1024, "3-4.png", "Pinterest"),
        AspectRatioProfile("1:1", 1024, 1024, "1-1.png", "Instagram"),
    )
}

SUPPORTED_RATIOS: tuple[str, ...] = tuple(PROFILES)


def get_profile(ratio: str) -> AspectRatioProfile:
    """Return the profile for *ratio*.

    Raises:
        ValidationError: If *ratio* is not a supported aspect ratio.
    """
    try:
        return PROFILES[ratio]
    except KeyError:
        raise ValidationError(
            f"Unsupported aspect ratio {ratio!r}; expected one of {', '.join(SUPPORTED_RATIOS)}"
        ) from None


def load_reference_image(profile: AspectRatioProfile, reference_dir: Path) -> bytes:
    """Read the blank reference PNG for *profile*.

    Args:
        profile: The resolved aspect ratio profile.
        reference_dir: Directory holding the reference PNGs.

    Returns:
        Raw PNG bytes.

    Raises:
        ConfigurationError: If the file is missing or cannot be read.  No
            request is ever submitted without its dimension anchor.
    """
    path = reference_dir / profile.filename
    if not path.is_file():
        logger.error(f"Reference image not found at path: {path}")
        raise ConfigurationError(
            f"Reference image for aspect ratio {profile.ratio} is missing ({profile.filename})"
        )
    try:
        return path.read_bytes()
    except OSError as e:
        logger.error(f"Failed to read reference image {path}: {e}")
        raise ConfigurationError(
            f"Reference image for aspect ratio {profile.ratio} could not be read"
        ) from e


def render_reference_images(reference_dir: Path, *, overwrite: bool = False) -> list[Path]:
    """Render a blank white PNG for every profile.

    Args:
        reference_dir: Target directory (created if needed).
        overwrite: Re-render files that already exist.

    Returns:
        Paths of the files that were written.
    """
    reference_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    for profile in PROFILES.values():
        path = reference_dir / profile.filename
        if path.exists() and not overwrite:
            continue
        image = Image.new("RGB", (profile.width, profile.height), color=(255, 255, 255))
        image.save(path, format="PNG")
        written.append(path)
        logger.info(f"Rendered reference image {path} ({profile.width}x{profile.height})")

    return written


def main() -> None:
    """Render missing reference images into the configured directory.

    Registered as the ``thumbcraft-references`` console script.
    """
    from thumbcraft.core.config import config

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    written = render_reference_images(config.reference_dir)
    if not written:
        logger.info(f"All reference images already present in {config.reference_dir}")


if __name__ == "__main__":
    main()
