"""Image payload helpers.

User images arrive as base64 strings, usually data URIs produced by the
browser's ``FileReader.readAsDataURL``.  :func:`decode_image_payload` turns
them into raw bytes plus a MIME type and checks with Pillow that the bytes
really are an image, so a garbage upload is rejected before the provider is
contacted.

Only the types in :data:`PROVIDER_MIME_TYPES` are forwarded.  Pillow has no
HEIF decoder, so HEIC/HEIF uploads are recognised from their ``ftyp``
container header instead of being opened.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from thumbcraft.core.errors import ValidationError

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(;[^;,]*)*),(?P<data>.*)$", re.DOTALL)

# MIME types the image model accepts as inline image parts.
PROVIDER_MIME_TYPES = frozenset(
    {"image/png", "image/jpeg", "image/webp", "image/heic", "image/heif"}
)

# Pillow formats whose bytes are sent under a different MIME type.
# MPO is the multi-picture JPEG written by many phone cameras.
_FORMAT_MIME_OVERRIDES = {"MPO": "image/jpeg"}

_HEIF_BRANDS = {
    b"heic": "image/heic",
    b"heix": "image/heic",
    b"heim": "image/heic",
    b"heis": "image/heic",
    b"hevc": "image/heic",
    b"hevx": "image/heic",
    b"mif1": "image/heif",
    b"msf1": "image/heif",
}


def to_data_uri(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def sniff_heif(data: bytes) -> str | None:
    """Return ``image/heic`` or ``image/heif`` if *data* starts with a HEIF ``ftyp`` box."""
    if len(data) < 12 or data[4:8] != b"ftyp":
        return None
    return _HEIF_BRANDS.get(data[8:12])


def decode_image_payload(
    payload: str,
    *,
    default_mime_type: str = "image/jpeg",
    max_bytes: int | None = None,
) -> tuple[bytes, str]:
    """Decode a base64 image or data URI and verify it is a readable image.

    Args:
        payload: Either a ``data:<mime>;base64,<data>`` URI or bare base64.
        default_mime_type: MIME type assumed for bare base64 when Pillow
            cannot name the format.
        max_bytes: Reject decoded payloads larger than this.

    Returns:
        Tuple of ``(image_bytes, mime_type)``.  The MIME type is always one of
        :data:`PROVIDER_MIME_TYPES`.

    Raises:
        ValidationError: If the payload is not base64, exceeds *max_bytes*,
            does not decode to an image, or is in a format the provider does
            not accept.
    """
    mime_type = default_mime_type
    encoded = payload.strip()

    match = _DATA_URI_RE.match(encoded)
    if match:
        if ";base64" not in match.group("params"):
            raise ValidationError("userImage data URI must be base64 encoded")
        mime_type = (match.group("mime") or default_mime_type).lower()
        encoded = match.group("data")

    try:
        data = base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("userImage is not valid base64") from e

    if not data:
        raise ValidationError("userImage is empty")
    if max_bytes is not None and len(data) > max_bytes:
        raise ValidationError(f"userImage exceeds the {max_bytes} byte limit")

    heif_type = sniff_heif(data)
    if heif_type is not None:
        if mime_type in ("image/heic", "image/heif"):
            return data, mime_type
        return data, heif_type

    try:
        with Image.open(BytesIO(data)) as image:
            image_format = image.format or ""
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValidationError("userImage is not a readable image") from e

    detected = _FORMAT_MIME_OVERRIDES.get(image_format) or Image.MIME.get(image_format)
    if detected not in PROVIDER_MIME_TYPES:
        raise ValidationError(
            f"userImage format {image_format or 'unknown'} is not supported; "
            "use PNG, JPEG, WebP, HEIC or HEIF"
        )
    if detected != mime_type:
        logger.debug(f"Declared user image type {mime_type} overridden by detected {detected}")
        mime_type = detected

    return data, mime_type


def read_image_size(data: bytes) -> tuple[int, int] | None:
    """Return ``(width, height)`` of encoded image bytes, or ``None`` if unreadable."""
    try:
        with Image.open(BytesIO(data)) as image:
            return image.size
    except (UnidentifiedImageError, OSError) as e:
        logger.debug(f"Could not read image size: {e}")
        return None
