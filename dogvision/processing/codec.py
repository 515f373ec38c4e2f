"""
Image codec for the encoded-image boundary.

Decodes arbitrary compressed image bytes into RGBA PixelBuffers and
encodes PixelBuffers back to bytes (PNG by default) using Pillow.
"""

from __future__ import annotations

import base64
import io
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from dogvision.core.contracts import PixelBuffer
from dogvision.core.errors import DecodeError, EncodeError


# Formats without an alpha channel get flattened to RGB
_OPAQUE_FORMATS = {"JPEG", "JPG", "BMP"}

_MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "JPG": "image/jpeg",
    "WEBP": "image/webp",
    "BMP": "image/bmp",
}


def decode_image(data: bytes) -> PixelBuffer:
    """
    Decode compressed image bytes.

    Args:
        data: Encoded image (PNG, JPEG, WebP, GIF, BMP, ...)

    Returns:
        RGBA PixelBuffer of the first frame

    Raises:
        DecodeError: If the bytes are empty, malformed or not an image
    """
    if not data:
        raise DecodeError("Empty image data")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            rgba = img.convert("RGBA")
    except UnidentifiedImageError as e:
        raise DecodeError(f"Unsupported or unrecognized image format: {e}") from e
    except (OSError, ValueError, SyntaxError) as e:
        # Truncated files and corrupt headers surface as these
        raise DecodeError(f"Malformed image data: {e}") from e
    except Image.DecompressionBombError as e:
        raise DecodeError(f"Image too large: {e}") from e

    if rgba.width <= 0 or rgba.height <= 0:
        raise DecodeError("Image has no pixels")

    return PixelBuffer.from_array(np.asarray(rgba, dtype=np.uint8))


def format_for_path(path) -> str:
    """
    Pillow output format for a file name, from its extension.

    Raises:
        EncodeError: If Pillow has no writer for the extension
    """
    suffix = Path(path).suffix.lower()
    image_format = Image.registered_extensions().get(suffix)
    if image_format is None or image_format not in Image.SAVE:
        raise EncodeError(f"No image writer for '{suffix or path}'")
    return image_format


def encode_image(buffer: PixelBuffer, image_format: str = "PNG", **save_kwargs) -> bytes:
    """
    Encode a PixelBuffer.

    Args:
        buffer: RGBA pixels
        image_format: Pillow format name ("PNG", "JPEG", "WEBP", ...)
        **save_kwargs: Passed to Image.save (e.g. quality=90)

    Returns:
        Encoded image bytes

    Raises:
        EncodeError: If the format is unknown or cannot hold the pixels
    """
    image_format = image_format.upper()
    img = Image.fromarray(buffer.as_array())
    if image_format in _OPAQUE_FORMATS:
        img = img.convert("RGB")
        if image_format == "JPG":
            image_format = "JPEG"

    out = io.BytesIO()
    try:
        img.save(out, format=image_format, **save_kwargs)
    except KeyError as e:
        raise EncodeError(f"Unknown image format '{image_format}'") from e
    except (OSError, ValueError) as e:
        raise EncodeError(f"Cannot encode as {image_format}: {e}") from e
    return out.getvalue()


def to_data_url(buffer: PixelBuffer, image_format: str = "PNG") -> str:
    """Encode a buffer as a base64 data URL for display layers."""
    mime = _MIME_TYPES.get(image_format.upper(), f"image/{image_format.lower()}")
    payload = base64.b64encode(encode_image(buffer, image_format)).decode("ascii")
    return f"data:{mime};base64,{payload}"
