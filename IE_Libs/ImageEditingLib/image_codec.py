"""
Encoded image helpers.

Images travel between the core and its callers as self-contained encoded
blobs: raw file bytes or a base64 `data:` URL. Inside a call they are RGBA
PIL images, and numpy arrays for the pixel routines.
"""

import base64
import binascii
import io
from typing import Any, Union

import numpy as np

from IE_Libs.constants import DATA_URL_PREFIX, DEFAULT_OUTPUT_FORMAT
from IE_Libs.ImageEditingLib.errors import DecodeError
from IE_Libs.pillow_compat import Image

EncodedImage = Union[bytes, bytearray, str]


def _payload_bytes(data: EncodedImage) -> bytes:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str):
        if not data.startswith("data:"):
            raise DecodeError("Expected image bytes or a data URL")
        header, sep, payload = data.partition(",")
        if not sep:
            raise DecodeError("Malformed data URL: missing payload")
        if not header.endswith(";base64"):
            raise DecodeError("Only base64 data URLs are supported")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"Invalid base64 payload: {e}") from e
    raise DecodeError(f"Unsupported image data type: {type(data).__name__}")


def decode_image(data: EncodedImage) -> Any:
    """
    Decode an encoded image into an RGBA PIL Image.

    Args:
        data: Encoded image bytes or a base64 data URL

    Returns:
        Fully loaded PIL Image in RGBA mode

    Raises:
        DecodeError: If the data is empty, malformed or not a readable image
    """
    raw = _payload_bytes(data)
    if not raw:
        raise DecodeError("Image data is empty")

    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            return img.convert("RGBA")
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Failed to load image from data: {e}") from e


def encode_png(image: Any) -> bytes:
    """Encode a PIL Image as PNG bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format=DEFAULT_OUTPUT_FORMAT)
    return buffer.getvalue()


def to_data_url(data: bytes) -> str:
    """Wrap PNG bytes in a base64 data URL."""
    return DATA_URL_PREFIX + base64.b64encode(data).decode("ascii")


def image_to_array(image: Any) -> np.ndarray:
    """Return an (H, W, 4) uint8 copy of the image pixels."""
    return np.array(image.convert("RGBA"), dtype=np.uint8)


def array_to_image(pixels: np.ndarray) -> Any:
    """Build an RGBA PIL Image from an (H, W, 4) uint8 array."""
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Expected an (H, W, 4) array, got shape {pixels.shape}")
    return Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
