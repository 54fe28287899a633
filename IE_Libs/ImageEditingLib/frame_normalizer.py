"""
Frame Normalizer.

Turns an arbitrary source image into a fixed-size grayscale frame:

- Center crop to the target aspect ratio
- Bilinear resample to exactly target_width x target_height
- Luminance desaturation (0.299 R + 0.587 G + 0.114 B, not gamma-corrected)
- Optional light Gaussian smoothing

Example:
    >>> with open("photo.jpg", "rb") as fh:
    ...     source = fh.read()
    >>> png_bytes = normalize(source, 600, 800, smoothing_enabled=True)
"""

import logging
from typing import Any, Tuple

import numpy as np

from IE_Libs.constants import (
    LUMA_BLUE_WEIGHT,
    LUMA_GREEN_WEIGHT,
    LUMA_RED_WEIGHT,
    SMOOTHING_RADIUS,
)
from IE_Libs.ImageEditingLib.image_codec import (
    EncodedImage,
    array_to_image,
    decode_image,
    encode_png,
    image_to_array,
)
from IE_Libs.pillow_compat import BILINEAR, ImageFilter

logger = logging.getLogger(__name__)

CropBox = Tuple[float, float, float, float]

_LUMA_WEIGHTS = np.array([LUMA_RED_WEIGHT, LUMA_GREEN_WEIGHT, LUMA_BLUE_WEIGHT])


def compute_crop_box(
    source_width: int,
    source_height: int,
    target_width: int,
    target_height: int,
) -> CropBox:
    """
    Compute the centered crop whose aspect ratio equals the target's.

    Wider sources lose equal margins left and right, taller sources lose
    equal margins top and bottom, matching sources are used whole.

    Args:
        source_width: Native width of the source image
        source_height: Native height of the source image
        target_width: Width of the output canvas
        target_height: Height of the output canvas

    Returns:
        (left, top, right, bottom) in source pixel coordinates (floats)

    Raises:
        ValueError: If any dimension is not positive
    """
    for name, value in (
        ("source_width", source_width),
        ("source_height", source_height),
        ("target_width", target_width),
        ("target_height", target_height),
    ):
        if value <= 0:
            raise ValueError(f"{name} must be > 0, got {value}")

    source_aspect = source_width / source_height
    target_aspect = target_width / target_height

    left, top = 0.0, 0.0
    crop_width, crop_height = float(source_width), float(source_height)

    if source_aspect > target_aspect:
        crop_width = source_height * target_aspect
        left = (source_width - crop_width) / 2
    elif source_aspect < target_aspect:
        crop_height = source_width / target_aspect
        top = (source_height - crop_height) / 2

    return (left, top, left + crop_width, top + crop_height)


def desaturate(pixels: np.ndarray) -> np.ndarray:
    """
    Replace RGB with weighted luminance, leaving alpha untouched.

    Args:
        pixels: (H, W, 4) uint8 RGBA array

    Returns:
        New (H, W, 4) uint8 array with R = G = B = round(L)
    """
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Expected an (H, W, 4) array, got shape {pixels.shape}")

    luminance = pixels[..., :3].astype(np.float64) @ _LUMA_WEIGHTS
    # Ties round to even, like a clamped 8-bit store
    gray = np.clip(np.rint(luminance), 0, 255).astype(np.uint8)

    result = pixels.copy()
    result[..., 0] = gray
    result[..., 1] = gray
    result[..., 2] = gray
    return result


def apply_smoothing(image: Any, radius: float = SMOOTHING_RADIUS) -> Any:
    """
    Apply a light Gaussian blur.

    Args:
        image: PIL Image
        radius: Blur radius in pixels (0 < radius <= 5)

    Returns:
        Blurred PIL Image (same mode as input)

    Raises:
        ValueError: If radius <= 0 or > 5
        TypeError: If image not PIL Image
    """
    if not hasattr(image, "filter"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    if not (0 < radius <= 5):
        raise ValueError(f"radius must be 0 < r <= 5, got {radius}")

    return image.filter(ImageFilter.GaussianBlur(radius=radius))


def crop_and_resample(image: Any, target_width: int, target_height: int) -> Any:
    """Center-crop to the target aspect ratio and resample to the exact target size."""
    box = compute_crop_box(image.width, image.height, target_width, target_height)
    return image.resize((target_width, target_height), BILINEAR, box=box)


def normalize(
    source_image: EncodedImage,
    target_width: int,
    target_height: int,
    smoothing_enabled: bool = False,
) -> bytes:
    """
    Normalize a source image into a fixed-size grayscale PNG.

    Args:
        source_image: Encoded source image (bytes or data URL)
        target_width: Output width in pixels
        target_height: Output height in pixels
        smoothing_enabled: Apply one light blur pass after desaturation

    Returns:
        PNG bytes of exactly target_width x target_height pixels

    Raises:
        DecodeError: If the source image cannot be decoded
        ValueError: If the target dimensions are not positive
    """
    if target_width <= 0 or target_height <= 0:
        raise ValueError(
            f"target dimensions must be > 0, got {target_width}x{target_height}"
        )

    image = decode_image(source_image)
    logger.debug(
        f"Normalizing {image.width}x{image.height} source to "
        f"{target_width}x{target_height} (smoothing={smoothing_enabled})"
    )

    frame = crop_and_resample(image, target_width, target_height)
    frame = array_to_image(desaturate(image_to_array(frame)))

    if smoothing_enabled:
        frame = apply_smoothing(frame)

    return encode_png(frame)
