"""
Text Overlay Renderer.

Draws centered multi-line text over a normalized frame. The text color is
picked from the average brightness of the frame under the text block
(black on light backgrounds, white on dark ones) unless a manual override
is set. Black text gets a faint blurred shadow to keep its edges readable.

Layout (all values in canvas pixels):
    line_height   = font_size * 1.2
    total_height  = n * font_size + (n - 1) * font_size * 0.2
    anchor_x      = width / 2 + x_offset
    block_center  = height / 2 + y_offset
    first_line_y  = block_center - total_height / 2 + font_size / 2

Example:
    >>> settings = TextSettings(is_active=True, font_size=32)
    >>> png_bytes, color = render_overlay(frame_png, "Hello\\nWorld", settings, 600, 800)
"""

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from IE_Libs.constants import (
    BRIGHTNESS_THRESHOLD,
    DEFAULT_FONT_FAMILY,
    DEFAULT_SAMPLE_BRIGHTNESS,
    DEFAULT_TEXT_COLOR,
    LINE_SPACING_FACTOR,
    SHADOW_BLUR_RADIUS,
    SHADOW_OFFSET,
    SHADOW_RGBA,
    TEXT_COLOR_BLACK,
    TEXT_COLOR_WHITE,
)
from IE_Libs.ImageEditingLib.errors import RenderError
from IE_Libs.ImageEditingLib.image_codec import (
    EncodedImage,
    decode_image,
    encode_png,
    image_to_array,
)
from IE_Libs.ImageEditingLib.image_models import TextSettings
from IE_Libs.pillow_compat import BILINEAR, Image, ImageDraw, ImageFilter, ImageFont

logger = logging.getLogger(__name__)

# Bold font files tried for well-known family names (Windows, macOS, Linux)
_KNOWN_BOLD_FONTS = {
    "arial": ("arialbd.ttf", "Arial Bold.ttf", "Arial_Bold.ttf", "LiberationSans-Bold.ttf"),
    "helvetica": ("Helvetica-Bold.ttf", "arialbd.ttf", "LiberationSans-Bold.ttf"),
    "verdana": ("verdanab.ttf", "Verdana Bold.ttf", "DejaVuSans-Bold.ttf"),
    "times new roman": ("timesbd.ttf", "Times New Roman Bold.ttf", "LiberationSerif-Bold.ttf"),
    "georgia": ("georgiab.ttf", "Georgia Bold.ttf", "DejaVuSerif-Bold.ttf"),
    "courier new": ("courbd.ttf", "Courier New Bold.ttf", "LiberationMono-Bold.ttf"),
    "sans-serif": ("DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf", "FreeSansBold.ttf"),
    "serif": ("DejaVuSerif-Bold.ttf", "LiberationSerif-Bold.ttf", "FreeSerifBold.ttf"),
    "monospace": ("DejaVuSansMono-Bold.ttf", "LiberationMono-Bold.ttf", "FreeMonoBold.ttf"),
}


@dataclass(frozen=True)
class SampleRect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class TextLayout:
    """Computed placement of a text block.

    Attributes:
        anchor_x: Horizontal center shared by every line
        block_center_y: Vertical center of the whole block
        total_height: Height of the block (lines plus inter-line gaps)
        line_centers: Vertical center of each line, top to bottom
        sample_rect: Region sampled for automatic color selection
    """
    anchor_x: float
    block_center_y: float
    total_height: float
    line_centers: Tuple[float, ...]
    sample_rect: SampleRect


def split_lines(text: str) -> List[str]:
    """Split text on newlines, keeping empty lines."""
    return [line.rstrip("\r") for line in text.split("\n")]


def compute_layout(
    line_widths: Sequence[float],
    font_size: int,
    x_offset: float,
    y_offset: float,
    image_width: int,
    image_height: int,
) -> TextLayout:
    """
    Compute line positions and the contrast sample rectangle for a text block.

    Args:
        line_widths: Rendered width of each line, in order
        font_size: Font size in pixels
        x_offset: Horizontal offset of the block from canvas center
        y_offset: Vertical offset of the block from canvas center
        image_width: Canvas width
        image_height: Canvas height

    Returns:
        TextLayout for the block

    Raises:
        ValueError: If there are no lines
    """
    line_count = len(line_widths)
    if line_count == 0:
        raise ValueError("compute_layout requires at least one line")

    line_height = font_size * LINE_SPACING_FACTOR
    total_height = (
        line_count * font_size
        + (line_count - 1) * font_size * (LINE_SPACING_FACTOR - 1)
    )

    anchor_x = image_width / 2 + x_offset
    block_center_y = image_height / 2 + y_offset
    start_y = block_center_y - total_height / 2 + font_size / 2

    line_centers = tuple(start_y + index * line_height for index in range(line_count))

    max_width = max(line_widths)
    sample_rect = SampleRect(
        x=anchor_x - max_width / 2,
        y=block_center_y - total_height / 2,
        width=max_width,
        height=total_height,
    )

    return TextLayout(
        anchor_x=anchor_x,
        block_center_y=block_center_y,
        total_height=total_height,
        line_centers=line_centers,
        sample_rect=sample_rect,
    )


def sample_average_brightness(pixels: np.ndarray, rect: SampleRect) -> float:
    """
    Average red-channel value of a grayscale buffer over a rectangle.

    The rectangle is snapped outward to whole pixels (at least 1x1). Pixels
    outside the buffer count as 0, the way a canvas read-back returns
    transparent black beyond its edges.

    Args:
        pixels: (H, W, C) uint8 array, C >= 1, red channel first
        rect: Region to sample

    Returns:
        Average brightness 0-255, or 128 for an empty/degenerate rectangle
    """
    if not (rect.width > 0 and rect.height > 0):
        return DEFAULT_SAMPLE_BRIGHTNESS

    x0 = math.floor(rect.x)
    y0 = math.floor(rect.y)
    width = max(1, math.ceil(rect.width))
    height = max(1, math.ceil(rect.height))

    buffer_height, buffer_width = pixels.shape[:2]
    left = max(0, x0)
    top = max(0, y0)
    right = min(buffer_width, x0 + width)
    bottom = min(buffer_height, y0 + height)

    total = 0
    if left < right and top < bottom:
        total = int(pixels[top:bottom, left:right, 0].sum(dtype=np.int64))

    return total / (width * height)


def choose_text_color(brightness: float) -> str:
    """Black text over backgrounds brighter than 128, white otherwise."""
    return TEXT_COLOR_BLACK if brightness > BRIGHTNESS_THRESHOLD else TEXT_COLOR_WHITE


def _bold_candidates(family: str) -> List[str]:
    name = family.strip().strip("'\"")
    if not name:
        return []
    known = _KNOWN_BOLD_FONTS.get(name.lower())
    if known:
        return list(known)
    compact = name.replace(" ", "")
    return [
        f"{compact}-Bold.ttf",
        f"{name} Bold.ttf",
        f"{compact}bd.ttf",
        f"{compact}-Bold.otf",
    ]


@lru_cache(maxsize=64)
def _resolve_bold_font_file(font_family: str) -> Optional[str]:
    families = [f for f in font_family.split(",") if f.strip()]
    families.append("sans-serif")
    for family in families:
        for candidate in _bold_candidates(family):
            try:
                ImageFont.truetype(candidate, 12)
            except OSError:
                continue
            logger.debug(f"Resolved bold font for '{font_family}': {candidate}")
            return candidate
    logger.debug(f"No bold font file found for '{font_family}', using built-in font")
    return None


def synthetic_bold_stroke(font_size: int) -> int:
    """Stroke width used to embolden a regular-weight fallback font."""
    return max(1, round(font_size / 24))


def load_bold_font(font_family: str, font_size: int) -> Tuple[Any, int]:
    """
    Load a bold font for the first available family in a CSS-like family list.

    Args:
        font_family: Comma separated family names, e.g. "Arial, sans-serif"
        font_size: Size in pixels

    Returns:
        (font, stroke_width): stroke_width is 0 for a real bold face and a
        small synthetic-bold stroke for the built-in fallback font

    Raises:
        RenderError: If no scalable font can be loaded
    """
    font_file = _resolve_bold_font_file(font_family or DEFAULT_FONT_FAMILY)
    try:
        if font_file is not None:
            return ImageFont.truetype(font_file, font_size), 0
        font = ImageFont.load_default(size=font_size)
    except (OSError, ValueError) as e:
        raise RenderError(f"Failed to load font '{font_family}': {e}") from e

    if not isinstance(font, ImageFont.FreeTypeFont):
        raise RenderError("No scalable font available for text rendering")
    return font, synthetic_bold_stroke(font_size)


def measure_line_widths(lines: Sequence[str], font: Any) -> List[float]:
    """
    Advance width of each line at the font's regular weight.

    Any synthetic-bold stroke is not included.

    Raises:
        RenderError: If the font cannot measure the text
    """
    try:
        return [float(font.getlength(line)) if line else 0.0 for line in lines]
    except (OSError, ValueError) as e:
        raise RenderError(f"Failed to measure text: {e}") from e


def _draw_lines(
    canvas: Any,
    lines: Sequence[str],
    layout: TextLayout,
    font: Any,
    fill: Any,
    stroke_width: int,
    offset: float = 0.0,
) -> None:
    draw = ImageDraw.Draw(canvas)
    for line, center_y in zip(lines, layout.line_centers):
        if not line:
            continue
        draw.text(
            (layout.anchor_x + offset, center_y + offset),
            line,
            font=font,
            fill=fill,
            anchor="mm",
            stroke_width=stroke_width,
            stroke_fill=fill,
        )


def render_overlay(
    normalized_image: EncodedImage,
    text: str,
    settings: TextSettings,
    image_width: int,
    image_height: int,
) -> Tuple[bytes, str]:
    """
    Composite text onto a normalized image.

    Args:
        normalized_image: Encoded grayscale frame (bytes or data URL)
        text: Overlay text, newline separated
        settings: Text settings; never modified
        image_width: Canvas width the frame is drawn at
        image_height: Canvas height the frame is drawn at

    Returns:
        (png_bytes, chosen_color): the new image and the color actually used

    Raises:
        DecodeError: If the normalized image cannot be decoded
        RenderError: If fonts or drawing fail
    """
    base = decode_image(normalized_image)
    if base.size != (image_width, image_height):
        base = base.resize((image_width, image_height), BILINEAR)

    if not text.strip() or not settings.is_active:
        return encode_png(base), settings.color or DEFAULT_TEXT_COLOR

    lines = split_lines(text)
    font, stroke_width = load_bold_font(settings.font_family, settings.font_size)
    line_widths = measure_line_widths(lines, font)

    layout = compute_layout(
        line_widths,
        settings.font_size,
        settings.x_offset,
        settings.y_offset,
        image_width,
        image_height,
    )

    if settings.manual_color_override:
        chosen_color = settings.manual_color_override
    else:
        brightness = sample_average_brightness(image_to_array(base), layout.sample_rect)
        chosen_color = choose_text_color(brightness)
        logger.debug(f"Sampled brightness {brightness:.1f} -> {chosen_color}")

    canvas = base
    try:
        if chosen_color == TEXT_COLOR_BLACK:
            shadow = Image.new("RGBA", base.size, (0, 0, 0, 0))
            _draw_lines(shadow, lines, layout, font, SHADOW_RGBA, stroke_width, SHADOW_OFFSET)
            shadow = shadow.filter(ImageFilter.GaussianBlur(radius=SHADOW_BLUR_RADIUS))
            canvas = Image.alpha_composite(base, shadow)
        _draw_lines(canvas, lines, layout, font, chosen_color, stroke_width)
    except (OSError, ValueError) as e:
        raise RenderError(f"Failed to draw text: {e}") from e

    return encode_png(canvas), chosen_color
