"""
Image editing data models for Image Enhancer.

This module defines core data structures used throughout the processing
system.

Classes:
    TextSettings: Text overlay configuration for a single item
    ItemStatus: Lifecycle state of a processed item
    ProcessedImageRecord: Immutable snapshot of one uploaded image and its outputs
"""

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional

from IE_Libs.constants import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DEFAULT_TEXT_COLOR,
    MANUAL_COLOR_CHOICES,
    MAX_FONT_SIZE,
    MIN_FONT_SIZE,
)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def normalize_color_override(value: Optional[str]) -> Optional[str]:
    """
    Validate a manual color override.

    Args:
        value: None/empty for auto-detect, or '#000000' / '#FFFFFF' (any case)

    Returns:
        The uppercase hex string, or None

    Raises:
        ValueError: If the value is not one of the allowed colors
    """
    if value is None or value == "":
        return None
    upper = str(value).strip().upper()
    if upper not in MANUAL_COLOR_CHOICES:
        raise ValueError(
            f"manual_color_override must be one of {MANUAL_COLOR_CHOICES} or None, got {value!r}"
        )
    return upper


@dataclass(frozen=True)
class TextSettings:
    """Text overlay configuration.

    Attributes:
        is_active: Whether the overlay is drawn at all
        x_offset: Horizontal offset from canvas center in pixels
        y_offset: Vertical offset from canvas center in pixels (positive moves down)
        color: Color used by the most recent render; derived, never user-edited
        font_size: Font size in pixels (8-120)
        font_family: Comma separated font family list, first match wins
        manual_color_override: '#000000', '#FFFFFF' or None for auto-detect
    """
    is_active: bool = False
    x_offset: int = 0
    y_offset: int = 0
    color: str = DEFAULT_TEXT_COLOR
    font_size: int = DEFAULT_FONT_SIZE
    font_family: str = DEFAULT_FONT_FAMILY
    manual_color_override: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(
            self,
            "manual_color_override",
            normalize_color_override(self.manual_color_override),
        )

    def clamped(self, width: int, height: int) -> "TextSettings":
        """Return a copy with offsets bounded to half the canvas and font size to 8-120."""
        half_w = width / 2
        half_h = height / 2
        return replace(
            self,
            x_offset=int(clamp(int(self.x_offset), -half_w, half_w)),
            y_offset=int(clamp(int(self.y_offset), -half_h, half_h)),
            font_size=int(clamp(int(self.font_size), MIN_FONT_SIZE, MAX_FONT_SIZE)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextSettings":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


class ItemStatus(str, Enum):
    READING = "reading"
    READY = "ready"
    NORMALIZING = "normalizing"
    OVERLAY_RENDERING = "overlay_rendering"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class ProcessedImageRecord:
    """One uploaded image and everything derived from it.

    Records are never mutated; the item store swaps in updated copies.
    """
    item_id: str
    name: str
    original_image: Optional[bytes] = None
    normalized_image: Optional[bytes] = None
    final_image: Optional[bytes] = None
    smoothing_enabled: bool = False
    overlay_text: str = ""
    text_settings: TextSettings = field(default_factory=TextSettings)
    status: ItemStatus = ItemStatus.READING
    error_message: Optional[str] = None

    @property
    def has_overlay_output(self) -> bool:
        return self.text_settings.is_active and self.final_image is not None
