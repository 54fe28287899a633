"""
Runtime configuration for the batch orchestrator.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict

from IE_Libs.constants import (
    IMAGE_TARGET_HEIGHT,
    IMAGE_TARGET_WIDTH,
    MAX_FILE_SIZE_BYTES,
    TEXT_RENDER_DEBOUNCE_SECONDS,
)


@dataclass
class BatchConfig:
    """Configuration for batch processing.

    Attributes:
        target_width: Width of every normalized image (default: 600)
        target_height: Height of every normalized image (default: 800)
        max_file_size: Largest accepted upload in bytes (default: 5 MiB)
        debounce_seconds: Quiet period before an overlay render fires (default: 0.3)
        use_threading: Run normalize/render in the loop's default executor so
                       the event loop stays responsive (default: True)
    """
    target_width: int = IMAGE_TARGET_WIDTH
    target_height: int = IMAGE_TARGET_HEIGHT
    max_file_size: int = MAX_FILE_SIZE_BYTES
    debounce_seconds: float = TEXT_RENDER_DEBOUNCE_SECONDS
    use_threading: bool = True

    def __post_init__(self):
        if self.target_width <= 0 or self.target_height <= 0:
            raise ValueError(
                f"target size must be > 0, got {self.target_width}x{self.target_height}"
            )
        if self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be > 0, got {self.max_file_size}")
        if self.debounce_seconds < 0:
            raise ValueError(f"debounce_seconds must be >= 0, got {self.debounce_seconds}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BatchConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)
