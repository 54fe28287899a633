"""
Constants and configuration values for Image Enhancer.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

# Target canvas (3:4 portrait)
IMAGE_TARGET_WIDTH = 600
IMAGE_TARGET_HEIGHT = 800

# Desaturation weights (non gamma-corrected luma)
LUMA_RED_WEIGHT = 0.299
LUMA_GREEN_WEIGHT = 0.587
LUMA_BLUE_WEIGHT = 0.114

# Smoothing pass
SMOOTHING_RADIUS = 1.0

# Text settings
DEFAULT_FONT_SIZE = 24
MIN_FONT_SIZE = 8
MAX_FONT_SIZE = 120
DEFAULT_FONT_FAMILY = "Arial, sans-serif"
LINE_SPACING_FACTOR = 1.2

# Text colors
TEXT_COLOR_BLACK = "#000000"
TEXT_COLOR_WHITE = "#FFFFFF"
DEFAULT_TEXT_COLOR = TEXT_COLOR_WHITE
MANUAL_COLOR_CHOICES = (TEXT_COLOR_BLACK, TEXT_COLOR_WHITE)

# Contrast detection
BRIGHTNESS_THRESHOLD = 128
DEFAULT_SAMPLE_BRIGHTNESS = 128.0

# Shadow drawn under black text
SHADOW_OFFSET = 0.3
SHADOW_BLUR_RADIUS = 0.5
SHADOW_RGBA = (0, 0, 0, 153)

# File intake
MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024
SIZE_ERROR_ID_SUFFIX = "-size-error"
SIZE_ERROR_MESSAGE = "File size exceeds 5MB limit."

# Overlay scheduling
TEXT_RENDER_DEBOUNCE_SECONDS = 0.3
OVERLAY_ERROR_PREFIX = "Text: "

# File naming
PROCESSED_SUFFIX = "_processed"
TEXT_OVERLAY_SUFFIX = "_text_overlay"
OUTPUT_EXTENSION = ".png"
DEFAULT_OUTPUT_FORMAT = "PNG"
DATA_URL_PREFIX = "data:image/png;base64,"

# Supported file formats
SUPPORTED_STANDARD_IMAGES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"}
