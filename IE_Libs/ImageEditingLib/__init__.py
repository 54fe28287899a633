"""
ImageEditingLib - Core image processing functionality

This module provides the frame normalizer, the text overlay renderer,
their data models and the export helpers for the Image Enhancer project.
"""

from IE_Libs.ImageEditingLib.errors import DecodeError, ImageEnhancerError, RenderError
from IE_Libs.ImageEditingLib.image_models import (
    ItemStatus,
    ProcessedImageRecord,
    TextSettings,
)
from IE_Libs.ImageEditingLib.image_codec import decode_image, encode_png, to_data_url
from IE_Libs.ImageEditingLib.frame_normalizer import (
    apply_smoothing,
    compute_crop_box,
    desaturate,
    normalize,
)
from IE_Libs.ImageEditingLib.text_overlay import (
    SampleRect,
    TextLayout,
    choose_text_color,
    compute_layout,
    render_overlay,
    sample_average_brightness,
    split_lines,
)
from IE_Libs.ImageEditingLib.image_editing_ops import (
    build_output_filename,
    save_records,
    select_artifact,
)

__all__ = [
    "DecodeError",
    "ImageEnhancerError",
    "RenderError",
    "ItemStatus",
    "ProcessedImageRecord",
    "TextSettings",
    "decode_image",
    "encode_png",
    "to_data_url",
    "apply_smoothing",
    "compute_crop_box",
    "desaturate",
    "normalize",
    "SampleRect",
    "TextLayout",
    "choose_text_color",
    "compute_layout",
    "render_overlay",
    "sample_average_brightness",
    "split_lines",
    "build_output_filename",
    "save_records",
    "select_artifact",
]
