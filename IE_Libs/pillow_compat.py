"""
Single import point for the Pillow modules used by Image Enhancer.

Loads the Pillow-provided modules via importlib and re-exports the symbols
the editing code needs: `Image`, `ImageDraw`, `ImageFont` and `ImageFilter`,
plus the bilinear resampling filter.
"""
from importlib import import_module
from types import ModuleType


def _require(name: str) -> ModuleType:
    try:
        return import_module(name)
    except ImportError as e:
        raise ImportError(
            f"{name} is unavailable: install Pillow with 'pip install Pillow'"
        ) from e


Image = _require("PIL.Image")
ImageDraw = _require("PIL.ImageDraw")
ImageFont = _require("PIL.ImageFont")
ImageFilter = _require("PIL.ImageFilter")

# Pillow >= 9.1 moved resampling filters under Image.Resampling
BILINEAR = Image.Resampling.BILINEAR
