"""
IE_Libs - Image Enhancer Library Modules

This package contains core functionality for the Image Enhancer project,
organized into specialized sub-packages:

- ImageEditingLib: Frame normalization, text overlay rendering and export
- BatchLib: Per-item store, debounced overlay scheduling and batch processing
"""

__version__ = "0.1.0"
