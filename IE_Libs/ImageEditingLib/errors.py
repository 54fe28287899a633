"""
Error types raised by the image processing core.

Both errors are terminal for the single call that raised them. Callers
(the batch orchestrator) record the message on the affected item.
"""


class ImageEnhancerError(Exception):
    """Base class for all processing errors."""


class DecodeError(ImageEnhancerError, ValueError):
    """Image bytes could not be read or decoded."""


class RenderError(ImageEnhancerError, RuntimeError):
    """Drawing surface or font unavailable, or drawing failed."""
