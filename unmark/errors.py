"""
Engine Errors

Every failure the engine surfaces to its caller. Nothing is retried
internally; the caller decides whether to skip, retry or report.
"""


class UnmarkError(Exception):
    """Base class for engine errors."""


class InitializationError(UnmarkError):
    """The engine's profile or alpha map assets are missing or malformed."""


class InvalidDimensionsError(UnmarkError, ValueError):
    """Width or height passed to a geometry query is not a positive integer."""

    def __init__(self, width, height):
        self.width = width
        self.height = height
        super().__init__(f"Image dimensions must be positive integers, got {width}x{height}")


class ProcessingError(UnmarkError):
    """The source raster cannot be processed (zero area, bad shape or dtype)."""
