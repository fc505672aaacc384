"""
Unmark

Removes a known corner overlay watermark from decoded images: computes the
overlay's region from the image size and synthesizes replacement pixels from
the rest of the image.
"""

from .batch import BatchItemResult, remove_batch
from .config import Settings, get_settings
from .engine import EngineState, WatermarkEngine
from .errors import InitializationError, InvalidDimensionsError, ProcessingError, UnmarkError
from .pipeline.geometry import resolve_region
from .schemas import Position, WatermarkProfile, WatermarkRegion

__version__ = "0.1.0"

__all__ = [
    # Engine
    "WatermarkEngine",
    "EngineState",
    "remove_batch",
    "BatchItemResult",
    # Geometry
    "resolve_region",
    "WatermarkRegion",
    "Position",
    "WatermarkProfile",
    # Configuration
    "Settings",
    "get_settings",
    # Errors
    "UnmarkError",
    "InitializationError",
    "InvalidDimensionsError",
    "ProcessingError",
]
