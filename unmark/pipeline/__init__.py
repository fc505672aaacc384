"""
Unmark Pipeline

Geometry, asset loading and region synthesis.
"""

from .geometry import resolve_region
from .synthesizer import PatchResult, content_aware_fill, synthesize, synthesize_region

__all__ = [
    "resolve_region",
    "synthesize",
    "synthesize_region",
    "content_aware_fill",
    "PatchResult",
]
