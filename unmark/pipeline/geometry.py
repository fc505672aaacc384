"""
Watermark Geometry

Computes where the overlay sits from image dimensions alone.

The logo is a square inset from one corner. Its size and inset come from the
profile tier matching the image's smaller side, so very wide or very tall
images are treated like a square of their short side. Images too small for
the nominal footprint get a proportionally shrunken square so the region
never leaves the frame.
"""

import numbers
from typing import Optional

from ..errors import InvalidDimensionsError
from ..schemas import Position, WatermarkProfile, WatermarkRegion
from .loader import default_profile


def _validate_dimensions(width, height) -> None:
    for value in (width, height):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
            raise InvalidDimensionsError(width, height)


def nominal_footprint(width: int, height: int, profile: WatermarkProfile) -> tuple[int, int]:
    """
    Return (size, margin) for an image, before any shrinking.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        profile: Watermark profile to read the tiers from

    Returns:
        Tuple of (logo_size, margin) from the matching tier
    """
    tier = profile.tier_for(min(width, height))
    return tier.size, tier.margin


def resolve_region(
    width: int,
    height: int,
    profile: Optional[WatermarkProfile] = None,
) -> WatermarkRegion:
    """
    Resolve the watermark region for an image of the given size.

    Args:
        width: Image width in pixels (positive)
        height: Image height in pixels (positive)
        profile: Watermark profile; the bundled default if None

    Returns:
        WatermarkRegion fully contained in [0, width) x [0, height)

    Raises:
        InvalidDimensionsError: If width or height is not a positive integer
    """
    _validate_dimensions(width, height)
    width, height = int(width), int(height)

    if profile is None:
        profile = default_profile()

    side = min(width, height)
    size, margin = nominal_footprint(width, height, profile)

    # Shrink size and margin together for images smaller than the footprint
    if size + margin > side:
        footprint = size + margin
        size = max(1, size * side // footprint)
        margin = margin * side // footprint

    if profile.anchor.endswith("right"):
        x = width - margin - size
    else:
        x = margin
    if profile.anchor.startswith("bottom"):
        y = height - margin - size
    else:
        y = margin

    return WatermarkRegion(size=size, position=Position(x=x, y=y))
