"""Tests for watermark region geometry."""

import numpy as np
import pytest

from unmark.errors import InvalidDimensionsError
from unmark.pipeline.geometry import nominal_footprint, resolve_region
from unmark.pipeline.loader import load_profile
from unmark.schemas import SizeTier, WatermarkProfile

SIDES = [1, 2, 3, 7, 47, 48, 79, 80, 81, 100, 333, 1024, 1025, 1080, 1920, 4000]


@pytest.mark.parametrize(
    ("width", "height", "size", "x", "y"),
    [
        (1920, 1080, 96, 1760, 920),
        (1080, 1920, 96, 920, 1760),
        (1024, 1024, 48, 944, 944),
        (1025, 1025, 96, 865, 865),
        (2048, 2048, 96, 1888, 1888),
        (4000, 100, 48, 3920, 20),
        (100, 4000, 48, 20, 3920),
        (800, 600, 48, 720, 520),
        (50, 50, 30, 0, 0),
        (1, 1, 1, 0, 0),
    ],
)
def test_resolve_known_sizes(width: int, height: int, size: int, x: int, y: int) -> None:
    """Default profile places the logo at the expected bottom-right spot."""
    region = resolve_region(width, height)
    assert region.size == size
    assert (region.x, region.y) == (x, y)


@pytest.mark.parametrize("width", SIDES)
@pytest.mark.parametrize("height", SIDES)
def test_region_always_inside_image(width: int, height: int) -> None:
    """Every positive size yields a non-empty square fully inside the frame."""
    region = resolve_region(width, height)
    assert region.size > 0
    assert region.x >= 0 and region.y >= 0
    assert region.x + region.size <= width
    assert region.y + region.size <= height
    assert region.fits(width, height)


def test_size_follows_smaller_side() -> None:
    """Extreme aspect ratios use the short side for the tier and shrink rule."""
    profile = load_profile()
    wide = resolve_region(4000, 60)
    assert wide.size < profile.min_size
    assert wide.y + wide.size <= 60
    assert resolve_region(5000, 1024).size == 48
    assert resolve_region(5000, 1025).size == 96


def test_size_within_profile_bounds() -> None:
    profile = load_profile()
    region = resolve_region(1920, 1080)
    assert profile.min_size <= region.size <= profile.max_size


def test_resolve_is_deterministic() -> None:
    assert resolve_region(1234, 567) == resolve_region(1234, 567)
    assert resolve_region(3, 3) == resolve_region(3, 3)


def test_numpy_integers_accepted() -> None:
    assert resolve_region(np.int64(800), np.int32(600)) == resolve_region(800, 600)


@pytest.mark.parametrize(
    ("width", "height"),
    [(0, 100), (100, 0), (-5, 10), (10, -1), (1.5, 10), (10, "10"), (True, 10), (None, 10)],
)
def test_invalid_dimensions(width, height) -> None:
    """Non-positive or non-integer dimensions are rejected."""
    with pytest.raises(InvalidDimensionsError):
        resolve_region(width, height)


def test_invalid_dimensions_is_value_error() -> None:
    with pytest.raises(ValueError, match="positive integers"):
        resolve_region(0, 0)


@pytest.mark.parametrize(
    ("anchor", "x", "y"),
    [
        ("bottom-right", 170, 70),
        ("bottom-left", 10, 70),
        ("top-right", 170, 10),
        ("top-left", 10, 10),
    ],
)
def test_anchor_corners(anchor: str, x: int, y: int) -> None:
    profile = WatermarkProfile(
        name="test",
        anchor=anchor,
        tiers=(SizeTier(min_side_above=0, size=20, margin=10),),
    )
    region = resolve_region(200, 100, profile)
    assert region.size == 20
    assert (region.x, region.y) == (x, y)


def test_nominal_footprint_ignores_shrinking() -> None:
    profile = load_profile()
    assert nominal_footprint(50, 50, profile) == (48, 32)
    assert nominal_footprint(2000, 3000, profile) == (96, 64)


def test_region_dump_is_plain_record() -> None:
    region = resolve_region(1920, 1080)
    assert region.model_dump() == {"size": 96, "position": {"x": 1760, "y": 920}}
    assert region.bounds == (1760, 920, 1856, 1016)
