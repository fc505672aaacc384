"""
Pydantic Schemas

Geometry records handed to callers and the watermark profile loaded as the
engine's static asset.
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


Anchor = Literal["bottom-right", "bottom-left", "top-right", "top-left"]


# ============================================================================
# Geometry Schemas
# ============================================================================

class Position(BaseModel):
    """Top-left corner of a region, in pixels."""
    model_config = ConfigDict(frozen=True)

    x: int = Field(ge=0)
    y: int = Field(ge=0)


class WatermarkRegion(BaseModel):
    """Square area of an image covered by the watermark overlay."""
    model_config = ConfigDict(frozen=True)

    size: int = Field(gt=0, description="Side length of the square, in pixels")
    position: Position

    @property
    def x(self) -> int:
        return self.position.x

    @property
    def y(self) -> int:
        return self.position.y

    @property
    def bounds(self) -> tuple[int, int, int, int]:
        """(left, top, right, bottom), right/bottom exclusive."""
        return self.x, self.y, self.x + self.size, self.y + self.size

    @property
    def slices(self) -> tuple[slice, slice]:
        """Row and column slices selecting the region from an (H, W, C) array."""
        return slice(self.y, self.y + self.size), slice(self.x, self.x + self.size)

    def fits(self, width: int, height: int) -> bool:
        return self.x + self.size <= width and self.y + self.size <= height


# ============================================================================
# Profile Schemas
# ============================================================================

class SizeTier(BaseModel):
    """Logo size and inset used once the image's smaller side exceeds a threshold."""
    model_config = ConfigDict(frozen=True)

    min_side_above: int = Field(ge=0)
    size: int = Field(gt=0)
    margin: int = Field(ge=0)


class WatermarkProfile(BaseModel):
    """
    Placement and blend constants for one watermark family.

    Loaded from JSON at engine creation. ``alpha_maps`` maps a nominal logo
    size to the file name of its captured alpha map (the logo rendered on
    black), relative to the configured alpha map directory.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    anchor: Anchor = "bottom-right"
    tiers: tuple[SizeTier, ...]
    logo_value: int = Field(default=255, ge=0, le=255)
    alpha_threshold: float = Field(default=0.002, ge=0.0, lt=1.0)
    max_alpha: float = Field(default=0.99, gt=0.0, lt=1.0)
    alpha_maps: dict[int, str] = Field(default_factory=dict)

    @field_validator("tiers")
    @classmethod
    def validate_tiers(cls, v: tuple[SizeTier, ...]) -> tuple[SizeTier, ...]:
        """Sort tiers by threshold and require a catch-all tier."""
        if not v:
            raise ValueError("At least one size tier is required")
        thresholds = [tier.min_side_above for tier in v]
        if len(set(thresholds)) != len(thresholds):
            raise ValueError("Size tier thresholds must be unique")
        if 0 not in thresholds:
            raise ValueError("A size tier with min_side_above=0 is required")
        return tuple(sorted(v, key=lambda tier: tier.min_side_above))

    def tier_for(self, min_side: int) -> SizeTier:
        """Pick the tier with the largest threshold below ``min_side``."""
        selected = self.tiers[0]
        for tier in self.tiers:
            if min_side > tier.min_side_above:
                selected = tier
        return selected

    @property
    def min_size(self) -> int:
        return min(tier.size for tier in self.tiers)

    @property
    def max_size(self) -> int:
        return max(tier.size for tier in self.tiers)
