"""
Watermark Engine

Facade over geometry and synthesis. Built once through the asynchronous
``WatermarkEngine.create()`` factory, which loads the profile and alpha map
assets; afterwards the engine is read-only and safe to share between
concurrent removal calls.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

import numpy as np
from PIL import Image

from .config import Settings, Strategy, get_settings
from .errors import InitializationError, ProcessingError
from .pipeline.geometry import resolve_region
from .pipeline.loader import load_alpha_maps, load_profile
from .pipeline.synthesizer import PatchResult, synthesize_region
from .schemas import WatermarkProfile, WatermarkRegion

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class EngineState:
    """Immutable assets and synthesis parameters shared by every removal call."""
    profile: WatermarkProfile
    alpha_maps: Mapping[int, np.ndarray]
    strategy: Strategy = "auto"
    fill_falloff: float = 1.0
    fill_texture: float = 1.0
    fill_smoothing: int = 5
    fill_alpha_above: float = 0.9
    max_concurrency: int = 4

    def alpha_map_for(self, width: int, height: int) -> Optional[np.ndarray]:
        """Alpha map for the nominal logo size of an image, if loaded."""
        size = self.profile.tier_for(min(width, height)).size
        return self.alpha_maps.get(size)


def load_state(settings: Settings) -> EngineState:
    """
    Load and validate every asset the engine needs.

    Blocking; ``WatermarkEngine.create`` runs it in a worker thread.

    Raises:
        InitializationError: If an asset is missing or malformed
    """
    profile = load_profile(settings.resolved_profile_path)
    alpha_maps = load_alpha_maps(profile, settings.alpha_map_dir)

    if settings.strategy == "reverse_alpha" and not alpha_maps:
        raise InitializationError(
            "Strategy 'reverse_alpha' requires alpha maps; set alpha_map_dir"
        )

    return EngineState(
        profile=profile,
        alpha_maps=alpha_maps,
        strategy=settings.strategy,
        fill_falloff=settings.fill_falloff,
        fill_texture=settings.fill_texture,
        fill_smoothing=settings.fill_smoothing,
        fill_alpha_above=settings.fill_alpha_above,
        max_concurrency=settings.max_concurrency,
    )


def _validate_raster(image) -> np.ndarray:
    """Check an input raster is an (H, W, 3|4) uint8 array with nonzero area."""
    if not isinstance(image, np.ndarray):
        raise ProcessingError(f"Expected a numpy array, got {type(image).__name__}")
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ProcessingError(f"Expected an (H, W, 3) or (H, W, 4) array, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ProcessingError(f"Expected uint8 pixels, got {image.dtype}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ProcessingError(f"Cannot process a zero-area image ({image.shape[1]}x{image.shape[0]})")
    return image


class WatermarkEngine:
    """
    Removes the corner overlay watermark from decoded rasters.

    Usage:
        engine = await WatermarkEngine.create()
        region = engine.get_watermark_info(width, height)
        cleaned = await engine.remove_watermark(pixels)

    Instances are independent; several may coexist (e.g. in tests).
    """

    def __init__(self, state: EngineState):
        """Wrap an already loaded state. Prefer ``create()``."""
        self._state = state

    @classmethod
    async def create(cls, settings: Optional[Settings] = None) -> "WatermarkEngine":
        """
        Load assets and return a ready engine.

        Args:
            settings: Engine settings; environment-based defaults if None

        Raises:
            InitializationError: If an asset is missing or malformed
        """
        settings = settings or get_settings()
        state = await asyncio.to_thread(load_state, settings)

        logger.info(
            f"Watermark engine ready: profile '{state.profile.name}', "
            f"strategy={state.strategy}, alpha maps={sorted(state.alpha_maps) or 'none'}"
        )
        return cls(state)

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def strategy(self) -> str:
        return self._state.strategy

    def get_watermark_info(self, width: int, height: int) -> WatermarkRegion:
        """
        Resolve the watermark region for an image size.

        Raises:
            InvalidDimensionsError: If width or height is not positive
        """
        return resolve_region(width, height, self._state.profile)

    def process(self, image: np.ndarray) -> tuple[np.ndarray, WatermarkRegion, PatchResult]:
        """
        Blocking removal returning the cleaned copy, region and patch details.

        Raises:
            ProcessingError: If the raster cannot be processed
        """
        image = _validate_raster(image)
        h, w = image.shape[:2]

        region = resolve_region(w, h, self._state.profile)
        result = synthesize_region(image, region, self._state)

        cleaned = image.copy()
        cleaned[region.slices] = result.patch

        logger.debug(
            f"Removed watermark from {w}x{h} image: {region.size}px at "
            f"({region.x}, {region.y}) via {result.method}"
        )
        return cleaned, region, result

    def remove_watermark_sync(self, image: np.ndarray) -> np.ndarray:
        """Blocking version of ``remove_watermark``."""
        cleaned, _, _ = self.process(image)
        return cleaned

    async def remove_watermark(self, image: np.ndarray) -> np.ndarray:
        """
        Remove the watermark from an (H, W, 3|4) uint8 raster.

        The source array is never modified; a new array of the same shape is
        returned in which only the watermark region differs.

        Raises:
            ProcessingError: If the raster cannot be processed
        """
        _validate_raster(image)
        return await asyncio.to_thread(self.remove_watermark_sync, image)

    async def remove_watermark_from_pil(self, image: Image.Image) -> Image.Image:
        """
        Remove the watermark from a PIL image.

        Returns:
            New RGBA PIL image
        """
        if image.width == 0 or image.height == 0:
            raise ProcessingError(f"Cannot process a zero-area image ({image.width}x{image.height})")
        pixels = np.array(image.convert("RGBA"))
        cleaned = await self.remove_watermark(pixels)
        return Image.fromarray(cleaned)
