"""
Region Synthesizer

Produces replacement pixels for the watermark region using only the rest of
the same image. Two strategies:

- Content-aware fill: inverse-distance interpolation of the smoothed border
  along the four axis rays, plus high-frequency texture mirrored across each
  border. Works on any image, needs no assets.
- Reverse alpha blending: exact inversion of the overlay using a captured
  alpha map. Only possible when the profile's alpha map is loaded and the
  overlay is actually present.

Everything here is read-only on the source image and deterministic.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import cv2
import numpy as np

from ..schemas import WatermarkRegion
from .alpha_blend import detect_overlay, fit_alpha_map, reverse_blend

if TYPE_CHECKING:
    from ..engine import EngineState

logger = logging.getLogger(__name__)

# Guards the normalized convolution against empty neighbourhoods
_EPS = 1e-6


@dataclass
class PatchResult:
    """Synthesized pixels for one region."""
    patch: np.ndarray  # (size, size, C) uint8
    method: str  # "fill" or "reverse_alpha"


def _smooth_known(context: np.ndarray, known: np.ndarray, kernel: int) -> np.ndarray:
    """Box-blur only the known pixels (normalized convolution)."""
    if kernel <= 1:
        return context
    weights = cv2.blur(known, (kernel, kernel))
    blurred = cv2.blur(context * known[:, :, np.newaxis], (kernel, kernel))
    return blurred / np.maximum(weights, _EPS)[:, :, np.newaxis]


def content_aware_fill(
    image: np.ndarray,
    region: WatermarkRegion,
    falloff: float = 1.0,
    texture: float = 1.0,
    smoothing: int = 5,
) -> np.ndarray:
    """
    Fill a square region from its surroundings.

    For each region pixel and each side of the region with image content
    beyond it, the nearest border pixel on the axis ray (taken from a
    smoothed copy of the surroundings) contributes with weight
    1 / distance ** falloff. With falloff 1, two opposite borders
    interpolate linearly, so smooth gradients carry straight through.
    Texture is restored by adding, with the same weights, the
    high-frequency residual of the pixel mirrored across each border.

    Args:
        image: (H, W, C) uint8 source, C >= 3; only RGB is filled
        region: Region to fill, inside the image
        falloff: Distance exponent of the blending weights
        texture: Scale of the mirrored texture residual (0 disables)
        smoothing: Odd box kernel size for the border smoothing

    Returns:
        (size, size, 3) float32 RGB fill, clipped to [0, 255]
    """
    h, w = image.shape[:2]
    left, top, right, bottom = region.bounds
    s = region.size

    # Context window: the region plus one region size on every side
    cx0, cy0 = max(0, left - s), max(0, top - s)
    cx1, cy1 = min(w, right + s), min(h, bottom + s)
    context = image[cy0:cy1, cx0:cx1, :3].astype(np.float32)
    ctx_h, ctx_w = context.shape[:2]

    rx0, ry0 = left - cx0, top - cy0
    rx1, ry1 = rx0 + s, ry0 + s

    known = np.ones((ctx_h, ctx_w), dtype=np.float32)
    known[ry0:ry1, rx0:rx1] = 0.0

    if not known.any():
        # Region is the whole image: nothing to borrow from
        mean = context.reshape(-1, 3).mean(axis=0)
        return np.broadcast_to(mean, (s, s, 3)).astype(np.float32)

    smooth = _smooth_known(context, known, smoothing)
    residual = context - smooth

    steps = np.arange(s)
    base_sum = np.zeros((s, s, 3), dtype=np.float32)
    texture_sum = np.zeros((s, s, 3), dtype=np.float32)
    weight_sum = np.zeros((s, s, 1), dtype=np.float32)

    def accumulate(dist, border, mirrored):
        weight = 1.0 / dist.astype(np.float32) ** falloff
        base_sum[:] += weight * border
        texture_sum[:] += weight * mirrored
        weight_sum[:] += weight

    rows = slice(ry0, ry1)
    cols = slice(rx0, rx1)

    if rx0 > 0:  # left
        mirror = np.maximum(rx0 - 1 - steps, 0)
        accumulate(
            (steps + 1)[np.newaxis, :, np.newaxis],
            smooth[rows, rx0 - 1][:, np.newaxis, :],
            residual[rows][:, mirror],
        )
    if rx1 < ctx_w:  # right
        mirror = np.minimum(rx1 + (s - 1 - steps), ctx_w - 1)
        accumulate(
            (s - steps)[np.newaxis, :, np.newaxis],
            smooth[rows, rx1][:, np.newaxis, :],
            residual[rows][:, mirror],
        )
    if ry0 > 0:  # top
        mirror = np.maximum(ry0 - 1 - steps, 0)
        accumulate(
            (steps + 1)[:, np.newaxis, np.newaxis],
            smooth[ry0 - 1, cols][np.newaxis, :, :],
            residual[mirror][:, cols],
        )
    if ry1 < ctx_h:  # bottom
        mirror = np.minimum(ry1 + (s - 1 - steps), ctx_h - 1)
        accumulate(
            (s - steps)[:, np.newaxis, np.newaxis],
            smooth[ry1, cols][np.newaxis, :, :],
            residual[mirror][:, cols],
        )

    filled = base_sum / weight_sum + texture * (texture_sum / weight_sum)
    return np.clip(filled, 0, 255)


def _to_patch(region_pixels: np.ndarray, rgb: np.ndarray) -> np.ndarray:
    """Merge synthesized RGB with the region's untouched extra channels."""
    patch = region_pixels.copy()
    patch[:, :, :3] = np.rint(np.clip(rgb, 0, 255)).astype(np.uint8)
    return patch


def _fill(image: np.ndarray, region: WatermarkRegion, state: "EngineState") -> np.ndarray:
    return content_aware_fill(
        image,
        region,
        falloff=state.fill_falloff,
        texture=state.fill_texture,
        smoothing=state.fill_smoothing,
    )


def _reverse_alpha(
    image: np.ndarray,
    region: WatermarkRegion,
    state: "EngineState",
    alpha: np.ndarray,
) -> np.ndarray:
    """Reverse the blend, handing near-opaque pixels over to the fill."""
    profile = state.profile
    region_pixels = image[region.slices]

    restored = reverse_blend(
        region_pixels,
        alpha,
        logo_value=profile.logo_value,
        alpha_threshold=profile.alpha_threshold,
        max_alpha=profile.max_alpha,
    )[:, :, :3]

    above = state.fill_alpha_above
    if above < 1.0 and (alpha >= above).any():
        handover = np.clip((alpha - above) / (1.0 - above), 0.0, 1.0)[:, :, np.newaxis]
        filled = _fill(image, region, state)
        restored = restored * (1.0 - handover) + filled * handover

    return restored


def synthesize_region(
    image: np.ndarray,
    region: WatermarkRegion,
    state: "EngineState",
) -> PatchResult:
    """
    Synthesize replacement pixels for a region, choosing the strategy.

    Args:
        image: (H, W, C) uint8 source, C in (3, 4); not modified
        region: Watermark region inside the image
        state: Engine state holding the profile, alpha maps and fill settings

    Returns:
        PatchResult with the (size, size, C) patch and the method used
    """
    h, w = image.shape[:2]
    region_pixels = image[region.slices]

    alpha = None
    if state.strategy in ("auto", "reverse_alpha"):
        alpha_map = state.alpha_map_for(w, h)
        if alpha_map is not None:
            alpha = fit_alpha_map(alpha_map, region.size)

    if alpha is not None and state.strategy == "auto":
        if not detect_overlay(region_pixels, alpha, state.profile.logo_value):
            logger.debug("Overlay not detected, using content-aware fill")
            alpha = None
    elif alpha is None and state.strategy == "reverse_alpha":
        logger.warning(
            f"No alpha map for a {w}x{h} image, falling back to content-aware fill"
        )

    if alpha is not None:
        rgb = _reverse_alpha(image, region, state, alpha)
        method = "reverse_alpha"
    else:
        rgb = _fill(image, region, state)
        method = "fill"

    return PatchResult(patch=_to_patch(region_pixels, rgb), method=method)


def synthesize(image: np.ndarray, region: WatermarkRegion, state: "EngineState") -> np.ndarray:
    """Return only the synthesized (size, size, C) patch for a region."""
    return synthesize_region(image, region, state).patch
