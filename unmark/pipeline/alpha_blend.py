"""
Reverse Alpha Blending

Undoes a white logo composited over the image with a known opacity map.

The overlay blending formula is:
    output = alpha * logo_value + (1 - alpha) * original

To recover the original:
    original = (output - alpha * logo_value) / (1 - alpha)
"""

import cv2
import numpy as np


def fit_alpha_map(alpha_map: np.ndarray, size: int) -> np.ndarray:
    """Resize an alpha map to the region size (regions shrink on small images)."""
    if alpha_map.shape[0] == size:
        return alpha_map
    return cv2.resize(alpha_map, (size, size), interpolation=cv2.INTER_AREA)


def detect_overlay(
    region: np.ndarray,
    alpha: np.ndarray,
    logo_value: int = 255,
) -> bool:
    """
    Check whether the overlay is actually present in a region.

    High-alpha pixels of a blended region are brighter than its low-alpha
    pixels by roughly alpha * logo_value. Regions that never received the
    overlay fail one of the two brightness checks.

    Args:
        region: (size, size, C) pixels, RGB first
        alpha: (size, size) opacity map matching the region

    Returns:
        True if the overlay is likely present
    """
    gray = region[:, :, :3].astype(np.float32).mean(axis=2)

    high = alpha >= 0.1
    low = alpha < 0.05
    if not (high.any() and low.any()):
        return False

    high_brightness = float(gray[high].mean())
    low_brightness = float(gray[low].mean())

    # At least half the theoretical brightness lift
    expected_diff = float(alpha[high].mean()) * logo_value * 0.5
    if high_brightness - low_brightness < expected_diff:
        return False

    very_high = alpha >= 0.5
    if very_high.any():
        avg_alpha = float(alpha[very_high].mean())
        expected = low_brightness * (1 - avg_alpha) + logo_value * avg_alpha
        if float(gray[very_high].mean()) < expected * 0.7:
            return False

    return True


def reverse_blend(
    region: np.ndarray,
    alpha: np.ndarray,
    logo_value: int = 255,
    alpha_threshold: float = 0.002,
    max_alpha: float = 0.99,
) -> np.ndarray:
    """
    Remove the overlay from a region by reversing alpha blending.

    Only the RGB channels are restored; pixels with alpha below the threshold
    are returned unchanged.

    Args:
        region: (size, size, C) uint8 pixels
        alpha: (size, size) opacity map matching the region
        logo_value: Brightness of the overlay logo
        alpha_threshold: Ignore noise-level alpha below this
        max_alpha: Cap to avoid division by near-zero

    Returns:
        Restored (size, size, C) float32 array, unclipped
    """
    result = region.astype(np.float32)
    rgb = result[:, :, :3]

    mask = alpha >= alpha_threshold
    capped = np.minimum(alpha, max_alpha)[:, :, np.newaxis]

    restored = (rgb - capped * logo_value) / (1.0 - capped)
    result[:, :, :3] = np.where(mask[:, :, np.newaxis], restored, rgb)

    return result
