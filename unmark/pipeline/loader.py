"""
Asset Loader

Reads the watermark profile and its captured alpha maps from disk.

Alpha maps are the logo rendered on a pure black background. On black,
alpha blending a white logo gives pixel = alpha * 255, so the per-pixel
opacity is max(R, G, B) / 255.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

import numpy as np
from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError

from ..config import DEFAULT_PROFILE_PATH
from ..errors import InitializationError
from ..schemas import WatermarkProfile

logger = logging.getLogger(__name__)


def load_profile(path: Optional[Path] = None) -> WatermarkProfile:
    """
    Load and validate a watermark profile.

    Args:
        path: Profile JSON file; the bundled default if None

    Returns:
        Validated WatermarkProfile

    Raises:
        InitializationError: If the file is missing, unreadable or invalid
    """
    path = Path(path) if path is not None else DEFAULT_PROFILE_PATH

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise InitializationError(f"Watermark profile not found: {path}") from e
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InitializationError(f"Could not read watermark profile {path}: {e}") from e

    try:
        profile = WatermarkProfile.model_validate(raw)
    except ValidationError as e:
        raise InitializationError(f"Invalid watermark profile {path}: {e}") from e

    logger.debug(f"Loaded watermark profile '{profile.name}' from {path}")
    return profile


@lru_cache(maxsize=1)
def default_profile() -> WatermarkProfile:
    """Bundled profile, parsed once per process."""
    return load_profile(DEFAULT_PROFILE_PATH)


def load_alpha_map(path: Path, expected_size: Optional[int] = None) -> np.ndarray:
    """
    Load an alpha map image and derive a read-only float32 opacity array.

    Args:
        path: Image of the logo rendered on black
        expected_size: Required side length, checked if given

    Returns:
        (size, size) float32 array with values in [0, 1]

    Raises:
        InitializationError: If the file is missing, undecodable or not square
    """
    try:
        with Image.open(path) as img:
            arr = np.asarray(img.convert("RGB"), dtype=np.float32)
    except FileNotFoundError as e:
        raise InitializationError(f"Alpha map not found: {path}") from e
    except (OSError, UnidentifiedImageError) as e:
        raise InitializationError(f"Could not decode alpha map {path}: {e}") from e

    h, w = arr.shape[:2]
    if h != w:
        raise InitializationError(f"Alpha map {path} must be square, got {w}x{h}")
    if expected_size is not None and h != expected_size:
        raise InitializationError(
            f"Alpha map {path} is {w}x{h}, expected {expected_size}x{expected_size}"
        )

    alpha_map = arr.max(axis=2) / 255.0
    alpha_map.flags.writeable = False
    return alpha_map


def load_alpha_maps(
    profile: WatermarkProfile,
    directory: Optional[Path],
) -> Mapping[int, np.ndarray]:
    """
    Load every alpha map a profile names from a directory.

    Returns an empty mapping when no directory is configured.
    """
    if directory is None:
        return MappingProxyType({})

    directory = Path(directory)
    if not directory.is_dir():
        raise InitializationError(f"Alpha map directory not found: {directory}")

    maps = {}
    for size, filename in sorted(profile.alpha_maps.items()):
        maps[size] = load_alpha_map(directory / filename, expected_size=size)
        logger.debug(f"Loaded {size}px alpha map from {directory / filename}")

    return MappingProxyType(maps)
