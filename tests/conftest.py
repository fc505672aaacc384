"""Shared fixtures for engine tests."""

import asyncio
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from unmark.config import Settings
from unmark.engine import WatermarkEngine


def make_settings(**overrides) -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, **overrides)


def make_alpha_map(size: int, peak: float = 0.75) -> np.ndarray:
    """Radial logo opacity: strongest at the centre, zero in the corners."""
    coords = np.arange(size, dtype=np.float32) - (size - 1) / 2.0
    radius = np.sqrt(coords[np.newaxis, :] ** 2 + coords[:, np.newaxis] ** 2)
    return np.clip(1.0 - radius / (size * 0.45), 0.0, 1.0) * peak


def quantize_alpha(alpha: np.ndarray) -> np.ndarray:
    """Alpha as it comes back from an 8-bit PNG."""
    return np.round(alpha * 255.0) / 255.0


def apply_overlay(image: np.ndarray, x: int, y: int, alpha: np.ndarray, logo_value: int = 255) -> np.ndarray:
    """Composite a white logo with the given opacity at (x, y)."""
    size = alpha.shape[0]
    out = image.copy()
    region = out[y:y + size, x:x + size, :3].astype(np.float64)
    a = alpha[:, :, np.newaxis].astype(np.float64)
    blended = a * logo_value + (1.0 - a) * region
    out[y:y + size, x:x + size, :3] = np.clip(np.round(blended), 0, 255).astype(np.uint8)
    return out


def textured_image(width: int, height: int, seed: int = 0) -> np.ndarray:
    """Dark RGBA image with a gradient and mild noise."""
    rng = np.random.default_rng(seed)
    xs = np.linspace(20, 70, width, dtype=np.float32)[np.newaxis, :]
    ys = np.linspace(0, 20, height, dtype=np.float32)[:, np.newaxis]
    base = xs + ys
    image = np.zeros((height, width, 4), dtype=np.uint8)
    for c, offset in enumerate((0, 10, 20)):
        noise = rng.integers(-6, 7, size=(height, width))
        image[:, :, c] = np.clip(base + offset + noise, 0, 255).astype(np.uint8)
    image[:, :, 3] = 255
    return image


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def engine(settings) -> WatermarkEngine:
    return asyncio.run(WatermarkEngine.create(settings))


@pytest.fixture
def gray_image() -> np.ndarray:
    image = np.full((100, 100, 4), 128, dtype=np.uint8)
    image[:, :, 3] = 255
    return image


@pytest.fixture
def alpha_map_dir(tmp_path: Path) -> Path:
    """Directory with 48px and 96px alpha maps as the default profile names them."""
    directory = tmp_path / "alpha"
    directory.mkdir()
    for size in (48, 96):
        values = np.round(make_alpha_map(size) * 255.0).astype(np.uint8)
        rgb = np.stack([values] * 3, axis=2)
        Image.fromarray(rgb).save(directory / f"bg_{size}.png")
    return directory


@pytest.fixture
def alpha_engine(alpha_map_dir) -> WatermarkEngine:
    return asyncio.run(WatermarkEngine.create(make_settings(alpha_map_dir=alpha_map_dir)))
