"""
Engine Configuration

Environment-based configuration for the watermark engine.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


ASSETS_DIR = Path(__file__).parent / "assets"
DEFAULT_PROFILE_PATH = ASSETS_DIR / "default_profile.json"

Strategy = Literal["auto", "fill", "reverse_alpha"]


class Settings(BaseSettings):
    """Engine settings loaded from UNMARK_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="UNMARK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Assets
    profile_path: Optional[Path] = None  # None = bundled default profile
    alpha_map_dir: Optional[Path] = None  # None = no alpha maps, fill only

    # Synthesis
    strategy: Strategy = "auto"
    fill_falloff: float = Field(default=1.0, gt=0.0)
    fill_texture: float = Field(default=1.0, ge=0.0, le=1.0)
    fill_smoothing: int = Field(default=5, ge=1)
    fill_alpha_above: float = Field(default=0.9, gt=0.0, le=1.0)

    # Batch processing
    max_concurrency: int = Field(default=4, ge=1)

    # Logging
    log_level: str = "INFO"

    @field_validator("fill_smoothing")
    @classmethod
    def validate_smoothing(cls, v: int) -> int:
        if v % 2 == 0:
            raise ValueError("fill_smoothing must be odd")
        return v

    @property
    def resolved_profile_path(self) -> Path:
        """Profile path, falling back to the bundled default."""
        return self.profile_path or DEFAULT_PROFILE_PATH


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
