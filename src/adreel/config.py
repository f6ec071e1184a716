"""Configuration management."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    return float(value) if value else None


def _optional_path(name: str) -> Optional[Path]:
    value = os.getenv(name, "").strip()
    return Path(value) if value else None


def _default_ffmpeg_binary() -> str:
    """Resolve the ffmpeg executable the way moviepy does."""
    explicit = os.getenv("FFMPEG_BINARY", "").strip()
    if explicit and explicit not in ("auto-detect", "ffmpeg-imageio"):
        return explicit

    from moviepy.config import FFMPEG_BINARY

    return FFMPEG_BINARY


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key (copywriter agent)"
    )

    # Paths
    workspace: Path = Field(
        default_factory=lambda: Path(os.getenv("ADREEL_WORKSPACE", ".")),
        description="Workspace directory"
    )
    temp_dir: Optional[Path] = Field(
        default_factory=lambda: _optional_path("ADREEL_TEMP_DIR"),
        description="Scratch area for frames and encoder manifests"
    )
    output_dir: Optional[Path] = Field(
        default_factory=lambda: _optional_path("ADREEL_OUTPUT_DIR"),
        description="Directory receiving finished videos"
    )
    font_path: Optional[Path] = Field(
        default_factory=lambda: _optional_path("ADREEL_FONT_PATH"),
        description="TrueType font used for scene text"
    )

    # Rendering / encoding
    max_workers: int = Field(
        default_factory=lambda: int(os.getenv("ADREEL_MAX_WORKERS", "4")),
        description="Concurrent scene renders per run",
        ge=1
    )
    encode_timeout: float = Field(
        default_factory=lambda: float(os.getenv("ADREEL_ENCODE_TIMEOUT", "300")),
        description="Seconds before the encoder process is killed",
        gt=0
    )
    frame_duration: Optional[float] = Field(
        default_factory=lambda: _optional_float("ADREEL_FRAME_DURATION"),
        description="Fixed seconds per frame; unset honors scene durations"
    )
    ffmpeg_binary: Optional[str] = Field(
        default_factory=lambda: os.getenv("FFMPEG_BINARY") or None,
        description="ffmpeg executable; resolved through moviepy when unset"
    )

    # Model settings
    default_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Default Claude model"
    )

    class Config:
        """Pydantic config."""
        frozen = False

    @property
    def resolved_temp_dir(self) -> Path:
        return self.temp_dir or self.workspace / "temp"

    @property
    def resolved_output_dir(self) -> Path:
        return self.output_dir or self.workspace / "output"

    def resolve_ffmpeg_binary(self) -> str:
        """Return the ffmpeg executable to invoke."""
        if self.ffmpeg_binary and self.ffmpeg_binary not in ("auto-detect", "ffmpeg-imageio"):
            return self.ffmpeg_binary
        return _default_ffmpeg_binary()

    def validate_required(self) -> None:
        """Validate that required credentials are set."""
        if not self.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")


# Global config instance
config = Config()
