"""Output geometry and the finished video descriptor."""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from pydantic import BaseModel, Field


class Dimensions(NamedTuple):
    """Pixel size of a frame."""

    width: int
    height: int


class AspectRatio(str, Enum):
    """Supported output aspect ratios."""
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    SQUARE = "1:1"

    @property
    def dimensions(self) -> Dimensions:
        return ASPECT_DIMENSIONS[self]


ASPECT_DIMENSIONS = {
    AspectRatio.LANDSCAPE: Dimensions(1280, 720),
    AspectRatio.PORTRAIT: Dimensions(720, 1280),
    AspectRatio.SQUARE: Dimensions(1000, 1000),
}

DEFAULT_ASPECT_RATIO = AspectRatio.LANDSCAPE


def resolve_aspect_ratio(value: object) -> AspectRatio:
    """Map a ratio string to a supported ratio, defaulting to 16:9."""
    if isinstance(value, AspectRatio):
        return value
    try:
        return AspectRatio(str(value).strip())
    except ValueError:
        return DEFAULT_ASPECT_RATIO


def resolve_dimensions(value: object) -> Dimensions:
    """Exact frame size for a ratio string (unknown ratios get 1280x720)."""
    return resolve_aspect_ratio(value).dimensions


class VideoArtifact(BaseModel):
    """Finished video handed to the caller."""

    video_id: str = Field(..., description="Run identifier")
    file_name: str = Field(..., description="File name inside the output area")
    path: Path = Field(..., description="Absolute location of the video")
    size_bytes: int = Field(..., description="File size in bytes", ge=0)
    width: int = Field(..., description="Frame width in pixels", gt=0)
    height: int = Field(..., description="Frame height in pixels", gt=0)
    duration_seconds: float = Field(..., description="Nominal duration", ge=0)
    aspect_ratio: AspectRatio = Field(default=DEFAULT_ASPECT_RATIO)
    created_at: datetime = Field(default_factory=datetime.now)

    class Config:
        """Pydantic config."""
        frozen = True

    def to_summary(self) -> dict:
        """JSON-ready descriptor for the API layer."""
        return {
            "videoId": self.video_id,
            "fileName": self.file_name,
            "size": self.size_bytes,
            "width": self.width,
            "height": self.height,
            "duration": self.duration_seconds,
            "aspectRatio": self.aspect_ratio.value,
            "createdAt": self.created_at.isoformat(),
        }
