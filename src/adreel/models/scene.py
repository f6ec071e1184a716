"""Scene data model."""

from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_BACKGROUND = "#667eea"
DEFAULT_TEXT_COLOR = "#ffffff"


class SceneKind(str, Enum):
    """Narrative role of a scene."""
    HOOK = "hook"
    BENEFITS = "benefits"
    CTA = "cta"
    CLOSING = "closing"
    GENERIC = "generic"

    @property
    def default_background(self) -> str:
        return KIND_BACKGROUNDS[self]


KIND_BACKGROUNDS = {
    SceneKind.HOOK: "#ff6b6b",
    SceneKind.BENEFITS: "#4ecdc4",
    SceneKind.CTA: "#45b7d1",
    SceneKind.CLOSING: "#96ceb4",
    SceneKind.GENERIC: DEFAULT_BACKGROUND,
}


class Scene(BaseModel):
    """One timed visual beat of the video."""

    index: int = Field(default=0, description="Playback position (0-based)", ge=0)
    duration_seconds: float = Field(
        ..., alias="durationSeconds", description="Scene duration in seconds", gt=0
    )
    text: str = Field(..., description="Display text; may be empty")
    kind: SceneKind = Field(..., description="Narrative role of the scene")
    background_color: Optional[str] = Field(
        None, alias="backgroundColor", description="Gradient start color"
    )
    text_color: Optional[str] = Field(
        None, alias="textColor", description="Primary text color"
    )
    animation: Optional[str] = Field(None, description="Decoration treatment tag")
    focal_image: Optional[Path] = Field(
        None, alias="focalImageRef", description="Local image shown above the text"
    )

    class Config:
        """Pydantic config."""
        frozen = True
        populate_by_name = True

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value: Any) -> Any:
        # Unknown kinds render as generic scenes; a missing kind is still an error.
        if isinstance(value, str):
            normalized = value.strip().lower()
            try:
                return SceneKind(normalized)
            except ValueError:
                return SceneKind.GENERIC
        return value

    @field_validator("background_color", "text_color", "animation", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def resolved_background(self) -> str:
        """Background color, falling back to the kind's default."""
        return self.background_color or self.kind.default_background

    @property
    def resolved_text_color(self) -> str:
        return self.text_color or DEFAULT_TEXT_COLOR

    @property
    def decoration_tag(self) -> str:
        """Tag selecting the decoration; the kind stands in for a missing animation."""
        return (self.animation or self.kind.value).strip().lower()

    @property
    def shows_price(self) -> bool:
        return self.kind in (SceneKind.CTA, SceneKind.CLOSING)
