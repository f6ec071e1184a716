"""Script data model and ingestion gate."""

from pathlib import Path
from typing import Any, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from ..errors import InvalidScript
from .scene import Scene

DURATION_TOLERANCE = 1e-3


class Script(BaseModel):
    """Ordered scenes making up one video."""

    scenes: List[Scene] = Field(..., description="Scenes in playback order")
    title: Optional[str] = Field(None, description="Product or campaign title")
    price: Optional[str] = Field(None, description="Secondary line for CTA/closing scenes")
    declared_total: Optional[float] = Field(
        None,
        alias="totalDurationSeconds",
        exclude=True,
        description="Total duration stated by the producer; checked against the scenes",
    )

    class Config:
        """Pydantic config."""
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def _assign_indices(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        scenes = data.get("scenes")
        if not isinstance(scenes, list):
            return data

        indexed = []
        for position, scene in enumerate(scenes):
            if isinstance(scene, Mapping) and scene.get("index") is None:
                scene = {**scene, "index": position}
            indexed.append(scene)
        return {**data, "scenes": indexed}

    @model_validator(mode="after")
    def _check_sequence(self) -> "Script":
        if not self.scenes:
            raise ValueError("script must contain at least one scene")

        indices = [scene.index for scene in self.scenes]
        if indices != list(range(len(self.scenes))):
            raise ValueError(
                f"scene indices must be contiguous from 0 in order, got {indices}"
            )
        if self.total_duration_seconds <= 0:
            raise ValueError("total duration must be positive")
        if (
            self.declared_total is not None
            and abs(self.declared_total - self.total_duration_seconds) > DURATION_TOLERANCE
        ):
            raise ValueError(
                f"totalDurationSeconds is {self.declared_total} "
                f"but scenes add up to {self.total_duration_seconds}"
            )
        return self

    @property
    def total_duration_seconds(self) -> float:
        return sum(scene.duration_seconds for scene in self.scenes)

    @classmethod
    def parse(cls, data: Any) -> "Script":
        """Validate raw script data, raising InvalidScript on any defect."""
        if isinstance(data, Script):
            return data
        if not isinstance(data, Mapping):
            raise InvalidScript(f"script must be a mapping, got {type(data).__name__}")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidScript(f"invalid script: {e}") from e

    @classmethod
    def from_yaml(cls, path: Path) -> "Script":
        """Load and validate a script from a YAML (or JSON) file."""
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise InvalidScript(f"cannot read script {path}: {e}") from e
        return cls.parse(data)

    def to_yaml(self, path: Path) -> None:
        """Save script to YAML file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(
                self.model_dump(mode="json", exclude_none=True),
                f,
                default_flow_style=False,
                sort_keys=False,
            )
