"""Data models for the ad video generator."""

from .scene import Scene, SceneKind
from .script import Script
from .product import Product
from .media import (
    AspectRatio,
    Dimensions,
    VideoArtifact,
    resolve_aspect_ratio,
    resolve_dimensions,
)

__all__ = [
    "Scene",
    "SceneKind",
    "Script",
    "Product",
    "AspectRatio",
    "Dimensions",
    "VideoArtifact",
    "resolve_aspect_ratio",
    "resolve_dimensions",
]
