"""Scene rendering and video assembly."""

from .layout import (
    SceneLayout,
    TextLine,
    Decoration,
    font_size_for,
    wrap_text,
    place_focal_image,
    decoration_for,
    layout_scene,
)
from .frame import (
    FrameRenderer,
    RenderedFrame,
    parse_color,
    darker_color,
    gradient_background,
    load_font,
)
from .timeline import Timeline, TimelineEntry, build_timeline
from .encoder import FFmpegEncoder
from .workspace import Workspace, RunContext, safe_id
from .pipeline import VideoPipeline

__all__ = [
    # Layout
    "SceneLayout",
    "TextLine",
    "Decoration",
    "font_size_for",
    "wrap_text",
    "place_focal_image",
    "decoration_for",
    "layout_scene",
    # Frames
    "FrameRenderer",
    "RenderedFrame",
    "parse_color",
    "darker_color",
    "gradient_background",
    "load_font",
    # Assembly
    "Timeline",
    "TimelineEntry",
    "build_timeline",
    "FFmpegEncoder",
    "Workspace",
    "RunContext",
    "safe_id",
    "VideoPipeline",
]
