"""Rasterize a scene into a single still frame."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageChops, ImageColor, ImageDraw, ImageFilter, ImageFont, ImageOps

from ..errors import SceneRenderFailure
from ..models import Dimensions, Scene
from ..models.scene import DEFAULT_TEXT_COLOR
from .layout import (
    IMAGE_CORNER_RADIUS,
    Box,
    SceneLayout,
    TextLine,
    font_size_for,
    layout_scene,
)

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

DARKEN_OFFSET = 30
FALLBACK_DARK: RGB = (0x44, 0x44, 0x44)
PRICE_COLOR: RGB = (0xFF, 0xEB, 0x3B)
SHADOW_COLOR = (0, 0, 0, 178)
SHADOW_OFFSET = (2, 2)
SHADOW_BLUR = 2

FONT_CANDIDATES: Sequence[str] = (
    "DejaVuSans-Bold.ttf",
    "Arial Bold.ttf",
    "arialbd.ttf",
    "LiberationSans-Bold.ttf",
    "Helvetica.ttc",
)


@dataclass(frozen=True)
class RenderedFrame:
    """A frame written to the scratch area for one scene."""

    scene_index: int
    path: Path
    duration_seconds: float
    width: int
    height: int


def parse_color(value: Optional[str]) -> Optional[RGB]:
    """Parse a CSS-style color (hex, rgb(), or name) into RGB, or None."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = ImageColor.getrgb(value.strip())
    except ValueError:
        return None
    return parsed[:3]


def darker_color(value: Optional[str]) -> RGB:
    """Subtract a fixed offset from each channel, clamping at zero.

    Anything that is not a recognizable color yields a fixed dark gray.
    """
    rgb = parse_color(value)
    if rgb is None:
        return FALLBACK_DARK
    return tuple(max(0, channel - DARKEN_OFFSET) for channel in rgb)


def gradient_background(dimensions: Dimensions, start: RGB, end: RGB) -> Image.Image:
    """Diagonal linear gradient from the top-left to the bottom-right corner."""
    width, height = dimensions
    xs = np.arange(width, dtype=np.float64)[None, :]
    ys = np.arange(height, dtype=np.float64)[:, None]
    # Projection of each pixel onto the (width, height) diagonal.
    t = (xs * width + ys * height) / float(width * width + height * height)
    mask = Image.fromarray(np.clip(t * 255.0, 0, 255).astype(np.uint8))
    return Image.composite(
        Image.new("RGB", (width, height), end),
        Image.new("RGB", (width, height), start),
        mask,
    )


def load_font(size: float, font_path: Optional[Path] = None) -> ImageFont.FreeTypeFont:
    """Load a bold font at ``size`` pixels, falling back to Pillow's bundled font."""
    pixel_size = max(1, int(round(size)))
    candidates = [str(font_path)] if font_path else []
    candidates.extend(FONT_CANDIDATES)
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, pixel_size)
        except OSError:
            continue
    logger.debug("No TrueType font found, using Pillow default")
    return ImageFont.load_default(size=pixel_size)


def load_focal_image(path: Optional[Path]) -> Optional[Image.Image]:
    """Open the focal image, or return None if it is missing or unreadable."""
    if path is None:
        return None
    path = Path(path)
    if not path.is_file():
        logger.warning(f"Focal image not found, rendering without it: {path}")
        return None
    try:
        with Image.open(path) as image:
            image.load()
            return image.convert("RGBA")
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load focal image {path}: {e}")
        return None


class FrameRenderer:
    """Draws scenes onto frames.

    Holds no per-run state; one instance may serve concurrent runs.
    """

    def __init__(self, font_path: Optional[Path] = None) -> None:
        self._font_path = font_path

    def compose(
        self,
        scene: Scene,
        dimensions: Dimensions,
        price: Optional[str] = None,
    ) -> Image.Image:
        """Build the frame image in memory."""
        font = load_font(font_size_for(dimensions.width), self._font_path)
        focal = load_focal_image(scene.focal_image)
        layout = layout_scene(
            scene,
            dimensions,
            measure=font.getlength,
            price=price,
            has_image=focal is not None,
        )

        background = scene.resolved_background
        start = parse_color(background)
        if start is None:
            logger.warning(
                f"Scene {scene.index}: unrecognized background {background!r}, using kind default"
            )
            start = parse_color(scene.kind.default_background)
        end = darker_color(background)
        canvas = gradient_background(dimensions, start, end).convert("RGBA")

        if focal is not None and layout.image_box is not None:
            _paste_rounded(canvas, focal, layout.image_box)

        text_color = parse_color(scene.text_color) or parse_color(DEFAULT_TEXT_COLOR)
        _draw_text_block(canvas, layout.lines, font, text_color)
        if layout.price_line is not None:
            price_font = load_font(layout.price_font_size, self._font_path)
            _draw_text_block(canvas, (layout.price_line,), price_font, PRICE_COLOR)

        canvas = _draw_decoration(canvas, layout)
        return canvas.convert("RGB")

    def render(
        self,
        scene: Scene,
        dimensions: Dimensions,
        output_path: Path,
        price: Optional[str] = None,
    ) -> RenderedFrame:
        """Render ``scene`` and write it as PNG to ``output_path``.

        Raises:
            SceneRenderFailure: If composing or writing the frame fails.
        """
        try:
            image = self.compose(scene, dimensions, price=price)
            image.save(output_path, format="PNG")
        except Exception as e:
            raise SceneRenderFailure(scene.index, f"{type(e).__name__}: {e}") from e

        logger.debug(f"Rendered scene {scene.index} -> {output_path}")
        return RenderedFrame(
            scene_index=scene.index,
            path=Path(output_path),
            duration_seconds=scene.duration_seconds,
            width=image.width,
            height=image.height,
        )


def _paste_rounded(canvas: Image.Image, image: Image.Image, box: Box) -> None:
    left, top, right, bottom = box
    size = (right - left, bottom - top)
    fitted = ImageOps.fit(image, size, method=Image.Resampling.LANCZOS)

    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).rounded_rectangle(
        (0, 0, size[0] - 1, size[1] - 1), radius=IMAGE_CORNER_RADIUS, fill=255
    )
    mask = ImageChops.multiply(mask, fitted.getchannel("A"))
    canvas.paste(fitted, (left, top), mask)


def _draw_text_block(
    canvas: Image.Image,
    lines: Sequence[TextLine],
    font: ImageFont.FreeTypeFont,
    color: RGB,
) -> None:
    if not lines:
        return

    shadow = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    shadow_draw = ImageDraw.Draw(shadow)
    dx, dy = SHADOW_OFFSET
    for line in lines:
        shadow_draw.text((line.x + dx, line.y + dy), line.text, font=font, fill=SHADOW_COLOR, anchor="mm")
    shadow = shadow.filter(ImageFilter.GaussianBlur(SHADOW_BLUR))
    canvas.alpha_composite(shadow)

    draw = ImageDraw.Draw(canvas)
    for line in lines:
        draw.text((line.x, line.y), line.text, font=font, fill=(*color, 255), anchor="mm")


def _draw_decoration(canvas: Image.Image, layout: SceneLayout) -> Image.Image:
    decoration = layout.decoration

    # Each translucent shape is composited separately so overlaps accumulate.
    for circle in decoration.circles:
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        ImageDraw.Draw(overlay).ellipse(circle.bbox, fill=circle.color)
        canvas = Image.alpha_composite(canvas, overlay)

    if decoration.rects:
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        for left, top, right, bottom in decoration.rects:
            draw.rectangle((left, top, right - 1, bottom - 1), fill=decoration.fill)
        canvas = Image.alpha_composite(canvas, overlay)

    if decoration.outline is not None:
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        ImageDraw.Draw(overlay).rectangle(
            decoration.outline,
            outline=decoration.outline_color,
            width=decoration.outline_width,
        )
        canvas = Image.alpha_composite(canvas, overlay)

    return canvas
