"""Pure geometry for scene frames.

Nothing here touches pixels: every function maps a scene and frame size to
coordinates, so the layout can be checked without a drawing backend. Text
measurement is injected as a ``measure(text) -> width`` callable.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..models import Dimensions, Scene

Measure = Callable[[str], float]
RGBA = Tuple[int, int, int, int]
Box = Tuple[int, int, int, int]

FONT_WIDTH_RATIO = 0.06
FONT_SIZE_CAP = 48
LINE_HEIGHT_RATIO = 1.2
TEXT_WIDTH_RATIO = 0.8
TEXT_TOP_RATIO = 0.7
PRICE_SCALE = 1.2
PRICE_OFFSET_RATIO = 2.0

IMAGE_SIZE_RATIO = 0.4
IMAGE_TOP_RATIO = 0.15
IMAGE_CORNER_RADIUS = 20

PULSE_CENTER_RATIO = 0.1
PULSE_BASE_RADIUS = 20
PULSE_RADIUS_STEP = 10
PULSE_RINGS = 3
PULSE_BASE_ALPHA = 0.3
PULSE_ALPHA_STEP = 0.1
PULSE_COLOR = (255, 255, 255)

BRACKET_LENGTH = 50
BRACKET_THICKNESS = 5
BRACKET_COLOR: RGBA = (255, 235, 59, 204)

BORDER_INSET = 10
BORDER_WIDTH = 2
BORDER_COLOR: RGBA = (255, 255, 255, 77)

PULSE_TAGS = frozenset({"pulse"})
BRACKET_TAGS = frozenset({"zoom_in", "cta"})


@dataclass(frozen=True)
class TextLine:
    """A wrapped line anchored at its center point."""

    text: str
    x: float
    y: float


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    radius: float
    color: RGBA

    @property
    def bbox(self) -> Tuple[float, float, float, float]:
        return (
            self.cx - self.radius,
            self.cy - self.radius,
            self.cx + self.radius,
            self.cy + self.radius,
        )


@dataclass(frozen=True)
class Decoration:
    """Ornamental shapes for one frame."""

    style: str
    circles: Tuple[Circle, ...] = ()
    rects: Tuple[Box, ...] = ()
    fill: Optional[RGBA] = None
    outline: Optional[Box] = None
    outline_color: Optional[RGBA] = None
    outline_width: int = 0


@dataclass(frozen=True)
class SceneLayout:
    """Complete geometry for rendering one scene."""

    dimensions: Dimensions
    font_size: float
    line_height: float
    lines: Tuple[TextLine, ...]
    image_box: Optional[Box]
    decoration: Decoration
    price_line: Optional[TextLine] = None
    price_font_size: float = 0.0


def font_size_for(width: int) -> float:
    """Primary font size: 6% of the frame width, capped."""
    return min(width * FONT_WIDTH_RATIO, FONT_SIZE_CAP)


def wrap_text(text: str, max_width: float, measure: Measure) -> List[str]:
    """Greedily pack words into lines no wider than ``max_width``.

    A word joins the current line unless that would overflow and the line
    already holds a word; a single overlong word gets a line of its own.
    """
    lines: List[str] = []
    current: List[str] = []
    for word in text.split():
        candidate = " ".join(current + [word])
        if current and measure(candidate) > max_width:
            lines.append(" ".join(current))
            current = [word]
        else:
            current.append(word)
    if current:
        lines.append(" ".join(current))
    return lines


def place_text_lines(
    lines: List[str],
    dimensions: Dimensions,
    line_height: float,
) -> Tuple[TextLine, ...]:
    """Center each line horizontally, stacking down from 70% of the height."""
    x = dimensions.width / 2
    top = dimensions.height * TEXT_TOP_RATIO
    return tuple(
        TextLine(text=line, x=x, y=top + i * line_height)
        for i, line in enumerate(lines)
    )


def place_price_line(
    price: str,
    lines: Tuple[TextLine, ...],
    dimensions: Dimensions,
    font_size: float,
) -> TextLine:
    """Secondary line sitting a fixed multiple of the font size below the text block."""
    anchor_y = lines[-1].y if lines else dimensions.height * TEXT_TOP_RATIO
    return TextLine(
        text=price,
        x=dimensions.width / 2,
        y=anchor_y + font_size * PRICE_OFFSET_RATIO,
    )


def place_focal_image(dimensions: Dimensions) -> Box:
    """Square box for the focal image: centered, 15% from the top."""
    width, height = dimensions
    size = int(round(min(width * IMAGE_SIZE_RATIO, height * IMAGE_SIZE_RATIO)))
    left = (width - size) // 2
    top = int(round(height * IMAGE_TOP_RATIO))
    return (left, top, left + size, top + size)


def _pulse(dimensions: Dimensions) -> Decoration:
    cx = dimensions.width * PULSE_CENTER_RATIO
    cy = dimensions.height * PULSE_CENTER_RATIO
    circles = []
    for ring in range(PULSE_RINGS):
        alpha = PULSE_BASE_ALPHA - ring * PULSE_ALPHA_STEP
        circles.append(
            Circle(
                cx=cx,
                cy=cy,
                radius=PULSE_BASE_RADIUS + ring * PULSE_RADIUS_STEP,
                color=(*PULSE_COLOR, round(alpha * 255)),
            )
        )
    return Decoration(style="pulse", circles=tuple(circles))


def _brackets(dimensions: Dimensions) -> Decoration:
    width, height = dimensions
    length, thick = BRACKET_LENGTH, BRACKET_THICKNESS
    rects = (
        # top-left
        (0, 0, length, thick),
        (0, 0, thick, length),
        # top-right
        (width - length, 0, width, thick),
        (width - thick, 0, width, length),
        # bottom-left
        (0, height - thick, length, height),
        (0, height - length, thick, height),
        # bottom-right
        (width - length, height - thick, width, height),
        (width - thick, height - length, width, height),
    )
    return Decoration(style="brackets", rects=rects, fill=BRACKET_COLOR)


def _border(dimensions: Dimensions) -> Decoration:
    width, height = dimensions
    return Decoration(
        style="border",
        outline=(BORDER_INSET, BORDER_INSET, width - BORDER_INSET, height - BORDER_INSET),
        outline_color=BORDER_COLOR,
        outline_width=BORDER_WIDTH,
    )


def decoration_for(tag: str, dimensions: Dimensions) -> Decoration:
    """Decoration geometry selected by the animation tag."""
    normalized = (tag or "").strip().lower()
    if normalized in PULSE_TAGS:
        return _pulse(dimensions)
    if normalized in BRACKET_TAGS:
        return _brackets(dimensions)
    return _border(dimensions)


def layout_scene(
    scene: Scene,
    dimensions: Dimensions,
    measure: Measure,
    price: Optional[str] = None,
    has_image: Optional[bool] = None,
) -> SceneLayout:
    """Compute every position needed to draw ``scene``.

    Args:
        scene: Scene to lay out.
        dimensions: Target frame size.
        measure: Width of a string in the primary font.
        price: Secondary line for CTA/closing scenes.
        has_image: Whether to reserve the focal image box. Defaults to
            whether the scene references an image at all.
    """
    font_size = font_size_for(dimensions.width)
    line_height = font_size * LINE_HEIGHT_RATIO
    wrapped = wrap_text(scene.text, dimensions.width * TEXT_WIDTH_RATIO, measure)
    lines = place_text_lines(wrapped, dimensions, line_height)

    if has_image is None:
        has_image = scene.focal_image is not None
    image_box = place_focal_image(dimensions) if has_image else None

    price_line = None
    if price and scene.shows_price:
        price_line = place_price_line(price, lines, dimensions, font_size)

    return SceneLayout(
        dimensions=dimensions,
        font_size=font_size,
        line_height=line_height,
        lines=lines,
        image_box=image_box,
        decoration=decoration_for(scene.decoration_tag, dimensions),
        price_line=price_line,
        price_font_size=font_size * PRICE_SCALE,
    )
