"""Derive a structured Script from free-form ad copy.

The copywriter answers in a loose labelled format::

    HOOK: Tired of cold coffee?
    BENEFITS: Keeps drinks hot for 12 hours, leak-proof lid, fits any cup holder
    CTA: Grab yours today before they sell out!
    FULL_SCRIPT: ...

Labels may be missing or the whole answer may be prose; every gap is filled
from the first/last sentence of the text or from the product itself, so
parsing never fails.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .models import Product, Scene, SceneKind, Script

logger = logging.getLogger(__name__)

SECTION_LABELS = ("HOOK", "BENEFITS", "CTA", "FULL_SCRIPT")
SENTENCE_SPLIT = re.compile(r"[.!?]+")
DEFAULT_CTA = "Get yours today - limited time offer!"
FALLBACK_CTA = "Order now and experience the difference!"
FALLBACK_BENEFITS = [
    "Premium quality guaranteed",
    "Exceptional value for money",
    "Perfect for your needs",
]


@dataclass
class AdCopy:
    """Structured sections of an ad script."""

    hook: str
    benefits: List[str] = field(default_factory=list)
    cta: str = ""
    full_script: str = ""
    fallback: bool = False


def _section(line: str) -> Optional[tuple]:
    for label in SECTION_LABELS:
        prefix = f"{label}:"
        if line.startswith(prefix):
            return label, line[len(prefix):].strip()
    return None


def parse_ad_copy(text: str, product: Product) -> AdCopy:
    """Parse labelled copywriter output into an AdCopy."""
    hook = ""
    cta = ""
    benefits: List[str] = []
    full_script = text

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        parsed = _section(line)
        if parsed is None:
            continue
        label, value = parsed
        if label == "HOOK":
            hook = value
        elif label == "BENEFITS":
            benefits = [b.strip() for b in value.split(",") if b.strip()]
        elif label == "CTA":
            cta = value
        else:
            full_script = value

    if not hook or not cta:
        sentences = [s.strip() for s in SENTENCE_SPLIT.split(text) if s.strip()]
        if sentences:
            hook = hook or f"{sentences[0]}!"
            cta = cta or f"{sentences[-1]}!"

    hook = hook or f"Discover the amazing {product.title}!"
    benefits = benefits or product.key_features[:3]
    cta = cta or DEFAULT_CTA

    if full_script == text and "HOOK:" in text:
        full_script = f"{hook} {', '.join(benefits)}. {product.price}. {cta}"

    return AdCopy(hook=hook, benefits=benefits, cta=cta, full_script=full_script)


def fallback_copy(product: Product) -> AdCopy:
    """Ad copy built from the product alone, used when no model is available."""
    logger.info(f"Using fallback copy for: {product.title}")
    hook = f"Introducing the incredible {product.title}!"
    benefits = product.key_features[:3] or list(FALLBACK_BENEFITS)
    full_script = (
        f"{hook} {', '.join(benefits)}. Only {product.price}. "
        f"{FALLBACK_CTA} Limited time offer - act fast!"
    )
    return AdCopy(
        hook=hook,
        benefits=benefits,
        cta=FALLBACK_CTA,
        full_script=full_script,
        fallback=True,
    )


def build_script(
    copy: AdCopy,
    product: Product,
    focal_image: Optional[Path] = None,
) -> Script:
    """Lay the copy out as the four canonical ad scenes."""
    benefits_text = (
        ". ".join(copy.benefits)
        if copy.benefits
        else f"{product.title} offers exceptional value"
    )
    beats = [
        (SceneKind.HOOK, 3.0, copy.hook, "fade_in"),
        (SceneKind.BENEFITS, 8.0, benefits_text, "slide_in"),
        (SceneKind.CTA, 4.0, copy.cta, "zoom_in"),
        (SceneKind.CLOSING, 5.0, f"{product.price} - Don't miss out!", "pulse"),
    ]

    scenes = [
        Scene(
            index=index,
            duration_seconds=duration,
            text=text,
            kind=kind,
            background_color=kind.default_background,
            text_color="#ffffff",
            animation=animation,
            focal_image=focal_image,
        )
        for index, (kind, duration, text, animation) in enumerate(beats)
    ]
    return Script(scenes=scenes, title=product.title, price=product.price)
