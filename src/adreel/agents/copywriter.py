"""Copywriter agent: product facts in, ad Script out."""

from pathlib import Path
from typing import Optional

from anthropic import APIError

from ..models import Product, Script
from ..storyboard import build_script, fallback_copy, parse_ad_copy
from .base import BaseAgent

SYSTEM_PROMPT = (
    "You are an expert copywriter specializing in creating compelling video "
    "advertisement scripts. Create engaging, concise scripts that grab attention "
    "and drive action. Always format your response with clear sections: HOOK, "
    "BENEFITS, CTA, and FULL_SCRIPT."
)


class CopywriterAgent(BaseAgent[Product, Script]):
    """Writes a short ad script for a product and lays it out as scenes.

    API failures never reach the caller: the agent falls back to copy built
    from the product itself.
    """

    def __init__(self, *args, focal_image: Optional[Path] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.focal_image = focal_image

    @property
    def name(self) -> str:
        return "CopywriterAgent"

    @property
    def system_prompt(self) -> str:
        return SYSTEM_PROMPT

    def run(self, input_data: Product) -> Script:
        self._logger.info(f"Writing ad copy for: {input_data.title}")
        try:
            response = self._create_message(self._build_prompt(input_data))
        except APIError as e:
            self._logger.warning(f"Copy generation failed, using fallback: {e}")
            copy = fallback_copy(input_data)
        else:
            if response.strip():
                copy = parse_ad_copy(response, input_data)
            else:
                self._logger.warning("Empty response from Claude, using fallback")
                copy = fallback_copy(input_data)

        return build_script(copy, input_data, focal_image=self.focal_image)

    def _build_prompt(self, product: Product) -> str:
        features = ", ".join(product.key_features[:5])
        return "\n".join([
            "Create a compelling 15-20 second video advertisement script for the following product:",
            "",
            f"Product: {product.title}",
            f"Brand: {product.brand}",
            f"Category: {product.category}",
            f"Price: {product.price}",
            f"Description: {product.description}",
            f"Key Features: {features}",
            "",
            "Requirements:",
            "- Hook viewers in the first 3 seconds with excitement",
            "- Highlight 2-3 key benefits that matter to customers",
            "- Include a strong, urgent call-to-action",
            "- Keep it conversational and exciting",
            "- Perfect for social media (Instagram/TikTok/Facebook style)",
            "- Total length: 15-20 seconds when spoken",
            "",
            "Please format your response EXACTLY as follows:",
            "HOOK: [Opening line to grab attention - make it exciting!]",
            "BENEFITS: [2-3 key selling points separated by commas]",
            "CTA: [Strong call-to-action with urgency]",
            "FULL_SCRIPT: [Complete script with natural flow]",
        ])
