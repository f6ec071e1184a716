"""AI agents for ad copy generation."""

from .base import BaseAgent
from .copywriter import CopywriterAgent

__all__ = ["BaseAgent", "CopywriterAgent"]
