"""External service integrations."""

from .anthropic import AnthropicClient

__all__ = ["AnthropicClient"]
