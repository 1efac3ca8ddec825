"""Provider adapters and their dispatcher."""

from .anthropic import AnthropicAdapter
from .base import Adapter, ProviderSpec, ServiceKind
from .dispatch import get_adapter
from .openai_compat import OpenAICompatAdapter

__all__ = [
    "Adapter",
    "AnthropicAdapter",
    "OpenAICompatAdapter",
    "ProviderSpec",
    "ServiceKind",
    "get_adapter",
]
