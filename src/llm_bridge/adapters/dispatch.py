"""Route a provider tag to its adapter."""

from __future__ import annotations

from functools import lru_cache

from llm_bridge.adapters import specs
from llm_bridge.adapters.anthropic import AnthropicAdapter
from llm_bridge.adapters.base import Adapter
from llm_bridge.adapters.openai_compat import OpenAICompatAdapter
from llm_bridge.errors import UnsupportedProviderError
from llm_bridge.kinds import AdapterKind


@lru_cache(maxsize=None)
def get_adapter(kind: AdapterKind) -> Adapter:
    """Return the (stateless, shared) adapter for ``kind``.

    Every ``AdapterKind`` member has an explicit branch here.
    """
    if kind is AdapterKind.OPENAI:
        return OpenAICompatAdapter(specs.OPENAI)
    if kind is AdapterKind.ANTHROPIC:
        return AnthropicAdapter(specs.ANTHROPIC)
    if kind is AdapterKind.COHERE:
        return OpenAICompatAdapter(specs.COHERE)
    if kind is AdapterKind.DEEPSEEK:
        return OpenAICompatAdapter(specs.DEEPSEEK)
    if kind is AdapterKind.GEMINI:
        return OpenAICompatAdapter(specs.GEMINI)
    if kind is AdapterKind.GROQ:
        return OpenAICompatAdapter(specs.GROQ)
    if kind is AdapterKind.XAI:
        return OpenAICompatAdapter(specs.XAI)
    if kind is AdapterKind.TOGETHER:
        return OpenAICompatAdapter(specs.TOGETHER)
    if kind is AdapterKind.FIREWORKS:
        return OpenAICompatAdapter(specs.FIREWORKS)
    if kind is AdapterKind.NEBIUS:
        return OpenAICompatAdapter(specs.NEBIUS)
    if kind is AdapterKind.OLLAMA:
        return OpenAICompatAdapter(specs.OLLAMA)
    if kind is AdapterKind.ZAI:
        return OpenAICompatAdapter(specs.ZAI)
    if kind is AdapterKind.ZHIPU:
        return OpenAICompatAdapter(specs.ZHIPU)
    if kind is AdapterKind.COPILOT:
        return OpenAICompatAdapter(specs.COPILOT)
    raise UnsupportedProviderError(str(kind))
