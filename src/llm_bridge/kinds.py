"""Provider tags and model identities."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from llm_bridge.errors import UnsupportedProviderError
from llm_bridge.model_names import GROQ_MODELS

NAMESPACE_SEPARATOR = "::"


class AdapterKind(str, Enum):
    """Every provider this package can talk to."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    COHERE = "cohere"
    DEEPSEEK = "deepseek"
    GEMINI = "gemini"
    GROQ = "groq"
    XAI = "xai"
    TOGETHER = "together"
    FIREWORKS = "fireworks"
    NEBIUS = "nebius"
    OLLAMA = "ollama"
    ZAI = "zai"
    ZHIPU = "zhipu"
    COPILOT = "copilot"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_lower_str(cls, name: str) -> AdapterKind:
        """Return the kind whose tag equals ``name`` (case-insensitive)."""
        try:
            return cls(name.strip().lower())
        except ValueError as exc:
            raise UnsupportedProviderError(name) from exc

    @classmethod
    def from_model(cls, model_name: str) -> AdapterKind:
        """Infer the provider for a model name.

        A ``provider::model`` namespace wins over any name-based guess.
        """
        namespace, bare = split_namespace(model_name)
        if namespace is not None:
            return cls.from_lower_str(namespace)

        if bare.startswith(("gpt", "o1", "o3", "o4", "chatgpt", "codex", "text-embedding")):
            return cls.OPENAI
        if bare.startswith("claude"):
            return cls.ANTHROPIC
        if bare.startswith(("command", "aya", "embed-")):
            return cls.COHERE
        if bare.startswith("gemini"):
            return cls.GEMINI
        if bare.startswith("grok"):
            return cls.XAI
        if bare.startswith("deepseek"):
            return cls.DEEPSEEK
        if bare.startswith("glm"):
            return cls.ZHIPU
        if bare in GROQ_MODELS:
            return cls.GROQ
        # Anything unrecognised is assumed to be a local model.
        return cls.OLLAMA


def split_namespace(model_name: str) -> tuple[str | None, str]:
    """Split ``"ns::name"`` into ``("ns", "name")``; no namespace gives ``None``."""
    namespace, sep, bare = model_name.partition(NAMESPACE_SEPARATOR)
    if not sep:
        return None, model_name
    return namespace, bare


class ModelIden(BaseModel):
    """Immutable identity of who answers a request."""

    model_config = ConfigDict(frozen=True)

    provider: AdapterKind
    model_name: str

    @classmethod
    def from_model_name(cls, model_name: str) -> ModelIden:
        """Build an identity from a bare or namespaced model name."""
        return cls(provider=AdapterKind.from_model(model_name), model_name=model_name)

    @property
    def namespace(self) -> str | None:
        return split_namespace(self.model_name)[0]

    @property
    def bare_name(self) -> str:
        """Model name as the provider expects it on the wire."""
        return split_namespace(self.model_name)[1]

    def with_name(self, model_name: str | None) -> ModelIden:
        """Same provider, another name; ``None`` keeps the current identity."""
        if not model_name or model_name == self.model_name:
            return self
        return ModelIden(provider=self.provider, model_name=model_name)

    def __str__(self) -> str:
        return f"{self.provider}/{self.model_name}"
