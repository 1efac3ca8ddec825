"""Model capability inference from model-name heuristics.

Every provider owns an ordered table of ``(predicate, value)`` rules per
capability. A lookup tries the queried provider's rules, then that provider's
blanket value (if it declares one), then the other providers' rules in
``PROVIDER_PRIORITY`` order, and finally ``GENERIC_DEFAULTS``. Lookups never
fail and never touch the network.

Many providers reuse OpenAI-style names, so a model may pick up another
provider's rule through the cross-provider step. That is accepted behavior.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from llm_bridge.kinds import AdapterKind, split_namespace
from llm_bridge.model import Modality, Model, ReasoningEffortType

_logger = logging.getLogger(__name__)

T = TypeVar("T")
Predicate = Callable[[str], bool]
TokenLimits = tuple[int | None, int | None]

CAPABILITIES = (
    "token_limits",
    "streaming",
    "tool_calls",
    "json_mode",
    "reasoning",
    "input_modalities",
    "output_modalities",
    "reasoning_efforts",
)


def prefix(*prefixes: str) -> Predicate:
    return lambda model_id: model_id.startswith(prefixes)


def contains(*parts: str) -> Predicate:
    return lambda model_id: any(part in model_id for part in parts)


def exact(*names: str) -> Predicate:
    allowed = frozenset(names)
    return lambda model_id: model_id in allowed


def all_of(*predicates: Predicate) -> Predicate:
    return lambda model_id: all(p(model_id) for p in predicates)


def any_of(*predicates: Predicate) -> Predicate:
    return lambda model_id: any(p(model_id) for p in predicates)


def none_of(*predicates: Predicate) -> Predicate:
    return lambda model_id: not any(p(model_id) for p in predicates)


@dataclass(frozen=True)
class Rule(Generic[T]):
    """``value`` applies when ``predicate`` matches the model id."""

    predicate: Predicate
    value: T


@dataclass(frozen=True)
class ProviderRules:
    """Rule tables for one provider. Empty tables defer to other providers."""

    token_limits: tuple[Rule[TokenLimits], ...] = ()
    streaming: tuple[Rule[bool], ...] = ()
    tool_calls: tuple[Rule[bool], ...] = ()
    json_mode: tuple[Rule[bool], ...] = ()
    reasoning: tuple[Rule[bool], ...] = ()
    input_modalities: tuple[Rule[frozenset[Modality]], ...] = ()
    output_modalities: tuple[Rule[frozenset[Modality]], ...] = ()
    reasoning_efforts: tuple[Rule[frozenset[ReasoningEffortType]], ...] = ()
    # provider-wide values, only used when this provider is the one queried
    blankets: Mapping[str, Any] = field(default_factory=dict)

    def match(self, capability: str, model_id: str) -> tuple[bool, Any]:
        """Return ``(True, value)`` for the first matching rule, else ``(False, None)``."""
        for rule in getattr(self, capability):
            if rule.predicate(model_id):
                return True, rule.value
        return False, None


TEXT = frozenset({Modality.TEXT})
TEXT_IMAGE = frozenset({Modality.TEXT, Modality.IMAGE})
TEXT_AUDIO = frozenset({Modality.TEXT, Modality.AUDIO})
TEXT_IMAGE_AUDIO = frozenset({Modality.TEXT, Modality.IMAGE, Modality.AUDIO})
ALL_EFFORTS = frozenset(ReasoningEffortType)

PROVIDER_PRIORITY: tuple[AdapterKind, ...] = (
    AdapterKind.OPENAI,
    AdapterKind.ANTHROPIC,
    AdapterKind.COHERE,
    AdapterKind.DEEPSEEK,
    AdapterKind.GEMINI,
    AdapterKind.GROQ,
    AdapterKind.XAI,
    AdapterKind.NEBIUS,
    AdapterKind.OLLAMA,
)

GENERIC_DEFAULTS: Mapping[str, Any] = {
    "token_limits": (4_096, 4_096),
    "streaming": True,
    "tool_calls": True,
    "json_mode": False,
    "reasoning": False,
    "input_modalities": TEXT,
    "output_modalities": TEXT,
    "reasoning_efforts": frozenset(),
}

_OPENAI_CHAT = prefix("gpt-4", "gpt-3.5", "o1", "o3", "o4", "chatgpt")
_OPENAI_REASONING = prefix("o1", "o3", "o4")
_OPENAI_VISION = any_of(contains("vision"), prefix("gpt-4o", "gpt-4.1", "o1", "o3", "o4"))

OPENAI_RULES = ProviderRules(
    token_limits=(
        Rule(prefix("gpt-4.1"), (128_000, 32_768)),
        Rule(prefix("gpt-4o"), (128_000, 16_384)),
        Rule(prefix("o3"), (200_000, 100_000)),
        Rule(prefix("o4"), (200_000, 256_000)),
        Rule(prefix("o1"), (200_000, 100_000)),
        Rule(all_of(prefix("gpt-4"), contains("32k")), (32_768, 32_768)),
        Rule(prefix("gpt-4"), (8_192, 4_096)),
        Rule(all_of(prefix("gpt-3.5"), contains("16k")), (16_384, 16_384)),
        Rule(prefix("gpt-3.5"), (4_096, 4_096)),
        Rule(prefix("chatgpt"), (16_384, 16_384)),
    ),
    streaming=(Rule(contains("whisper", "tts", "dall-e"), False),),
    tool_calls=(Rule(_OPENAI_CHAT, True),),
    json_mode=(Rule(_OPENAI_CHAT, True),),
    reasoning=(Rule(_OPENAI_REASONING, True),),
    input_modalities=(
        Rule(all_of(_OPENAI_VISION, contains("audio")), TEXT_IMAGE_AUDIO),
        Rule(_OPENAI_VISION, TEXT_IMAGE),
        Rule(contains("audio"), TEXT_AUDIO),
    ),
    output_modalities=(
        Rule(contains("tts"), TEXT_AUDIO),
        Rule(contains("dall-e"), TEXT_IMAGE),
    ),
    reasoning_efforts=(Rule(_OPENAI_REASONING, ALL_EFFORTS),),
    blankets={"streaming": True, "tool_calls": False, "json_mode": False},
)

_CLAUDE_4 = contains("claude-4", "claude-opus-4", "claude-sonnet-4")

ANTHROPIC_RULES = ProviderRules(
    token_limits=(
        Rule(contains("claude-opus-4"), (200_000, 32_000)),
        Rule(contains("claude-sonnet-4"), (200_000, 64_000)),
        Rule(contains("claude-3-7-sonnet", "claude-3-5-sonnet", "claude-3-5-haiku"), (200_000, 8_192)),
        Rule(contains("claude-3-opus", "claude-3-sonnet", "claude-3-haiku"), (200_000, 4_096)),
        Rule(contains("claude-2.1"), (200_000, 4_096)),
        Rule(contains("claude-2.0", "claude-instant"), (100_000, 4_096)),
    ),
    reasoning=(Rule(_CLAUDE_4, True),),
    input_modalities=(
        Rule(any_of(contains("claude-3", "claude-2.1"), _CLAUDE_4), TEXT_IMAGE),
    ),
    reasoning_efforts=(Rule(_CLAUDE_4, ALL_EFFORTS),),
    blankets={"streaming": True, "json_mode": False},
)

COHERE_RULES = ProviderRules(
    token_limits=(
        Rule(contains("aya-vision-32b", "aya-expanse-32b"), (128_000, 8_192)),
        Rule(contains("aya-vision-8b", "aya-expanse-8b"), (128_000, 4_096)),
        Rule(contains("command-a", "command-r"), (128_000, 4_096)),
        Rule(contains("command"), (4_096, 4_096)),
    ),
    tool_calls=(Rule(contains("command-r", "command-a", "command-nightly", "aya-"), True),),
    json_mode=(
        Rule(contains("aya-"), True),
        Rule(contains("command-light"), False),
    ),
    input_modalities=(Rule(contains("vision"), TEXT_IMAGE),),
    blankets={"streaming": True, "tool_calls": False, "json_mode": True},
)

_DEEPSEEK_CHAT = exact("deepseek-chat", "deepseek-reasoner")

DEEPSEEK_RULES = ProviderRules(
    token_limits=(Rule(_DEEPSEEK_CHAT, (64_000, 8_192)),),
    tool_calls=(Rule(_DEEPSEEK_CHAT, True),),
    json_mode=(Rule(_DEEPSEEK_CHAT, True),),
    reasoning=(Rule(contains("reasoner"), True),),
    reasoning_efforts=(Rule(prefix("deepseek"), ALL_EFFORTS),),
    blankets={"streaming": True, "tool_calls": False, "json_mode": False},
)

GEMINI_RULES = ProviderRules(
    token_limits=(
        Rule(contains("gemini-2.5-pro"), (2_000_000, 32_768)),
        Rule(contains("gemini-2.5-flash-lite"), (1_000_000, 8_192)),
        Rule(contains("gemini-2.5-flash"), (1_000_000, 16_384)),
        Rule(contains("gemini-2.0-flash-lite"), (1_000_000, 16_384)),
        Rule(contains("gemini-2.0-flash-live"), (1_000_000, 8_192)),
        Rule(contains("gemini-2.0-flash"), (1_000_000, 32_768)),
        Rule(contains("gemini-1.5-pro"), (2_000_000, 8_192)),
        Rule(contains("gemini-1.5-flash"), (1_000_000, 8_192)),
        Rule(contains("gemini-1.0-pro"), (30_720, 2_048)),
        Rule(contains("gemini-exp"), (2_000_000, 8_192)),
        Rule(contains("embedding"), (2_048, 768)),
    ),
    reasoning=(Rule(all_of(prefix("gemini"), contains("thinking", "2.5")), True),),
    input_modalities=(
        Rule(all_of(prefix("gemini"), contains("embedding")), TEXT),
        Rule(all_of(prefix("gemini"), contains("2.0-flash-live")), TEXT_IMAGE_AUDIO),
        Rule(prefix("gemini"), TEXT_IMAGE),
    ),
    reasoning_efforts=(Rule(prefix("gemini"), ALL_EFFORTS),),
    blankets={"streaming": True, "json_mode": False},
)

GROQ_RULES = ProviderRules(
    token_limits=(
        Rule(contains("moonshotai/kimi-k2-instruct"), (131_072, 16_384)),
        Rule(contains("qwen/qwen3-32b"), (128_000, 32_768)),
        Rule(contains("llama-3.3-70b-versatile"), (128_000, 32_768)),
        Rule(contains("llama-3.1-8b-instant"), (131_072, 131_072)),
        Rule(contains("gemma2-9b-it"), (8_192, 8_192)),
        Rule(contains("meta-llama/llama-guard-4-12b"), (131_072, 1_024)),
        Rule(contains("deepseek-r1-distill-llama-70b"), (128_000, 32_768)),
        Rule(contains("llama-4-maverick-17b-128e-instruct", "llama-4-scout-17b-16e-instruct"), (131_072, 8_192)),
        Rule(contains("meta-llama/llama-prompt-guard-2"), (512, 512)),
        Rule(contains("llama-3.1-405b-reasoning", "llama-3.1-70b-versatile"), (131_072, 32_768)),
        Rule(contains("llama-3.2-90b-vision", "llama-3.2-3b-preview", "llama-3.2-1b-preview"), (131_072, 32_768)),
        Rule(contains("llama-3.2-11b-vision"), (131_072, 16_384)),
        Rule(contains("mixtral-8x7b-32768"), (32_768, 32_768)),
        Rule(contains("llama3-70b-8192", "llama-guard-3-8b", "gemma-7b-it"), (8_192, 8_192)),
    ),
    reasoning=(Rule(contains("qwen3-32b"), True),),
    input_modalities=(Rule(contains("vision", "llama-3.2-90b", "llama-3.2-11b"), TEXT_IMAGE),),
    reasoning_efforts=(Rule(contains("qwen3-32b"), ALL_EFFORTS),),
    blankets={"streaming": True, "json_mode": True},
)

_GROK_REASONING = exact("grok-4-0709", "grok-3-mini", "grok-3-mini-fast")

XAI_RULES = ProviderRules(
    token_limits=(
        Rule(exact("grok-4-0709"), (256_000, 32_768)),
        Rule(exact("grok-3", "grok-3-fast"), (131_072, 32_768)),
        Rule(exact("grok-3-mini"), (131_072, 16_384)),
        Rule(exact("grok-3-mini-fast"), (131_072, 8_192)),
        Rule(exact("grok-2-vision-1212"), (32_768, 8_192)),
        Rule(contains("grok-4"), (256_000, 32_768)),
        Rule(contains("grok"), (131_072, 32_768)),
    ),
    reasoning=(Rule(_GROK_REASONING, True),),
    input_modalities=(
        Rule(any_of(exact("grok-4-0709"), contains("grok-2-vision-1212")), TEXT_IMAGE),
    ),
    reasoning_efforts=(Rule(_GROK_REASONING, ALL_EFFORTS),),
    blankets={"streaming": True, "json_mode": True},
)

_GLM_THINKING = all_of(contains("glm-4.5"), none_of(contains("air")))

# Z.ai and Zhipu serve the same GLM family.
GLM_RULES = ProviderRules(
    token_limits=(
        Rule(exact("glm-4.5", "glm-4.5-x", "glm-4-32b-0414-128k"), (128_000, 32_768)),
        Rule(exact("glm-4.5-air", "glm-4.5-airx"), (128_000, 16_384)),
        Rule(exact("glm-4.5-flash"), (128_000, 8_192)),
        Rule(prefix("glm-4-plus"), (128_000, 32_768)),
        Rule(prefix("glm-4-air"), (128_000, 16_384)),
        Rule(prefix("glm-4-flash"), (128_000, 8_192)),
        Rule(prefix("glm-4-long"), (1_000_000, 32_768)),
        Rule(all_of(prefix("glm"), contains("4v")), (128_000, 16_384)),
        Rule(prefix("glm-z1"), (128_000, 16_384)),
        Rule(all_of(prefix("glm"), contains("thinking")), (128_000, 32_768)),
        Rule(prefix("glm-4"), (128_000, 16_384)),
        Rule(prefix("glm"), (128_000, 8_192)),
    ),
    reasoning=(Rule(_GLM_THINKING, True),),
    input_modalities=(Rule(all_of(prefix("glm"), contains("4v", "vision")), TEXT_IMAGE),),
    reasoning_efforts=(Rule(_GLM_THINKING, frozenset({ReasoningEffortType.HIGH})),),
    blankets={"streaming": True, "json_mode": True},
)

# OpenAI-compatible hosts without their own naming scheme.
OPENAI_LIKE_RULES = ProviderRules(blankets={"streaming": True, "json_mode": True})

PROVIDER_RULES: Mapping[AdapterKind, ProviderRules] = {
    AdapterKind.OPENAI: OPENAI_RULES,
    AdapterKind.ANTHROPIC: ANTHROPIC_RULES,
    AdapterKind.COHERE: COHERE_RULES,
    AdapterKind.DEEPSEEK: DEEPSEEK_RULES,
    AdapterKind.GEMINI: GEMINI_RULES,
    AdapterKind.GROQ: GROQ_RULES,
    AdapterKind.XAI: XAI_RULES,
    AdapterKind.TOGETHER: OPENAI_LIKE_RULES,
    AdapterKind.FIREWORKS: OPENAI_LIKE_RULES,
    AdapterKind.NEBIUS: OPENAI_LIKE_RULES,
    AdapterKind.OLLAMA: OPENAI_LIKE_RULES,
    AdapterKind.ZAI: GLM_RULES,
    AdapterKind.ZHIPU: GLM_RULES,
    AdapterKind.COPILOT: OPENAI_LIKE_RULES,
}


def resolve(capability: str, kind: AdapterKind, model_id: str) -> Any:
    """Resolve one capability through the fallback chain."""
    if capability not in CAPABILITIES:
        raise ValueError(f"unknown capability: {capability}")

    own = PROVIDER_RULES[kind]
    found, value = own.match(capability, model_id)
    if found:
        return value
    if capability in own.blankets:
        return own.blankets[capability]

    for other in PROVIDER_PRIORITY:
        if other is kind:
            continue
        found, value = PROVIDER_RULES[other].match(capability, model_id)
        if found:
            _logger.debug("%s/%s: %s taken from %s rules", kind, model_id, capability, other)
            return value

    return GENERIC_DEFAULTS[capability]


def infer_token_limits(kind: AdapterKind, model_id: str) -> TokenLimits:
    """Return ``(max_input_tokens, max_output_tokens)``."""
    return resolve("token_limits", kind, model_id)


def supports_streaming(kind: AdapterKind, model_id: str) -> bool:
    return resolve("streaming", kind, model_id)


def supports_tool_calls(kind: AdapterKind, model_id: str) -> bool:
    return resolve("tool_calls", kind, model_id)


def supports_json_mode(kind: AdapterKind, model_id: str) -> bool:
    return resolve("json_mode", kind, model_id)


def supports_reasoning(kind: AdapterKind, model_id: str) -> bool:
    return resolve("reasoning", kind, model_id)


def infer_input_modalities(kind: AdapterKind, model_id: str) -> frozenset[Modality]:
    return resolve("input_modalities", kind, model_id)


def infer_output_modalities(kind: AdapterKind, model_id: str) -> frozenset[Modality]:
    return resolve("output_modalities", kind, model_id)


def infer_reasoning_efforts(kind: AdapterKind, model_id: str) -> frozenset[ReasoningEffortType]:
    return resolve("reasoning_efforts", kind, model_id)


def resolve_model(kind: AdapterKind, model_id: str, name: str | None = None) -> Model:
    """Assemble the full capability descriptor for ``model_id`` under ``kind``.

    Namespaced ids (``ns::model``) are matched on their bare name.
    """
    bare_id = split_namespace(model_id)[1]
    max_input, max_output = infer_token_limits(kind, bare_id)
    reasoning = supports_reasoning(kind, bare_id)
    efforts = infer_reasoning_efforts(kind, bare_id) if reasoning else frozenset()

    return Model(
        id=model_id,
        name=name or model_id,
        max_input_tokens=max_input,
        max_output_tokens=max_output,
        supported_input_modalities=infer_input_modalities(kind, bare_id),
        supported_output_modalities=infer_output_modalities(kind, bare_id),
        supports_reasoning=reasoning,
        supported_reasoning_efforts=efforts or None,
        supports_tool_calls=supports_tool_calls(kind, bare_id),
        supports_streaming=supports_streaming(kind, bare_id),
        supports_json_mode=supports_json_mode(kind, bare_id),
    )
