"""Static per-provider model-name tables.

Used as the answer for providers without a listing endpoint and as the
fallback when a live listing fails.
"""

from __future__ import annotations

OPENAI_MODELS: tuple[str, ...] = (
    "gpt-4.1",
    "gpt-4.1-mini",
    "gpt-4.1-nano",
    "o4-mini",
    "gpt-4o",
    "gpt-4o-mini",
    "o3-mini",
)

ANTHROPIC_MODELS: tuple[str, ...] = (
    "claude-opus-4-20250514",
    "claude-sonnet-4-20250514",
    "claude-3-7-sonnet-latest",
    "claude-3-5-haiku-latest",
)

COHERE_MODELS: tuple[str, ...] = (
    "command-a-03-2025",
    "command-r-plus",
    "command-r",
    "command-r7b-12-2024",
    "aya-expanse-32b",
    "aya-vision-32b",
)

DEEPSEEK_MODELS: tuple[str, ...] = ("deepseek-chat", "deepseek-reasoner")

GEMINI_MODELS: tuple[str, ...] = (
    "gemini-2.5-pro",
    "gemini-2.5-flash",
    "gemini-2.5-flash-lite",
    "gemini-2.0-flash",
)

GROQ_MODELS: tuple[str, ...] = (
    # production
    "moonshotai/kimi-k2-instruct",
    "qwen/qwen3-32b",
    "llama-3.3-70b-versatile",
    "llama-3.1-8b-instant",
    "gemma2-9b-it",
    "meta-llama/llama-guard-4-12b",
    # preview
    "deepseek-r1-distill-llama-70b",
    "meta-llama/llama-4-maverick-17b-128e-instruct",
    "meta-llama/llama-4-scout-17b-16e-instruct",
    "meta-llama/llama-prompt-guard-2-22m",
    "meta-llama/llama-prompt-guard-2-86m",
    # legacy
    "llama-3.1-405b-reasoning",
    "llama-3.1-70b-versatile",
    "llama-3.2-90b-vision-preview",
    "llama-3.2-11b-vision-preview",
    "llama-3.2-3b-preview",
    "llama-3.2-1b-preview",
    "mixtral-8x7b-32768",
    "llama3-70b-8192",
    "llama-guard-3-8b",
    "gemma-7b-it",
)

XAI_MODELS: tuple[str, ...] = (
    "grok-4-0709",
    "grok-3",
    "grok-3-mini",
    "grok-3-fast",
    "grok-3-mini-fast",
    "grok-2-vision-1212",
)

FIREWORKS_MODELS: tuple[str, ...] = (
    "accounts/fireworks/models/llama-v3p1-8b-instruct",
    "accounts/fireworks/models/qwen3-235b-a22b",
)

NEBIUS_MODELS: tuple[str, ...] = (
    "meta-llama/Meta-Llama-3.1-70B-Instruct",
    "Qwen/Qwen3-235B-A22B",
    "deepseek-ai/DeepSeek-V3",
)

ZAI_MODELS: tuple[str, ...] = (
    "glm-4.6",
    "glm-4.5",
    "glm-4.5-x",
    "glm-4.5-air",
    "glm-4.5-airx",
    "glm-4.5-flash",
    "glm-4.5v",
    "glm-4-32b-0414-128k",
    "glm-4-plus",
    "glm-4-air",
    "glm-4-flash",
    "glm-4-long",
    "glm-4v-plus-0111",
    "glm-4v-flash",
    "glm-z1-air",
    "glm-z1-flash",
    "glm-4.1v-thinking-flash",
)

ZHIPU_MODELS: tuple[str, ...] = (
    "glm-4.5",
    "glm-4.5-x",
    "glm-4.5-air",
    "glm-4.5-airx",
    "glm-4.5-flash",
    "glm-4-32b-0414-128k",
    "glm-4-plus",
    "glm-4-air",
    "glm-4-airx",
    "glm-4-flash",
    "glm-4-long",
    "glm-4v-plus-0111",
    "glm-4v-flash",
    "glm-z1-air",
    "glm-z1-airx",
    "glm-z1-flash",
    "glm-z1-flashx",
    "glm-4.1v-thinking-flash",
    "glm-4.1v-thinking-flashx",
)

COPILOT_MODELS: tuple[str, ...] = (
    "gpt-4o",
    "gpt-4o-mini",
    "claude-3.5-sonnet",
    "o1-mini",
    "o1-preview",
)
