"""Per-provider data table."""

from __future__ import annotations

from llm_bridge import model_names
from llm_bridge.adapters.base import ProviderSpec
from llm_bridge.kinds import AdapterKind

COPILOT_EDITOR_HEADERS = {
    "Copilot-Integration-Id": "vscode-chat",
    "Editor-Version": "vscode/1.103.2",
}

OPENAI = ProviderSpec(
    kind=AdapterKind.OPENAI,
    base_url="https://api.openai.com/v1/",
    base_url_env="OPENAI_BASE_URL",
    api_key_env="OPENAI_API_KEY",
    model_names=model_names.OPENAI_MODELS,
    sends_reasoning_effort=True,
    effort_from_model_suffix=True,
)

ANTHROPIC = ProviderSpec(
    kind=AdapterKind.ANTHROPIC,
    base_url="https://api.anthropic.com/v1/",
    api_key_env="ANTHROPIC_API_KEY",
    model_names=model_names.ANTHROPIC_MODELS,
    supports_embed=False,
    static_headers={"anthropic-version": "2023-06-01"},
    chat_path="messages",
)

COHERE = ProviderSpec(
    kind=AdapterKind.COHERE,
    base_url="https://api.cohere.ai/compatibility/v1/",
    api_key_env="COHERE_API_KEY",
    model_names=model_names.COHERE_MODELS,
    live_listing=False,
)

DEEPSEEK = ProviderSpec(
    kind=AdapterKind.DEEPSEEK,
    base_url="https://api.deepseek.com/v1/",
    api_key_env="DEEPSEEK_API_KEY",
    model_names=model_names.DEEPSEEK_MODELS,
    listing_filter=lambda model_id: model_id in ("deepseek-chat", "deepseek-reasoner"),
)

GEMINI = ProviderSpec(
    kind=AdapterKind.GEMINI,
    base_url="https://generativelanguage.googleapis.com/v1beta/openai/",
    api_key_env="GEMINI_API_KEY",
    model_names=model_names.GEMINI_MODELS,
    live_listing=False,
)

GROQ = ProviderSpec(
    kind=AdapterKind.GROQ,
    base_url="https://api.groq.com/openai/v1/",
    api_key_env="GROQ_API_KEY",
    model_names=model_names.GROQ_MODELS,
    listing_filter=lambda model_id: "whisper" not in model_id and "embedding" not in model_id,
    supports_embed=False,
)

XAI = ProviderSpec(
    kind=AdapterKind.XAI,
    base_url="https://api.x.ai/v1/",
    api_key_env="XAI_API_KEY",
    model_names=model_names.XAI_MODELS,
    listing_filter=lambda model_id: "embedding" not in model_id and "image" not in model_id,
)

TOGETHER = ProviderSpec(
    kind=AdapterKind.TOGETHER,
    base_url="https://api.together.xyz/v1/",
    api_key_env="TOGETHER_API_KEY",
)

FIREWORKS = ProviderSpec(
    kind=AdapterKind.FIREWORKS,
    base_url="https://api.fireworks.ai/inference/v1/",
    api_key_env="FIREWORKS_API_KEY",
    model_names=model_names.FIREWORKS_MODELS,
    live_listing=False,
)

NEBIUS = ProviderSpec(
    kind=AdapterKind.NEBIUS,
    base_url="https://api.studio.nebius.ai/v1/",
    api_key_env="NEBIUS_API_KEY",
    model_names=model_names.NEBIUS_MODELS,
)

OLLAMA = ProviderSpec(
    kind=AdapterKind.OLLAMA,
    base_url="http://localhost:11434/v1/",
    api_key="ollama",
    listing_needs_auth=False,
)

ZAI = ProviderSpec(
    kind=AdapterKind.ZAI,
    base_url="https://api.z.ai/api/paas/v4/",
    api_key_env="ZAI_API_KEY",
    model_names=model_names.ZAI_MODELS,
    live_listing=False,
    namespace_base_urls={"zai": "https://api.z.ai/api/coding/paas/v4/"},
)

ZHIPU = ProviderSpec(
    kind=AdapterKind.ZHIPU,
    base_url="https://open.bigmodel.cn/api/paas/v4/",
    api_key_env="ZHIPU_API_KEY",
    model_names=model_names.ZHIPU_MODELS,
    live_listing=False,
)

COPILOT = ProviderSpec(
    kind=AdapterKind.COPILOT,
    base_url="https://api.githubcopilot.com/",
    api_key_env="COPILOT_API_TOKEN",
    model_names=model_names.COPILOT_MODELS,
    listing_headers={"x-github-api-version": "2025-05-01"},
    listing_advertises_capabilities=True,
    supports_embed=False,
    static_headers=COPILOT_EDITOR_HEADERS,
    chat_headers={"X-Initiator": "user"},
    vision_header="Copilot-Vision-Request",
    payload_extras={"n": 1, "intent": True},
)
