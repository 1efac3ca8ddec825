import unittest

from llm_bridge import capabilities
from llm_bridge.capabilities import GENERIC_DEFAULTS, TEXT, TEXT_IMAGE
from llm_bridge.kinds import AdapterKind
from llm_bridge.model import Modality, Model, ReasoningEffortType

UNKNOWN = "my-custom-model-7"


class GenericFallbackTests(unittest.TestCase):
    def test_unknown_model_gets_generic_values_for_every_provider(self) -> None:
        for kind in AdapterKind:
            with self.subTest(kind=kind):
                self.assertEqual(capabilities.infer_token_limits(kind, UNKNOWN), (4_096, 4_096))
                self.assertFalse(capabilities.supports_reasoning(kind, UNKNOWN))
                self.assertEqual(capabilities.infer_input_modalities(kind, UNKNOWN), TEXT)
                self.assertEqual(capabilities.infer_output_modalities(kind, UNKNOWN), TEXT)
                self.assertEqual(capabilities.infer_reasoning_efforts(kind, UNKNOWN), frozenset())
                self.assertTrue(capabilities.supports_streaming(kind, UNKNOWN))

    def test_blanket_values_are_provider_specific(self) -> None:
        self.assertFalse(capabilities.supports_tool_calls(AdapterKind.OPENAI, UNKNOWN))
        self.assertFalse(capabilities.supports_tool_calls(AdapterKind.COHERE, UNKNOWN))
        self.assertTrue(capabilities.supports_tool_calls(AdapterKind.GROQ, UNKNOWN))
        self.assertEqual(capabilities.supports_tool_calls(AdapterKind.ANTHROPIC, UNKNOWN), GENERIC_DEFAULTS["tool_calls"])

        self.assertFalse(capabilities.supports_json_mode(AdapterKind.OPENAI, UNKNOWN))
        self.assertTrue(capabilities.supports_json_mode(AdapterKind.GROQ, UNKNOWN))
        self.assertTrue(capabilities.supports_json_mode(AdapterKind.COHERE, UNKNOWN))

    def test_unknown_capability_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            capabilities.resolve("telepathy", AdapterKind.OPENAI, "gpt-4o")


class ProviderRuleTests(unittest.TestCase):
    def test_openai_gpt_4o(self) -> None:
        model = capabilities.resolve_model(AdapterKind.OPENAI, "gpt-4o")

        self.assertEqual((model.max_input_tokens, model.max_output_tokens), (128_000, 16_384))
        self.assertTrue(model.supports_streaming)
        self.assertTrue(model.supports_tool_calls)
        self.assertTrue(model.supports_json_mode)
        self.assertFalse(model.supports_reasoning)
        self.assertIsNone(model.supported_reasoning_efforts)
        self.assertEqual(model.supported_input_modalities, TEXT_IMAGE)
        self.assertEqual(model.supported_output_modalities, TEXT)

    def test_openai_reasoning_models(self) -> None:
        model = capabilities.resolve_model(AdapterKind.OPENAI, "o3-mini")

        self.assertTrue(model.supports_reasoning)
        self.assertEqual(model.supported_reasoning_efforts, frozenset(ReasoningEffortType))
        self.assertEqual(model.max_input_tokens, 200_000)

    def test_openai_rule_order_prefers_specific_names(self) -> None:
        self.assertEqual(capabilities.infer_token_limits(AdapterKind.OPENAI, "gpt-4.1-mini"), (128_000, 32_768))
        self.assertEqual(capabilities.infer_token_limits(AdapterKind.OPENAI, "gpt-4-32k"), (32_768, 32_768))
        self.assertEqual(capabilities.infer_token_limits(AdapterKind.OPENAI, "gpt-4"), (8_192, 4_096))

    def test_openai_audio_only_models(self) -> None:
        self.assertFalse(capabilities.supports_streaming(AdapterKind.OPENAI, "whisper-1"))
        self.assertEqual(
            capabilities.infer_output_modalities(AdapterKind.OPENAI, "tts-1"),
            frozenset({Modality.TEXT, Modality.AUDIO}),
        )

    def test_cross_provider_attribution(self) -> None:
        # together has no rules of its own and picks up OpenAI's
        self.assertEqual(capabilities.infer_token_limits(AdapterKind.TOGETHER, "gpt-4o"), (128_000, 16_384))
        self.assertTrue(capabilities.supports_tool_calls(AdapterKind.TOGETHER, "gpt-4o"))
        self.assertTrue(capabilities.supports_json_mode(AdapterKind.TOGETHER, "gpt-4o"))

    def test_anthropic_claude_sonnet_4(self) -> None:
        model = capabilities.resolve_model(AdapterKind.ANTHROPIC, "claude-sonnet-4-20250514")

        self.assertEqual((model.max_input_tokens, model.max_output_tokens), (200_000, 64_000))
        self.assertTrue(model.supports_reasoning)
        self.assertTrue(model.supports_reasoning_effort(ReasoningEffortType.MEDIUM))
        self.assertEqual(model.supported_input_modalities, TEXT_IMAGE)
        self.assertFalse(model.supports_json_mode)

    def test_anthropic_claude_3_haiku(self) -> None:
        model = capabilities.resolve_model(AdapterKind.ANTHROPIC, "claude-3-haiku-20240307")

        self.assertEqual(model.max_output_tokens, 4_096)
        self.assertFalse(model.supports_reasoning)

    def test_deepseek_reasoner_vs_chat(self) -> None:
        reasoner = capabilities.resolve_model(AdapterKind.DEEPSEEK, "deepseek-reasoner")
        chat = capabilities.resolve_model(AdapterKind.DEEPSEEK, "deepseek-chat")

        self.assertTrue(reasoner.supports_reasoning)
        self.assertFalse(chat.supports_reasoning)
        self.assertIsNone(chat.supported_reasoning_efforts)
        self.assertEqual((chat.max_input_tokens, chat.max_output_tokens), (64_000, 8_192))
        self.assertTrue(chat.supports_tool_calls)
        self.assertFalse(capabilities.supports_tool_calls(AdapterKind.DEEPSEEK, "deepseek-coder"))

    def test_gemini_specific_names_match_first(self) -> None:
        self.assertEqual(capabilities.infer_token_limits(AdapterKind.GEMINI, "gemini-2.5-flash-lite"), (1_000_000, 8_192))
        self.assertEqual(capabilities.infer_token_limits(AdapterKind.GEMINI, "gemini-2.5-flash"), (1_000_000, 16_384))
        self.assertEqual(capabilities.infer_token_limits(AdapterKind.GEMINI, "gemini-2.0-flash-live-001"), (1_000_000, 8_192))
        self.assertTrue(capabilities.supports_reasoning(AdapterKind.GEMINI, "gemini-2.5-pro"))
        self.assertFalse(capabilities.supports_reasoning(AdapterKind.GEMINI, "gemini-1.5-flash"))
        self.assertEqual(capabilities.infer_input_modalities(AdapterKind.GEMINI, "gemini-embedding-001"), TEXT)

    def test_groq_models(self) -> None:
        self.assertEqual(capabilities.infer_token_limits(AdapterKind.GROQ, "llama-3.1-8b-instant"), (131_072, 131_072))
        self.assertTrue(capabilities.supports_reasoning(AdapterKind.GROQ, "qwen/qwen3-32b"))
        self.assertEqual(capabilities.infer_input_modalities(AdapterKind.GROQ, "llama-3.2-11b-vision-preview"), TEXT_IMAGE)

    def test_xai_grok_3_mini(self) -> None:
        model = capabilities.resolve_model(AdapterKind.XAI, "grok-3-mini")

        self.assertEqual((model.max_input_tokens, model.max_output_tokens), (131_072, 16_384))
        self.assertTrue(model.supports_reasoning)
        self.assertEqual(model.supported_reasoning_efforts, frozenset(ReasoningEffortType))
        self.assertFalse(capabilities.supports_reasoning(AdapterKind.XAI, "grok-3"))

    def test_glm_family(self) -> None:
        for kind in (AdapterKind.ZAI, AdapterKind.ZHIPU):
            with self.subTest(kind=kind):
                full = capabilities.resolve_model(kind, "glm-4.5")
                air = capabilities.resolve_model(kind, "glm-4.5-air")

                self.assertEqual(full.max_output_tokens, 32_768)
                self.assertEqual(full.supported_reasoning_efforts, frozenset({ReasoningEffortType.HIGH}))
                self.assertFalse(air.supports_reasoning)
                self.assertIsNone(air.supported_reasoning_efforts)
                self.assertEqual(air.max_output_tokens, 16_384)

    def test_namespaced_id_matches_bare_name(self) -> None:
        model = capabilities.resolve_model(AdapterKind.ZAI, "zai::glm-4.5", name="GLM 4.5")

        self.assertEqual(model.id, "zai::glm-4.5")
        self.assertEqual(model.name, "GLM 4.5")
        self.assertEqual(model.max_input_tokens, 128_000)
        self.assertTrue(model.supports_reasoning)

    def test_lookups_are_deterministic(self) -> None:
        first = capabilities.resolve_model(AdapterKind.OPENAI, "gpt-4o-mini")
        second = capabilities.resolve_model(AdapterKind.OPENAI, "gpt-4o-mini")
        self.assertEqual(first, second)


class ModelTests(unittest.TestCase):
    def test_defaults_and_str(self) -> None:
        model = Model(id="m-1", name="Model One")

        self.assertEqual(str(model), "Model One (id: m-1)")
        self.assertTrue(model.supports_input_modality(Modality.TEXT))
        self.assertFalse(model.supports_output_modality(Modality.IMAGE))
        self.assertFalse(model.is_multimodal())
        self.assertFalse(model.supports_reasoning_effort(ReasoningEffortType.LOW))

    def test_token_limit_checks(self) -> None:
        model = Model(id="m", name="m", max_input_tokens=100)

        self.assertTrue(model.is_input_tokens_within_limit(100))
        self.assertFalse(model.is_input_tokens_within_limit(101))
        # unknown limit accepts anything
        self.assertTrue(model.is_output_tokens_within_limit(10**9))

    def test_evolve_and_multimodal(self) -> None:
        model = Model(id="m", name="m").evolve(supported_input_modalities=TEXT_IMAGE)

        self.assertTrue(model.is_multimodal())
        self.assertTrue(model.supports_input_modality(Modality.IMAGE))

    def test_additional_properties_do_not_affect_equality(self) -> None:
        left = Model(id="m", name="m", additional_properties={"a": 1})
        right = Model(id="m", name="m")
        self.assertEqual(left, right)

    def test_reasoning_effort_type_from_effort(self) -> None:
        self.assertIs(ReasoningEffortType.from_effort("high"), ReasoningEffortType.HIGH)
        self.assertIs(ReasoningEffortType.from_effort(2048), ReasoningEffortType.BUDGET)


if __name__ == "__main__":
    unittest.main()
