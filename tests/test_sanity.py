import unittest

from pydantic import ValidationError

from llm_bridge import (
    AdapterKind,
    BinaryPart,
    ChatMessage,
    ChatOptions,
    ChatRequest,
    TextPart,
    ToolCall,
    UnsupportedProviderError,
    Usage,
)
from llm_bridge.types import CompletionTokensDetails, PromptTokensDetails


class MessageSanityTests(unittest.TestCase):
    def test_string_content_is_coerced_to_parts(self) -> None:
        message = ChatMessage.user("hi")

        self.assertEqual(message.content, [TextPart(text="hi")])
        self.assertEqual(message.texts(), ["hi"])

    def test_single_part_is_wrapped(self) -> None:
        call = ToolCall(call_id="c1", fn_name="f", fn_arguments={"x": 1})
        message = ChatMessage.assistant(call)  # type: ignore[arg-type]

        self.assertEqual(message.tool_calls(), [call])
        self.assertEqual(message.texts(), [])

    def test_parts_round_trip_through_dicts(self) -> None:
        message = ChatMessage.model_validate(
            {"role": "user", "content": [{"type": "text", "text": "a"}, {"type": "binary", "content_type": "image/png", "url": "u"}]}
        )

        self.assertIsInstance(message.content[1], BinaryPart)
        self.assertEqual(len(message.binaries()), 1)

    def test_tool_response_message(self) -> None:
        message = ChatMessage.tool_response("c1", "42")

        self.assertEqual(message.role, "tool")
        self.assertEqual(message.tool_responses()[0].call_id, "c1")

    def test_binary_part_needs_exactly_one_source(self) -> None:
        with self.assertRaises(ValidationError):
            BinaryPart(content_type="image/png")
        with self.assertRaises(ValidationError):
            BinaryPart(content_type="image/png", url="u", data="d")
        self.assertEqual(BinaryPart(content_type="image/gif", data="R0lG").to_url(), "data:image/gif;base64,R0lG")


class RequestSanityTests(unittest.TestCase):
    def test_append_message_returns_copy(self) -> None:
        request = ChatRequest.from_user("first", system="sys")
        longer = request.append_message(ChatMessage.assistant("reply"))

        self.assertEqual(len(request.messages), 1)
        self.assertEqual(len(longer.messages), 2)
        self.assertEqual(longer.system, "sys")

    def test_has_images(self) -> None:
        plain = ChatRequest.from_user("hi")
        with_image = plain.append_message(
            ChatMessage.user([BinaryPart(content_type="image/png", url="https://example.com/a.png")])
        )
        with_pdf = plain.append_message(ChatMessage.user([BinaryPart(content_type="application/pdf", data="JVBE")]))

        self.assertFalse(plain.has_images())
        self.assertTrue(with_image.has_images())
        self.assertFalse(with_pdf.has_images())


class OptionsSanityTests(unittest.TestCase):
    def test_per_call_values_win(self) -> None:
        defaults = ChatOptions(temperature=0.1, max_tokens=100, capture_usage=True)
        merged = ChatOptions(temperature=0.7, capture_usage=False).merged_over(defaults)

        self.assertEqual(merged.temperature, 0.7)
        self.assertEqual(merged.max_tokens, 100)
        self.assertIs(merged.capture_usage, False)
        self.assertIsNone(merged.top_p)

    def test_merge_without_defaults(self) -> None:
        options = ChatOptions(seed=3)
        self.assertIs(options.merged_over(None), options)


class UsageSanityTests(unittest.TestCase):
    def test_compact_drops_empty_details(self) -> None:
        usage = Usage(
            prompt_tokens=1,
            prompt_tokens_details=PromptTokensDetails(),
            completion_tokens_details=CompletionTokensDetails(reasoning_tokens=2),
        ).compact_details()

        self.assertIsNone(usage.prompt_tokens_details)
        self.assertEqual(usage.completion_tokens_details.reasoning_tokens, 2)

    def test_is_empty(self) -> None:
        self.assertTrue(Usage().is_empty())
        self.assertFalse(Usage(total_tokens=0).is_empty())


class AdapterKindSanityTests(unittest.TestCase):
    def test_from_lower_str(self) -> None:
        self.assertIs(AdapterKind.from_lower_str("OpenAI"), AdapterKind.OPENAI)
        self.assertEqual(str(AdapterKind.ZHIPU), "zhipu")
        with self.assertRaises(UnsupportedProviderError):
            AdapterKind.from_lower_str("acme")


if __name__ == "__main__":
    unittest.main()
