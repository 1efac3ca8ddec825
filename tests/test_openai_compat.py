import json
import unittest
from typing import Any

from llm_bridge.adapters import AnthropicAdapter, OpenAICompatAdapter, ServiceKind, get_adapter
from llm_bridge.adapters.openai_compat import extract_think, forbid_additional_properties
from llm_bridge.errors import CredentialMissingError, MalformedResponseError, UnsupportedOperationError
from llm_bridge.kinds import AdapterKind, ModelIden
from llm_bridge.resolver import AuthData, Endpoint, ServiceTarget
from llm_bridge.types import (
    BinaryPart,
    ChatMessage,
    ChatOptions,
    ChatRequest,
    JsonMode,
    JsonSpec,
    TextPart,
    Tool,
    ToolCall,
)


def target_for(kind: AdapterKind, model_name: str, key: str = "sk-test") -> ServiceTarget:
    model = ModelIden(provider=kind, model_name=model_name)
    return ServiceTarget(
        model=model,
        auth=AuthData.from_key(key),
        endpoint=get_adapter(kind).default_endpoint(model),
    )


def build(
    kind: AdapterKind,
    model_name: str,
    request: ChatRequest,
    options: ChatOptions | None = None,
    service_kind: ServiceKind = ServiceKind.CHAT,
):
    adapter = get_adapter(kind)
    return adapter.build_request(target_for(kind, model_name), service_kind, request, options or ChatOptions())


class DispatchTests(unittest.TestCase):
    def test_every_kind_has_an_adapter(self) -> None:
        for kind in AdapterKind:
            with self.subTest(kind=kind):
                adapter = get_adapter(kind)
                self.assertIs(adapter.kind, kind)
                expected = AnthropicAdapter if kind is AdapterKind.ANTHROPIC else OpenAICompatAdapter
                self.assertIsInstance(adapter, expected)

    def test_adapters_are_shared(self) -> None:
        self.assertIs(get_adapter(AdapterKind.GROQ), get_adapter(AdapterKind.GROQ))


class BuildRequestTests(unittest.TestCase):
    def test_message_serialization(self) -> None:
        request = ChatRequest(
            system="Be brief.",
            messages=[
                ChatMessage.user(
                    [
                        TextPart(text="What is in these?"),
                        BinaryPart(content_type="image/png", url="https://example.com/cat.png"),
                        BinaryPart(content_type="image/jpeg", data="AAAA"),
                        BinaryPart(content_type="application/pdf", data="JVBE"),
                    ]
                ),
                ChatMessage.assistant(
                    [ToolCall(call_id="call_1", fn_name="lookup", fn_arguments={"q": "cats"})]
                ),
                ChatMessage.tool_response("call_1", "two cats"),
            ],
            tools=[Tool(name="lookup", description="Search", json_schema={"type": "object"})],
        )
        data = build(AdapterKind.OPENAI, "gpt-4o", request)
        messages = data.payload["messages"]

        self.assertEqual(data.url, "https://api.openai.com/v1/chat/completions")
        self.assertEqual(data.headers["Authorization"], "Bearer sk-test")
        self.assertEqual(data.payload["model"], "gpt-4o")
        self.assertIs(data.payload["stream"], False)

        self.assertEqual(messages[0], {"role": "system", "content": "Be brief."})
        user_parts = messages[1]["content"]
        self.assertEqual(len(user_parts), 3)
        self.assertEqual(user_parts[1]["image_url"]["url"], "https://example.com/cat.png")
        self.assertEqual(user_parts[2]["image_url"]["url"], "data:image/jpeg;base64,AAAA")

        call = messages[2]["tool_calls"][0]
        self.assertEqual(call["id"], "call_1")
        self.assertEqual(json.loads(call["function"]["arguments"]), {"q": "cats"})
        self.assertEqual(messages[3], {"role": "tool", "content": "two cats", "tool_call_id": "call_1"})

        tool = data.payload["tools"][0]
        self.assertEqual(tool["type"], "function")
        self.assertIs(tool["function"]["strict"], False)
        self.assertEqual(tool["function"]["description"], "Search")

    def test_single_text_user_message_is_plain_string(self) -> None:
        data = build(AdapterKind.GROQ, "llama-3.1-8b-instant", ChatRequest.from_user("hello"))
        self.assertEqual(data.payload["messages"], [{"role": "user", "content": "hello"}])
        self.assertEqual(data.url, "https://api.groq.com/openai/v1/chat/completions")

    def test_tool_calls_on_user_message_are_dropped(self) -> None:
        request = ChatRequest(
            messages=[ChatMessage.user([TextPart(text="hi"), ToolCall(call_id="c", fn_name="f")])]
        )
        with self.assertLogs("llm_bridge", "WARNING") as logs:
            data = build(AdapterKind.OPENAI, "gpt-4o", request)

        self.assertEqual(data.payload["messages"], [{"role": "user", "content": "hi"}])
        self.assertIn("dropping 1 tool call", logs.output[0])

    def test_effort_from_model_suffix(self) -> None:
        data = build(AdapterKind.OPENAI, "o3-mini-high", ChatRequest.from_user("hi"))

        self.assertEqual(data.payload["model"], "o3-mini")
        self.assertEqual(data.payload["reasoning_effort"], "high")

    def test_explicit_effort_keeps_model_name(self) -> None:
        data = build(AdapterKind.OPENAI, "o3-mini-high", ChatRequest.from_user("hi"), ChatOptions(reasoning_effort="low"))

        self.assertEqual(data.payload["model"], "o3-mini-high")
        self.assertEqual(data.payload["reasoning_effort"], "low")

    def test_budget_effort_is_not_sent(self) -> None:
        data = build(AdapterKind.OPENAI, "o3-mini", ChatRequest.from_user("hi"), ChatOptions(reasoning_effort=4096))
        self.assertNotIn("reasoning_effort", data.payload)

    def test_effort_only_sent_where_supported(self) -> None:
        data = build(AdapterKind.GROQ, "qwen/qwen3-32b", ChatRequest.from_user("hi"), ChatOptions(reasoning_effort="high"))
        self.assertNotIn("reasoning_effort", data.payload)

        suffixed = build(AdapterKind.TOGETHER, "some-model-low", ChatRequest.from_user("hi"))
        self.assertEqual(suffixed.payload["model"], "some-model-low")

    def test_json_schema_response_format(self) -> None:
        schema = {
            "type": "object",
            "properties": {"city": {"type": "object", "properties": {"name": {"type": "string"}}}},
        }
        options = ChatOptions(response_format=JsonSpec(name="answer", json_schema=schema))
        data = build(AdapterKind.OPENAI, "gpt-4o", ChatRequest.from_user("hi"), options)
        response_format = data.payload["response_format"]

        self.assertEqual(response_format["type"], "json_schema")
        self.assertIs(response_format["json_schema"]["strict"], True)
        sent = response_format["json_schema"]["schema"]
        self.assertIs(sent["additionalProperties"], False)
        self.assertIs(sent["properties"]["city"]["additionalProperties"], False)
        # caller's schema is not mutated
        self.assertNotIn("additionalProperties", schema)

    def test_json_mode_response_format(self) -> None:
        data = build(AdapterKind.XAI, "grok-3", ChatRequest.from_user("hi"), ChatOptions(response_format=JsonMode()))
        self.assertEqual(data.payload["response_format"], {"type": "json_object"})

    def test_stream_options_only_with_usage_capture(self) -> None:
        streamed = build(
            AdapterKind.OPENAI,
            "gpt-4o",
            ChatRequest.from_user("hi"),
            ChatOptions(capture_usage=True),
            service_kind=ServiceKind.CHAT_STREAM,
        )
        self.assertIs(streamed.payload["stream"], True)
        self.assertEqual(streamed.payload["stream_options"], {"include_usage": True})

        plain = build(AdapterKind.OPENAI, "gpt-4o", ChatRequest.from_user("hi"), ChatOptions(capture_usage=True))
        self.assertNotIn("stream_options", plain.payload)

    def test_request_options(self) -> None:
        options = ChatOptions(
            temperature=0.2,
            top_p=0.9,
            max_tokens=256,
            stop_sequences=["END"],
            seed=7,
            extra_headers={"X-Trace": "abc"},
        )
        data = build(AdapterKind.DEEPSEEK, "deepseek-chat", ChatRequest.from_user("hi"), options)

        self.assertEqual(data.payload["temperature"], 0.2)
        self.assertEqual(data.payload["top_p"], 0.9)
        self.assertEqual(data.payload["max_tokens"], 256)
        self.assertEqual(data.payload["stop"], ["END"])
        self.assertEqual(data.payload["seed"], 7)
        self.assertEqual(data.headers["X-Trace"], "abc")

    def test_copilot_headers_and_extras(self) -> None:
        request = ChatRequest(
            messages=[
                ChatMessage.user(
                    [TextPart(text="look"), BinaryPart(content_type="image/png", url="https://example.com/a.png")]
                )
            ]
        )
        data = build(AdapterKind.COPILOT, "gpt-4o", request)

        self.assertEqual(data.url, "https://api.githubcopilot.com/chat/completions")
        self.assertEqual(data.headers["Copilot-Integration-Id"], "vscode-chat")
        self.assertEqual(data.headers["X-Initiator"], "user")
        self.assertEqual(data.headers["Copilot-Vision-Request"], "true")
        self.assertEqual(data.payload["n"], 1)
        self.assertIs(data.payload["intent"], True)

        text_only = build(AdapterKind.COPILOT, "gpt-4o", ChatRequest.from_user("hi"))
        self.assertNotIn("Copilot-Vision-Request", text_only.headers)

    def test_unsupported_services(self) -> None:
        for kind in (AdapterKind.GROQ, AdapterKind.COPILOT, AdapterKind.ANTHROPIC):
            with self.subTest(kind=kind):
                with self.assertRaises(UnsupportedOperationError):
                    build(kind, "m", ChatRequest.from_user("hi"), service_kind=ServiceKind.EMBED)

    def test_missing_credential_raises_before_sending(self) -> None:
        model = ModelIden(provider=AdapterKind.OPENAI, model_name="gpt-4o")
        target = ServiceTarget(
            model=model,
            auth=AuthData.from_env("LLM_BRIDGE_UNSET_VARIABLE"),
            endpoint=Endpoint(base_url="https://api.openai.com/v1/"),
        )
        with self.assertRaises(CredentialMissingError) as ctx:
            get_adapter(AdapterKind.OPENAI).build_request(
                target, ServiceKind.CHAT, ChatRequest.from_user("hi"), ChatOptions()
            )
        self.assertIn("LLM_BRIDGE_UNSET_VARIABLE", str(ctx.exception))


def completion(message: dict[str, Any], **extra: Any) -> dict[str, Any]:
    return {"model": "gpt-4o-2024-08-06", "choices": [{"index": 0, "message": message}], **extra}


class ParseResponseTests(unittest.TestCase):
    def setUp(self) -> None:
        self.adapter = get_adapter(AdapterKind.OPENAI)
        self.iden = ModelIden(provider=AdapterKind.OPENAI, model_name="gpt-4o")

    def test_text_and_usage(self) -> None:
        body = completion(
            {"role": "assistant", "content": "Hello"},
            usage={
                "prompt_tokens": 10,
                "completion_tokens": 2,
                "total_tokens": 12,
                "prompt_tokens_details": {"cached_tokens": 4},
                "completion_tokens_details": {"reasoning_tokens": None},
            },
        )
        response = self.adapter.parse_response(self.iden, body, ChatOptions())

        self.assertEqual(response.first_text(), "Hello")
        self.assertEqual(response.model_iden, self.iden)
        self.assertEqual(response.provider_model_iden.model_name, "gpt-4o-2024-08-06")
        self.assertEqual(response.usage.total_tokens, 12)
        self.assertEqual(response.usage.prompt_tokens_details.cached_tokens, 4)
        self.assertIsNone(response.usage.completion_tokens_details)
        self.assertIsNone(response.captured_raw_body)

    def test_raw_body_captured_on_request(self) -> None:
        body = completion({"role": "assistant", "content": "Hi"})
        response = self.adapter.parse_response(self.iden, body, ChatOptions(capture_raw_body=True))
        self.assertEqual(response.captured_raw_body, body)

    def test_reasoning_content_field(self) -> None:
        body = completion({"role": "assistant", "content": "42", "reasoning_content": "  thinking  "})
        response = self.adapter.parse_response(self.iden, body, ChatOptions())

        self.assertEqual(response.reasoning_content, "thinking")
        self.assertEqual(response.texts(), ["42"])

    def test_inline_think_block_is_extracted_when_asked(self) -> None:
        body = completion({"role": "assistant", "content": "<think> plan </think>\n\nAnswer"})

        normalized = self.adapter.parse_response(self.iden, body, ChatOptions(normalize_reasoning_content=True))
        self.assertEqual(normalized.reasoning_content, "plan")
        self.assertEqual(normalized.first_text(), "Answer")

        untouched = self.adapter.parse_response(self.iden, body, ChatOptions())
        self.assertIsNone(untouched.reasoning_content)
        self.assertIn("<think>", untouched.first_text())

    def test_tool_calls(self) -> None:
        body = completion(
            {
                "role": "assistant",
                "content": None,
                "tool_calls": [
                    {"id": "call_1", "type": "function", "function": {"name": "f", "arguments": '{"a": 1}'}},
                    {"id": "call_2", "type": "function", "function": {"name": "g", "arguments": ""}},
                ],
            }
        )
        response = self.adapter.parse_response(self.iden, body, ChatOptions())

        self.assertEqual(
            response.tool_calls(),
            [
                ToolCall(call_id="call_1", fn_name="f", fn_arguments={"a": 1}),
                ToolCall(call_id="call_2", fn_name="g", fn_arguments={}),
            ],
        )
        self.assertIsNone(response.first_text())

    def test_malformed_tool_call_arguments(self) -> None:
        body = completion(
            {"role": "assistant", "tool_calls": [{"id": "c", "function": {"name": "f", "arguments": "{oops"}}]}
        )
        with self.assertRaises(MalformedResponseError):
            self.adapter.parse_response(self.iden, body, ChatOptions())

        not_object = completion(
            {"role": "assistant", "tool_calls": [{"id": "c", "function": {"name": "f", "arguments": "[1]"}}]}
        )
        with self.assertRaises(MalformedResponseError):
            self.adapter.parse_response(self.iden, not_object, ChatOptions())

    def test_missing_choices(self) -> None:
        with self.assertRaises(MalformedResponseError):
            self.adapter.parse_response(self.iden, {"model": "gpt-4o"}, ChatOptions())
        with self.assertRaises(MalformedResponseError):
            self.adapter.parse_response(self.iden, ["not", "a", "dict"], ChatOptions())

    def test_empty_choices_is_empty_response(self) -> None:
        response = self.adapter.parse_response(self.iden, {"choices": []}, ChatOptions())
        self.assertEqual(response.content, [])
        self.assertIs(response.provider_model_iden, self.iden)

    def test_xai_reasoning_tokens_added_to_completion(self) -> None:
        adapter = get_adapter(AdapterKind.XAI)
        iden = ModelIden(provider=AdapterKind.XAI, model_name="grok-3-mini")
        body = completion(
            {"role": "assistant", "content": "ok"},
            usage={
                "prompt_tokens": 5,
                "completion_tokens": 3,
                "total_tokens": 28,
                "completion_tokens_details": {"reasoning_tokens": 20},
            },
        )
        response = adapter.parse_response(iden, body, ChatOptions())

        self.assertEqual(response.usage.completion_tokens, 23)
        self.assertEqual(response.usage.total_tokens, 28)

    def test_bad_usage_does_not_fail_response(self) -> None:
        body = completion({"role": "assistant", "content": "ok"}, usage={"prompt_tokens": "many"})
        with self.assertLogs("llm_bridge", "ERROR"):
            response = self.adapter.parse_response(self.iden, body, ChatOptions())
        self.assertTrue(response.usage.is_empty())


class HelperTests(unittest.TestCase):
    def test_extract_think(self) -> None:
        self.assertEqual(extract_think("a<think>b</think>  c"), ("ac", "b"))
        self.assertEqual(extract_think("no block"), ("no block", None))
        self.assertEqual(extract_think("<think>unterminated"), ("<think>unterminated", None))

    def test_forbid_additional_properties_handles_arrays(self) -> None:
        schema = {"type": "array", "items": [{"type": "object"}]}
        self.assertEqual(
            forbid_additional_properties(schema),
            {"type": "array", "items": [{"type": "object", "additionalProperties": False}]},
        )


if __name__ == "__main__":
    unittest.main()
