"""Adapter for every provider that speaks the OpenAI Chat Completions dialect."""

from __future__ import annotations

import json
from typing import Any

from llm_bridge.adapters.base import Adapter, ServiceKind
from llm_bridge.errors import MalformedResponseError, UnsupportedOperationError
from llm_bridge.kinds import ModelIden
from llm_bridge.resolver import ServiceTarget
from llm_bridge.streaming import FrameDecoder, OpenAIFrameDecoder
from llm_bridge.transport import WebRequestData
from llm_bridge.types import (
    BinaryPart,
    ChatMessage,
    ChatOptions,
    ChatRequest,
    ChatResponse,
    ContentPart,
    JsonMode,
    JsonSpec,
    ReasoningEffort,
    TextPart,
    Tool,
    ToolCall,
)
from llm_bridge.usage import usage_from_openai

_EFFORT_KEYWORDS = ("low", "medium", "high")
THINK_START = "<think>"
THINK_END = "</think>"


class OpenAICompatAdapter(Adapter):
    """One parameterized adapter; ``ProviderSpec`` carries the per-provider differences."""

    def auth_headers(self, api_key: str | None) -> dict[str, str]:
        if not api_key:
            return {}
        return {"Authorization": f"Bearer {api_key}"}

    def frame_decoder(self) -> FrameDecoder:
        return OpenAIFrameDecoder(self.kind)

    def build_request(
        self,
        target: ServiceTarget,
        service_kind: ServiceKind,
        chat_request: ChatRequest,
        options: ChatOptions,
    ) -> WebRequestData:
        """Build an OpenAI-style chat completions request."""
        url = self.service_url(target.model, service_kind, target.endpoint)
        if service_kind not in (ServiceKind.CHAT, ServiceKind.CHAT_STREAM):
            raise UnsupportedOperationError(str(self.kind), f"build_request({service_kind})")

        headers = self.chat_headers(target)
        if self.spec.vision_header is not None and chat_request.has_images():
            headers[self.spec.vision_header] = "true"
        if options.extra_headers:
            headers.update(options.extra_headers)

        stream = service_kind is ServiceKind.CHAT_STREAM
        model_name, effort = self._model_name_and_effort(target.model.bare_name, options)

        payload: dict[str, Any] = {
            "model": model_name,
            "messages": self._serialize_messages(chat_request),
            "stream": stream,
        }

        if isinstance(effort, str) and self.spec.sends_reasoning_effort:
            payload["reasoning_effort"] = effort

        if chat_request.tools:
            payload["tools"] = [self._serialize_tool(t) for t in chat_request.tools]

        if isinstance(options.response_format, JsonMode):
            payload["response_format"] = {"type": "json_object"}
        elif isinstance(options.response_format, JsonSpec):
            payload["response_format"] = self._json_schema_format(options.response_format)

        if stream and options.capture_usage:
            payload["stream_options"] = {"include_usage": True}
        if options.temperature is not None:
            payload["temperature"] = options.temperature
        if options.stop_sequences:
            payload["stop"] = list(options.stop_sequences)
        if options.max_tokens is not None:
            payload["max_tokens"] = options.max_tokens
        if options.top_p is not None:
            payload["top_p"] = options.top_p
        if options.seed is not None:
            payload["seed"] = options.seed

        payload.update(self.spec.payload_extras)
        return WebRequestData(url=url, headers=headers, payload=payload)

    def _model_name_and_effort(self, model_name: str, options: ChatOptions) -> tuple[str, ReasoningEffort | None]:
        if options.reasoning_effort is not None:
            return model_name, options.reasoning_effort
        if self.spec.effort_from_model_suffix:
            for keyword in _EFFORT_KEYWORDS:
                suffix = f"-{keyword}"
                if model_name.endswith(suffix):
                    return model_name[: -len(suffix)], keyword
        return model_name, None

    def _serialize_messages(self, chat_request: ChatRequest) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []
        if chat_request.system:
            messages.append({"role": "system", "content": chat_request.system})

        for message in chat_request.messages:
            # Tool responses always travel as their own tool-role messages.
            for response in message.tool_responses():
                messages.append({"role": "tool", "content": response.content, "tool_call_id": response.call_id})

            if message.role == "system":
                texts = message.texts()
                if texts:
                    messages.append({"role": "system", "content": "\n".join(texts)})
            elif message.role == "user":
                content = self._user_content(message)
                if content:
                    messages.append({"role": "user", "content": content})
            elif message.role == "assistant":
                text = "".join(message.texts())
                calls = message.tool_calls()
                if calls:
                    messages.append(
                        {
                            "role": "assistant",
                            "content": text,
                            "tool_calls": [self._serialize_tool_call(c) for c in calls],
                        }
                    )
                elif text:
                    messages.append({"role": "assistant", "content": text})

            if message.role != "assistant" and message.tool_calls():
                self._logger.warning(
                    "%s: dropping %d tool call(s) on a %s message",
                    self.kind,
                    len(message.tool_calls()),
                    message.role,
                )

        return messages

    def _user_content(self, message: ChatMessage) -> str | list[dict[str, Any]]:
        parts: list[dict[str, Any]] = []
        for part in message.content:
            if isinstance(part, TextPart):
                parts.append({"type": "text", "text": part.text})
            elif isinstance(part, BinaryPart):
                if part.is_image():
                    parts.append({"type": "image_url", "image_url": {"url": part.to_url()}})
                else:
                    self._logger.debug("%s: omitting unsupported %s part", self.kind, part.content_type)
        if len(parts) == 1 and parts[0]["type"] == "text":
            return parts[0]["text"]
        return parts

    @staticmethod
    def _serialize_tool_call(call: ToolCall) -> dict[str, Any]:
        return {
            "type": "function",
            "id": call.call_id,
            "function": {"name": call.fn_name, "arguments": json.dumps(call.fn_arguments)},
        }

    @staticmethod
    def _serialize_tool(tool: Tool) -> dict[str, Any]:
        function: dict[str, Any] = {
            "name": tool.name,
            "parameters": tool.json_schema or {"type": "object", "properties": {}},
            "strict": False,
        }
        if tool.description:
            function["description"] = tool.description
        return {"type": "function", "function": function}

    @staticmethod
    def _json_schema_format(spec: JsonSpec) -> dict[str, Any]:
        json_schema: dict[str, Any] = {
            "name": spec.name,
            "strict": True,
            "schema": forbid_additional_properties(spec.json_schema),
        }
        if spec.description:
            json_schema["description"] = spec.description
        return {"type": "json_schema", "json_schema": json_schema}

    def parse_response(self, model_iden: ModelIden, raw_body: Any, options: ChatOptions) -> ChatResponse:
        """Normalize a chat completion body."""
        provider = str(self.kind)
        if not isinstance(raw_body, dict):
            raise MalformedResponseError(provider, "body is not a JSON object")

        choices = raw_body.get("choices")
        if not isinstance(choices, list):
            raise MalformedResponseError(provider, "missing 'choices' array")

        content: list[ContentPart] = []
        reasoning: str | None = None
        if choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            if not isinstance(message, dict):
                raise MalformedResponseError(provider, "first choice has no 'message'")

            raw_reasoning = message.get("reasoning_content") or message.get("reasoning")
            if isinstance(raw_reasoning, str):
                reasoning = raw_reasoning.strip() or None

            text = message.get("content")
            if isinstance(text, str):
                if options.normalize_reasoning_content and reasoning is None:
                    text, reasoning = extract_think(text)
                if text:
                    content.append(TextPart(text=text))

            content.extend(self._parse_tool_calls(message.get("tool_calls")))

        provider_model = raw_body.get("model")
        return ChatResponse(
            content=content,
            reasoning_content=reasoning,
            model_iden=model_iden,
            provider_model_iden=model_iden.with_name(provider_model if isinstance(provider_model, str) else None),
            usage=usage_from_openai(raw_body.get("usage"), self.kind),
            captured_raw_body=raw_body if options.capture_raw_body else None,
        )

    def _parse_tool_calls(self, raw_calls: Any) -> list[ToolCall]:
        provider = str(self.kind)
        if raw_calls is None:
            return []
        if not isinstance(raw_calls, list):
            raise MalformedResponseError(provider, "'tool_calls' is not an array")

        calls: list[ToolCall] = []
        for raw in raw_calls:
            function = raw.get("function") if isinstance(raw, dict) else None
            if not isinstance(function, dict) or not isinstance(raw.get("id"), str):
                raise MalformedResponseError(provider, f"invalid tool call: {raw!r}")

            arguments = function.get("arguments")
            if isinstance(arguments, str):
                try:
                    arguments = json.loads(arguments) if arguments.strip() else {}
                except ValueError as exc:
                    raise MalformedResponseError(provider, f"tool call arguments are not JSON: {exc}") from exc
            if arguments is None:
                arguments = {}
            if not isinstance(arguments, dict):
                raise MalformedResponseError(provider, "tool call arguments are not an object")

            calls.append(ToolCall(call_id=raw["id"], fn_name=str(function.get("name", "")), fn_arguments=arguments))
        return calls


def extract_think(text: str) -> tuple[str, str | None]:
    """Split an inline ``<think>...</think>`` block out of ``text``.

    Returns the remaining text and the trimmed reasoning, or the text
    unchanged and ``None`` when there is no complete block.
    """
    start = text.find(THINK_START)
    if start == -1:
        return text, None
    end = text.find(THINK_END, start + len(THINK_START))
    if end == -1:
        return text, None

    reasoning = text[start + len(THINK_START) : end].strip()
    remaining = text[:start] + text[end + len(THINK_END) :].lstrip()
    return remaining, reasoning or None


def forbid_additional_properties(schema: Any) -> Any:
    """Copy ``schema`` with ``additionalProperties: false`` on every object schema."""
    if isinstance(schema, list):
        return [forbid_additional_properties(item) for item in schema]
    if not isinstance(schema, dict):
        return schema

    result = {key: forbid_additional_properties(value) for key, value in schema.items()}
    if result.get("type") == "object":
        result["additionalProperties"] = False
    return result
