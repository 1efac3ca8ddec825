"""Anthropic Messages API adapter."""

from __future__ import annotations

from typing import Any

from llm_bridge.adapters.base import Adapter, ServiceKind
from llm_bridge.adapters.openai_compat import extract_think
from llm_bridge.errors import MalformedResponseError, UnsupportedOperationError
from llm_bridge.kinds import ModelIden
from llm_bridge.resolver import ServiceTarget
from llm_bridge.streaming import AnthropicFrameDecoder, FrameDecoder
from llm_bridge.transport import WebRequestData
from llm_bridge.types import (
    BinaryPart,
    ChatMessage,
    ChatOptions,
    ChatRequest,
    ChatResponse,
    ContentPart,
    ReasoningEffort,
    TextPart,
    Tool,
    ToolCall,
)
from llm_bridge.usage import usage_from_anthropic

_DEFAULT_MAX_TOKENS = 1024
THINKING_BUDGETS = {"low": 1024, "medium": 8000, "high": 24000}


class AnthropicAdapter(Adapter):
    """Async translation layer for the Anthropic Messages API."""

    def auth_headers(self, api_key: str | None) -> dict[str, str]:
        if not api_key:
            return {}
        return {"x-api-key": api_key}

    def frame_decoder(self) -> FrameDecoder:
        return AnthropicFrameDecoder()

    def build_request(
        self,
        target: ServiceTarget,
        service_kind: ServiceKind,
        chat_request: ChatRequest,
        options: ChatOptions,
    ) -> WebRequestData:
        url = self.service_url(target.model, service_kind, target.endpoint)
        if service_kind not in (ServiceKind.CHAT, ServiceKind.CHAT_STREAM):
            raise UnsupportedOperationError(str(self.kind), f"build_request({service_kind})")

        headers = self.chat_headers(target)
        if options.extra_headers:
            headers.update(options.extra_headers)

        system_text, messages = self._split_system(chat_request)
        payload: dict[str, Any] = {
            "model": target.model.bare_name,
            "max_tokens": options.max_tokens or _DEFAULT_MAX_TOKENS,
            "messages": messages,
        }
        if system_text:
            payload["system"] = system_text
        if service_kind is ServiceKind.CHAT_STREAM:
            payload["stream"] = True

        if chat_request.tools:
            payload["tools"] = [self._serialize_tool(t) for t in chat_request.tools]

        budget = thinking_budget(options.reasoning_effort)
        if budget is not None:
            payload["thinking"] = {"type": "enabled", "budget_tokens": budget}
            # max_tokens must leave room for the answer after thinking
            if payload["max_tokens"] <= budget:
                payload["max_tokens"] = budget + _DEFAULT_MAX_TOKENS

        if options.response_format is not None:
            self._logger.warning("anthropic: response_format is not supported, ignoring it")
        if options.temperature is not None:
            payload["temperature"] = options.temperature
        if options.top_p is not None:
            payload["top_p"] = options.top_p
        if options.stop_sequences:
            payload["stop_sequences"] = list(options.stop_sequences)

        return WebRequestData(url=url, headers=headers, payload=payload)

    def _split_system(self, chat_request: ChatRequest) -> tuple[str, list[dict[str, Any]]]:
        system_parts: list[str] = [chat_request.system] if chat_request.system else []
        messages: list[dict[str, Any]] = []

        for message in chat_request.messages:
            if message.role == "system":
                system_parts.extend(message.texts())
                continue

            role = "assistant" if message.role == "assistant" else "user"
            blocks = self._content_blocks(message)
            if not blocks:
                continue
            # The API expects alternating turns; merge consecutive same-role messages.
            if messages and messages[-1]["role"] == role:
                messages[-1]["content"].extend(blocks)
            else:
                messages.append({"role": role, "content": blocks})

        return "\n".join(system_parts), messages

    def _content_blocks(self, message: ChatMessage) -> list[dict[str, Any]]:
        blocks: list[dict[str, Any]] = []
        # Tool results lead a user turn.
        for response in message.tool_responses():
            blocks.append({"type": "tool_result", "tool_use_id": response.call_id, "content": response.content})

        for part in message.content:
            if isinstance(part, TextPart):
                if part.text:
                    blocks.append({"type": "text", "text": part.text})
            elif isinstance(part, BinaryPart):
                if part.is_image():
                    blocks.append({"type": "image", "source": self._image_source(part)})
                else:
                    self._logger.debug("anthropic: omitting unsupported %s part", part.content_type)
            elif isinstance(part, ToolCall):
                if message.role == "assistant":
                    blocks.append({"type": "tool_use", "id": part.call_id, "name": part.fn_name, "input": part.fn_arguments})
                else:
                    self._logger.warning("anthropic: dropping tool call %s on a %s message", part.call_id, message.role)
        return blocks

    @staticmethod
    def _image_source(part: BinaryPart) -> dict[str, Any]:
        if part.url is not None:
            return {"type": "url", "url": part.url}
        return {"type": "base64", "media_type": part.content_type, "data": part.data}

    @staticmethod
    def _serialize_tool(tool: Tool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": tool.name,
            "input_schema": tool.json_schema or {"type": "object", "properties": {}},
        }
        if tool.description:
            payload["description"] = tool.description
        return payload

    def parse_response(self, model_iden: ModelIden, raw_body: Any, options: ChatOptions) -> ChatResponse:
        """Normalize a Messages API body."""
        if not isinstance(raw_body, dict):
            raise MalformedResponseError("anthropic", "body is not a JSON object")
        blocks = raw_body.get("content")
        if not isinstance(blocks, list):
            raise MalformedResponseError("anthropic", "missing 'content' array")

        content: list[ContentPart] = []
        thinking: list[str] = []
        for block in blocks:
            if not isinstance(block, dict):
                raise MalformedResponseError("anthropic", f"invalid content block: {block!r}")
            kind = block.get("type")
            if kind == "text":
                text = block.get("text") or ""
                if options.normalize_reasoning_content:
                    text, inline = extract_think(text)
                    if inline:
                        thinking.append(inline)
                if text:
                    content.append(TextPart(text=text))
            elif kind == "thinking":
                thinking.append(block.get("thinking") or "")
            elif kind == "tool_use":
                arguments = block.get("input")
                if arguments is None:
                    arguments = {}
                if not isinstance(arguments, dict) or not isinstance(block.get("id"), str):
                    raise MalformedResponseError("anthropic", f"invalid tool_use block: {block!r}")
                content.append(ToolCall(call_id=block["id"], fn_name=str(block.get("name", "")), fn_arguments=arguments))

        reasoning = "".join(thinking).strip() or None
        provider_model = raw_body.get("model")
        return ChatResponse(
            content=content,
            reasoning_content=reasoning,
            model_iden=model_iden,
            provider_model_iden=model_iden.with_name(provider_model if isinstance(provider_model, str) else None),
            usage=usage_from_anthropic(raw_body.get("usage")),
            captured_raw_body=raw_body if options.capture_raw_body else None,
        )


def thinking_budget(effort: ReasoningEffort | None) -> int | None:
    """Token budget for an effort level; ints are taken literally."""
    if effort is None:
        return None
    if isinstance(effort, int):
        return effort
    return THINKING_BUDGETS[effort]
