"""Streaming normalization.

``ChatStream`` turns a transport event source plus a per-wire frame decoder
into the ordered ``InterStreamEvent`` sequence: one ``StreamStart``, any
number of chunks, one ``StreamEnd``.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel, Field

from llm_bridge.errors import LLMBridgeError, StreamDecodeError, TransportError
from llm_bridge.kinds import AdapterKind, ModelIden
from llm_bridge.transport import SseEvent, SseMessage, SseOpen
from llm_bridge.types import (
    ChatOptions,
    InterStreamEvent,
    ReasoningChunk,
    StreamChunk,
    StreamEnd,
    StreamStart,
    ToolCall,
    ToolCallChunk,
    Usage,
)
from llm_bridge.usage import usage_from_anthropic, usage_from_openai

_logger = logging.getLogger(__name__)

DONE_MARKER = "[DONE]"


@dataclass
class ToolCallFragment:
    """Piece of a tool call; ``index`` groups fragments of the same call."""

    index: int | None = None
    call_id: str | None = None
    fn_name: str | None = None
    arguments: str | None = None


@dataclass
class StreamDelta:
    """Everything one provider frame contributed."""

    usage: Usage | None = None
    reasoning: str | None = None
    text: str | None = None
    tool_calls: list[ToolCallFragment] = field(default_factory=list)
    # a finish reason was reported
    finished: bool = False
    # the provider's own end-of-stream marker
    done: bool = False

    def is_empty(self) -> bool:
        return (
            self.usage is None
            and not self.reasoning
            and not self.text
            and not self.tool_calls
            and not self.finished
            and not self.done
        )


class FrameDecoder(Protocol):
    """Decodes one SSE message; raises ``ValueError`` for frames it cannot parse."""

    def decode(self, message: SseMessage) -> StreamDelta: ...


class _FunctionDelta(BaseModel):
    name: str | None = None
    arguments: str | None = None


class _ToolCallDelta(BaseModel):
    index: int | None = None
    id: str | None = None
    function: _FunctionDelta | None = None


class _MessageDelta(BaseModel):
    content: str | None = None
    reasoning_content: str | None = None
    reasoning: str | None = None
    tool_calls: list[_ToolCallDelta] | None = None


class _Choice(BaseModel):
    delta: _MessageDelta = Field(default_factory=_MessageDelta)
    finish_reason: str | None = None


class _ChatCompletionChunk(BaseModel):
    choices: list[_Choice] = Field(default_factory=list)
    usage: dict[str, Any] | None = None


class OpenAIFrameDecoder:
    """Decoder for OpenAI-compatible ``chat.completion.chunk`` frames."""

    def __init__(self, kind: AdapterKind) -> None:
        self._kind = kind

    def decode(self, message: SseMessage) -> StreamDelta:
        chunk = _ChatCompletionChunk.model_validate_json(message.data)
        delta = StreamDelta()
        if chunk.usage is not None:
            delta.usage = usage_from_openai(chunk.usage, self._kind)

        if not chunk.choices:
            return delta

        choice = chunk.choices[0]
        delta.reasoning = choice.delta.reasoning_content or choice.delta.reasoning
        delta.text = choice.delta.content
        for call in choice.delta.tool_calls or ():
            function = call.function or _FunctionDelta()
            delta.tool_calls.append(
                ToolCallFragment(
                    index=call.index,
                    call_id=call.id,
                    fn_name=function.name,
                    arguments=function.arguments,
                )
            )
        delta.finished = choice.finish_reason is not None
        return delta


class AnthropicFrameDecoder:
    """Decoder for Anthropic Messages stream events. One instance per stream."""

    def __init__(self) -> None:
        self._raw_usage: dict[str, Any] = {}

    def decode(self, message: SseMessage) -> StreamDelta:
        data = json.loads(message.data)
        if not isinstance(data, dict):
            raise ValueError("event payload is not an object")
        kind = data.get("type") or message.event
        delta = StreamDelta()

        if kind == "message_start":
            self._raw_usage.update(data["message"].get("usage") or {})
            delta.usage = usage_from_anthropic(self._raw_usage)
        elif kind == "content_block_start":
            block = data["content_block"]
            if block.get("type") == "tool_use":
                delta.tool_calls.append(
                    ToolCallFragment(index=data["index"], call_id=block["id"], fn_name=block["name"])
                )
            elif block.get("type") == "text" and block.get("text"):
                delta.text = block["text"]
        elif kind == "content_block_delta":
            inner = data["delta"]
            inner_kind = inner.get("type")
            if inner_kind == "text_delta":
                delta.text = inner["text"]
            elif inner_kind == "thinking_delta":
                delta.reasoning = inner["thinking"]
            elif inner_kind == "input_json_delta":
                delta.tool_calls.append(
                    ToolCallFragment(index=data["index"], arguments=inner["partial_json"])
                )
        elif kind == "message_delta":
            if data.get("usage"):
                self._raw_usage.update(data["usage"])
                delta.usage = usage_from_anthropic(self._raw_usage)
            delta.finished = (data.get("delta") or {}).get("stop_reason") is not None
        elif kind == "message_stop":
            delta.done = True
        elif kind == "error":
            error = data.get("error") or {}
            raise TransportError("anthropic", f"stream error: {error.get('message', error)}")
        # ping, content_block_stop and unknown events carry nothing
        return delta


@dataclass
class _PartialToolCall:
    call_id: str | None = None
    fn_name: str | None = None
    arguments: str = ""

    def to_tool_call(self) -> ToolCall | None:
        if not self.call_id or not self.fn_name:
            return None
        return ToolCall(call_id=self.call_id, fn_name=self.fn_name, fn_arguments=_parse_arguments(self.arguments))


def _parse_arguments(raw: str) -> Any:
    # Mid-stream argument strings are usually incomplete JSON.
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        return {}


class ToolCallAccumulator:
    """Rebuilds tool calls from fragments keyed by index (or call id)."""

    def __init__(self) -> None:
        self._calls: dict[int, _PartialToolCall] = {}
        self._last_key: int | None = None

    def _key_for(self, fragment: ToolCallFragment) -> int:
        if fragment.index is not None:
            return fragment.index
        if fragment.call_id is not None:
            for key, partial in self._calls.items():
                if partial.call_id == fragment.call_id:
                    return key
            if self._last_key is not None and self._calls[self._last_key].call_id not in (None, fragment.call_id):
                return max(self._calls) + 1
        return self._last_key if self._last_key is not None else 0

    def apply(self, fragment: ToolCallFragment) -> ToolCall | None:
        """Merge ``fragment``; return the call if it is now complete."""
        key = self._key_for(fragment)
        partial = self._calls.setdefault(key, _PartialToolCall())
        self._last_key = key
        if fragment.call_id:
            partial.call_id = fragment.call_id
        if fragment.fn_name:
            partial.fn_name = fragment.fn_name
        if fragment.arguments:
            partial.arguments += fragment.arguments
        return partial.to_tool_call()

    def completed(self) -> list[ToolCall]:
        calls = (self._calls[key].to_tool_call() for key in sorted(self._calls))
        return [call for call in calls if call is not None]

    def clear(self) -> None:
        self._calls.clear()
        self._last_key = None


class StreamState(Enum):
    IDLE = "idle"
    STARTED = "started"
    STREAMING = "streaming"
    DONE = "done"


class ChatStream:
    """Pull-based normalizer over one provider event stream.

    Nothing happens until the stream is polled. Use ``aclose()`` (or
    ``async with``) to abandon a stream early; no ``StreamEnd`` follows.
    """

    def __init__(
        self,
        source: AsyncIterator[SseEvent],
        decoder: FrameDecoder,
        options: ChatOptions,
        *,
        model_iden: ModelIden,
    ) -> None:
        self.model_iden = model_iden
        self._source = source
        self._decoder = decoder
        self._options = options
        self._provider = str(model_iden.provider)
        self._state = StreamState.IDLE
        self._ready: deque[InterStreamEvent] = deque()

        self._text: list[str] = []
        self._reasoning: list[str] = []
        self._tool_calls = ToolCallAccumulator()
        self._usage: Usage | None = None
        self._end_pending = False

    @property
    def state(self) -> StreamState:
        return self._state

    def __aiter__(self) -> ChatStream:
        return self

    async def __anext__(self) -> InterStreamEvent:
        while True:
            if self._ready:
                return self._ready.popleft()
            if self._state is StreamState.DONE:
                raise StopAsyncIteration

            try:
                event = await self._source.__anext__()
            except StopAsyncIteration:
                await self._on_source_closed()
                continue
            except LLMBridgeError:
                await self._fail()
                raise

            await self._on_event(event)

    async def __aenter__(self) -> ChatStream:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop the stream and release the transport and buffers."""
        if self._state is not StreamState.DONE:
            self._state = StreamState.DONE
            self._ready.clear()
        self._text.clear()
        self._reasoning.clear()
        self._tool_calls.clear()
        await self._release()

    async def _on_event(self, event: SseEvent) -> None:
        if isinstance(event, SseOpen):
            if self._state is StreamState.IDLE:
                self._start()
            return

        if self._state is StreamState.IDLE:
            self._start()

        data = event.data.strip()
        if data == DONE_MARKER:
            await self._finish()
            return

        try:
            delta = self._decoder.decode(event)
        except LLMBridgeError:
            await self._fail()
            raise
        except ValueError as exc:
            await self._fail()
            raise StreamDecodeError(self._provider, str(exc), event.data) from exc
        except (KeyError, TypeError, AttributeError) as exc:
            await self._fail()
            raise StreamDecodeError(self._provider, f"unexpected frame shape: {exc!r}", event.data) from exc

        self._state = StreamState.STREAMING
        if delta.is_empty():
            _logger.debug("%s: skipping empty stream frame", self._provider)
            return
        await self._apply(delta)

    async def _apply(self, delta: StreamDelta) -> None:
        options = self._options

        if delta.usage is not None:
            self._usage = delta.usage

        if delta.reasoning:
            if options.capture_reasoning_content:
                self._reasoning.append(delta.reasoning)
            self._ready.append(ReasoningChunk(content=delta.reasoning))

        if delta.text:
            if options.capture_content:
                self._text.append(delta.text)
            self._ready.append(StreamChunk(content=delta.text))

        for fragment in delta.tool_calls:
            call = self._tool_calls.apply(fragment)
            if call is not None:
                self._ready.append(ToolCallChunk(tool_call=call))

        if delta.done:
            await self._finish()
        elif delta.finished or self._end_pending:
            # Usage often trails the finish frame; wait for it when it is wanted.
            if options.capture_usage and self._usage is None:
                self._end_pending = True
            else:
                await self._finish()

    def _start(self) -> None:
        self._state = StreamState.STARTED
        self._ready.append(StreamStart())

    async def _on_source_closed(self) -> None:
        if self._end_pending:
            await self._finish()
            return
        await self._fail()
        raise TransportError(self._provider, "stream closed before completion")

    async def _finish(self) -> None:
        self._ready.append(self._build_end())
        self._state = StreamState.DONE
        await self._release()

    async def _fail(self) -> None:
        self._state = StreamState.DONE
        self._ready.clear()
        await self._release()

    async def _release(self) -> None:
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()

    def _build_end(self) -> StreamEnd:
        options = self._options
        end = StreamEnd()
        if options.capture_usage:
            end.captured_usage = self._usage or Usage()
        if options.capture_content and self._text:
            end.captured_text_content = "".join(self._text)
        if options.capture_reasoning_content and self._reasoning:
            end.captured_reasoning_content = "".join(self._reasoning)
        if options.capture_tool_calls:
            calls = self._tool_calls.completed()
            end.captured_tool_calls = calls or None
        return end
