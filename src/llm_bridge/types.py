"""Provider-agnostic request/response and stream event models."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from llm_bridge.kinds import ModelIden

ChatRole = Literal["system", "user", "assistant", "tool"]
# A keyword level, or an explicit token budget.
ReasoningEffort = Union[Literal["low", "medium", "high"], int]


class TextPart(BaseModel):
    """Plain text content."""

    type: Literal["text"] = "text"
    text: str


class BinaryPart(BaseModel):
    """Binary content (images) given either by URL or base64 payload."""

    type: Literal["binary"] = "binary"
    content_type: str
    url: str | None = None
    data: str | None = None
    name: str | None = None

    @model_validator(mode="after")
    def _one_source(self) -> BinaryPart:
        if (self.url is None) == (self.data is None):
            raise ValueError("exactly one of 'url' or 'data' must be set")
        return self

    def is_image(self) -> bool:
        return self.content_type.startswith("image/")

    def to_url(self) -> str:
        """Return the URL, or a ``data:`` URI for inline payloads."""
        if self.url is not None:
            return self.url
        return f"data:{self.content_type};base64,{self.data}"


class ToolCall(BaseModel):
    """A function call requested by the model."""

    type: Literal["tool_call"] = "tool_call"
    call_id: str
    fn_name: str
    fn_arguments: Any = Field(default_factory=dict)


class ToolResponse(BaseModel):
    """The caller's answer to a tool call."""

    type: Literal["tool_response"] = "tool_response"
    call_id: str
    content: str


ContentPart = Annotated[
    Union[TextPart, BinaryPart, ToolCall, ToolResponse],
    Field(discriminator="type"),
]


class ChatMessage(BaseModel):
    """Single chat message made of content parts."""

    role: ChatRole
    content: list[ContentPart]

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [TextPart(text=value)]
        if isinstance(value, (TextPart, BinaryPart, ToolCall, ToolResponse)):
            return [value]
        return value

    @classmethod
    def system(cls, text: str) -> ChatMessage:
        return cls(role="system", content=text)

    @classmethod
    def user(cls, content: str | list[Any]) -> ChatMessage:
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str | list[Any]) -> ChatMessage:
        return cls(role="assistant", content=content)

    @classmethod
    def tool_response(cls, call_id: str, content: str) -> ChatMessage:
        return cls(role="tool", content=[ToolResponse(call_id=call_id, content=content)])

    def texts(self) -> list[str]:
        return [p.text for p in self.content if isinstance(p, TextPart)]

    def binaries(self) -> list[BinaryPart]:
        return [p for p in self.content if isinstance(p, BinaryPart)]

    def tool_calls(self) -> list[ToolCall]:
        return [p for p in self.content if isinstance(p, ToolCall)]

    def tool_responses(self) -> list[ToolResponse]:
        return [p for p in self.content if isinstance(p, ToolResponse)]


class Tool(BaseModel):
    """Simple JSON-schema tool definition."""

    name: str
    description: str | None = None
    json_schema: dict[str, Any] | None = None


class ChatRequest(BaseModel):
    """Normalized request shared by all providers."""

    system: str | None = None
    messages: list[ChatMessage] = Field(default_factory=list)
    tools: list[Tool] = Field(default_factory=list)

    @classmethod
    def from_user(cls, text: str, *, system: str | None = None) -> ChatRequest:
        return cls(system=system, messages=[ChatMessage.user(text)])

    def append_message(self, message: ChatMessage) -> ChatRequest:
        """Return a copy with ``message`` appended."""
        return self.model_copy(update={"messages": [*self.messages, message]})

    def has_images(self) -> bool:
        return any(b.is_image() for m in self.messages for b in m.binaries())


class JsonMode(BaseModel):
    """Ask for any valid JSON object."""

    type: Literal["json_mode"] = "json_mode"


class JsonSpec(BaseModel):
    """Ask for JSON matching a named schema."""

    type: Literal["json_spec"] = "json_spec"
    name: str
    json_schema: dict[str, Any]
    description: str | None = None


ResponseFormat = Annotated[Union[JsonMode, JsonSpec], Field(discriminator="type")]


class ChatOptions(BaseModel):
    """Per-call (or client default) options. ``None`` means not set."""

    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    stop_sequences: list[str] | None = None
    seed: int | None = None
    reasoning_effort: ReasoningEffort | None = None
    response_format: ResponseFormat | None = None
    extra_headers: dict[str, str] | None = None

    capture_content: bool | None = None
    capture_usage: bool | None = None
    capture_reasoning_content: bool | None = None
    capture_tool_calls: bool | None = None
    capture_raw_body: bool | None = None
    normalize_reasoning_content: bool | None = None

    def merged_over(self, defaults: ChatOptions | None) -> ChatOptions:
        """Fill unset fields from ``defaults``; values set here win."""
        if defaults is None:
            return self
        values = {
            name: value if (value := getattr(self, name)) is not None else getattr(defaults, name)
            for name in type(self).model_fields
        }
        return ChatOptions.model_construct(**values)


class PromptTokensDetails(BaseModel):
    cached_tokens: int | None = None
    audio_tokens: int | None = None


class CompletionTokensDetails(BaseModel):
    reasoning_tokens: int | None = None
    audio_tokens: int | None = None
    accepted_prediction_tokens: int | None = None
    rejected_prediction_tokens: int | None = None


class Usage(BaseModel):
    """Token accounting; every field is optional."""

    prompt_tokens: int | None = None
    prompt_tokens_details: PromptTokensDetails | None = None
    completion_tokens: int | None = None
    completion_tokens_details: CompletionTokensDetails | None = None
    total_tokens: int | None = None

    def compact_details(self) -> Usage:
        """Drop detail objects whose fields are all empty."""
        update: dict[str, Any] = {}
        for name in ("prompt_tokens_details", "completion_tokens_details"):
            details = getattr(self, name)
            if details is not None and not any(v is not None for v in details.model_dump().values()):
                update[name] = None
        return self.model_copy(update=update) if update else self

    def is_empty(self) -> bool:
        return self.prompt_tokens is None and self.completion_tokens is None and self.total_tokens is None


class ChatResponse(BaseModel):
    """Normalized chat response."""

    content: list[ContentPart] = Field(default_factory=list)
    reasoning_content: str | None = None
    model_iden: ModelIden
    provider_model_iden: ModelIden
    usage: Usage = Field(default_factory=Usage)
    # provider payload, kept only when capture_raw_body is set
    captured_raw_body: dict[str, Any] | None = None

    def texts(self) -> list[str]:
        return [p.text for p in self.content if isinstance(p, TextPart)]

    def first_text(self) -> str | None:
        texts = self.texts()
        return texts[0] if texts else None

    def tool_calls(self) -> list[ToolCall]:
        return [p for p in self.content if isinstance(p, ToolCall)]


class StreamStart(BaseModel):
    type: Literal["start"] = "start"


class StreamChunk(BaseModel):
    type: Literal["chunk"] = "chunk"
    content: str


class ReasoningChunk(BaseModel):
    type: Literal["reasoning_chunk"] = "reasoning_chunk"
    content: str


class ToolCallChunk(BaseModel):
    type: Literal["tool_call_chunk"] = "tool_call_chunk"
    tool_call: ToolCall


class StreamEnd(BaseModel):
    """Terminal stream event; each field is set only if its capture flag was on."""

    type: Literal["end"] = "end"
    captured_usage: Usage | None = None
    captured_text_content: str | None = None
    captured_reasoning_content: str | None = None
    captured_tool_calls: list[ToolCall] | None = None


InterStreamEvent = Union[StreamStart, StreamChunk, ReasoningChunk, ToolCallChunk, StreamEnd]
