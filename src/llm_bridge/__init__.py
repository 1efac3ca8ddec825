"""Unified async client for many LLM providers."""

import logging

from .client import Client
from .config import ClientConfig
from .errors import (
    CredentialMissingError,
    LLMBridgeError,
    MalformedResponseError,
    StreamDecodeError,
    TransportError,
    UnsupportedOperationError,
    UnsupportedProviderError,
)
from .kinds import AdapterKind, ModelIden
from .model import Modality, Model, ReasoningEffortType
from .resolver import AuthData, Endpoint, ServiceTarget, ServiceTargetResolver
from .streaming import ChatStream
from .types import (
    BinaryPart,
    ChatMessage,
    ChatOptions,
    ChatRequest,
    ChatResponse,
    JsonMode,
    JsonSpec,
    ReasoningChunk,
    StreamChunk,
    StreamEnd,
    StreamStart,
    TextPart,
    Tool,
    ToolCall,
    ToolCallChunk,
    ToolResponse,
    Usage,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AdapterKind",
    "AuthData",
    "BinaryPart",
    "ChatMessage",
    "ChatOptions",
    "ChatRequest",
    "ChatResponse",
    "ChatStream",
    "Client",
    "ClientConfig",
    "CredentialMissingError",
    "Endpoint",
    "JsonMode",
    "JsonSpec",
    "LLMBridgeError",
    "MalformedResponseError",
    "Modality",
    "Model",
    "ModelIden",
    "ReasoningChunk",
    "ReasoningEffortType",
    "ServiceTarget",
    "ServiceTargetResolver",
    "StreamChunk",
    "StreamDecodeError",
    "StreamEnd",
    "StreamStart",
    "TextPart",
    "Tool",
    "ToolCall",
    "ToolCallChunk",
    "ToolResponse",
    "TransportError",
    "UnsupportedOperationError",
    "UnsupportedProviderError",
    "Usage",
]
