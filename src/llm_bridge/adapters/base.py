"""Adapter contract shared by every provider."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from llm_bridge import capabilities
from llm_bridge.errors import LLMBridgeError, MalformedResponseError, UnsupportedOperationError
from llm_bridge.kinds import AdapterKind, ModelIden
from llm_bridge.model import Model
from llm_bridge.resolver import AuthData, Endpoint, ServiceTarget, ServiceTargetResolver
from llm_bridge.streaming import ChatStream, FrameDecoder
from llm_bridge.transport import WebClient, WebRequestData
from llm_bridge.types import ChatOptions, ChatRequest, ChatResponse


class ServiceKind(str, Enum):
    CHAT = "chat"
    CHAT_STREAM = "chat-stream"
    EMBED = "embed"
    MODELS = "models"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProviderSpec:
    """Static facts that distinguish one provider from another."""

    kind: AdapterKind
    base_url: str
    api_key_env: str | None = None
    # literal default credential, for local servers that ignore it
    api_key: str | None = None
    base_url_env: str | None = None
    model_names: tuple[str, ...] = ()
    live_listing: bool = True
    listing_needs_auth: bool = True
    listing_filter: Callable[[str], bool] | None = None
    listing_headers: Mapping[str, str] = field(default_factory=dict)
    # listing entries carry limits/supports that override inferred values
    listing_advertises_capabilities: bool = False
    supports_embed: bool = True
    sends_reasoning_effort: bool = False
    effort_from_model_suffix: bool = False
    static_headers: Mapping[str, str] = field(default_factory=dict)
    # sent with chat requests only
    chat_headers: Mapping[str, str] = field(default_factory=dict)
    vision_header: str | None = None
    payload_extras: Mapping[str, Any] = field(default_factory=dict)
    namespace_base_urls: Mapping[str, str] = field(default_factory=dict)
    chat_path: str = "chat/completions"
    embed_path: str = "embeddings"
    models_path: str = "models"


class Adapter(ABC):
    """Translates unified requests to one provider wire format and back."""

    _logger = logging.getLogger(__name__)

    def __init__(self, spec: ProviderSpec) -> None:
        self.spec = spec

    @property
    def kind(self) -> AdapterKind:
        return self.spec.kind

    def default_auth(self) -> AuthData:
        """Credential source used when no auth resolver overrides it."""
        if self.spec.api_key is not None:
            return AuthData.from_key(self.spec.api_key)
        if self.spec.api_key_env is not None:
            return AuthData.from_env(self.spec.api_key_env)
        return AuthData.none()

    def default_endpoint(self, model_iden: ModelIden) -> Endpoint:
        """Endpoint used when no endpoint resolver overrides it."""
        base_url = self.spec.base_url
        namespace = model_iden.namespace
        if namespace is not None and namespace in self.spec.namespace_base_urls:
            base_url = self.spec.namespace_base_urls[namespace]
        elif self.spec.base_url_env is not None:
            base_url = os.environ.get(self.spec.base_url_env) or base_url
        return Endpoint(base_url=base_url)

    def service_url(self, model_iden: ModelIden, service_kind: ServiceKind, endpoint: Endpoint) -> str:
        """Full URL for ``service_kind``; unsupported services raise."""
        if service_kind in (ServiceKind.CHAT, ServiceKind.CHAT_STREAM):
            suffix = self.spec.chat_path
        elif service_kind is ServiceKind.EMBED:
            if not self.spec.supports_embed:
                raise UnsupportedOperationError(str(self.kind), str(service_kind))
            suffix = self.spec.embed_path
        else:
            suffix = self.spec.models_path
        return endpoint.url_for(suffix)

    @abstractmethod
    def auth_headers(self, api_key: str | None) -> dict[str, str]:
        """Headers carrying the credential."""
        raise NotImplementedError

    @abstractmethod
    def build_request(
        self,
        target: ServiceTarget,
        service_kind: ServiceKind,
        chat_request: ChatRequest,
        options: ChatOptions,
    ) -> WebRequestData:
        """Translate a unified request into the provider payload."""
        raise NotImplementedError

    @abstractmethod
    def parse_response(self, model_iden: ModelIden, raw_body: Any, options: ChatOptions) -> ChatResponse:
        """Normalize a non-streaming provider body."""
        raise NotImplementedError

    @abstractmethod
    def frame_decoder(self) -> FrameDecoder:
        """Fresh decoder for one stream."""
        raise NotImplementedError

    def chat_headers(self, target: ServiceTarget) -> dict[str, str]:
        """Headers for a chat request; resolving the credential may raise."""
        api_key = target.auth.api_key(target.model)
        return {
            "Content-Type": "application/json",
            **self.spec.static_headers,
            **self.spec.chat_headers,
            **target.endpoint.headers,
            **self.auth_headers(api_key),
        }

    def open_stream(
        self,
        web_client: WebClient,
        target: ServiceTarget,
        chat_request: ChatRequest,
        options: ChatOptions,
    ) -> ChatStream:
        """Build the streaming request and wrap its event source.

        The request is built eagerly so that credential and option errors
        surface here; nothing is sent until the stream is polled.
        """
        request = self.build_request(target, ServiceKind.CHAT_STREAM, chat_request, options)
        source = web_client.open_event_source(request, provider=str(self.kind))
        return ChatStream(source, self.frame_decoder(), options, model_iden=target.model)

    async def list_model_names(self, web_client: WebClient, resolver: ServiceTargetResolver) -> list[str]:
        """Live model ids, or the static table if listing is unavailable or fails.

        Target resolution runs inside the fallback, so a failing auth or
        endpoint resolver also yields the static table.
        """
        if not self.spec.live_listing:
            return list(self.spec.model_names)
        try:
            entries = await self._fetch_model_entries(web_client, resolver)
        except LLMBridgeError as exc:
            self._logger.warning("%s: model listing failed, using static list: %s", self.kind, exc)
            return list(self.spec.model_names)
        return [entry["id"] for entry in entries]

    async def list_models(self, web_client: WebClient, resolver: ServiceTargetResolver) -> list[Model]:
        """Capability descriptors for every listed model, with the same fallback."""
        if self.spec.live_listing:
            try:
                entries = await self._fetch_model_entries(web_client, resolver)
            except LLMBridgeError as exc:
                self._logger.warning("%s: model listing failed, using static list: %s", self.kind, exc)
            else:
                return [self.model_from_listing(entry) for entry in entries]
        return [capabilities.resolve_model(self.kind, name) for name in self.spec.model_names]

    def model_from_listing(self, entry: dict[str, Any]) -> Model:
        """Inferred descriptor for a listing entry; the raw entry is kept as ``additional_properties``."""
        model = capabilities.resolve_model(self.kind, entry["id"], name=entry.get("name"))
        if self.spec.listing_advertises_capabilities:
            model = _overlay_advertised(model, entry.get("capabilities"))
        return model.evolve(additional_properties=entry)

    async def _fetch_model_entries(
        self,
        web_client: WebClient,
        resolver: ServiceTargetResolver,
    ) -> list[dict[str, Any]]:
        target = resolver.resolve_provider(self.kind, lambda kind: self)
        url = self.service_url(target.model, ServiceKind.MODELS, target.endpoint)
        headers = {**self.spec.static_headers, **target.endpoint.headers, **self.spec.listing_headers}
        if self.spec.listing_needs_auth:
            headers.update(self.auth_headers(target.auth.api_key(target.model)))

        response = await web_client.do_get(url, headers, provider=str(self.kind))
        body = response.body
        data = body.get("data") if isinstance(body, dict) else body
        if not isinstance(data, list):
            raise MalformedResponseError(str(self.kind), "model listing has no 'data' array")

        entries = [e for e in data if isinstance(e, dict) and isinstance(e.get("id"), str)]
        if self.spec.listing_filter is not None:
            entries = [e for e in entries if self.spec.listing_filter(e["id"])]
        if not entries:
            raise MalformedResponseError(str(self.kind), "model listing is empty")

        self._logger.debug("%s: listed %d models", self.kind, len(entries))
        return entries


def _overlay_advertised(model: Model, advertised: Any) -> Model:
    """Apply limits and feature flags a listing reports explicitly."""
    if not isinstance(advertised, dict):
        return model
    changes: dict[str, Any] = {}

    limits = advertised.get("limits")
    if isinstance(limits, dict):
        if isinstance(limits.get("max_context_window_tokens"), int):
            changes["max_input_tokens"] = limits["max_context_window_tokens"]
        if isinstance(limits.get("max_output_tokens"), int):
            changes["max_output_tokens"] = limits["max_output_tokens"]

    supports = advertised.get("supports")
    if isinstance(supports, dict):
        if isinstance(supports.get("streaming"), bool):
            changes["supports_streaming"] = supports["streaming"]
        if isinstance(supports.get("tool_calls"), bool):
            changes["supports_tool_calls"] = supports["tool_calls"]
        if supports.get("vision") is True:
            changes["supported_input_modalities"] = capabilities.TEXT_IMAGE

    return model.evolve(**changes) if changes else model
