"""Async client orchestrating provider interactions."""

from __future__ import annotations

import logging

from llm_bridge import capabilities
from llm_bridge.adapters import ServiceKind, get_adapter
from llm_bridge.config import ClientConfig
from llm_bridge.kinds import AdapterKind, ModelIden
from llm_bridge.model import Model
from llm_bridge.resolver import ServiceTarget
from llm_bridge.streaming import ChatStream
from llm_bridge.transport import WebClient
from llm_bridge.types import ChatOptions, ChatRequest, ChatResponse


class Client:
    """High-level entry point: resolve the target, pick the adapter, send."""

    _logger = logging.getLogger(__name__)

    def __init__(self, config: ClientConfig | None = None, *, web_client: WebClient | None = None) -> None:
        self._config = config or ClientConfig()
        self._web_client = web_client or WebClient(timeout_s=self._config.timeout_s)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._web_client.aclose()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def resolve_service_target(self, model: str | ModelIden) -> ServiceTarget:
        """Run the mapper, auth and endpoint resolvers for ``model``."""
        model_iden = model if isinstance(model, ModelIden) else ModelIden.from_model_name(model)
        return self._config.resolver.resolve(model_iden, get_adapter)

    async def send_chat(
        self,
        model: str | ModelIden,
        chat_request: ChatRequest,
        options: ChatOptions | None = None,
    ) -> ChatResponse:
        """Execute a non-streaming chat request."""
        target = self.resolve_service_target(model)
        adapter = get_adapter(target.model.provider)
        opts = self._merged_options(options)

        request = adapter.build_request(target, ServiceKind.CHAT, chat_request, opts)
        self._logger.debug("POST %s (%s)", request.url, target.model)
        response = await self._web_client.do_post(
            request.url,
            request.headers,
            request.payload,
            provider=str(target.model.provider),
        )
        return adapter.parse_response(target.model, response.body, opts)

    def open_chat_stream(
        self,
        model: str | ModelIden,
        chat_request: ChatRequest,
        options: ChatOptions | None = None,
    ) -> ChatStream:
        """Return a stream of normalized events; nothing is sent until it is iterated."""
        target = self.resolve_service_target(model)
        adapter = get_adapter(target.model.provider)
        return adapter.open_stream(self._web_client, target, chat_request, self._merged_options(options))

    async def list_model_names(self, provider: AdapterKind | str) -> list[str]:
        """Model ids offered by ``provider``; never fails on listing errors."""
        kind = self._kind(provider)
        return await get_adapter(kind).list_model_names(self._web_client, self._config.resolver)

    async def list_models(self, provider: AdapterKind | str) -> list[Model]:
        """Capability descriptors for every model of ``provider``."""
        kind = self._kind(provider)
        return await get_adapter(kind).list_models(self._web_client, self._config.resolver)

    def model_info(self, model: str | ModelIden) -> Model:
        """Inferred capabilities of the (mapped) model. No network access."""
        model_iden = model if isinstance(model, ModelIden) else ModelIden.from_model_name(model)
        mapped = self._config.resolver.map_model(model_iden)
        return capabilities.resolve_model(mapped.provider, mapped.model_name)

    def _merged_options(self, options: ChatOptions | None) -> ChatOptions:
        defaults = self._config.chat_options
        if options is None:
            return defaults or ChatOptions()
        return options.merged_over(defaults)

    @staticmethod
    def _kind(provider: AdapterKind | str) -> AdapterKind:
        if isinstance(provider, AdapterKind):
            return provider
        return AdapterKind.from_lower_str(provider)
