"""Immutable client configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from llm_bridge.resolver import AuthResolver, EndpointResolver, ModelMapper, ServiceTargetResolver
from llm_bridge.types import ChatOptions

TIMEOUT_ENV = "LLM_BRIDGE_TIMEOUT_S"
DEFAULT_TIMEOUT_S = 60.0


@dataclass(frozen=True)
class ClientConfig:
    """Built once at startup and shared read-only by every call."""

    resolver: ServiceTargetResolver = field(default_factory=ServiceTargetResolver)
    chat_options: ChatOptions | None = None
    timeout_s: float = DEFAULT_TIMEOUT_S

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Defaults plus the transport timeout from ``LLM_BRIDGE_TIMEOUT_S``."""
        env = os.environ if environ is None else environ
        raw = env.get(TIMEOUT_ENV)
        if not raw:
            return cls()
        try:
            timeout_s = float(raw)
        except ValueError as exc:
            raise ValueError(f"{TIMEOUT_ENV} must be a number of seconds, got {raw!r}") from exc
        if timeout_s <= 0:
            raise ValueError(f"{TIMEOUT_ENV} must be positive, got {raw!r}")
        return cls(timeout_s=timeout_s)

    def with_model_mapper(self, mapper: ModelMapper) -> ClientConfig:
        return replace(self, resolver=self.resolver.with_model_mapper(mapper))

    def with_auth_resolver(self, resolver: AuthResolver) -> ClientConfig:
        return replace(self, resolver=self.resolver.with_auth_resolver(resolver))

    def with_endpoint_resolver(self, resolver: EndpointResolver) -> ClientConfig:
        return replace(self, resolver=self.resolver.with_endpoint_resolver(resolver))

    def with_chat_options(self, options: ChatOptions) -> ClientConfig:
        return replace(self, chat_options=options)
