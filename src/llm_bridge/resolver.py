"""Service target resolution: model mapping, then auth, then endpoint."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from llm_bridge.errors import CredentialMissingError
from llm_bridge.kinds import AdapterKind, ModelIden

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthData:
    """Where a credential comes from: an env variable, a literal key, or nowhere."""

    env_name: str | None = None
    key: str | None = field(default=None, repr=False)

    @classmethod
    def from_env(cls, env_name: str) -> AuthData:
        return cls(env_name=env_name)

    @classmethod
    def from_key(cls, key: str) -> AuthData:
        return cls(key=key)

    @classmethod
    def none(cls) -> AuthData:
        return cls()

    def is_none(self) -> bool:
        return self.env_name is None and self.key is None

    def api_key(self, model_iden: ModelIden) -> str | None:
        """Return the credential, reading the environment at call time.

        Raises ``CredentialMissingError`` naming the variable when it is unset.
        """
        if self.key is not None:
            return self.key
        if self.env_name is None:
            return None
        value = os.environ.get(self.env_name)
        if not value:
            raise CredentialMissingError(str(model_iden.provider), self.env_name)
        return value


class Endpoint(BaseModel):
    """Base URL plus static headers and query parameters."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    headers: dict[str, str] = Field(default_factory=dict)
    query_params: dict[str, str] = Field(default_factory=dict)

    @field_validator("base_url")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        url = httpx.URL(value)
        if not url.path.endswith("/"):
            url = url.copy_with(path=url.path + "/")
        return str(url)

    @classmethod
    def from_static(cls, base_url: str, headers: Mapping[str, str] | None = None) -> Endpoint:
        return cls(base_url=base_url, headers=dict(headers or {}))

    def url_for(self, suffix: str) -> str:
        """Join ``suffix`` to the base URL, keeping base and endpoint query params."""
        base = httpx.URL(self.base_url)
        url = base.join(suffix)
        if base.params:
            url = url.copy_merge_params(base.params)
        if self.query_params:
            url = url.copy_merge_params(self.query_params)
        return str(url)


@dataclass(frozen=True)
class ServiceTarget:
    """Fully resolved destination of one call."""

    model: ModelIden
    auth: AuthData
    endpoint: Endpoint


class ProviderDefaults(Protocol):
    """What an adapter offers when no resolver overrides it."""

    def default_auth(self) -> AuthData: ...

    def default_endpoint(self, model_iden: ModelIden) -> Endpoint: ...


# Each resolver may return None to keep the provider default.
ModelMapper = Callable[[ModelIden], "ModelIden | None"]
AuthResolver = Callable[[ModelIden], "AuthData | None"]
EndpointResolver = Callable[[ModelIden], "Endpoint | None"]


@dataclass(frozen=True)
class ServiceTargetResolver:
    """Immutable chain of optional, reentrant resolvers.

    Order is fixed: the mapper runs first and every later step sees only the
    mapped identity.
    """

    model_mapper: ModelMapper | None = None
    auth_resolver: AuthResolver | None = None
    endpoint_resolver: EndpointResolver | None = None

    def with_model_mapper(self, mapper: ModelMapper) -> ServiceTargetResolver:
        return replace(self, model_mapper=mapper)

    def with_auth_resolver(self, resolver: AuthResolver) -> ServiceTargetResolver:
        return replace(self, auth_resolver=resolver)

    def with_endpoint_resolver(self, resolver: EndpointResolver) -> ServiceTargetResolver:
        return replace(self, endpoint_resolver=resolver)

    def map_model(self, model_iden: ModelIden) -> ModelIden:
        if self.model_mapper is None:
            return model_iden
        mapped = self.model_mapper(model_iden)
        if mapped is None:
            return model_iden
        if mapped != model_iden:
            _logger.debug("Model mapped: %s -> %s", model_iden, mapped)
        return mapped

    def resolve(
        self,
        model_iden: ModelIden,
        defaults_for: Callable[[AdapterKind], ProviderDefaults],
    ) -> ServiceTarget:
        """Materialize the target for ``model_iden``.

        ``defaults_for`` supplies the provider defaults for the mapped provider.
        """
        return self._resolve_mapped(self.map_model(model_iden), defaults_for)

    def _resolve_mapped(
        self,
        model: ModelIden,
        defaults_for: Callable[[AdapterKind], ProviderDefaults],
    ) -> ServiceTarget:
        defaults = defaults_for(model.provider)

        auth = self.auth_resolver(model) if self.auth_resolver is not None else None
        if auth is None:
            auth = defaults.default_auth()

        endpoint = self.endpoint_resolver(model) if self.endpoint_resolver is not None else None
        if endpoint is None:
            endpoint = defaults.default_endpoint(model)

        return ServiceTarget(model=model, auth=auth, endpoint=endpoint)

    def resolve_provider(
        self,
        kind: AdapterKind,
        defaults_for: Callable[[AdapterKind], ProviderDefaults],
    ) -> ServiceTarget:
        """Target for provider-wide calls such as model listing.

        No model is involved, so the mapper is skipped; auth and endpoint
        resolvers see an identity with an empty model name.
        """
        return self._resolve_mapped(ModelIden(provider=kind, model_name=""), defaults_for)
