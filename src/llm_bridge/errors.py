"""Package specific exception hierarchy."""

from __future__ import annotations


class LLMBridgeError(Exception):
    """Base exception for llm_bridge package."""


class UnsupportedProviderError(LLMBridgeError):
    """Raised when a provider tag or model namespace is not known."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"Provider '{provider}' is not available.")
        self.provider = provider


class UnsupportedOperationError(LLMBridgeError):
    """Raised when a provider declares it cannot perform a service."""

    def __init__(self, provider: str, operation: str) -> None:
        super().__init__(f"{provider}: operation '{operation}' is not supported.")
        self.provider = provider
        self.operation = operation


class TransportError(LLMBridgeError):
    """Represents network or HTTP-level failures, surfaced verbatim."""

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        suffix = f" (status {status_code})" if status_code is not None else ""
        super().__init__(f"{provider}: {message}{suffix}")
        self.provider = provider
        self.status_code = status_code


class MalformedResponseError(LLMBridgeError):
    """Raised when a provider body does not have the expected JSON shape."""

    def __init__(self, provider: str, detail: str) -> None:
        super().__init__(f"{provider}: malformed response: {detail}")
        self.provider = provider
        self.detail = detail


class CredentialMissingError(LLMBridgeError):
    """Raised when no credential could be found for a model."""

    def __init__(self, provider: str, env_name: str | None = None) -> None:
        source = f" (expected environment variable '{env_name}')" if env_name else ""
        super().__init__(f"{provider}: missing credential{source}")
        self.provider = provider
        self.env_name = env_name


class StreamDecodeError(LLMBridgeError):
    """Raised when a single streaming frame fails to parse; ends that stream only."""

    def __init__(self, provider: str, detail: str, data: str) -> None:
        super().__init__(f"{provider}: cannot decode stream frame: {detail}")
        self.provider = provider
        self.detail = detail
        self.data = data
