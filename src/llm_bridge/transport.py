"""Thin HTTP/SSE transport built on ``httpx.AsyncClient``."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

import httpx

from llm_bridge.errors import MalformedResponseError, TransportError


@dataclass(frozen=True)
class WebRequestData:
    """A provider request ready to send."""

    url: str
    headers: Mapping[str, str]
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WebResponse:
    status: int
    body: Any


@dataclass(frozen=True)
class SseOpen:
    """The response headers arrived with a success status."""


@dataclass(frozen=True)
class SseMessage:
    data: str
    event: str = "message"


SseEvent = Union[SseOpen, SseMessage]


class WebClient:
    """Issues JSON requests and decodes Server-Sent-Events streams.

    One shared ``httpx.AsyncClient`` serves every call; pooling is left to httpx.
    """

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        timeout_s: float = 60.0,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s, transport=transport)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def do_get(self, url: str, headers: Mapping[str, str], *, provider: str) -> WebResponse:
        """GET ``url`` and decode its JSON body."""
        return await self._send("GET", url, headers, None, provider)

    async def do_post(
        self,
        url: str,
        headers: Mapping[str, str],
        payload: dict[str, Any],
        *,
        provider: str,
    ) -> WebResponse:
        """POST ``payload`` as JSON and decode the JSON body."""
        return await self._send("POST", url, headers, payload, provider)

    async def _send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        payload: dict[str, Any] | None,
        provider: str,
    ) -> WebResponse:
        try:
            response = await self._client.request(method, url, headers=dict(headers), json=payload)
        except httpx.HTTPError as exc:
            raise TransportError(provider, f"{method} {url} failed: {exc}") from exc

        if response.status_code >= 400:
            raise TransportError(
                provider,
                response.text or response.reason_phrase,
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError(provider, f"body is not JSON: {response.text[:200]!r}") from exc
        return WebResponse(status=response.status_code, body=body)

    def open_event_source(self, request: WebRequestData, *, provider: str) -> AsyncIterator[SseEvent]:
        """Return an async iterator of SSE events for a streaming POST.

        Nothing is sent until the iterator is first polled. Closing the iterator
        releases the connection.
        """

        async def _gen() -> AsyncIterator[SseEvent]:
            try:
                async with self._client.stream(
                    "POST",
                    request.url,
                    headers=dict(request.headers),
                    json=request.payload,
                ) as response:
                    if response.status_code >= 400:
                        body = await response.aread()
                        raise TransportError(
                            provider,
                            body.decode(errors="replace") or response.reason_phrase,
                            status_code=response.status_code,
                        )

                    yield SseOpen()

                    event_name = "message"
                    data_lines: list[str] = []
                    async for line in response.aiter_lines():
                        line = line.rstrip("\r")
                        if not line:
                            if data_lines:
                                yield SseMessage(data="\n".join(data_lines), event=event_name)
                            event_name = "message"
                            data_lines = []
                            continue
                        if line.startswith(":"):
                            continue

                        name, _, value = line.partition(":")
                        if value.startswith(" "):
                            value = value[1:]
                        if name == "data":
                            data_lines.append(value)
                        elif name == "event":
                            event_name = value or "message"
                        else:
                            self._logger.debug("Ignoring SSE field %r", name)

                    if data_lines:
                        yield SseMessage(data="\n".join(data_lines), event=event_name)
            except httpx.HTTPError as exc:
                raise TransportError(provider, f"stream failed: {exc}") from exc

        return _gen()
