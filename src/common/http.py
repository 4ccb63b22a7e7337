from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

import httpx

from .config import DEFAULT_TIMEOUT


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportFailure:
    """The exchange did not complete; no HTTP status is available."""

    message: str


@dataclass(frozen=True)
class TextResponse:
    status_code: int
    text: str


@dataclass(frozen=True)
class BinaryResponse:
    status_code: int
    content: bytes
    media_type: Optional[str] = None


TextOutcome = Union[TransportFailure, TextResponse]
BinaryOutcome = Union[TransportFailure, BinaryResponse]

Params = Mapping[str, Any]


def _describe(exc: httpx.RequestError) -> str:
    # Some httpx errors carry an empty message; fall back to the type name
    return str(exc) or exc.__class__.__name__


class HttpPipeline:
    """
    One-shot async HTTP exchanges for the Fitcoin service.

    Notes
    - Each call performs exactly one request: no retries, no backoff.
    - Transport problems (connect/DNS/timeout/protocol/content decoding) are
      returned as `TransportFailure` rather than raised.
    - Any HTTP status comes back uninterpreted; deciding what counts as
      success is left to the caller.
    - `timeout` only configures a client the pipeline creates itself; an
      injected client keeps its own timeout.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpPipeline":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --------------- Public API ---------------
    async def get(self, url: str, *, params: Optional[Params] = None) -> TextOutcome:
        resp = await self._send("GET", url, params=params)
        if isinstance(resp, TransportFailure):
            return resp
        return TextResponse(status_code=resp.status_code, text=resp.text)

    async def post(
        self,
        url: str,
        *,
        form: Optional[Dict[str, str]] = None,
        params: Optional[Params] = None,
    ) -> TextOutcome:
        # Always send a form body, even an empty one
        resp = await self._send("POST", url, params=params, data=dict(form or {}))
        if isinstance(resp, TransportFailure):
            return resp
        return TextResponse(status_code=resp.status_code, text=resp.text)

    async def get_binary(self, url: str, *, params: Optional[Params] = None) -> BinaryOutcome:
        resp = await self._send("GET", url, params=params)
        if isinstance(resp, TransportFailure):
            return resp
        return BinaryResponse(
            status_code=resp.status_code,
            content=resp.content,
            media_type=resp.headers.get("content-type"),
        )

    # --------------- Internal ---------------
    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Params] = None,
        data: Optional[Dict[str, str]] = None,
    ) -> Union[httpx.Response, TransportFailure]:
        logger.debug("%s %s", method, url)
        try:
            resp = await self._client.request(method, url, params=params, data=data)
        except httpx.RequestError as exc:
            logger.warning("%s %s failed before a response arrived: %s", method, url, exc.__class__.__name__)
            return TransportFailure(_describe(exc))
        logger.debug("%s %s -> HTTP %s", method, url, resp.status_code)
        return resp


__all__ = [
    "BinaryOutcome",
    "BinaryResponse",
    "HttpPipeline",
    "TextOutcome",
    "TextResponse",
    "TransportFailure",
]
