"""HTTP client for the remote conversion endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from .errors import NetworkFailure
from .models import ConversionRequest

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True, slots=True)
class RawResponse:
    status_code: int
    text: str


class ConversionClient:
    """POSTs conversion requests to ``{base_url}{endpoint}``.

    Transport problems are raised as :class:`NetworkFailure`; any HTTP status
    is returned as-is for the reconciler to interpret.
    """

    def __init__(
        self,
        base_url: str,
        endpoint: str = "/api/convert",
        *,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.endpoint = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        self._timeout = timeout_s
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.endpoint}"

    async def send(self, request: ConversionRequest) -> RawResponse:
        body = request.to_json()
        logger.debug("POST %s direction=%s bytes=%d", self.url, request.direction.value, len(body))
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self.url, content=body, headers=JSON_HEADERS)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Conversion request to %s failed: %s", self.url, exc)
            raise NetworkFailure(str(exc) or exc.__class__.__name__) from exc
        logger.debug("Response status %s from %s", response.status_code, self.url)
        return RawResponse(status_code=response.status_code, text=response.text)


__all__ = ["ConversionClient", "RawResponse"]
