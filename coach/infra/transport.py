"""Shared HTTP session for the coaching backend.

Wraps an ``httpx.AsyncClient`` with the base URL, bearer token, request /
response logging and failure classification. A 401 answer drops the token
held in memory so later calls go out unauthenticated until a new one is set.
"""
import logging
from typing import Any, Optional

import httpx

from coach.utilities.config import API_BASE_URL, API_TOKEN, DEFAULT_TIMEOUT
from coach.utilities.network import classify_failure

logger = logging.getLogger(__name__)


class BackendSession:
    def __init__(self, base_url: str = API_BASE_URL, token: Optional[str] = API_TOKEN,
                 timeout: float = DEFAULT_TIMEOUT, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.token = token
        self.base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            event_hooks={"request": [self._on_request], "response": [self._on_response]},
        )

    async def _on_request(self, request: httpx.Request):
        if self.token:
            request.headers["Authorization"] = f"Bearer {self.token}"
        logger.debug("%s %s", request.method, request.url)

    async def _on_response(self, response: httpx.Response):
        logger.debug("%s %s -> %s", response.request.method, response.request.url, response.status_code)
        if response.status_code == 401 and self.token:
            logger.warning("Backend rejected the auth token; clearing it")
            self.token = None

    async def request(self, method: str, path: str, *, params: Optional[dict] = None,
                      json: Any = None, timeout: Optional[float] = None) -> httpx.Response:
        """Send one request; non-2xx answers and transport failures raise CoachError subclasses."""
        kwargs: dict = {"params": params, "json": json}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPError as exc:
            error = classify_failure(exc)
            logger.info("%s %s failed: %s", method, path, error.message)
            raise error from exc

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()


__all__ = ['BackendSession']
