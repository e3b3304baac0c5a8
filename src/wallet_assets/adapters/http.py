"""Minimal JSON-over-HTTP client shared by the reference adapters."""

import asyncio
import json
import logging
import urllib.parse
import urllib.request
from collections.abc import Mapping, Sequence
from typing import Any

from wallet_assets.adapters.providers import ResilientCaller, RetryConfig

logger = logging.getLogger(__name__)

QueryValue = str | int | Sequence[str] | None


def build_url(base_url: str, path: str, params: Mapping[str, QueryValue] | None = None) -> str:
    """Join ``base_url`` and ``path`` and append non-empty query parameters.

    Sequence values are repeated (``?id=a&id=b``); ``None`` values are dropped.
    """
    url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
    if not params:
        return url

    query: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, str | int):
            query.append((key, str(value)))
        else:
            query.extend((key, str(item)) for item in value)

    if not query:
        return url
    return f"{url}?{urllib.parse.urlencode(query)}"


class JsonHttpClient:
    """Issues blocking ``urllib`` GET requests off the event loop."""

    def __init__(
        self,
        base_url: str,
        *,
        name: str,
        timeout_seconds: float = 10.0,
        retry_config: RetryConfig | None = None,
    ):
        """Initialize HTTP client.

        Args:
            base_url: Service root, e.g. ``https://nodes.wavesnodes.com``
            name: Upstream identifier for logging and health status
            timeout_seconds: Socket timeout of a single request
            retry_config: Retry policy for failed requests
        """
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.caller = ResilientCaller(name, retry_config)

    async def get_json(self, path: str, params: Mapping[str, QueryValue] | None = None) -> Any:
        """GET ``path`` and decode the JSON body.

        Raises:
            urllib.error.HTTPError: At once for a 4xx answer, after retries for 5xx
            RuntimeError: If the upstream's circuit is open
        """
        url = build_url(self.base_url, path, params)

        async def _fetch():
            return await asyncio.to_thread(self._get_blocking, url)

        return await self.caller.call(_fetch, operation_name=f"GET {path}")

    def _get_blocking(self, url: str) -> Any:
        logger.debug(f"GET {url}")
        req = urllib.request.Request(url, headers={"Accept": "application/json"})
        with urllib.request.urlopen(req, timeout=self.timeout_seconds) as response:
            return json.loads(response.read())
