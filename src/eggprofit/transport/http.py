"""
HTTP client for the config and attribution endpoints.

Single attempt per call; callers decide what a failure means.
"""

import json
import logging
from typing import Any, Optional

import httpx

from eggprofit import __version__
from eggprofit.errors import EggProfitError

logger = logging.getLogger(__name__)

HTTP_ERROR = "http_error"
TRANSPORT_ERROR = "transport_error"
DECODE_ERROR = "decode_error"


class HttpClient:
    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._client = httpx.AsyncClient(
            headers={"User-Agent": f"eggprofit/{__version__}", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        if resp.status_code != 200:
            raise EggProfitError(
                HTTP_ERROR, f"HTTP {resp.status_code}: {resp.text[:200]}", {"status": resp.status_code},
            )
        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise EggProfitError(DECODE_ERROR, f"Undecodable body: {e}")

    async def get(self, url: str, params: Optional[dict[str, str]] = None, timeout: Optional[float] = None) -> Any:
        try:
            resp = await self._client.get(url, params=params, timeout=timeout or httpx.USE_CLIENT_DEFAULT)
        except httpx.HTTPError as e:
            raise EggProfitError(TRANSPORT_ERROR, f"GET {url} failed: {e!r}")
        return self._decode(resp)

    async def post(self, url: str, body: dict[str, Any], timeout: Optional[float] = None) -> Any:
        try:
            resp = await self._client.post(
                url, json=body, headers={"Content-Type": "application/json"},
                timeout=timeout or httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.HTTPError as e:
            raise EggProfitError(TRANSPORT_ERROR, f"POST {url} failed: {e!r}")
        return self._decode(resp)

    async def close(self) -> None:
        await self._client.aclose()
