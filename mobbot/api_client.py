"""Game API gateway — bearer-authenticated JSON calls that never raise."""

import asyncio
import json
import sys
from typing import Any, Dict, Optional

import aiohttp

from mobbot.config import CONFIG
from mobbot.domain.models import ApiResult


def _log(msg: str):
    print(msg, file=sys.stderr)


class GameApiClient:
    """Thin wrapper over aiohttp for the game's REST API.

    Every call returns an ``ApiResult``. Network errors, unparsable bodies and
    non-2xx statuses become ``kind="transport"`` failures; a well-formed body with
    ``status == "error"`` becomes a ``kind="business"`` failure. No retries here.
    """

    def __init__(
        self,
        api_base: Optional[str] = None,
        auth_token: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.api_base = (api_base or CONFIG["api_base"]).rstrip("/")
        token = auth_token if auth_token is not None else CONFIG["auth_token"]
        if token and not token.lower().startswith("bearer "):
            token = f"Bearer {token}"
        self._auth = token
        self._session = session
        self._owns_session = session is None

    @property
    def is_configured(self) -> bool:
        return bool(self._auth)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._auth:
            headers["Authorization"] = self._auth
        return headers

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def call(self, endpoint: str, method: str = "GET", body: Optional[Any] = None) -> ApiResult:
        url = f"{self.api_base}{endpoint}"
        method = method.upper()
        kwargs: Dict[str, Any] = {"headers": self._headers()}
        if method != "GET":
            kwargs["data"] = json.dumps(body) if body is not None else None

        try:
            session = self._get_session()
            async with session.request(method, url, **kwargs) as resp:
                status = resp.status
                try:
                    data = await resp.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError):
                    data = None
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            _log(f"[API] {method} {endpoint} failed: {e}")
            return ApiResult(success=False, error=str(e) or type(e).__name__, kind="transport")

        message = data.get("message") if isinstance(data, dict) else None

        if not 200 <= status < 300:
            error = message or f"HTTP {status}"
            _log(f"[API] {method} {endpoint} -> {status}: {error}")
            return ApiResult(success=False, data=data, error=error, status_code=status, kind="transport")

        if data is None:
            _log(f"[API] {method} {endpoint} returned an unparsable body")
            return ApiResult(success=False, error="invalid JSON response", status_code=status, kind="transport")

        if isinstance(data, dict) and data.get("status") == "error":
            error = message or "request failed"
            _log(f"[API] {method} {endpoint} rejected: {error}")
            return ApiResult(success=False, data=data, error=error, status_code=status, kind="business")

        return ApiResult(success=True, data=data, status_code=status)

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------
    async def character_updates(self) -> ApiResult:
        return await self.call("/character-updates")

    async def train(self, stat: str) -> ApiResult:
        return await self.call("/fight-club/train", "POST", {"stat": stat})

    async def commit_crime(self, crime_id: int) -> ApiResult:
        return await self.call(f"/crimes/{crime_id}/commit", "POST")

    async def commit_gta(self, gta_id: int) -> ApiResult:
        return await self.call(f"/gtas/{gta_id}/commit", "POST")

    async def start_heist(self, heist_id: int) -> ApiResult:
        return await self.call(f"/heists/{heist_id}/start", "POST")

    async def close(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
