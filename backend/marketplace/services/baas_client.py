"""Async client for the hosted backend-as-a-service.

Covers the three surfaces the marketplace consumes: REST tables
(``/rest/v1``), storage objects (``/storage/v1``) and the auth user lookup
(``/auth/v1/user``). Row-level security is enforced remotely, so calls made
on behalf of a user carry that user's access token.
"""
import asyncio
import json
import logging
from typing import Any, Optional
from urllib.parse import quote

import aiohttp

logger = logging.getLogger(__name__)


class BaaSAPIError(Exception):
    """Rich error from hosted backend calls - carries status, message, and URL."""

    def __init__(self, status: int, message: str, url: str):
        self.status = status
        self.message = message
        self.url = url
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status} from {self.url}: {self.message}"
        return f"Connection error for {self.url}: {self.message}"


class BaaSClient:
    """Async HTTP client for the hosted backend.

    Supports async context manager for connection pooling across multiple
    calls. Falls back to a per-call session if used without ``async with``.
    """

    def __init__(
        self, base_url: str, api_key: str,
        access_token: Optional[str] = None,
        timeout: float = 30,
    ):
        if not base_url or not api_key:
            raise ValueError("BAAS_URL and BAAS_ANON_KEY must be set for the remote backend.")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self._session: Optional[aiohttp.ClientSession] = None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def open(self) -> None:
        """Open a persistent session for connection pooling."""
        if not self._session:
            self._session = aiohttp.ClientSession()

    async def close(self) -> None:
        """Close the persistent session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "BaaSClient":
        await self.open()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    def _headers(self, token: Optional[str] = None, **extra: str) -> dict:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token or self.access_token or self.api_key}",
        }
        headers.update(extra)
        return headers

    # ── REST tables ─────────────────────────────────────────────────

    async def select_rows(
        self, table: str, filters: dict[str, Any],
        order: Optional[tuple[str, bool]] = None,
    ) -> list[dict]:
        params = {"select": "*"}
        params.update({col: f"eq.{value}" for col, value in filters.items()})
        if order:
            column, descending = order
            params["order"] = f"{column}.{'desc' if descending else 'asc'}"
        return await self._request(
            "GET", f"/rest/v1/{table}", params=params, headers=self._headers(),
        )

    async def insert_rows(self, table: str, payload: dict) -> list[dict]:
        return await self._request(
            "POST", f"/rest/v1/{table}", json=[payload],
            headers=self._headers(Prefer="return=representation"),
        )

    async def update_rows(self, table: str, payload: dict, filters: dict[str, Any]) -> list[dict]:
        params = {col: f"eq.{value}" for col, value in filters.items()}
        return await self._request(
            "PATCH", f"/rest/v1/{table}", params=params, json=payload,
            headers=self._headers(Prefer="return=representation"),
        )

    # ── Storage ─────────────────────────────────────────────────────

    async def upload_object(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        path = f"/storage/v1/object/{bucket}/{quote(key)}"
        await self._request(
            "POST", path, data=data,
            headers=self._headers(**{"Content-Type": content_type, "x-upsert": "false"}),
        )

    async def object_exists(self, bucket: str, key: str) -> bool:
        try:
            await self._request(
                "HEAD", f"/storage/v1/object/{bucket}/{quote(key)}", headers=self._headers(),
            )
        except BaaSAPIError as e:
            if e.status in (400, 404):
                return False
            raise
        return True

    def public_object_url(self, bucket: str, key: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{quote(key)}"

    # ── Auth ────────────────────────────────────────────────────────

    async def get_user(self, access_token: str) -> Optional[dict]:
        """Return the user behind ``access_token``, or None if it is not valid."""
        try:
            return await self._request("GET", "/auth/v1/user", headers=self._headers(access_token))
        except BaaSAPIError as e:
            if e.status in (401, 403):
                return None
            raise

    # ── Transport ───────────────────────────────────────────────────

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        if self._session:
            return await self._send(self._session, method, path, **kwargs)
        async with aiohttp.ClientSession() as session:
            return await self._send(session, method, path, **kwargs)

    async def _send(self, session: aiohttp.ClientSession, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            async with session.request(method, url, timeout=self._timeout, **kwargs) as resp:
                if resp.status >= 400:
                    body = await resp.text()
                    raise BaaSAPIError(
                        status=resp.status,
                        message=_error_message(body) or resp.reason or "No response body",
                        url=url,
                    )
                if method == "HEAD" or resp.content_length == 0:
                    return None
                return await resp.json(content_type=None)
        except BaaSAPIError:
            raise
        except asyncio.TimeoutError as e:
            raise BaaSAPIError(
                status=0,
                message="Request timed out - hosted backend did not respond in time",
                url=url,
            ) from e
        except aiohttp.ClientError as e:
            raise BaaSAPIError(
                status=0,
                message=str(e) or type(e).__name__,
                url=url,
            ) from e


def _error_message(body: str) -> str:
    """Pull the human message out of a JSON error body, falling back to the raw text."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body[:500]
    if isinstance(data, dict):
        for key in ("message", "error_description", "msg", "error"):
            if data.get(key):
                return str(data[key])[:500]
    return body[:500]
