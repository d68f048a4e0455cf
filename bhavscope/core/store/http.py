"""HTTP snapshot store talking to the bhavcopy upload backend.

The backend keeps one document per uploaded file under
``/api/historical-data`` and the CSV body itself in object storage; each
listing entry carries the object URL in its ``cloudinary`` block.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import httpx

from bhavscope.core.exceptions import SnapshotFetchError, SnapshotNotFoundError
from bhavscope.core.logging import get_logger
from bhavscope.core.models.snapshots import SnapshotMeta
from bhavscope.core.store.base import extract_date_from_filename

logger = get_logger(__name__)

LISTING_PATH = "/api/historical-data"
_URL_KEYS = ("secure_url", "url", "secure_url_raw", "public_id")


@dataclass
class HttpStoreConfig:
    """Connection settings for :class:`HttpSnapshotStore`."""

    base_url: str
    timeout: float = 30.0
    max_retries: int = 3
    backoff_factor: float = 1.0
    retry_on_status: tuple[int, ...] = (429, 502, 503, 504)
    cloud_name: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url cannot be empty")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.backoff_factor < 0:
            raise ValueError("backoff_factor must be non-negative")


def resolve_content_url(cloudinary: dict[str, Any] | None, cloud_name: str | None = None) -> str:
    """Pick the object URL from an upload's ``cloudinary`` block.

    A bare public id is expanded to a raw-upload URL when ``cloud_name`` is known.
    """

    if not cloudinary:
        return ""
    url = next((str(cloudinary[key]) for key in _URL_KEYS if cloudinary.get(key)), "")
    if url and not url.startswith("http") and cloud_name:
        url = f"https://res.cloudinary.com/{cloud_name}/raw/upload/{url}"
    return url


def _parse_data_date(value: Any) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def upload_to_meta(upload: dict[str, Any], cloud_name: str | None = None) -> SnapshotMeta:
    """Convert one backend upload document to :class:`SnapshotMeta`."""

    filename = str(upload.get("filename") or "")
    trading_date = _parse_data_date(upload.get("dataDate")) or extract_date_from_filename(filename)
    return SnapshotMeta(
        id=str(upload.get("_id") or upload.get("id") or filename),
        filename=filename,
        trading_date=trading_date,
        locator=resolve_content_url(upload.get("cloudinary"), cloud_name),
    )


class HttpSnapshotStore:
    """Snapshot store reading listings and CSV bodies over HTTP."""

    def __init__(self, config: HttpStoreConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> HttpSnapshotStore:
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout),
                follow_redirects=True,
                headers=self.config.headers,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def list_snapshots(self) -> list[SnapshotMeta]:
        response = await self._get(LISTING_PATH)
        try:
            payload = response.json()
        except ValueError as exc:
            raise SnapshotFetchError("Snapshot listing is not valid JSON", locator=LISTING_PATH) from exc
        if isinstance(payload, dict):
            uploads = payload.get("uploads") or payload.get("data") or []
        elif isinstance(payload, list):
            uploads = payload
        else:
            uploads = []
        return [upload_to_meta(upload, self.config.cloud_name) for upload in uploads if isinstance(upload, dict)]

    async def fetch_content(self, locator: str) -> str:
        if not locator:
            raise SnapshotNotFoundError("Snapshot has no content URL", locator=locator)
        response = await self._get(locator)
        return response.text

    async def _get(self, url: str) -> httpx.Response:
        client = self._ensure_client()
        attempts = self.config.max_retries + 1
        for attempt in range(attempts):
            last_attempt = attempt == attempts - 1
            try:
                response = await client.get(url)
            except (httpx.TimeoutException, httpx.ConnectError) as exc:
                if last_attempt:
                    raise SnapshotFetchError(f"Request to {url} failed: {exc}", locator=url) from exc
                await self._backoff(url, attempt, reason=type(exc).__name__)
                continue
            except httpx.HTTPError as exc:
                raise SnapshotFetchError(f"Request to {url} failed: {exc}", locator=url) from exc

            if response.status_code in self.config.retry_on_status and not last_attempt:
                await self._backoff(url, attempt, reason=f"HTTP {response.status_code}")
                continue
            if response.status_code == 404:
                raise SnapshotNotFoundError(f"Snapshot content not found at {url}", locator=url)
            if response.is_error:
                raise SnapshotFetchError(
                    f"HTTP {response.status_code} from {url}",
                    locator=url,
                    status_code=response.status_code,
                )
            return response
        raise SnapshotFetchError(f"Request to {url} exhausted retries", locator=url)  # pragma: no cover

    async def _backoff(self, url: str, attempt: int, *, reason: str) -> None:
        delay = self.config.backoff_factor * (2**attempt)
        logger.warning("Retrying snapshot request", url=url, attempt=attempt + 1, reason=reason, delay=delay)
        await asyncio.sleep(delay)


__all__ = [
    "HttpSnapshotStore",
    "HttpStoreConfig",
    "LISTING_PATH",
    "resolve_content_url",
    "upload_to_meta",
]
