"""
MediRate Admin Backend — Blob Store Client
============================================

What:  Thin async client for the hosted blob store's REST API (list, put,
       delete) plus streaming downloads of public object URLs.
How:   httpx.AsyncClient per call with the configured timeout and bearer
       token. Non-2xx responses and transport errors become
       BlobStorageError; nothing is retried.
Who:   Used by DocumentService; the health check reads `is_configured`.

Wire format:
    GET    {base}/?prefix=&limit=&cursor=   → {"blobs": [...], "cursor", "hasMore"}
    PUT    {base}/{pathname}                 → {"url", "pathname", ...}
    POST   {base}/delete  {"urls": [...]}    → {}
    GET    https://<store>.<public host suffix>/<pathname>   (download, no token)

There are no folders in the store. A "folder" is a pathname prefix, and an
empty folder is kept alive by a zero-byte `<path>/.gitkeep` object.
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional
from urllib.parse import quote, unquote, urlsplit

import httpx

from medirate.config import settings
from medirate.exceptions import BlobStorageError, NotFoundError, ValidationError
from medirate.schemas.documents import BlobListPage, BlobObject, UploadedBlob

logger = logging.getLogger(__name__)


@dataclass
class BlobDownload:
    """An open streaming response; the caller must `aclose()` it."""

    filename: str
    content_type: str
    content_length: Optional[str]
    response: httpx.Response
    client: httpx.AsyncClient

    def iter_bytes(self) -> AsyncIterator[bytes]:
        return self.response.aiter_bytes()

    async def aclose(self) -> None:
        await self.response.aclose()
        await self.client.aclose()


class BlobService:
    """
    Client for one blob store, configured from settings by default.

    `transport` lets tests substitute an httpx.MockTransport.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        page_size: Optional[int] = None,
        public_host_suffix: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token if token is not None else settings.blob_read_write_token
        self.base_url = (base_url or settings.blob_api_url).rstrip("/")
        self.api_version = api_version or settings.blob_api_version
        self.timeout = timeout or settings.http_timeout_seconds
        self.page_size = page_size or settings.blob_list_page_size
        self.public_host_suffix = (
            public_host_suffix or settings.blob_public_host_suffix
        ).strip(".").lower()
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    def _client(self) -> httpx.AsyncClient:
        if not self.is_configured:
            raise BlobStorageError(
                "Document storage is not configured",
                context={"reason": "missing_token"},
            )
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={
                "authorization": f"Bearer {self.token}",
                "x-api-version": self.api_version,
            },
        )

    async def _send(self, operation: str, method: str, url: str, **kwargs) -> dict:
        async with self._client() as client:
            try:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(
                    "Blob %s failed with HTTP %d: %s",
                    operation, e.response.status_code, e.response.text[:200],
                )
                raise BlobStorageError(
                    context={"operation": operation, "status": e.response.status_code}
                ) from e
            except httpx.HTTPError as e:
                logger.error("Blob %s transport error: %s", operation, str(e))
                raise BlobStorageError(
                    context={"operation": operation, "error_type": type(e).__name__}
                ) from e

        if not response.content:
            return {}
        return response.json()

    # ── Listing ───────────────────────────────────────────────────────────

    async def list_page(
        self,
        prefix: str = "",
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> BlobListPage:
        params = {"limit": str(limit or self.page_size)}
        if prefix:
            params["prefix"] = prefix
        if cursor:
            params["cursor"] = cursor
        payload = await self._send("list", "GET", "/", params=params)
        return BlobListPage.model_validate(payload)

    async def list_all(self, prefix: str) -> List[BlobObject]:
        """Follows the cursor until the store reports no more pages."""
        blobs: List[BlobObject] = []
        cursor: Optional[str] = None
        while True:
            page = await self.list_page(prefix=prefix, cursor=cursor)
            blobs.extend(page.blobs)
            if not page.has_more or not page.cursor:
                return blobs
            cursor = page.cursor

    # ── Writes ────────────────────────────────────────────────────────────

    async def put(
        self,
        pathname: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> UploadedBlob:
        """Writes `content` at exactly `pathname`, overwriting what is there."""
        headers = {"x-add-random-suffix": "0"}
        if content_type:
            headers["x-content-type"] = content_type
        payload = await self._send(
            "put", "PUT", "/" + quote(pathname, safe="/"), content=content, headers=headers
        )
        return UploadedBlob(
            url=payload.get("url", ""),
            pathname=payload.get("pathname", pathname),
        )

    async def delete(self, urls: List[str]) -> None:
        if not urls:
            return
        await self._send("delete", "POST", "/delete", json={"urls": urls})

    # ── Downloads ─────────────────────────────────────────────────────────

    def is_store_url(self, url: str) -> bool:
        """True for https URLs on a host under the store's public domain."""
        parts = urlsplit(url)
        host = (parts.hostname or "").lower()
        return parts.scheme == "https" and host.endswith("." + self.public_host_suffix)

    async def open_download(self, url: str) -> BlobDownload:
        """
        Starts a streaming GET of a stored object.

        Redirects are not followed. The returned BlobDownload holds the
        connection open until `aclose()`.

        Raises:
            ValidationError:  URL is not on the store's public host
            NotFoundError:    The store answered with a non-2xx status
            BlobStorageError: Transport failure or timeout
        """
        if not self.is_store_url(url):
            raise ValidationError(
                "URL is not a document store address", field="url"
            )

        client = httpx.AsyncClient(timeout=self.timeout, transport=self.transport)
        try:
            response = await client.send(client.build_request("GET", url), stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            logger.error("Blob download transport error: %s", str(e))
            raise BlobStorageError(
                context={"operation": "download", "error_type": type(e).__name__}
            ) from e

        if not response.is_success:
            status = response.status_code
            await response.aclose()
            await client.aclose()
            logger.warning("Blob download returned HTTP %d for %s", status, url)
            raise NotFoundError("document", context={"status": status})

        filename = unquote(urlsplit(url).path.rsplit("/", 1)[-1]) or "document"
        return BlobDownload(
            filename=filename,
            content_type=response.headers.get("content-type", "application/octet-stream"),
            content_length=response.headers.get("content-length"),
            response=response,
            client=client,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
blob_service = BlobService()
