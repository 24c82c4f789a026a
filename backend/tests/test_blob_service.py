"""
MediRate Admin Backend — Blob Store Client Tests
==================================================

What we test:
    ✅ Listing follows the cursor across pages and sends the prefix
    ✅ Put writes at the exact pathname without a random suffix
    ✅ Delete posts the URL batch
    ✅ HTTP and transport failures become BlobStorageError
    ✅ A missing token fails before any request is made
    ✅ Downloads only go to the store's public host and stream the body
"""

import json

import httpx
import pytest

from medirate.exceptions import BlobStorageError, NotFoundError, ValidationError
from medirate.services.blob_service import BlobService


def blob(pathname):
    return {
        "url": f"https://store.test/{pathname}",
        "pathname": pathname,
        "size": 3,
        "uploadedAt": "2025-01-15T12:00:00.000Z",
    }


class TestBlobService:

    def setup_method(self):
        self.requests = []

    def service(self, handler, token="vercel_blob_rw_test"):
        def record(request):
            self.requests.append(request)
            return handler(request)

        return BlobService(
            token=token,
            base_url="https://blob.test",
            page_size=2,
            transport=httpx.MockTransport(record),
        )

    @pytest.mark.asyncio
    async def test_list_all_follows_cursor(self):
        def handler(request):
            if request.url.params.get("cursor") == "page-2":
                return httpx.Response(200, json={"blobs": [blob("a/c.txt")], "hasMore": False})
            return httpx.Response(
                200,
                json={"blobs": [blob("a/b.txt"), blob("a/bb.txt")], "cursor": "page-2", "hasMore": True},
            )

        blobs = await self.service(handler).list_all(prefix="a")

        assert [b.pathname for b in blobs] == ["a/b.txt", "a/bb.txt", "a/c.txt"]
        assert len(self.requests) == 2
        assert self.requests[0].url.params["prefix"] == "a"
        assert self.requests[0].url.params["limit"] == "2"
        assert self.requests[0].headers["authorization"] == "Bearer vercel_blob_rw_test"

    @pytest.mark.asyncio
    async def test_put_uses_exact_pathname(self):
        def handler(request):
            return httpx.Response(
                200, json={"url": "https://store.test/X/.gitkeep", "pathname": "X/.gitkeep"}
            )

        stored = await self.service(handler).put("X/.gitkeep", b"", content_type="text/plain")

        request = self.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/X/.gitkeep"
        assert request.headers["x-add-random-suffix"] == "0"
        assert request.headers["x-content-type"] == "text/plain"
        assert stored.pathname == "X/.gitkeep"

    @pytest.mark.asyncio
    async def test_delete_posts_url_batch(self):
        service = self.service(lambda request: httpx.Response(200, json={}))
        await service.delete(["https://store.test/a", "https://store.test/b"])

        request = self.requests[0]
        assert request.url.path == "/delete"
        assert json.loads(request.content) == {"urls": ["https://store.test/a", "https://store.test/b"]}

    @pytest.mark.asyncio
    async def test_delete_of_nothing_makes_no_request(self):
        await self.service(lambda request: httpx.Response(500)).delete([])
        assert self.requests == []

    @pytest.mark.asyncio
    async def test_http_error_becomes_blob_storage_error(self):
        service = self.service(lambda request: httpx.Response(403, json={"error": "forbidden"}))
        with pytest.raises(BlobStorageError) as exc_info:
            await service.list_page(prefix="a")
        assert exc_info.value.context["status"] == 403

    @pytest.mark.asyncio
    async def test_transport_error_becomes_blob_storage_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(BlobStorageError):
            await self.service(handler).put("a.txt", b"abc")

    @pytest.mark.asyncio
    async def test_missing_token_fails_without_request(self):
        service = self.service(lambda request: httpx.Response(200, json={}), token="")
        assert not service.is_configured
        with pytest.raises(BlobStorageError):
            await service.list_page()
        assert self.requests == []


STORE_URL = "https://abc123.public.blob.vercel-storage.com/Texas/Rate%20Notice.pdf"


class TestBlobDownload:

    def setup_method(self):
        self.requests = []

    def service(self, handler):
        def record(request):
            self.requests.append(request)
            return handler(request)

        return BlobService(token="", transport=httpx.MockTransport(record))

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/secret",
            "http://abc123.public.blob.vercel-storage.com/a.pdf",
            "https://public.blob.vercel-storage.com.attacker.test/a.pdf",
            "https://attackerpublic.blob.vercel-storage.com/a.pdf",
            "https://169.254.169.254/latest/meta-data",
        ],
    )
    def test_only_store_hosts_are_accepted(self, url):
        assert not self.service(lambda request: httpx.Response(200)).is_store_url(url)

    @pytest.mark.asyncio
    async def test_foreign_host_is_rejected_without_request(self):
        service = self.service(lambda request: httpx.Response(200, content=b"internal"))
        with pytest.raises(ValidationError):
            await service.open_download("https://example.com/secret")
        assert self.requests == []

    @pytest.mark.asyncio
    async def test_streams_body_without_token(self):
        def handler(request):
            return httpx.Response(
                200, content=b"%PDF-1.4", headers={"content-type": "application/pdf"}
            )

        download = await self.service(handler).open_download(STORE_URL)
        try:
            body = b"".join([chunk async for chunk in download.iter_bytes()])
        finally:
            await download.aclose()

        assert body == b"%PDF-1.4"
        assert download.filename == "Rate Notice.pdf"
        assert download.content_type == "application/pdf"
        assert "authorization" not in self.requests[0].headers

    @pytest.mark.asyncio
    async def test_missing_object_is_not_found(self):
        service = self.service(lambda request: httpx.Response(404, text="not found"))
        with pytest.raises(NotFoundError):
            await service.open_download(STORE_URL)

    @pytest.mark.asyncio
    async def test_redirect_is_not_followed(self):
        def handler(request):
            return httpx.Response(302, headers={"location": "https://example.com/secret"})

        with pytest.raises(NotFoundError):
            await self.service(handler).open_download(STORE_URL)
        assert len(self.requests) == 1

    @pytest.mark.asyncio
    async def test_transport_error_becomes_blob_storage_error(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(BlobStorageError) as exc_info:
            await self.service(handler).open_download(STORE_URL)
        assert exc_info.value.context["operation"] == "download"
