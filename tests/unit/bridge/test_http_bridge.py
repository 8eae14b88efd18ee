"""Unit tests for HTTPFileSystemBridge.

Requests are served by an httpx.MockTransport, so no network is used.
"""

import json

import httpx
import pytest
from ucdstore.bridge.base import DirectoryEntry, FileEntry
from ucdstore.bridge.errors import (
    BridgeFileNotFoundError,
    BridgeRequestError,
    BridgeUnsupportedOperation,
    PathTraversalError,
)
from ucdstore.bridge.http import HTTPFileSystemBridge

BASE_URL = "https://api.example.test/api/v1/files"

LISTINGS = {
    "/api/v1/files/16.0.0": [
        {"type": "file", "name": "A.txt", "path": "/16.0.0/A.txt"},
        {"type": "directory", "name": "extracted", "path": "/16.0.0/extracted"},
    ],
    "/api/v1/files/16.0.0/extracted": [
        {"type": "file", "name": "DerivedAge.txt", "path": "/16.0.0/extracted/DerivedAge.txt"},
    ],
}


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/api/v1/files/16.0.0/A.txt":
        return httpx.Response(200, text="alpha")
    if path == "/api/v1/files/forbidden":
        return httpx.Response(403)
    if path == "/api/v1/files/broken":
        return httpx.Response(500)
    if path == "/api/v1/files/teapot":
        return httpx.Response(418)
    if path == "/api/v1/files/garbage":
        return httpx.Response(200, json={"not": "a list"})
    if path in LISTINGS:
        return httpx.Response(200, content=json.dumps(LISTINGS[path]))
    return httpx.Response(404)


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    """Requests received by the mock transport."""
    return []


@pytest.fixture
def bridge(requests_seen: list[httpx.Request]) -> HTTPFileSystemBridge:
    """Bridge backed by the mock transport."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        return _handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HTTPFileSystemBridge(BASE_URL, client=client)


class TestHTTPRead:
    """Tests for read and exists."""

    @pytest.mark.asyncio
    async def test_read(self, bridge: HTTPFileSystemBridge) -> None:
        """read returns the response body."""
        assert await bridge.read("16.0.0/A.txt") == "alpha"

    @pytest.mark.asyncio
    async def test_read_missing(self, bridge: HTTPFileSystemBridge) -> None:
        """A 404 maps to BridgeFileNotFoundError."""
        with pytest.raises(BridgeFileNotFoundError):
            await bridge.read("16.0.0/missing.txt")

    @pytest.mark.asyncio
    async def test_read_server_error(self, bridge: HTTPFileSystemBridge) -> None:
        """Other failures map to BridgeRequestError with the status code."""
        with pytest.raises(BridgeRequestError) as exc_info:
            await bridge.read("broken")

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_paths_stay_under_base(
        self, bridge: HTTPFileSystemBridge, requests_seen: list[httpx.Request]
    ) -> None:
        """Requested paths are resolved beneath the base URL path."""
        await bridge.exists("/16.0.0//A.txt")

        assert requests_seen[-1].url.path == "/api/v1/files/16.0.0/A.txt"

    @pytest.mark.asyncio
    async def test_traversal_never_sent(
        self, bridge: HTTPFileSystemBridge, requests_seen: list[httpx.Request]
    ) -> None:
        """Traversal is rejected before any request is made."""
        with pytest.raises(PathTraversalError):
            await bridge.read("%2e%2e/%2e%2e/%2e%2e/secret")

        assert requests_seen == []

    @pytest.mark.asyncio
    async def test_exists(self, bridge: HTTPFileSystemBridge) -> None:
        """exists uses HEAD and reports success statuses."""
        assert await bridge.exists("16.0.0/A.txt")
        assert not await bridge.exists("16.0.0/missing.txt")

    @pytest.mark.asyncio
    async def test_exists_transport_error(self) -> None:
        """Transport errors make exists return False."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        bridge = HTTPFileSystemBridge(BASE_URL, client=client)

        assert not await bridge.exists("16.0.0/A.txt")


class TestHTTPListdir:
    """Tests for listdir."""

    @pytest.mark.asyncio
    async def test_flat_listing(self, bridge: HTTPFileSystemBridge) -> None:
        """Entries are parsed from the JSON listing."""
        entries = await bridge.listdir("16.0.0")

        assert entries == [
            FileEntry(name="A.txt", path="A.txt"),
            DirectoryEntry(name="extracted", path="extracted"),
        ]

    @pytest.mark.asyncio
    async def test_recursive_listing(self, bridge: HTTPFileSystemBridge) -> None:
        """Recursive listings fetch each directory."""
        entries = await bridge.listdir("16.0.0", recursive=True)

        extracted = entries[1]
        assert isinstance(extracted, DirectoryEntry)
        assert extracted.children == (
            FileEntry(name="DerivedAge.txt", path="extracted/DerivedAge.txt"),
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["forbidden", "nothing-here"])
    async def test_forbidden_or_missing_is_empty(
        self, bridge: HTTPFileSystemBridge, path: str
    ) -> None:
        """403 and 404 yield an empty listing."""
        assert await bridge.listdir(path) == []

    @pytest.mark.asyncio
    async def test_server_error(self, bridge: HTTPFileSystemBridge) -> None:
        """5xx responses raise BridgeRequestError."""
        with pytest.raises(BridgeRequestError, match="Server error"):
            await bridge.listdir("broken")

    @pytest.mark.asyncio
    async def test_other_client_error(self, bridge: HTTPFileSystemBridge) -> None:
        """Unexpected 4xx responses raise BridgeRequestError."""
        with pytest.raises(BridgeRequestError, match="Failed to list directory"):
            await bridge.listdir("teapot")

    @pytest.mark.asyncio
    async def test_invalid_schema(self, bridge: HTTPFileSystemBridge) -> None:
        """A body that is not a listing raises BridgeRequestError."""
        with pytest.raises(BridgeRequestError, match="Invalid response schema"):
            await bridge.listdir("garbage")


class TestHTTPUnsupported:
    """Tests for operations the HTTP bridge does not support."""

    @pytest.mark.asyncio
    async def test_write_unsupported(self, bridge: HTTPFileSystemBridge) -> None:
        """write raises BridgeUnsupportedOperation."""
        with pytest.raises(BridgeUnsupportedOperation):
            await bridge.write("a.txt", "data")

    @pytest.mark.asyncio
    async def test_rm_unsupported(self, bridge: HTTPFileSystemBridge) -> None:
        """rm raises BridgeUnsupportedOperation."""
        with pytest.raises(BridgeUnsupportedOperation):
            await bridge.rm("a.txt")

    def test_rejects_non_http_url(self) -> None:
        """Only http(s) base URLs are accepted."""
        with pytest.raises(ValueError, match="http"):
            HTTPFileSystemBridge("ftp://example.test/files")
