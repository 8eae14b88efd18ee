"""Read-only HTTP filesystem bridge.

Serves files from a remote files API. The path component of ``base_url``
acts as the bridge root: every requested path is resolved beneath it
before a request is sent.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Literal

import httpx
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from ucdstore.bridge.base import (
    Capability,
    DirectoryEntry,
    FileEntry,
    FileSystemBridge,
    FSEntry,
    join_entry_path,
)
from ucdstore.bridge.errors import BridgeFileNotFoundError, BridgeRequestError
from ucdstore.bridge.resolver import resolve_safe_path

logger = logging.getLogger(__name__)

DEFAULT_FILES_URL = "https://api.ucdjs.dev/api/v1/files"


class RemoteEntry(BaseModel):
    """Directory listing entry as returned by the files API."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["file", "directory"]
    name: str
    path: str


_LISTING_ADAPTER = TypeAdapter(list[RemoteEntry])


class HTTPFileSystemBridge(FileSystemBridge):
    """Bridge reading from a remote HTTP files API.

    Attributes:
        base_url: Files API URL. Its path is the bridge root.
    """

    name = "http"
    capabilities = frozenset({Capability.READ, Capability.EXISTS, Capability.LISTDIR})

    def __init__(
        self,
        base_url: str = DEFAULT_FILES_URL,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the bridge.

        Args:
            base_url: Files API URL.
            client: Shared client to use. When None a short-lived client is
                opened for every request.
            timeout: Request timeout in seconds for self-managed clients.
        """
        url = httpx.URL(base_url)
        if url.scheme not in ("http", "https"):
            msg = f"base_url must be an http(s) URL, got {base_url!r}"
            raise ValueError(msg)
        self.base_url = url
        self._root = url.path or "/"
        self._client = client
        self._timeout = timeout

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
            yield client

    def _url(self, path: str) -> httpx.URL:
        return self.base_url.copy_with(path=resolve_safe_path(self._root, path))

    async def read(self, path: str) -> str:
        url = self._url(path)
        logger.debug("GET %s", url)
        async with self._session() as client:
            response = await client.get(url)

        if response.status_code == 404:
            raise BridgeFileNotFoundError(path)
        if not response.is_success:
            raise BridgeRequestError(
                f"Failed to read remote file: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response.text

    async def exists(self, path: str) -> bool:
        url = self._url(path)
        try:
            async with self._session() as client:
                response = await client.head(url)
        except httpx.HTTPError as e:
            logger.debug("HEAD %s failed: %s", url, e)
            return False
        return response.is_success

    async def listdir(self, path: str, recursive: bool = False) -> list[FSEntry]:
        async with self._session() as client:
            return await self._list(client, path, "", recursive)

    async def _list(
        self,
        client: httpx.AsyncClient,
        path: str,
        prefix: str,
        recursive: bool,
    ) -> list[FSEntry]:
        url = self._url(path)
        logger.debug("GET %s (listing)", url)
        response = await client.get(url, headers={"Accept": "application/json"})

        if response.status_code in (403, 404):
            return []
        if response.status_code >= 500:
            raise BridgeRequestError(
                f"Server error while listing directory: {response.reason_phrase}",
                status_code=response.status_code,
            )
        if not response.is_success:
            raise BridgeRequestError(
                f"Failed to list directory: {response.reason_phrase} ({response.status_code})",
                status_code=response.status_code,
            )

        try:
            remote_entries = _LISTING_ADAPTER.validate_json(response.content)
        except ValidationError as e:
            raise BridgeRequestError(f"Invalid response schema: {e}") from e

        entries: list[FSEntry] = []
        for remote in remote_entries:
            entry_path = join_entry_path(prefix, remote.name)
            if remote.type == "directory":
                children: tuple[FSEntry, ...] = ()
                if recursive:
                    child_path = f"{path.rstrip('/')}/{remote.name}"
                    children = tuple(await self._list(client, child_path, entry_path, True))
                entries.append(DirectoryEntry(name=remote.name, path=entry_path, children=children))
            else:
                entries.append(FileEntry(name=remote.name, path=entry_path))
        return entries
