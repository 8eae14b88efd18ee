"""Remote collaborators feeding the store.

The store depends on three narrow interfaces: a manifest source listing
the files each version should contain, a content source serving those
files, and a version registry. ``UCDClient`` implements all three against
the public UCD API over HTTP.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ucdstore.bridge.resolver import resolve_safe_path
from ucdstore.core.config import DEFAULT_API_URL
from ucdstore.store.errors import StoreUpstreamError
from ucdstore.store.models import ExpectedFile, FetchedContent, VersionInfo

logger = logging.getLogger(__name__)

FILES_ENDPOINT = "/api/v1/files"
VERSIONS_ENDPOINT = "/api/v1/versions"
WELL_KNOWN_ENDPOINT = "/.well-known/ucd-store"

_TEXT_CONTENT_TYPES = ("text/", "application/json", "application/xml")


class ManifestSource(Protocol):
    """Lists the files expected for a version."""

    async def get_expected_files(self, version: str) -> list[ExpectedFile]: ...


class ContentSource(Protocol):
    """Serves the content of remote files."""

    async def fetch_file_content(self, version: str, path: str) -> FetchedContent: ...


class VersionRegistry(Protocol):
    """Lists the versions available upstream."""

    async def list_versions(self) -> list[VersionInfo]: ...


class _ExpectedFileModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    path: str
    store_path: str = Field(alias="storePath")


class _VersionManifestModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    expected_files: list[_ExpectedFileModel] = Field(alias="expectedFiles")


class _VersionModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    version: str
    mapped_ucd_version: str | None = Field(default=None, alias="mappedUcdVersion")


_VERSIONS_ADAPTER = TypeAdapter(list[_VersionModel])


class UCDClient:
    """HTTP client for the UCD API.

    Example:
        >>> client = UCDClient("https://api.ucdjs.dev")
        >>> files = await client.get_expected_files("16.0.0")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API origin.
            client: Shared httpx client. When None a short-lived client is
                opened for every request.
            timeout: Request timeout in seconds for self-managed clients.
        """
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._timeout = timeout

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
            yield client

    async def _get(self, path: str) -> httpx.Response:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s", url)
        try:
            async with self._session() as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            raise StoreUpstreamError(f"Request to {url} failed: {e}") from e

        if not response.is_success:
            raise StoreUpstreamError(
                f"Request to {url} failed: {response.status_code} {response.reason_phrase}"
            )
        return response

    async def get_expected_files(self, version: str) -> list[ExpectedFile]:
        """Fetch the expected files of a version from the well-known manifest.

        Args:
            version: Unicode version.

        Returns:
            Expected files in manifest order.

        Raises:
            StoreUpstreamError: If the request fails or the body is malformed.
        """
        response = await self._get(f"{WELL_KNOWN_ENDPOINT}/{version}.json")
        try:
            manifest = _VersionManifestModel.model_validate_json(response.content)
        except ValidationError as e:
            msg = f"Invalid manifest for version '{version}': {e}"
            raise StoreUpstreamError(msg) from e

        return [
            ExpectedFile(name=entry.name, path=entry.path, store_path=entry.store_path)
            for entry in manifest.expected_files
        ]

    async def fetch_file_content(self, version: str, path: str) -> FetchedContent:
        """Download a single file.

        Args:
            version: Unicode version the file belongs to.
            path: Remote path, either absolute ("/16.0.0/ucd/X.txt") or
                relative to the version.

        Returns:
            Text content for textual media types, bytes otherwise.

        Raises:
            StoreUpstreamError: If the request fails.
        """
        remote = path if path.startswith(f"/{version}/") else f"/{version}/{path.lstrip('/')}"
        response = await self._get(resolve_safe_path(FILES_ENDPOINT, remote))

        content_type = response.headers.get("content-type")
        if content_type is None or content_type.startswith(_TEXT_CONTENT_TYPES):
            return FetchedContent(content=response.text, content_type=content_type)
        return FetchedContent(content=response.content, content_type=content_type)

    async def list_versions(self) -> list[VersionInfo]:
        """List the versions the API knows about.

        Returns:
            Versions with the UCD version backing each one.

        Raises:
            StoreUpstreamError: If the request fails or the body is malformed.
        """
        response = await self._get(VERSIONS_ENDPOINT)
        try:
            versions = _VERSIONS_ADAPTER.validate_json(response.content)
        except ValidationError as e:
            raise StoreUpstreamError(f"Invalid versions response: {e}") from e

        return [
            VersionInfo(version=v.version, mapped_version=v.mapped_ucd_version or v.version)
            for v in versions
        ]
