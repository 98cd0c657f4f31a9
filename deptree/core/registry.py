import asyncio
import logging
from typing import Optional

import httpx

from deptree import config
from deptree.core.cache import MetadataCache
from deptree.core.errors import MalformedMetadata, PackageUnavailable
from deptree.core.model import PackageMetadata

LATEST = "latest"


class RegistryClient:
    """
    Async npm registry client backed by a MetadataCache.

    Lookups never raise: a package that is missing in both the requested
    version and "latest" comes back as None so the caller can prune it.
    """

    def __init__(
        self,
        cache: MetadataCache,
        base_url: str = config.REGISTRY_URL,
        timeout: float = config.REQUEST_TIMEOUT,
        max_concurrency: int = config.MAX_CONCURRENCY,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._client = client
        self._owns_client = client is None
        self.requests_made = 0

    async def __aenter__(self) -> "RegistryClient":
        if self._client is None:
            limits = httpx.Limits(max_keepalive_connections=20, max_connections=100)
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                limits=limits,
                headers={"Accept": "application/json", "User-Agent": config.USER_AGENT},
            )
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_metadata(self, name: str, version: str) -> Optional[PackageMetadata]:
        key = MetadataCache.key(name, version)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            metadata = await self._lookup(name, version)
        except (PackageUnavailable, MalformedMetadata) as e:
            logging.debug(f"{key} not resolved ({e}), falling back to {LATEST}")
            try:
                metadata = await self._lookup(name, LATEST)
            except (PackageUnavailable, MalformedMetadata) as e:
                logging.warning(f"Failed to fetch metadata for {name}: {e}")
                return None

        # Stored under the requested key, even when "latest" answered
        self.cache.put(key, metadata)
        return metadata

    async def _lookup(self, name: str, version: str) -> PackageMetadata:
        if self._client is None:
            raise RuntimeError("RegistryClient used outside 'async with'")

        async with self._semaphore:
            self.requests_made += 1
            try:
                url = f"{self.base_url}/{name}/{version}"
                response = await self._client.get(url, timeout=self.timeout)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise PackageUnavailable(f"request error: {e}") from e

        if response.status_code != 200:
            raise PackageUnavailable(f"registry answered {response.status_code}")

        try:
            return PackageMetadata.from_registry(response.json())
        except ValueError as e:
            raise MalformedMetadata(str(e)) from e
