# versiondb/core/mirror/upstream.py
"""
UPSTREAM FETCHER - Pull the game version catalog from the remote API

Endpoints (relative to UPSTREAM_BASE_URL):
    /versions       -> [VersionEntry, ...]
    /version-types  -> [VersionTypeEntry, ...]

Both requests carry the API token in the X-Api-Token header. No retries here,
a failed fetch simply aborts the refresh that asked for it.
"""

import logging
from typing import List, Optional, Tuple

import httpx
from pydantic import TypeAdapter, ValidationError

from versiondb.core.exceptions import UpstreamDecodeError, UpstreamUnavailable
from versiondb.core.schemas import (
    VersionEntry,
    VersionList,
    VersionTypeEntry,
    VersionTypeList,
)

logger = logging.getLogger(__name__)

VERSIONS_PATH = "/versions"
VERSION_TYPES_PATH = "/version-types"
TOKEN_HEADER = "X-Api-Token"


class UpstreamFetcher:
    def __init__(
        self,
        base_url: str,
        api_token: str,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={TOKEN_HEADER: api_token},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def fetch(self) -> Tuple[List[VersionEntry], List[VersionTypeEntry]]:
        """
        Download both collections.

        Raises:
            UpstreamUnavailable: transport failure or non-2xx status
            UpstreamDecodeError: body is not the expected JSON array
        """
        logger.info(f"Fetching catalog from {self.base_url}")

        versions = await self._get(VERSIONS_PATH, VersionList)
        version_types = await self._get(VERSION_TYPES_PATH, VersionTypeList)

        logger.info(
            f"Fetched {len(versions)} versions and {len(version_types)} version types"
        )
        return versions, version_types

    async def _get(self, path: str, adapter: TypeAdapter) -> list:
        try:
            response = await self.client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailable(
                f"Upstream {path} answered {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Upstream {path} unreachable: {e!r}") from e

        try:
            return adapter.validate_json(response.content)
        except ValidationError as e:
            raise UpstreamDecodeError(
                f"Unexpected payload from {path}: {e.error_count()} errors, "
                f"first: {e.errors()[0]['msg']}"
            ) from e

    async def aclose(self) -> None:
        await self.client.aclose()
