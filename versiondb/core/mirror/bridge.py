# versiondb/core/mirror/bridge.py
"""
QUERY BRIDGE - The one entry point the HTTP layer talks to

    run_query(sql) -> lock -> maybe_refresh() -> execute_query() -> rows

One asyncio.Lock covers the refresh check and the query of every request, so
refreshes and queries form a single stream: no two refreshes race and no
reader sees a half replaced mirror. A slow upstream blocks all queries while
it runs.
"""

import asyncio
import logging
from typing import Any, Dict, List, Sequence

from versiondb.core.config import Settings
from versiondb.core.mirror.refresh import RefreshCoordinator
from versiondb.core.mirror.store import MirrorStore
from versiondb.core.mirror.upstream import UpstreamFetcher
from versiondb.core.schemas import MirrorStatusResponse

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Owns the store, the fetcher and the refresh state for the process.

    Built once at startup with start(), shared by every request handler,
    closed at shutdown with close().
    """

    def __init__(
        self,
        store: MirrorStore,
        fetcher: UpstreamFetcher,
        coordinator: RefreshCoordinator,
    ):
        self.store = store
        self.fetcher = fetcher
        self.coordinator = coordinator
        self.lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, transport=None) -> "CatalogService":
        store = MirrorStore(settings.DATABASE_PATH, echo=settings.SQL_ECHO)
        fetcher = UpstreamFetcher(
            settings.UPSTREAM_BASE_URL,
            settings.API_TOKEN,
            timeout=settings.UPSTREAM_TIMEOUT,
            transport=transport,
        )
        coordinator = RefreshCoordinator(
            fetcher, store, ttl=settings.REFRESH_TTL_SECONDS
        )
        return cls(store, fetcher, coordinator)

    async def start(self) -> None:
        """Create the schema and load the first snapshot, ignoring the TTL."""
        await self.store.ensure_schema()
        async with self.lock:
            await self.coordinator.refresh()

    async def run_query(
        self, sql: str, params: Sequence[Any] = ()
    ) -> List[Dict[str, Any]]:
        """
        Refresh if stale, then run the caller's SQL on the mirror.

        Raises:
            RefreshError: the refresh step failed (not the caller's fault)
            StoreError: the mirror could not be opened
            QueryError: the SQL failed to prepare or execute
        """
        async with self.lock:
            await self.coordinator.maybe_refresh()
            return await self.store.execute_query(sql, params)

    async def status(self) -> MirrorStatusResponse:
        async with self.lock:
            return MirrorStatusResponse(
                refresh=self.coordinator.status(),
                tables=await self.store.counts(),
            )

    async def close(self) -> None:
        await self.fetcher.aclose()
        await self.store.dispose()
