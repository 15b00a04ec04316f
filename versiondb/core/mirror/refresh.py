# versiondb/core/mirror/refresh.py
"""
REFRESH COORDINATOR - Decide when the mirror is stale and rebuild it

States:
    Fresh: last successful refresh is at most ttl seconds old
    Stale: never refreshed, or older than ttl

A refresh is fetch() followed by replace_all(). The timestamp only moves after
both succeed, so a failed attempt leaves the state Stale and the next call
tries again. There is no timer, staleness is only checked when asked.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from versiondb.core.exceptions import CatalogError, RefreshError
from versiondb.core.mirror.store import MirrorStore
from versiondb.core.mirror.upstream import UpstreamFetcher
from versiondb.core.schemas import RefreshStatus

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class RefreshCoordinator:
    def __init__(
        self,
        fetcher: UpstreamFetcher,
        store: MirrorStore,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.fetcher = fetcher
        self.store = store
        self.ttl = ttl
        self.clock = clock
        self.last_refresh: Optional[float] = None
        self.last_refresh_at: Optional[datetime] = None

    def age(self) -> Optional[float]:
        if self.last_refresh is None:
            return None
        return self.clock() - self.last_refresh

    def is_stale(self) -> bool:
        age = self.age()
        return age is None or age > self.ttl

    async def refresh(self) -> None:
        """
        Fetch and replace unconditionally.

        Raises:
            RefreshError: fetch or replace failed, mirror and timestamp untouched
        """
        try:
            versions, version_types = await self.fetcher.fetch()
            await self.store.replace_all(versions, version_types)
        except CatalogError as e:
            logger.error(f"Refresh failed: {e}")
            raise RefreshError(f"Refresh failed: {e}") from e

        self.last_refresh = self.clock()
        self.last_refresh_at = datetime.now(timezone.utc)
        logger.info("Mirror refreshed")

    async def maybe_refresh(self) -> None:
        """Refresh only when stale. No-op while fresh."""
        if not self.is_stale():
            return
        await self.refresh()

    def status(self) -> RefreshStatus:
        return RefreshStatus(
            last_refresh=(
                self.last_refresh_at.isoformat() if self.last_refresh_at else None
            ),
            age_seconds=self.age(),
            ttl_seconds=self.ttl,
            stale=self.is_stale(),
        )
