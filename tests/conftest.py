import asyncio
import os
from pathlib import Path

# Settings are read at import time, give them a token before the app loads
os.environ.setdefault("API_TOKEN", "test-token")
os.environ.setdefault("STATIC_DIR", str(Path(__file__).resolve().parent.parent / "static"))

import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from versiondb.api.deps import get_catalog
from versiondb.core.mirror.bridge import CatalogService
from versiondb.core.mirror.refresh import RefreshCoordinator
from versiondb.core.mirror.store import MirrorStore
from versiondb.core.schemas import VersionEntry, VersionTypeEntry
from versiondb.main import app

TTL = 300.0

OLD_VERSIONS = [
    VersionEntry(id=1, version_type_id=2, name="1.20", slug="1-20"),
    VersionEntry(id=2, version_type_id=2, name="1.20.1", slug="1-20-1"),
]
OLD_TYPES = [VersionTypeEntry(id=2, name="Minecraft 1.20", slug="minecraft-1-20")]

NEW_VERSIONS = [
    VersionEntry(id=10, version_type_id=3, name="1.21", slug="1-21"),
    VersionEntry(id=11, version_type_id=3, name="1.21.1", slug="1-21-1"),
    VersionEntry(id=12, version_type_id=4, name="Forge", slug="forge"),
]
NEW_TYPES = [
    VersionTypeEntry(id=3, name="Minecraft 1.21", slug="minecraft-1-21"),
    VersionTypeEntry(id=4, name="Modloader", slug="modloader"),
]


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeFetcher:
    """Stands in for UpstreamFetcher, counts calls and can be slowed or broken."""

    def __init__(self, versions, version_types, delay: float = 0.0):
        self.versions = versions
        self.version_types = version_types
        self.delay = delay
        self.error = None
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.versions), list(self.version_types)

    async def aclose(self):
        pass


# Fresh SQLite file per test, schema already created
@pytest_asyncio.fixture(scope="function")
async def store(tmp_path):
    mirror = MirrorStore(str(tmp_path / "mirror.sqlite"))
    await mirror.ensure_schema()
    yield mirror
    await mirror.dispose()


@pytest_asyncio.fixture(scope="function")
async def clock():
    return FakeClock()


@pytest_asyncio.fixture(scope="function")
async def fetcher():
    return FakeFetcher(OLD_VERSIONS, OLD_TYPES)


# Service started with the old snapshot loaded
@pytest_asyncio.fixture(scope="function")
async def catalog(store, fetcher, clock):
    coordinator = RefreshCoordinator(fetcher, store, ttl=TTL, clock=clock)
    service = CatalogService(store, fetcher, coordinator)
    await service.start()
    return service


# Client
@pytest_asyncio.fixture(scope="function")
async def client(catalog):
    app.dependency_overrides[get_catalog] = lambda: catalog

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
