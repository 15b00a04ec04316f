import pytest
from httpx import AsyncClient

from versiondb.core.exceptions import UpstreamUnavailable
from versiondb.core.schemas import VersionEntry

from conftest import TTL


@pytest.mark.asyncio
async def test_query_returns_rows(client: AsyncClient):
    """Raw SQL in, JSON array out"""
    response = await client.post(
        "/query.json", content="SELECT id, name FROM versions ORDER BY id"
    )

    assert response.status_code == 200
    assert response.json() == [
        {"id": 1, "name": "1.20"},
        {"id": 2, "name": "1.20.1"},
    ]


@pytest.mark.asyncio
async def test_query_alias_route(client: AsyncClient):
    response = await client.post("/query", content="SELECT count(*) AS n FROM versions")

    assert response.status_code == 200
    assert response.json() == [{"n": 2}]


@pytest.mark.asyncio
async def test_join_across_tables(client: AsyncClient):
    response = await client.post(
        "/query.json",
        content=(
            "SELECT v.slug, t.name AS type FROM versions v "
            "JOIN versionTypes t ON t.id = v.version_type_id WHERE v.id = 1"
        ),
    )

    assert response.status_code == 200
    assert response.json() == [{"slug": "1-20", "type": "Minecraft 1.20"}]


@pytest.mark.asyncio
async def test_bad_sql_is_400_with_message(client: AsyncClient):
    response = await client.post("/query.json", content="SELEKT * FROM versions")

    assert response.status_code == 400
    assert response.headers["content-type"].startswith("text/plain")
    assert "syntax error" in response.text


@pytest.mark.asyncio
async def test_write_attempt_is_400(client: AsyncClient):
    response = await client.post("/query.json", content="DROP TABLE versions")
    assert response.status_code == 400

    # Table is still there
    check = await client.post("/query.json", content="SELECT count(*) AS n FROM versions")
    assert check.json() == [{"n": 2}]


@pytest.mark.asyncio
async def test_invalid_utf8_body_is_400(client: AsyncClient):
    response = await client.post("/query.json", content=b"SELECT '\xff'")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_refresh_failure_is_500(client: AsyncClient, fetcher, clock):
    clock.advance(TTL + 1)
    fetcher.error = UpstreamUnavailable("Upstream /versions answered 503")

    response = await client.post("/query.json", content="SELECT 1")

    assert response.status_code == 500
    assert "503" in response.text


@pytest.mark.asyncio
async def test_status_reports_mirror(client: AsyncClient, fetcher):
    response = await client.get("/status")

    assert response.status_code == 200
    data = response.json()
    assert data["tables"] == {"versions": 2, "versionTypes": 1}
    assert data["refresh"]["stale"] is False
    assert data["refresh"]["ttl_seconds"] == TTL
    assert fetcher.calls == 1


@pytest.mark.asyncio
async def test_root_redirects_to_index(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code in (302, 307)
    assert response.headers["location"] == "/static/index.html"


@pytest.mark.asyncio
async def test_static_index_is_served(client: AsyncClient):
    response = await client.get("/static/index.html")

    assert response.status_code == 200
    assert "query.json" in response.text


@pytest.mark.asyncio
async def test_unknown_path_gets_404_page(client: AsyncClient):
    for path in ("/nope", "/static/missing.html"):
        response = await client.get(path)
        assert response.status_code == 404
        assert "404 Not Found" in response.text


@pytest.mark.asyncio
async def test_version_types_table_name(client: AsyncClient):
    response = await client.post("/query.json", content="SELECT id, slug FROM versionTypes")

    assert response.status_code == 200
    assert response.json() == [{"id": 2, "slug": "minecraft-1-20"}]


@pytest.mark.asyncio
async def test_oversized_upstream_id_is_500(client: AsyncClient, fetcher, clock):
    clock.advance(TTL + 1)
    fetcher.versions = [
        VersionEntry.model_construct(
            id=2**63, version_type_id=2, name="huge", slug="huge"
        )
    ]

    response = await client.post("/query.json", content="SELECT 1")

    assert response.status_code == 500
    assert "Refresh failed" in response.text
