import pytest
from unittest.mock import AsyncMock, MagicMock

from elasticsearch import ApiError, ConnectionError, NotFoundError

from search_sync_server.indexing.errors import Outcome
from search_sync_server.search.client import SearchEngine, SearchEngineError


def _meta(status):
    meta = MagicMock()
    meta.status = status
    return meta


@pytest.fixture
def es():
    client = MagicMock()
    client.indices.create = AsyncMock(return_value=MagicMock(body={"acknowledged": True}))
    client.indices.delete = AsyncMock()
    client.index = AsyncMock()
    client.delete = AsyncMock()
    client.close = AsyncMock()
    # options() returns a client carrying the per-request timeout
    client.options.return_value = client
    return client


@pytest.fixture
def search(config, es):
    return SearchEngine(config, client=es)


@pytest.mark.asyncio
async def test_create_index(search, es):
    result = await search.create_index("idx", {"number_of_shards": 1}, {"properties": {}})

    assert result == {"acknowledged": True}
    es.indices.create.assert_awaited_once_with(
        index="idx",
        settings={"number_of_shards": 1},
        mappings={"properties": {}},
    )
    es.options.assert_called_with(request_timeout=30.0)


@pytest.mark.asyncio
async def test_create_index_failure(search, es):
    es.indices.create.side_effect = ApiError(
        "resource_already_exists_exception", _meta(400), {"error": "exists"}
    )

    with pytest.raises(SearchEngineError) as excinfo:
        await search.create_index("idx", {})

    assert excinfo.value.status == 400
    assert excinfo.value.as_dict()["info"] == {"error": "exists"}


@pytest.mark.asyncio
async def test_delete_missing_index(search, es):
    es.indices.delete.side_effect = NotFoundError("index_not_found_exception", _meta(404), {})
    assert await search.delete_index("idx") is Outcome.MISSING


@pytest.mark.asyncio
async def test_delete_index(search, es):
    assert await search.delete_index("idx") is Outcome.OK


@pytest.mark.asyncio
async def test_upsert_document(search, es):
    await search.upsert_document("idx", "1", {"post_title": "A"})
    es.index.assert_awaited_once_with(index="idx", id="1", document={"post_title": "A"})


@pytest.mark.asyncio
async def test_transport_failure_wrapped(search, es):
    es.index.side_effect = ConnectionError("refused")

    with pytest.raises(SearchEngineError):
        await search.upsert_document("idx", "1", {})


@pytest.mark.asyncio
async def test_delete_document_missing(search, es):
    es.delete.side_effect = NotFoundError("not_found", _meta(404), {})
    assert await search.delete_document("idx", "1") is Outcome.MISSING
