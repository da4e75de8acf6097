import pytest

from search_sync_server.indexing.admin import IndexAdministrator
from search_sync_server.indexing.errors import IndexCreationFailed, Outcome
from search_sync_server.search.client import SearchEngineError


@pytest.mark.asyncio
async def test_create_when_index_missing(config, engine):
    engine.delete_index.return_value = Outcome.MISSING
    admin = IndexAdministrator(config, engine)

    result = await admin.create("content-primary-post", {"post_title": {"type": "text"}})

    assert result == {"acknowledged": True}
    engine.delete_index.assert_awaited_once_with("content-primary-post")

    name, settings, mappings = engine.create_index.await_args.args
    assert name == "content-primary-post"
    assert settings["number_of_shards"] == 1
    assert settings["number_of_replicas"] == 1
    assert "ngram_analyzer" in settings["analysis"]["analyzer"]
    assert settings["analysis"]["filter"]["ngram_filter"]["type"] == "edge_ngram"
    assert mappings == {"properties": {"post_title": {"type": "text"}}}


@pytest.mark.asyncio
async def test_create_without_mappings(config, engine):
    await IndexAdministrator(config, engine).create("idx")
    assert engine.create_index.await_args.args[2] is None


@pytest.mark.asyncio
async def test_create_failure_raises_with_errors(config, engine):
    engine.create_index.side_effect = SearchEngineError(
        "create index 'idx' failed: resource_already_exists_exception",
        status=400,
    )

    with pytest.raises(IndexCreationFailed) as excinfo:
        await IndexAdministrator(config, engine).create("idx")

    assert excinfo.value.index == "idx"
    assert excinfo.value.errors[0]["status"] == 400


@pytest.mark.asyncio
async def test_predelete_failure_raises(config, engine):
    engine.delete_index.side_effect = SearchEngineError("forbidden", status=403)

    with pytest.raises(IndexCreationFailed):
        await IndexAdministrator(config, engine).create("idx")

    engine.create_index.assert_not_awaited()


@pytest.mark.asyncio
async def test_clear_reports_missing(config, engine):
    engine.delete_index.return_value = Outcome.MISSING
    assert await IndexAdministrator(config, engine).clear("idx") is Outcome.MISSING


def test_settings_follow_config(config):
    config = config.model_copy(update={"shards": 3, "replicas": 0})
    settings = IndexAdministrator(config, None).index_settings()
    assert settings["number_of_shards"] == 3
    assert settings["number_of_replicas"] == 0
