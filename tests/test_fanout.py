import pytest

from search_sync_server.indexing.errors import Outcome, UnsupportedContentKind
from search_sync_server.indexing.fanout import FanOut
from search_sync_server.indexing.targets import Generation
from search_sync_server.search.client import SearchEngineError

from conftest import make_post, make_term


def _written(engine):
    return sorted(call.args[0] for call in engine.upsert_document.await_args_list)


def _deleted(engine):
    return sorted(call.args[0] for call in engine.delete_document.await_args_list)


@pytest.mark.asyncio
async def test_new_public_post_goes_to_four_targets(config, engine):
    report = await FanOut(config, engine).upsert(make_post(post_id=9), is_new=True)

    assert report.ok
    assert report.doc_id == "9"
    assert _written(engine) == [
        "content-primary-post",
        "content-primary-post-private",
        "content-secondary-post",
        "content-secondary-post-private",
    ]


@pytest.mark.asyncio
async def test_updated_public_post_stays_in_current_generation(config, engine):
    await FanOut(config, engine).upsert(make_post(), generation=Generation.SECONDARY)

    assert _written(engine) == [
        "content-secondary-post",
        "content-secondary-post-private",
    ]


@pytest.mark.asyncio
async def test_private_post_only_reaches_private_indexes(config, engine):
    report = await FanOut(config, engine).upsert(make_post(post_status="private"), is_new=True)

    assert _written(engine) == [
        "content-primary-post-private",
        "content-secondary-post-private",
    ]
    # any earlier public copy is removed from both generations
    assert _deleted(engine) == [
        "content-primary-post",
        "content-secondary-post",
    ]
    assert report.attempted == ["content-primary-post-private", "content-secondary-post-private"]
    assert report.cleaned == ["content-primary-post", "content-secondary-post"]


@pytest.mark.asyncio
async def test_private_fields_split_documents(config, engine):
    from search_sync_server.content.models import CustomField, KindRegistration

    config = config.model_copy(update={"private_fields": ["secret"]})
    registration = KindRegistration(
        post_type="post",
        fields=[CustomField(name="secret", type="text")],
    )
    post = make_post(fields={"secret": "s3cret"})

    await FanOut(config, engine).upsert(post, registration=registration)

    bodies = {call.args[0]: call.args[2] for call in engine.upsert_document.await_args_list}
    assert "secret" not in bodies["content-primary-post"]
    assert bodies["content-primary-post-private"]["secret"] == "s3cret"


@pytest.mark.asyncio
async def test_unconfigured_targets_are_skipped(config, engine):
    config = config.model_copy(update={"secondary_index": None, "private_indexes": False})
    report = await FanOut(config, engine).upsert(make_post(), is_new=True)

    assert report.ok
    assert _written(engine) == ["content-primary-post"]


@pytest.mark.asyncio
async def test_one_failing_target_does_not_stop_the_others(config, engine):
    async def upsert(index, doc_id, body):
        if index == "content-primary-post":
            raise SearchEngineError("boom", status=500)

    engine.upsert_document.side_effect = upsert

    report = await FanOut(config, engine).upsert(make_post(), is_new=True)

    assert not report.ok
    assert len(report.attempted) == 4
    assert [e.index for e in report.errors] == ["content-primary-post"]
    assert report.errors[0].operation == "upsert"


@pytest.mark.asyncio
async def test_excluded_kind_is_skipped(config, engine):
    report = await FanOut(config, engine).upsert(make_post(post_type="revision"))

    assert report.skipped
    engine.upsert_document.assert_not_awaited()


@pytest.mark.asyncio
async def test_none_item_is_skipped(config, engine):
    assert (await FanOut(config, engine).upsert(None)).skipped
    assert (await FanOut(config, engine).delete(None)).skipped


@pytest.mark.asyncio
async def test_unsupported_item_raises(config, engine):
    with pytest.raises(UnsupportedContentKind):
        await FanOut(config, engine).upsert(object())


@pytest.mark.asyncio
async def test_term_is_written_to_public_and_private(config, engine):
    await FanOut(config, engine).upsert(make_term(), is_new=True)

    assert _written(engine) == [
        "content-primary-category",
        "content-primary-category-private",
        "content-secondary-category",
        "content-secondary-category-private",
    ]


@pytest.mark.asyncio
async def test_delete_public_post_everywhere(config, engine):
    report = await FanOut(config, engine).delete(make_post())

    assert report.ok
    assert _deleted(engine) == [
        "content-primary-post",
        "content-primary-post-private",
        "content-secondary-post",
        "content-secondary-post-private",
    ]


@pytest.mark.asyncio
async def test_delete_private_post_only_private(config, engine):
    await FanOut(config, engine).delete(make_post(post_status="private"))

    assert _deleted(engine) == [
        "content-primary-post-private",
        "content-secondary-post-private",
    ]


@pytest.mark.asyncio
async def test_deleting_twice_is_not_an_error(config, engine):
    fanout = FanOut(config, engine)
    first = await fanout.delete(make_post())

    engine.delete_document.return_value = Outcome.MISSING
    second = await fanout.delete(make_post())

    assert first.ok and second.ok
    assert first.missing == []
    assert len(second.missing) == 4


@pytest.mark.asyncio
async def test_delete_failure_collected(config, engine):
    engine.delete_document.side_effect = SearchEngineError("down")

    report = await FanOut(config, engine).delete(make_term())

    assert len(report.errors) == 4
    assert {e.operation for e in report.errors} == {"delete"}
