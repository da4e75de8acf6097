import pytest

from search_sync_server.indexing.progress import (
    SINGLE_SITE_KEY,
    ProgressState,
    ProgressStore,
    ScopeProgress,
)
from search_sync_server.indexing.targets import Generation

from conftest import MemoryOptionStore


class TestScopeProgress:

    def test_complete_when_counted(self):
        assert ScopeProgress(page=3, count=25, total=25).is_complete(per_page=10)

    def test_complete_when_pages_cover_total(self):
        # 2 items failed to index, but every page was walked
        assert ScopeProgress(page=4, count=23, total=25).is_complete(per_page=10)

    def test_incomplete(self):
        assert not ScopeProgress(page=3, count=20, total=25).is_complete(per_page=10)

    def test_empty_scope_is_complete(self):
        assert ScopeProgress(page=1, count=0, total=0).is_complete(per_page=10)

    def test_restart(self):
        scope = ScopeProgress(page=4, count=25, total=25, blog_id=2)
        restarted = scope.restart(Generation.SECONDARY)
        assert (restarted.page, restarted.count, restarted.total) == (1, 0, 25)
        assert restarted.generation is Generation.SECONDARY
        assert restarted.blog_id == 2


class TestPersistedShape:

    def test_single_site_is_flat(self):
        state = ProgressState(scopes={SINGLE_SITE_KEY: ScopeProgress(page=2, count=10, total=25)})
        assert state.to_option(multisite=False) == {
            "page": 2,
            "count": 10,
            "total": 25,
            "generation": "primary",
        }

    def test_multisite_keyed_by_site(self):
        state = ProgressState(scopes={
            "2": ScopeProgress(total=5, blog_id=2),
            "1": ScopeProgress(total=3, blog_id=1),
        })
        option = state.to_option(multisite=True)
        assert list(option) == ["1", "2"]
        assert option["2"]["blog_id"] == 2

    def test_round_trip_multisite(self):
        raw = {"1": {"page": 2, "count": 10, "total": 30, "generation": "secondary", "blog_id": 1}}
        state = ProgressState.from_option(raw, multisite=True)
        assert state.scopes["1"].generation is Generation.SECONDARY
        assert state.to_option(multisite=True) == raw

    @pytest.mark.parametrize("raw", [None, {}, "garbage", []])
    def test_absent_progress(self, raw):
        assert ProgressState.from_option(raw, multisite=False) is None


@pytest.mark.asyncio
async def test_store_persists_under_key():
    options = MemoryOptionStore()
    store = ProgressStore(options, key="progress", multisite=False)

    assert await store.load() is None

    snapshot = await store.save(ProgressState(scopes={SINGLE_SITE_KEY: ScopeProgress(total=4)}))
    assert options.values["progress"] == snapshot

    loaded = await store.load()
    assert loaded.scopes[SINGLE_SITE_KEY].total == 4
