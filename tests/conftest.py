import pytest
from unittest.mock import AsyncMock

from search_sync_server.config import IndexerConfig
from search_sync_server.content.api_client import ContentClient
from search_sync_server.content.models import KindRegistration, Post, Term
from search_sync_server.indexing.errors import Outcome
from search_sync_server.search.client import SearchEngine


class MemoryOptionStore:
    """Dict-backed option store."""

    def __init__(self, initial=None):
        self.values = dict(initial or {})
        self.writes = 0

    async def get(self, key):
        return self.values.get(key)

    async def set(self, key, value):
        self.values[key] = value
        self.writes += 1


@pytest.fixture
def config():
    return IndexerConfig(
        server_url="http://search.test:9200",
        primary_index="content-primary",
        secondary_index="content-secondary",
        posts_per_page=10,
    )


@pytest.fixture
def engine():
    mock = AsyncMock(spec=SearchEngine)
    mock.create_index.return_value = {"acknowledged": True}
    mock.delete_index.return_value = Outcome.OK
    mock.upsert_document.return_value = None
    mock.delete_document.return_value = Outcome.OK
    return mock


@pytest.fixture
def content():
    mock = AsyncMock(spec=ContentClient)
    mock.list_sites.return_value = []
    mock.list_post_types.return_value = ["post", "page", "revision"]
    mock.list_taxonomies.return_value = ["category"]
    mock.list_terms.return_value = []
    mock.list_content.return_value = []
    mock.count_content.return_value = 0

    async def registration(post_type, blog_id=None):
        return KindRegistration(post_type=post_type)

    mock.registration.side_effect = registration
    return mock


@pytest.fixture
def options():
    return MemoryOptionStore()


def make_post(post_id=1, **kwargs):
    values = {
        "id": post_id,
        "post_type": "post",
        "post_status": "publish",
        "post_title": f"Post {post_id}",
        "post_content": "<p>Hello <b>world</b></p>",
        "post_date": "2023-10-05 12:30:00",
        "link": f"https://example.test/?p={post_id}",
    }
    values.update(kwargs)
    return Post(**values)


def make_term(term_id=7, **kwargs):
    values = {
        "term_id": term_id,
        "taxonomy": "category",
        "name": "News",
        "slug": "news",
    }
    values.update(kwargs)
    return Term(**values)
