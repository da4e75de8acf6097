from functools import lru_cache
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import IndexerConfig, settings
from ..content.api_client import ContentClient
from ..db import SqlOptionStore, get_async_session
from ..indexing.fanout import FanOut
from ..indexing.indexer import Indexer
from ..indexing.lifecycle import LifecycleHandler
from ..search.client import SearchEngine


def get_indexer_config() -> IndexerConfig:
    return settings.indexer_config()


# One search-engine client per process; closed on application shutdown.
_global_engine: Optional[SearchEngine] = None


def get_search_engine(
    config: IndexerConfig = Depends(get_indexer_config),
) -> SearchEngine:
    global _global_engine
    if _global_engine is None:
        _global_engine = SearchEngine(config)
    return _global_engine


async def close_search_engine() -> None:
    global _global_engine
    if _global_engine is not None:
        await _global_engine.close()
        _global_engine = None


@lru_cache
def get_content_client() -> ContentClient:
    return ContentClient()


def get_option_store(
    session: AsyncSession = Depends(get_async_session),
) -> SqlOptionStore:
    return SqlOptionStore(session)


def get_indexer(
    config: IndexerConfig = Depends(get_indexer_config),
    engine: SearchEngine = Depends(get_search_engine),
    content: ContentClient = Depends(get_content_client),
    options: SqlOptionStore = Depends(get_option_store),
) -> Indexer:
    return Indexer(config, engine, content, options)


def get_lifecycle(
    config: IndexerConfig = Depends(get_indexer_config),
    engine: SearchEngine = Depends(get_search_engine),
    content: ContentClient = Depends(get_content_client),
) -> LifecycleHandler:
    return LifecycleHandler(config, FanOut(config, engine), content)
