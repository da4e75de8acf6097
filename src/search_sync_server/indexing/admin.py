"""
Index Administrator

Index lifecycle against the search engine: (re)create an index with the
fixed analysis configuration, or clear (delete) it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..config import IndexerConfig
from ..search.client import SearchEngine, SearchEngineError
from .errors import IndexCreationFailed, Outcome
from .fields import NGRAM_ANALYZER, WHITESPACE_ANALYZER

logger = logging.getLogger("sync.admin")


ANALYSIS: Dict[str, Any] = {
    "filter": {
        "ngram_filter": {
            "type": "edge_ngram",
            "min_gram": 1,
            "max_gram": 20,
            "token_chars": [
                "letter",
                "digit",
                "punctuation",
                "symbol",
            ],
        },
    },
    "analyzer": {
        "analyzer_startswith": {
            "tokenizer": "keyword",
            "filter": ["lowercase"],
        },
        NGRAM_ANALYZER: {
            "type": "custom",
            "tokenizer": "whitespace",
            "filter": [
                "lowercase",
                "asciifolding",
                "ngram_filter",
            ],
        },
        WHITESPACE_ANALYZER: {
            "type": "custom",
            "tokenizer": "whitespace",
            "filter": [
                "lowercase",
                "asciifolding",
            ],
        },
    },
}


class IndexAdministrator:
    def __init__(self, config: IndexerConfig, engine: SearchEngine) -> None:
        self._config = config
        self._engine = engine

    def index_settings(self) -> Dict[str, Any]:
        return {
            "number_of_shards": self._config.shards,
            "number_of_replicas": self._config.replicas,
            "analysis": ANALYSIS,
        }

    async def create(
        self,
        name: str,
        mappings: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Delete `name` if it exists, then create it with the analysis settings.

        Parameters
        ----------
        name : str
            Index name.

        mappings : Optional[Dict[str, Any]]
            Mapping properties (as rendered by `render_properties`).

        Returns
        -------
        Dict[str, Any]
            The search engine's creation response.

        Raises
        ------
        IndexCreationFailed
            If the pre-delete fails for any reason other than a missing index,
            or the creation itself fails.
        """
        try:
            await self._engine.delete_index(name)
        except SearchEngineError as exc:
            logger.error("Could not remove index '%s' before re-creating it: %s", name, exc)
            raise IndexCreationFailed(name, [exc.as_dict()]) from exc

        body = {"properties": mappings} if mappings else None

        try:
            return await self._engine.create_index(name, self.index_settings(), body)
        except SearchEngineError as exc:
            logger.error("Failed to create index '%s': %s", name, exc)
            raise IndexCreationFailed(name, [exc.as_dict()]) from exc

    async def clear(self, name: str) -> Outcome:
        """
        Delete `name`. A missing index is expected and reported as
        Outcome.MISSING; any other failure propagates as SearchEngineError.
        """
        return await self._engine.delete_index(name)
