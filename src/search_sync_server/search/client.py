"""
Search Engine Client

Thin async wrapper over the Elasticsearch client, narrowed to the four
operations the indexing engine needs:

- create_index(name, settings, mappings)
- delete_index(name)            -> Outcome.OK | Outcome.MISSING
- upsert_document(index, id, body)
- delete_document(index, id)    -> Outcome.OK | Outcome.MISSING

"Missing" conditions are returned, not raised. Every other failure is
wrapped in `SearchEngineError`. There is no retry here; each call is a
single round trip.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from elasticsearch import ApiError, AsyncElasticsearch, NotFoundError, TransportError

from ..config import IndexerConfig
from ..indexing.errors import Outcome

logger = logging.getLogger("sync.search")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class SearchEngineError(RuntimeError):
    """Raised when a search-engine call fails for a reason other than 'missing'."""

    def __init__(self, message: str, status: Optional[int] = None, info: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.info = info

    def as_dict(self) -> Dict[str, Any]:
        return {
            "error": str(self),
            "status": self.status,
            "info": self.info,
        }


def _wrap(exc: Exception, action: str) -> SearchEngineError:
    if isinstance(exc, ApiError):
        return SearchEngineError(
            f"{action} failed: {exc.message}",
            status=exc.meta.status,
            info=exc.info,
        )
    return SearchEngineError(f"{action} failed: {type(exc).__name__}")


# ---------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------

class SearchEngine:
    """
    Search-engine collaborator used by the index administrator and fan-out.
    """

    def __init__(
        self,
        config: IndexerConfig,
        client: Optional[AsyncElasticsearch] = None,
    ) -> None:
        """
        Parameters
        ----------
        config : IndexerConfig
            Supplies the server URL and read/write timeouts.

        client : Optional[AsyncElasticsearch]
            Pre-built client (tests, shared connection pools).
        """
        self._client = client or AsyncElasticsearch(config.server_url)
        self._read_timeout = config.read_timeout
        self._write_timeout = config.write_timeout

    # ------------------------------------------------------------------
    # Index Lifecycle
    # ------------------------------------------------------------------

    async def create_index(
        self,
        name: str,
        settings: Dict[str, Any],
        mappings: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"index": name, "settings": settings}
        if mappings:
            kwargs["mappings"] = mappings

        try:
            resp = await self._client.options(
                request_timeout=self._read_timeout
            ).indices.create(**kwargs)
        except (ApiError, TransportError) as exc:
            raise _wrap(exc, f"create index '{name}'") from exc

        logger.info("Created index '%s'", name)
        return dict(resp.body)

    async def delete_index(self, name: str) -> Outcome:
        try:
            await self._client.options(
                request_timeout=self._read_timeout
            ).indices.delete(index=name)
        except NotFoundError:
            logger.debug("Index '%s' does not exist", name)
            return Outcome.MISSING
        except (ApiError, TransportError) as exc:
            raise _wrap(exc, f"delete index '{name}'") from exc

        logger.info("Deleted index '%s'", name)
        return Outcome.OK

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def upsert_document(
        self,
        index: str,
        doc_id: str,
        body: Dict[str, Any],
    ) -> None:
        try:
            await self._client.options(
                request_timeout=self._write_timeout
            ).index(index=index, id=doc_id, document=body)
        except (ApiError, TransportError) as exc:
            raise _wrap(exc, f"upsert '{doc_id}' into '{index}'") from exc

    async def delete_document(self, index: str, doc_id: str) -> Outcome:
        try:
            await self._client.options(
                request_timeout=self._write_timeout
            ).delete(index=index, id=doc_id)
        except NotFoundError:
            return Outcome.MISSING
        except (ApiError, TransportError) as exc:
            raise _wrap(exc, f"delete '{doc_id}' from '{index}'") from exc

        return Outcome.OK

    async def close(self) -> None:
        await self._client.close()
