"""
Content Lifecycle Handling

Maps content-host notifications (post saved / status changed / deleted,
term created / edited / deleted) onto fan-out upserts and deletes against
the active generation.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import IndexerConfig
from ..content.api_client import ContentClient
from ..content.models import Post, Term
from .fanout import FanOut, FanOutReport

logger = logging.getLogger("sync.lifecycle")


class LifecycleHandler:
    def __init__(
        self,
        config: IndexerConfig,
        fanout: FanOut,
        content: ContentClient,
    ) -> None:
        self._config = config
        self._fanout = fanout
        self._content = content

    def is_indexable_status(self, status: Optional[str]) -> bool:
        return status in self._config.index_post_statuses

    def should_index_post(self, post: Post) -> bool:
        return self._fanout.builders.post_mappings.valid(post.post_type)

    def should_index_term(self, term: Term) -> bool:
        return self._fanout.builders.term_mappings.valid(term.taxonomy)

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def post_saved(self, post: Optional[Post], created: bool = False) -> FanOutReport:
        """
        Index a saved post if its status is publishable, otherwise remove it.
        """
        if post is None or not self.should_index_post(post):
            return FanOutReport(operation="none", skipped=True)

        if self.is_indexable_status(post.post_status):
            return await self._upsert(post, is_new=created)

        return await self._fanout.delete(post)

    async def post_status_changed(
        self,
        post: Optional[Post],
        old_status: str,
        new_status: str,
    ) -> FanOutReport:
        """
        React to a status transition. A post becoming publishable is seeded
        into both generations; a post leaving the publishable set is removed.
        """
        if post is None or old_status == new_status or not self.should_index_post(post):
            return FanOutReport(operation="none", skipped=True)

        if self.is_indexable_status(new_status):
            post = post.model_copy(update={"post_status": new_status})
            return await self._upsert(post, is_new=not self.is_indexable_status(old_status))

        if self.is_indexable_status(old_status):
            return await self._fanout.delete(post)

        return FanOutReport(operation="none", skipped=True)

    async def post_deleted(self, post: Optional[Post]) -> FanOutReport:
        if post is None:
            return FanOutReport(operation="none", skipped=True)
        return await self._fanout.delete(post)

    async def _upsert(self, post: Post, is_new: bool) -> FanOutReport:
        registration = await self._content.registration(post.post_type, post.blog_id)
        report = await self._fanout.upsert(post, is_new=is_new, registration=registration)
        if report.errors:
            logger.warning(
                "Post %s indexed with %d failed target(s)",
                report.doc_id,
                len(report.errors),
            )
        return report

    # ------------------------------------------------------------------
    # Terms
    # ------------------------------------------------------------------

    async def term_created(self, term: Term) -> FanOutReport:
        if not self.should_index_term(term):
            return FanOutReport(operation="none", skipped=True)
        return await self._fanout.upsert(term, is_new=True)

    async def term_edited(self, term: Term) -> FanOutReport:
        if not self.should_index_term(term):
            return FanOutReport(operation="none", skipped=True)
        return await self._fanout.upsert(term, is_new=False)

    async def term_deleted(self, term: Term) -> FanOutReport:
        if not self.should_index_term(term):
            return FanOutReport(operation="none", skipped=True)
        return await self._fanout.delete(term)
