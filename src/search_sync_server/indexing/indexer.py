"""
Indexer

Orchestrates bulk indexing and index administration.

Bulk indexing is a cooperative stepping function: every `index_posts` call
does exactly one page of work for one scope (the whole deployment, or one
site in multi-site mode), persists the new progress and returns the
snapshot. The caller decides whether to schedule another step. Re-invoking
after a crash resumes from the last persisted page.

Per scope the state runs:

    no progress -> indexing primary -> indexing secondary -> complete

Callers must serialize steps; there is no lock around the progress state.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import IndexerConfig
from ..content.api_client import ContentClient
from ..content.models import KindRegistration, Post, Term
from ..search.client import SearchEngine, SearchEngineError
from .admin import IndexAdministrator
from .errors import IndexCreationFailed, Outcome, UnsupportedContentKind
from .fanout import FanOut
from .fields import Schema, render_properties
from .mapping import PostMappingBuilder, TermMappingBuilder
from .progress import (
    SINGLE_SITE_KEY,
    OptionStore,
    ProgressState,
    ProgressStore,
    ScopeProgress,
)
from .targets import Generation, IndexTarget, TypeFactory, Visibility

logger = logging.getLogger("sync.indexer")


class Indexer:
    def __init__(
        self,
        config: IndexerConfig,
        engine: SearchEngine,
        content: ContentClient,
        options: OptionStore,
        fanout: Optional[FanOut] = None,
        admin: Optional[IndexAdministrator] = None,
    ) -> None:
        """
        Parameters
        ----------
        config : IndexerConfig
            Immutable configuration snapshot.

        engine : SearchEngine
            Search-engine collaborator.

        content : ContentClient
            Content-listing and custom-field-schema collaborator.

        options : OptionStore
            Progress persistence collaborator.
        """
        self._config = config
        self._content = content
        self.fanout = fanout or FanOut(config, engine)
        self.admin = admin or IndexAdministrator(config, engine)
        self.types: TypeFactory = self.fanout.types
        self.post_mappings: PostMappingBuilder = self.fanout.builders.post_mappings
        self.term_mappings: TermMappingBuilder = self.fanout.builders.term_mappings
        self.progress = ProgressStore(
            options,
            key=config.index_status_option,
            multisite=config.multisite,
        )

    # ------------------------------------------------------------------
    # Index Lifecycle
    # ------------------------------------------------------------------

    async def create(self, name: str, mappings: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self.admin.create(name, mappings)

    async def clear(self, name: str) -> Outcome:
        return await self.admin.clear(name)

    async def create_mappings(self) -> Dict[str, Any]:
        """
        (Re)create every target index with its content-kind schema.

        Failures are collected per index; one failing index does not stop
        the others.
        """
        created: List[str] = []
        errors: List[Dict[str, Any]] = []

        for schema, targets in await self._schema_targets():
            properties = render_properties(schema)
            for target in targets:
                try:
                    await self.admin.create(target.index, properties)
                except IndexCreationFailed as exc:
                    errors.append({"index": exc.index, "errors": exc.errors})
                else:
                    created.append(target.index)

        return {"created": created, "errors": errors}

    async def clear_index(self) -> Dict[str, Any]:
        """Delete every target index `create_mappings` would create."""
        cleared: List[str] = []
        missing: List[str] = []
        errors: List[Dict[str, Any]] = []

        for _, targets in await self._schema_targets():
            for target in targets:
                try:
                    outcome = await self.admin.clear(target.index)
                except SearchEngineError as exc:
                    errors.append({"index": target.index, "errors": [exc.as_dict()]})
                    continue
                (missing if outcome is Outcome.MISSING else cleared).append(target.index)

        return {"cleared": cleared, "missing": missing, "errors": errors}

    async def _schema_targets(self) -> List[Tuple[Schema, List[IndexTarget]]]:
        result: List[Tuple[Schema, List[IndexTarget]]] = []

        post_types = self.post_mappings.valid_post_types(await self._content.list_post_types())
        for post_type in post_types:
            registration = await self._content.registration(post_type)
            schema = self.post_mappings.build(post_type, registration)
            if schema:
                result.append((schema, self._all_targets(post_type)))

        for taxonomy in await self._content.list_taxonomies():
            schema = self.term_mappings.build(taxonomy)
            if schema:
                result.append((schema, self._all_targets(taxonomy)))

        return result

    def _all_targets(self, kind: str) -> List[IndexTarget]:
        targets = []
        for generation in Generation:
            for visibility in Visibility:
                target = self.types.resolve(kind, visibility, generation)
                if target is not None:
                    targets.append(target)
        return targets

    # ------------------------------------------------------------------
    # Bulk Indexing
    # ------------------------------------------------------------------

    async def status(self) -> Optional[Dict[str, Any]]:
        state = await self.progress.load()
        return self.progress.snapshot(state) if state is not None else None

    async def is_finished(self) -> bool:
        """True once every scope is complete on the secondary generation."""
        state = await self.progress.load()
        return state is not None and self._select_scope(state) is None

    async def index_posts(self, fresh: bool = False) -> Dict[str, Any]:
        """
        Perform one bulk-indexing step.

        Parameters
        ----------
        fresh : bool
            Discard any persisted progress and start again from page 1 of
            the primary generation.

        Returns
        -------
        Dict[str, Any]
            The full progress snapshot after this step.
        """
        state = None if fresh else await self.progress.load()
        if state is None:
            state = await self._initial_state()
            await self.progress.save(state)

        selected = self._select_scope(state)
        if selected is None:
            logger.info("Bulk indexing complete; nothing to do")
            return self.progress.snapshot(state)

        key, scope, rolled_over = selected
        if rolled_over:
            state.scopes[key] = scope
            await self.progress.save(state)

        logger.info(
            "Indexing %s generation for scope '%s', page %d (%d/%d)",
            scope.generation.value,
            key,
            scope.page,
            scope.count,
            scope.total,
        )

        post_types = await self._valid_post_types(scope.blog_id)
        posts = await self._content.list_content(
            scope.blog_id,
            scope.page,
            self._config.posts_per_page,
            post_types,
            self._config.index_post_statuses,
        )

        count = await self.add_or_update_documents(posts, scope.generation, scope.blog_id)

        state.scopes[key] = scope.model_copy(update={
            "page": scope.page + 1,
            "count": scope.count + count,
        })
        return await self.progress.save(state)

    async def _valid_post_types(self, blog_id: Optional[int]) -> List[str]:
        return self.post_mappings.valid_post_types(
            await self._content.list_post_types(blog_id)
        )

    async def _initial_state(self) -> ProgressState:
        if self._config.multisite:
            sites: Sequence[Optional[int]] = [s.blog_id for s in await self._content.list_sites()]
        else:
            sites = [None]

        scopes: Dict[str, ScopeProgress] = {}
        for blog_id in sites:
            total = await self._content.count_content(
                blog_id,
                await self._valid_post_types(blog_id),
                self._config.index_post_statuses,
            )
            key = str(blog_id) if blog_id is not None else SINGLE_SITE_KEY
            scopes[key] = ScopeProgress(
                page=1,
                count=0,
                total=total,
                generation=Generation.PRIMARY,
                blog_id=blog_id,
            )

        return ProgressState(scopes=scopes)

    def _select_scope(
        self,
        state: ProgressState,
    ) -> Optional[Tuple[str, ScopeProgress, bool]]:
        """
        The first incomplete scope; otherwise the first scope finished on
        the primary generation, restarted on the secondary; otherwise None.
        """
        per_page = self._config.posts_per_page

        for key, scope in state.ordered():
            if not scope.is_complete(per_page):
                return key, scope, False

        for key, scope in state.ordered():
            if scope.generation is Generation.PRIMARY:
                return key, scope.restart(Generation.SECONDARY), True

        return None

    async def add_or_update_documents(
        self,
        items: Iterable[Post | Term],
        generation: Optional[Generation] = None,
        blog_id: Optional[int] = None,
    ) -> int:
        """
        Fan out every item as an update. Returns the number of items that
        were written to all of their targets without error.
        """
        registrations: Dict[str, KindRegistration] = {}
        count = 0

        for item in items:
            registration = None
            if isinstance(item, Post):
                if item.post_type not in registrations:
                    registrations[item.post_type] = await self._content.registration(
                        item.post_type, blog_id
                    )
                registration = registrations[item.post_type]

            try:
                report = await self.fanout.upsert(
                    item,
                    is_new=False,
                    generation=generation,
                    registration=registration,
                )
            except UnsupportedContentKind as exc:
                logger.warning("Skipping item: %s", exc)
                continue

            # an item counts once it reached at least one configured target
            if report.ok and not report.skipped and report.attempted:
                count += 1

        return count

    async def index_taxonomies(self, generation: Optional[Generation] = None) -> int:
        """
        Index every term of every valid taxonomy. Not resumable.

        Runs for `generation` only, or for each configured generation in
        turn (primary, then secondary). Returns the number of terms written.
        """
        generations = [generation] if generation is not None else self.types.configured_generations()

        if self._config.multisite:
            sites: Sequence[Optional[int]] = [s.blog_id for s in await self._content.list_sites()]
        else:
            sites = [None]

        count = 0
        for gen in generations:
            for blog_id in sites:
                taxonomies = [
                    t for t in await self._content.list_taxonomies(blog_id=blog_id)
                    if self.term_mappings.valid(t)
                ]
                terms = await self._content.list_terms(taxonomies, blog_id)
                count += await self.add_or_update_documents(terms, gen, blog_id)
                logger.info(
                    "Indexed %d terms for site %s into %s generation",
                    len(terms),
                    blog_id if blog_id is not None else SINGLE_SITE_KEY,
                    gen.value,
                )

        return count
