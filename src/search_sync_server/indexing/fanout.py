"""
Write/Delete Fan-out

For a single content item, compute the (generation x visibility) index
targets to write to or delete from, and apply them best-effort:

- a target that does not resolve (unconfigured generation/visibility) is
  skipped silently
- a failure on one target never prevents attempts on the others; failures
  are collected in the returned `FanOutReport`
- deleting a document that is already absent counts as success
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config import IndexerConfig
from ..content.models import KindRegistration, Post, Term
from ..search.client import SearchEngine, SearchEngineError
from .documents import Document, DocumentBuilderFactory
from .errors import Outcome
from .targets import Generation, IndexTarget, TypeFactory, Visibility

logger = logging.getLogger("sync.fanout")


# ---------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------

@dataclass
class TargetError:
    index: str
    operation: str
    error: str

    def as_dict(self) -> Dict[str, str]:
        return {"index": self.index, "operation": self.operation, "error": self.error}


@dataclass
class FanOutReport:
    """
    Aggregate result of one fan-out.

    `skipped` is True when there was nothing to do (no id or no document),
    which is not a failure.
    """

    operation: str
    doc_id: Optional[str] = None
    kind: Optional[str] = None
    skipped: bool = False
    attempted: List[str] = field(default_factory=list)
    cleaned: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    errors: List[TargetError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def as_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "doc_id": self.doc_id,
            "kind": self.kind,
            "skipped": self.skipped,
            "attempted": list(self.attempted),
            "cleaned": list(self.cleaned),
            "missing": list(self.missing),
            "errors": [e.as_dict() for e in self.errors],
        }


# ---------------------------------------------------------------------
# Fan-out
# ---------------------------------------------------------------------

class FanOut:
    def __init__(
        self,
        config: IndexerConfig,
        engine: SearchEngine,
        builders: Optional[DocumentBuilderFactory] = None,
        types: Optional[TypeFactory] = None,
    ) -> None:
        self._config = config
        self._engine = engine
        self.builders = builders or DocumentBuilderFactory(config)
        self.types = types or TypeFactory(config)

    def _generation(self, generation: Optional[Generation]) -> Generation:
        if generation is not None:
            return generation
        return Generation(self._config.active_generation)

    async def upsert(
        self,
        item: Union[Post, Term, None],
        is_new: bool = False,
        generation: Optional[Generation] = None,
        registration: Optional[KindRegistration] = None,
    ) -> FanOutReport:
        """
        Write `item` to its index targets.

        Public items go to the public index of the current generation and
        every item goes to the private index of the current generation. New
        items are also written to the other generation, so they appear both
        in the index being rebuilt and in the one serving traffic.

        Restricted items are removed from the public index of both
        generations (listed in `cleaned`), since an earlier public version
        may still be there.

        Raises
        ------
        UnsupportedContentKind
            If no builder matches the item.
        """
        report = FanOutReport(operation="upsert")
        if item is None:
            report.skipped = True
            return report

        builder = self.builders.create(item, registration)

        is_private = builder.is_private(item)
        public_doc = builder.build(item, include_private=False)
        if builder.has_private_fields():
            private_doc = builder.build(item, include_private=True)
        else:
            private_doc = public_doc

        report.doc_id = builder.get_id(item)
        report.kind = builder.get_kind(item)

        if not report.doc_id or not public_doc:
            report.skipped = True
            return report

        current = self._generation(generation)
        generations = [current, current.other] if is_new else [current]

        writes: List[Tuple[Visibility, Generation, Document]] = []
        if not is_private:
            writes.extend((Visibility.PUBLIC, g, public_doc) for g in generations)
        writes.extend((Visibility.PRIVATE, g, private_doc) for g in generations)

        jobs = []
        for visibility, gen, document in writes:
            target = self.types.resolve(report.kind, visibility, gen)
            if target is None:
                continue
            jobs.append(self._write(target, report.doc_id, document))

        # a restricted item may still sit in a public index from before
        cleanup = []
        if is_private:
            for gen in Generation:
                target = self.types.resolve(report.kind, Visibility.PUBLIC, gen)
                if target is not None:
                    cleanup.append(self._remove(target, report.doc_id))

        await self._collect(report, jobs)
        await self._collect(report, cleanup, into=report.cleaned)
        return report

    async def delete(
        self,
        item: Union[Post, Term, None],
        registration: Optional[KindRegistration] = None,
    ) -> FanOutReport:
        """
        Delete `item` from every target it may have been written to: all four
        (visibility x generation) combinations for public items, the two
        private ones for private items.
        """
        report = FanOutReport(operation="delete")
        if item is None:
            report.skipped = True
            return report

        builder = self.builders.create(item, registration)
        report.doc_id = builder.get_id(item)
        report.kind = builder.get_kind(item)

        if not report.doc_id:
            report.skipped = True
            return report

        visibilities = [Visibility.PRIVATE]
        if not builder.is_private(item):
            visibilities.insert(0, Visibility.PUBLIC)

        jobs = []
        for visibility in visibilities:
            for gen in Generation:
                target = self.types.resolve(report.kind, visibility, gen)
                if target is None:
                    continue
                jobs.append(self._remove(target, report.doc_id))

        await self._collect(report, jobs)
        return report

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    async def _collect(
        self,
        report: FanOutReport,
        jobs: list,
        into: Optional[List[str]] = None,
    ) -> None:
        touched = report.attempted if into is None else into
        for target, outcome, error in await asyncio.gather(*jobs):
            touched.append(target.index)
            if outcome is Outcome.MISSING:
                report.missing.append(target.index)
            elif error is not None:
                report.errors.append(error)

    async def _write(
        self,
        target: IndexTarget,
        doc_id: str,
        document: Document,
    ) -> Tuple[IndexTarget, Outcome, Optional[TargetError]]:
        try:
            await self._engine.upsert_document(target.index, doc_id, document)
        except SearchEngineError as exc:
            logger.warning("Upsert of '%s' into '%s' failed: %s", doc_id, target.index, exc)
            return target, Outcome.ERROR, TargetError(target.index, "upsert", str(exc))
        return target, Outcome.OK, None

    async def _remove(
        self,
        target: IndexTarget,
        doc_id: str,
    ) -> Tuple[IndexTarget, Outcome, Optional[TargetError]]:
        try:
            outcome = await self._engine.delete_document(target.index, doc_id)
        except SearchEngineError as exc:
            logger.warning("Delete of '%s' from '%s' failed: %s", doc_id, target.index, exc)
            return target, Outcome.ERROR, TargetError(target.index, "delete", str(exc))

        if outcome is Outcome.MISSING:
            logger.debug("Document '%s' already absent from '%s'", doc_id, target.index)
        return target, outcome, None
