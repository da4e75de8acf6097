"""
Indexing Progress State

Persisted, resumable position of the bulk indexer.

Internally progress is always a mapping of scope key -> `ScopeProgress`.
Single-site deployments use one implicit scope; their persisted shape stays
the flat record `{page, count, total, generation}`. Multi-site deployments
persist `{<blog_id>: {page, count, total, generation, blog_id}, ...}`.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Protocol, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .targets import Generation


SINGLE_SITE_KEY = "default"


class OptionStore(Protocol):
    """Process-wide key/value store (configuration and mutable state)."""

    async def get(self, key: str) -> Optional[Any]:
        ...

    async def set(self, key: str, value: Any) -> None:
        ...


class ScopeProgress(BaseModel):
    page: int = Field(default=1, ge=1)
    count: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    generation: Generation = Generation.PRIMARY
    blog_id: Optional[int] = None

    model_config = ConfigDict(extra="ignore")

    def is_complete(self, per_page: int) -> bool:
        """
        True once every item was counted, or once the pages walked already
        cover `total` (items that failed are not retried within a pass).
        """
        if self.count >= self.total:
            return True
        return (self.page - 1) * per_page >= self.total

    def restart(self, generation: Generation) -> "ScopeProgress":
        return self.model_copy(update={"page": 1, "count": 0, "generation": generation})

    def to_record(self, with_blog_id: bool) -> Dict[str, Any]:
        record = {
            "page": self.page,
            "count": self.count,
            "total": self.total,
            "generation": self.generation.value,
        }
        if with_blog_id:
            record["blog_id"] = self.blog_id
        return record


class ProgressState(BaseModel):
    scopes: Dict[str, ScopeProgress] = Field(default_factory=dict)

    def ordered(self) -> Iterator[Tuple[str, ScopeProgress]]:
        """Scopes in a stable order: by blog id, then key."""
        def sort_key(entry: Tuple[str, ScopeProgress]) -> Tuple[int, str]:
            key, scope = entry
            return (scope.blog_id if scope.blog_id is not None else 0, key)

        return iter(sorted(self.scopes.items(), key=sort_key))

    # ------------------------------------------------------------------
    # Persisted Shape
    # ------------------------------------------------------------------

    def to_option(self, multisite: bool) -> Dict[str, Any]:
        if not multisite:
            scope = self.scopes.get(SINGLE_SITE_KEY, ScopeProgress())
            return scope.to_record(with_blog_id=False)

        return {key: scope.to_record(with_blog_id=True) for key, scope in self.ordered()}

    @classmethod
    def from_option(cls, raw: Any, multisite: bool) -> Optional["ProgressState"]:
        if not raw or not isinstance(raw, dict):
            return None

        if not multisite:
            return cls(scopes={SINGLE_SITE_KEY: ScopeProgress.model_validate(raw)})

        scopes = {
            str(key): ScopeProgress.model_validate(value)
            for key, value in raw.items()
            if isinstance(value, dict)
        }
        return cls(scopes=scopes) if scopes else None


class ProgressStore:
    """
    Reads and writes `ProgressState` through the option store, under the
    configured option key. No caching: every call hits the store.
    """

    def __init__(self, options: OptionStore, key: str, multisite: bool) -> None:
        self._options = options
        self._key = key
        self._multisite = multisite

    async def load(self) -> Optional[ProgressState]:
        raw = await self._options.get(self._key)
        return ProgressState.from_option(raw, self._multisite)

    async def save(self, state: ProgressState) -> Dict[str, Any]:
        snapshot = state.to_option(self._multisite)
        await self._options.set(self._key, snapshot)
        return snapshot

    def snapshot(self, state: ProgressState) -> Dict[str, Any]:
        return state.to_option(self._multisite)
