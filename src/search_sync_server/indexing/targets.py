"""
Index Targets

An index target is a resolved (content kind, visibility, generation) triple
mapped to a concrete search-engine index name. Targets are recomputed for
every operation and never persisted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import IndexerConfig


class Generation(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"

    @property
    def other(self) -> "Generation":
        return Generation.SECONDARY if self is Generation.PRIMARY else Generation.PRIMARY


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


PRIVATE_SUFFIX = "private"

_INVALID_NAME_CHARS = re.compile(r"[^a-z0-9_]+")


def type_name(kind: str) -> str:
    """Derive an index-safe type name from a content-kind identifier."""
    return _INVALID_NAME_CHARS.sub("_", kind.lower()).strip("_")


@dataclass(frozen=True)
class IndexTarget:
    kind: str
    visibility: Visibility
    generation: Generation
    index: str

    @property
    def is_private(self) -> bool:
        return self.visibility is Visibility.PRIVATE


class TypeFactory:
    """
    Resolve index targets from the configured base index names.

    Index name = `<base index for generation>-<type name>[-private]`.
    """

    def __init__(self, config: IndexerConfig) -> None:
        self._config = config

    def base_index(self, generation: Generation) -> Optional[str]:
        if generation is Generation.PRIMARY:
            return self._config.primary_index
        return self._config.secondary_index

    def configured_generations(self) -> list[Generation]:
        return [g for g in Generation if self.base_index(g)]

    def create(
        self,
        kind: Optional[str],
        is_private: bool,
        is_primary: bool,
    ) -> Optional[IndexTarget]:
        """
        Returns
        -------
        Optional[IndexTarget]
            None when the generation has no base index configured, private
            indexes are disabled, or the kind is empty. Callers skip None
            targets; it is not a failure.
        """
        if not kind:
            return None

        generation = Generation.PRIMARY if is_primary else Generation.SECONDARY
        base = self.base_index(generation)
        if not base:
            return None

        if is_private and not self._config.private_indexes:
            return None

        name = f"{base}-{type_name(kind)}"
        if is_private:
            name = f"{name}-{PRIVATE_SUFFIX}"

        return IndexTarget(
            kind=kind,
            visibility=Visibility.PRIVATE if is_private else Visibility.PUBLIC,
            generation=generation,
            index=name.lower(),
        )

    def resolve(
        self,
        kind: Optional[str],
        visibility: Visibility,
        generation: Generation,
    ) -> Optional[IndexTarget]:
        return self.create(
            kind,
            is_private=visibility is Visibility.PRIVATE,
            is_primary=generation is Generation.PRIMARY,
        )
