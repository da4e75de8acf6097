"""
Indexing Errors & Outcomes

Expected "missing" conditions (index or document already absent) are not
exceptions here: the search-engine wrapper reports them as an `Outcome`.
Exceptions are reserved for conditions that must reach the invoking layer.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional


class Outcome(str, Enum):
    """Result of a search-engine operation that may legitimately find nothing."""

    OK = "ok"
    MISSING = "missing"
    ERROR = "error"


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class IndexingError(RuntimeError):
    """Base error for the indexing engine."""


class UnsupportedContentKind(IndexingError):
    """Raised when no document or mapping builder matches a content item."""

    def __init__(self, kind: Any) -> None:
        name = kind if isinstance(kind, str) else type(kind).__name__
        super().__init__(f"Unsupported content kind: {name}")
        self.kind = name


class IndexCreationFailed(IndexingError):
    """Raised when an index could not be (re)created."""

    def __init__(self, index: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(f"Failed to create index '{index}'")
        self.index = index
        self.errors = errors or []
