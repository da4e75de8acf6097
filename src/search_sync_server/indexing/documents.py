"""
Document Builders

Convert a content item into a search-engine document, following the schema
its mapping builder derives.

- `PostDocumentBuilder` / `TermDocumentBuilder` implement the per-kind
  contract: `build`, `get_id`, `get_kind`, `is_private`, `has_private_fields`.
- `DocumentBuilderFactory` selects the builder for an item's runtime variant.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union

from ..config import IndexerConfig
from ..content.models import KindRegistration, Post, Term
from .errors import UnsupportedContentKind
from .fields import SUGGEST_SUFFIX, FieldDefinition, Schema, SemanticType
from .mapping import PostMappingBuilder, TermMappingBuilder
from .transformers import apply_transformer

logger = logging.getLogger("sync.documents")

Document = Dict[str, Any]


# ---------------------------------------------------------------------
# Value Extraction
# ---------------------------------------------------------------------

def _resolve(item: Any, path: str) -> Any:
    """
    Resolve a dotted source path against an item.

    Path segments walk attributes, then mapping keys; a segment applied to a
    list is applied to every element (so `terms.genre.slug` yields a list of
    slugs).
    """
    value: Any = item
    for segment in path.split("."):
        if value is None:
            return None
        if isinstance(value, list):
            value = [_resolve(v, segment) for v in value]
        elif isinstance(value, dict):
            value = value.get(segment)
        else:
            value = getattr(value, segment, None)
    return value


def _transform(definition: FieldDefinition, value: Any) -> Any:
    if value is None:
        return None

    if definition.semantic_type is SemanticType.NESTED:
        return _nested_rows(definition.properties or {}, value)

    # multi-valued fields (relationships, taxonomy slugs) keep their shape
    if isinstance(value, list) and definition.transformer not in (None, "boolean"):
        return [apply_transformer(definition.transformer, v) for v in value]

    return apply_transformer(definition.transformer, value)


def _nested_rows(properties: Schema, rows: Any) -> List[Dict[str, Any]]:
    if not isinstance(rows, list):
        return []

    result = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        built: Dict[str, Any] = {}
        for name, definition in properties.items():
            built[name] = _transform(definition, row.get(definition.source or name))
        result.append(built)
    return result


def _build_from_schema(
    item: Any,
    schema: Schema,
    exclude: Iterable[str] = (),
) -> Document:
    excluded = set(exclude)
    document: Document = {}

    for name, definition in schema.items():
        if name in excluded:
            continue

        value = _transform(definition, _resolve(item, definition.source or name))
        document[name] = value

        if definition.suggest:
            document[f"{name}{SUGGEST_SUFFIX}"] = value

    return document


# ---------------------------------------------------------------------
# Builder Contract
# ---------------------------------------------------------------------

class DocumentBuilder(Protocol):
    def build(self, item: Any, include_private: bool = False) -> Optional[Document]:
        ...

    def get_id(self, item: Any) -> Optional[str]:
        ...

    def get_kind(self, item: Any) -> Optional[str]:
        ...

    def is_private(self, item: Any) -> bool:
        ...

    def has_private_fields(self) -> bool:
        ...


class PostDocumentBuilder:
    """
    Document builder for post-like content.

    The builder is bound to the schema of one post type. Fields named in the
    configured private-field list are only written to private documents.
    """

    def __init__(
        self,
        config: IndexerConfig,
        schema: Optional[Schema],
    ) -> None:
        self._config = config
        self._schema = schema

    @property
    def schema(self) -> Optional[Schema]:
        return self._schema

    def is_private(self, post: Optional[Post]) -> bool:
        if post is None:
            return False
        return (
            post.post_status == "private"
            or post.post_type in self._config.private_post_types
        )

    def has_private_fields(self) -> bool:
        if not self._schema:
            return False
        return any(name in self._schema for name in self._config.private_fields)

    def build(self, post: Optional[Post], include_private: bool = False) -> Optional[Document]:
        """
        Build the document for `post`.

        Returns None when the post is absent or its kind has no schema
        (excluded post types); callers treat that as nothing to index.
        """
        if post is None or not self._schema:
            return None

        exclude: Iterable[str] = ()
        if not include_private and self.has_private_fields():
            exclude = self._config.private_fields

        return _build_from_schema(post, self._schema, exclude)

    def get_id(self, post: Optional[Post]) -> Optional[str]:
        if post is None or post.id in (None, ""):
            return None
        return str(post.id)

    def get_kind(self, post: Optional[Post]) -> Optional[str]:
        return post.post_type if post is not None else None


class TermDocumentBuilder:
    """
    Document builder for taxonomy terms. Terms are always public.
    """

    def __init__(self, schema: Optional[Schema]) -> None:
        self._schema = schema

    def is_private(self, term: Optional[Term]) -> bool:
        return False

    def has_private_fields(self) -> bool:
        return False

    def build(self, term: Optional[Term], include_private: bool = False) -> Optional[Document]:
        if term is None or not self._schema:
            return None
        return _build_from_schema(term, self._schema)

    def get_id(self, term: Optional[Term]) -> Optional[str]:
        return str(term.term_id) if term is not None else None

    def get_kind(self, term: Optional[Term]) -> Optional[str]:
        return term.taxonomy if term is not None else None


# ---------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------

class DocumentBuilderFactory:
    """
    Select and construct the document builder for a content item.
    """

    def __init__(
        self,
        config: IndexerConfig,
        post_mappings: Optional[PostMappingBuilder] = None,
        term_mappings: Optional[TermMappingBuilder] = None,
    ) -> None:
        self._config = config
        self.post_mappings = post_mappings or PostMappingBuilder()
        self.term_mappings = term_mappings or TermMappingBuilder()

    def create(
        self,
        item: Union[Post, Term],
        registration: Optional[KindRegistration] = None,
    ) -> DocumentBuilder:
        """
        Parameters
        ----------
        item : Union[Post, Term]
            Content item to build for.

        registration : Optional[KindRegistration]
            Current custom-field/taxonomy registration for a post's kind.
            Ignored for terms.

        Raises
        ------
        UnsupportedContentKind
            If the item is not a known content variant.
        """
        if isinstance(item, Post):
            schema = self.post_mappings.build(item.post_type, registration)
            return PostDocumentBuilder(self._config, schema)

        if isinstance(item, Term):
            return TermDocumentBuilder(self.term_mappings.build(item.taxonomy))

        raise UnsupportedContentKind(item)
