"""
Field Definitions

A Schema maps field names to `FieldDefinition` records. Schemas are plain
data: they are built by the mapping builders, consumed by the document
builders (which fields to copy, how to transform them) and rendered into
search-engine mapping properties by `render_properties`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from .transformers import TRANSFORMERS


NGRAM_ANALYZER = "ngram_analyzer"
WHITESPACE_ANALYZER = "whitespace_analyzer"
SUGGEST_SUFFIX = "_suggest"


class SemanticType(str, Enum):
    STRING = "string"
    DATE = "date"
    BOOLEAN = "boolean"
    LONG = "long"
    GEO_POINT = "geo_point"
    NESTED = "nested"


class FieldDefinition(BaseModel):
    """
    How one field is stored and indexed.

    Invariants
    ----------
    - nested fields carry `properties` and never `indexed`
    - non-nested fields carry `indexed` and never `properties`
    - `suggest=True` implies a `<name>_suggest` n-gram companion
    """

    semantic_type: SemanticType
    indexed: Optional[bool] = True
    suggest: bool = False
    ngram: bool = False
    transformer: Optional[str] = None
    properties: Optional[Dict[str, "FieldDefinition"]] = None
    format: Optional[str] = None
    source: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_shape(self) -> "FieldDefinition":
        if self.semantic_type is SemanticType.NESTED:
            if self.indexed is not None:
                raise ValueError("nested fields must not carry 'indexed'")
            if self.properties is None:
                raise ValueError("nested fields require 'properties'")
            if self.suggest:
                raise ValueError("nested fields cannot have a suggest variant")
        elif self.properties is not None:
            raise ValueError("only nested fields may carry 'properties'")

        if self.transformer is not None and self.transformer not in TRANSFORMERS:
            raise ValueError(f"unknown transformer '{self.transformer}'")

        return self


Schema = Dict[str, FieldDefinition]


# ---------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------

def text_field(**kwargs: Any) -> FieldDefinition:
    """Analyzed free-text string."""
    return FieldDefinition(semantic_type=SemanticType.STRING, indexed=True, **kwargs)


def exact_field(**kwargs: Any) -> FieldDefinition:
    """Exact-match (not analyzed) string."""
    return FieldDefinition(semantic_type=SemanticType.STRING, indexed=False, **kwargs)


def ngram_field(**kwargs: Any) -> FieldDefinition:
    """String analyzed with the edge n-gram analyzer, for type-ahead."""
    return FieldDefinition(semantic_type=SemanticType.STRING, indexed=True, ngram=True, **kwargs)


def nested_field(properties: Schema, **kwargs: Any) -> FieldDefinition:
    return FieldDefinition(
        semantic_type=SemanticType.NESTED,
        indexed=None,
        properties=properties,
        **kwargs,
    )


# ---------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------

def _ngram_property() -> Dict[str, Any]:
    return {
        "type": "text",
        "analyzer": NGRAM_ANALYZER,
        "search_analyzer": WHITESPACE_ANALYZER,
    }


def render_field(definition: FieldDefinition) -> Dict[str, Any]:
    """Render one field definition as a search-engine mapping property."""
    kind = definition.semantic_type

    if kind is SemanticType.NESTED:
        return {
            "type": "nested",
            "properties": render_properties(definition.properties or {}),
        }

    if kind is SemanticType.STRING:
        if definition.ngram:
            return _ngram_property()
        return {"type": "text" if definition.indexed else "keyword"}

    # dates, numbers, booleans and geo points are never analyzed
    prop: Dict[str, Any] = {"type": kind.value}
    if definition.format:
        prop["format"] = definition.format
    return prop


def render_properties(schema: Schema) -> Dict[str, Any]:
    """
    Render a Schema as mapping properties, adding the `_suggest` companion
    for every field that requests one.
    """
    properties: Dict[str, Any] = {}

    for name, definition in schema.items():
        properties[name] = render_field(definition)
        if definition.suggest:
            properties[f"{name}{SUGGEST_SUFFIX}"] = _ngram_property()

    return properties
