"""
Mapping Builders

Derive a Schema (field name -> FieldDefinition) for a content kind.

- `PostMappingBuilder`: core post fields, every registered custom field and
  every associated taxonomy.
- `TermMappingBuilder`: the fixed, much smaller taxonomy-term schema.

Both implement the `MappingBuilder` capability: `valid(kind)` and
`build(kind, ...)`, returning None for excluded kinds. Schemas are built
fresh on every call; nothing is cached.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Optional, Protocol

from ..content.models import CustomField, KindRegistration
from .fields import (
    FieldDefinition,
    Schema,
    SemanticType,
    exact_field,
    nested_field,
    ngram_field,
    text_field,
)


# ---------------------------------------------------------------------
# Exclusion Lists
# ---------------------------------------------------------------------

EXCLUDE_POST_TYPES = frozenset({
    "revision",
    "attachment",
    "json_consumer",
    "nav_menu",
    "nav_menu_item",
    "post_format",
    "link_category",
    "acf-field-group",
    "acf-field",
})

# Taxonomies never denormalized onto posts.
EXCLUDE_POST_TAXONOMIES = frozenset({
    "post_tag",
    "post_format",
})

# Taxonomies whose terms are never indexed as documents.
EXCLUDE_TAXONOMIES = frozenset({
    "nav_menu",
    "post_format",
    "link_category",
})


# ---------------------------------------------------------------------
# Core Fields
# ---------------------------------------------------------------------

POST_CORE_FIELDS: Schema = {
    "type": exact_field(source="object_type"),
    "post_content": text_field(suggest=True, transformer="html"),
    "post_title": text_field(suggest=True),
    "post_type": exact_field(),
    "post_date": FieldDefinition(semantic_type=SemanticType.DATE, indexed=False, transformer="date"),
    "link": exact_field(),
}

TERM_CORE_FIELDS: Schema = {
    "name": text_field(suggest=True),
    "slug": exact_field(),
}


# ---------------------------------------------------------------------
# Custom Field Types
# ---------------------------------------------------------------------

class CustomFieldType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    WYSIWYG = "wysiwyg"
    EMAIL = "email"
    URL = "url"
    COLOR_PICKER = "color_picker"
    PAGE_LINK = "page_link"
    RADIO = "radio"
    SELECT = "select"
    CHECKBOX = "checkbox"
    TRUE_FALSE = "true_false"
    DATE_PICKER = "date_picker"
    DATE_TIME_PICKER = "date_time_picker"
    TIME_PICKER = "time_picker"
    NUMBER = "number"
    GOOGLE_MAP = "google_map"
    IMAGE = "image"
    POST_OBJECT = "post_object"
    TAXONOMY = "taxonomy"
    USER = "user"
    RELATIONSHIP = "relationship"
    REPEATER = "repeater"
    FILE = "file"
    MESSAGE = "message"
    OEMBED = "oembed"
    PASSWORD = "password"
    TAB = "tab"


# Field types that never reach the schema.
EXCLUDED_FIELD_TYPES = frozenset({
    CustomFieldType.FILE,
    CustomFieldType.MESSAGE,
    CustomFieldType.OEMBED,
    CustomFieldType.PASSWORD,
    CustomFieldType.TAB,
})

RELATIONSHIP_SUFFIX = "_relationship"

_SCALAR_FIELD_TYPES: Dict[CustomFieldType, Dict[str, object]] = {
    CustomFieldType.CHECKBOX: {"semantic_type": SemanticType.BOOLEAN, "indexed": False, "transformer": "boolean"},
    CustomFieldType.TRUE_FALSE: {"semantic_type": SemanticType.BOOLEAN, "indexed": False, "transformer": "boolean"},
    CustomFieldType.DATE_PICKER: {"semantic_type": SemanticType.DATE, "indexed": False, "transformer": "date"},
    CustomFieldType.DATE_TIME_PICKER: {"semantic_type": SemanticType.DATE, "indexed": False, "transformer": "date"},
    CustomFieldType.TIME_PICKER: {"semantic_type": SemanticType.DATE, "indexed": False, "format": "HH:mm:ss"},
    CustomFieldType.NUMBER: {"semantic_type": SemanticType.LONG, "indexed": False},
    CustomFieldType.GOOGLE_MAP: {"semantic_type": SemanticType.GEO_POINT, "indexed": False, "transformer": "geo_point"},
    CustomFieldType.WYSIWYG: {"semantic_type": SemanticType.STRING, "indexed": True, "transformer": "html"},
}


def _field_type(tag: str) -> Optional[CustomFieldType]:
    try:
        return CustomFieldType(tag)
    except ValueError:
        return None


def build_custom_field(field: CustomField, nested: bool = False) -> Schema:
    """
    Derive schema entries for one custom field.

    Returns an empty dict for skipped/excluded fields. Relationship fields are
    renamed with a `_relationship` suffix so lookups can tell them apart.
    Sub-fields of repeaters are derived recursively.
    """
    if not field.name:
        return {}

    field_type = _field_type(field.type)
    if field_type in EXCLUDED_FIELD_TYPES:
        return {}

    name = field.name
    source = None if nested else f"fields.{field.name}"

    if field_type is CustomFieldType.REPEATER:
        properties: Schema = {}
        for sub_field in field.sub_fields:
            properties.update(build_custom_field(sub_field, nested=True))
        return {name: nested_field(properties, source=source)}

    if field_type is CustomFieldType.RELATIONSHIP:
        definition = FieldDefinition(
            semantic_type=SemanticType.LONG,
            indexed=False,
            source=source if source is not None else field.name,
        )
        return {f"{name}{RELATIONSHIP_SUFFIX}": definition}

    options = _SCALAR_FIELD_TYPES.get(field_type) if field_type is not None else None
    if options is None:
        # text-like and unknown types: indexed free text
        return {name: text_field(source=source)}

    return {name: FieldDefinition(source=source, **options)}


def build_taxonomy_fields(taxonomy: str) -> Schema:
    """Raw term slug, free-text term name and n-gram term name."""
    return {
        taxonomy: exact_field(source=f"terms.{taxonomy}.slug"),
        f"{taxonomy}_name": text_field(source=f"terms.{taxonomy}.name"),
        f"{taxonomy}_suggest": ngram_field(source=f"terms.{taxonomy}.name"),
    }


# ---------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------

class MappingBuilder(Protocol):
    def valid(self, kind: str) -> bool:
        ...

    def build(self, kind: str, registration: Optional[KindRegistration] = None) -> Optional[Schema]:
        ...


class PostMappingBuilder:
    """
    Schema builder for post-like content.
    """

    def valid(self, post_type: str) -> bool:
        return bool(post_type) and post_type not in EXCLUDE_POST_TYPES

    def valid_post_types(self, post_types: Iterable[str]) -> list[str]:
        return [p for p in post_types if self.valid(p)]

    def build(
        self,
        post_type: str,
        registration: Optional[KindRegistration] = None,
    ) -> Optional[Schema]:
        """
        Build the schema for `post_type`.

        Parameters
        ----------
        post_type : str
            Content-kind identifier.

        registration : Optional[KindRegistration]
            Custom fields and taxonomies currently registered for the post
            type. When absent (no custom-field system installed and no
            taxonomies), only core fields are produced.

        Returns
        -------
        Optional[Schema]
            None when the post type is excluded.
        """
        if not self.valid(post_type):
            return None

        schema: Schema = dict(POST_CORE_FIELDS)

        if registration is None:
            return schema

        for field in registration.fields:
            schema.update(build_custom_field(field))

        for taxonomy in registration.taxonomies:
            if taxonomy not in EXCLUDE_POST_TAXONOMIES:
                schema.update(build_taxonomy_fields(taxonomy))

        return schema


class TermMappingBuilder:
    """
    Schema builder for taxonomy terms.
    """

    def valid(self, taxonomy: str) -> bool:
        return bool(taxonomy) and taxonomy not in EXCLUDE_TAXONOMIES

    def build(
        self,
        taxonomy: str,
        registration: Optional[KindRegistration] = None,
    ) -> Optional[Schema]:
        if not self.valid(taxonomy):
            return None
        return dict(TERM_CORE_FIELDS)
