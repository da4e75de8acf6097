"""
Content Data Models

This module defines the read-only view of host content that the indexing
engine consumes. The host (a multi-site capable CMS) pushes these shapes in
lifecycle notifications and returns them from its listing API.

Content Items
-------------
A content item is a tagged union over:
- `Post`  (post-like content: articles, pages, custom post types)
- `Term`  (taxonomy terms)

The `object_type` field is the discriminator.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------
# Content Items
# ---------------------------------------------------------------------

class TermRef(BaseModel):
    """
    A term attached to a post, as carried on the post itself.
    """
    term_id: int
    slug: str
    name: str

    model_config = ConfigDict(extra="ignore", frozen=True)


class Post(BaseModel):
    """
    Post-like content item.
    """
    object_type: Literal["post"] = "post"

    id: Union[int, str]
    post_type: str = Field(..., min_length=1)
    post_status: str = Field(..., min_length=1)
    post_title: str = ""
    post_content: str = ""
    post_date: Optional[Union[datetime, str]] = None
    link: Optional[str] = None
    blog_id: Optional[int] = Field(default=None, ge=1)

    fields: Dict[str, Any] = Field(
        default_factory=dict,
        description="Custom-field values keyed by field name.",
    )
    terms: Dict[str, List[TermRef]] = Field(
        default_factory=dict,
        description="Attached terms keyed by taxonomy name.",
    )

    model_config = ConfigDict(extra="ignore", frozen=True)


class Term(BaseModel):
    """
    Taxonomy term content item.
    """
    object_type: Literal["term"] = "term"

    term_id: int
    taxonomy: str = Field(..., min_length=1)
    name: str = ""
    slug: str = ""
    blog_id: Optional[int] = Field(default=None, ge=1)

    model_config = ConfigDict(extra="ignore", frozen=True)


ContentItem = Annotated[Union[Post, Term], Field(discriminator="object_type")]


# ---------------------------------------------------------------------
# Field & Taxonomy Registrations
# ---------------------------------------------------------------------

class CustomField(BaseModel):
    """
    A custom-field definition registered on the host for a post type.
    """
    name: str = ""
    type: str = "text"
    sub_fields: List["CustomField"] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", frozen=True)


class KindRegistration(BaseModel):
    """
    Everything registered against one post type at a point in time.

    Fetched fresh for each mapping/document build because field groups and
    taxonomy registrations can change between builds.
    """
    post_type: str
    fields: List[CustomField] = Field(default_factory=list)
    taxonomies: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class Site(BaseModel):
    """
    A site in a multi-site deployment.
    """
    blog_id: int = Field(..., ge=1)
    domain: Optional[str] = None
    path: Optional[str] = None

    model_config = ConfigDict(extra="ignore", frozen=True)
