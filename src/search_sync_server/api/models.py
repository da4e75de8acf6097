"""
API Models for the Sync Server

This module defines the Pydantic models used for request/response validation
across the administrative and content-lifecycle endpoints.

Design Goals
------------
- Strong typing
- Safe defaults (no shared mutable state)
- Clear schema documentation
- Forward compatibility with testing and OpenAPI generation
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..content.models import ContentItem


# ---------------------------------------------------------------------
# Administrative Actions
# ---------------------------------------------------------------------

class ActionResult(BaseModel):
    """
    Result of an administrative action.

    `progress` carries the bulk-indexing snapshot (flat for single-site,
    keyed by site id for multi-site).
    """
    message: str
    status: Literal["success", "error"] = "success"
    progress: Optional[Dict[str, Any]] = None
    count: Optional[int] = Field(default=None, ge=0)
    errors: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class IndexPostsRequest(BaseModel):
    """
    One bulk-indexing step. `fresh` discards persisted progress first.
    """
    fresh: bool = False

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Content Lifecycle
# ---------------------------------------------------------------------

class ContentRef(BaseModel):
    """
    Either an inline content item, or a post id the server fetches from
    the content host.
    """
    item: Optional[ContentItem] = None
    post_id: Optional[Union[int, str]] = None
    blog_id: Optional[int] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _require_item_or_id(self) -> "ContentRef":
        if self.item is None and self.post_id is None:
            raise ValueError("Either 'item' or 'post_id' is required.")
        return self


class ContentSavedRequest(ContentRef):
    created: bool = False


class StatusChangeRequest(ContentRef):
    old_status: str = Field(..., min_length=1)
    new_status: str = Field(..., min_length=1)


class ContentDeletedRequest(ContentRef):
    pass


class OperationResult(BaseModel):
    """
    Standardized mutation operation result.
    `details` carries the fan-out report.
    """
    status: Literal["updated", "deleted", "skipped", "partial"]
    count: Optional[int] = Field(default=None, ge=0)
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="forbid")
