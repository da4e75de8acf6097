"""
Content Host API Client

This module provides the client for the content host's JSON API. It is the
content-listing and custom-field-schema collaborator of the indexing engine.

Design Goals
------------
- Stable pagination (explicit ascending id ordering on every listing)
- Explicit JWT scope usage per request
- Transport and response failures surfaced as `ContentClientError`
- Absent custom-field system (404 on field groups) is not an error
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..auth.jwt_utils import create_sync_to_host_jwt
from ..auth.models import SCOPE_CONTENT_READ, SCOPE_SCHEMA_READ
from ..config import settings
from .models import CustomField, KindRegistration, Post, Site, Term

logger = logging.getLogger("sync.content")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class ContentClientError(RuntimeError):
    """Raised when the content host cannot be reached or answers badly."""


class ContentNotFound(ContentClientError):
    """Raised internally for 404 responses."""


# ---------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------

class ContentClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        base_url : Optional[str]
            API root. Defaults to settings.content_api_base_url.

        timeout : Optional[float]
            Per-request timeout. Defaults to settings.content_api_timeout.

        transport : Optional[httpx.AsyncBaseTransport]
            Custom transport (tests use httpx.MockTransport).
        """
        self.base_url = (base_url or str(settings.content_api_base_url)).rstrip("/")
        self.timeout = timeout or settings.content_api_timeout
        self._transport = transport

    async def _request(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        scopes: Optional[List[str]] = None,
    ) -> Any:
        """
        Make an authenticated GET request to the content host.

        Args:
            path: API path below the base URL
            params: Query parameters (None values are dropped)
            scopes: JWT scopes for this request (defaults to content_read)
        """
        if scopes is None:
            scopes = [SCOPE_CONTENT_READ]

        token = create_sync_to_host_jwt(scopes)
        headers = {
            "Authorization": f"Bearer {token}"
        }
        query = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(f"{self.base_url}{path}", params=query, headers=headers)
        except httpx.HTTPError as exc:
            raise ContentClientError(
                f"Content host request to {path} failed: {type(exc).__name__}"
            ) from exc

        if resp.status_code == 404:
            raise ContentNotFound(f"Content host returned 404 for {path}")

        try:
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPStatusError, ValueError) as exc:
            raise ContentClientError(
                f"Content host returned an invalid response for {path}: {type(exc).__name__}"
            ) from exc

    # ------------------------------------------------------------------
    # Sites & Kinds
    # ------------------------------------------------------------------

    async def list_sites(self) -> List[Site]:
        data = await self._request("/sites")
        return [Site.model_validate(s) for s in data]

    async def list_post_types(self, blog_id: Optional[int] = None) -> List[str]:
        data = await self._request("/post-types", {"blog_id": blog_id})
        return [str(p) for p in data]

    async def list_taxonomies(
        self,
        post_type: Optional[str] = None,
        blog_id: Optional[int] = None,
    ) -> List[str]:
        data = await self._request(
            "/taxonomies",
            {"post_type": post_type, "blog_id": blog_id},
        )
        return [str(t) for t in data]

    async def list_field_groups(
        self,
        post_type: str,
        blog_id: Optional[int] = None,
    ) -> List[CustomField]:
        """
        Return every custom field registered for `post_type`, in field-group
        order. Returns an empty list when no custom-field system is installed.
        """
        try:
            data = await self._request(
                "/field-groups",
                {"post_type": post_type, "blog_id": blog_id},
                scopes=[SCOPE_SCHEMA_READ],
            )
        except ContentNotFound:
            return []

        fields: List[CustomField] = []
        for group in data:
            fields.extend(CustomField.model_validate(f) for f in group.get("fields", []))
        return fields

    async def registration(
        self,
        post_type: str,
        blog_id: Optional[int] = None,
    ) -> KindRegistration:
        """Current custom fields and taxonomies for `post_type`."""
        return KindRegistration(
            post_type=post_type,
            fields=await self.list_field_groups(post_type, blog_id),
            taxonomies=await self.list_taxonomies(post_type, blog_id),
        )

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    async def count_content(
        self,
        blog_id: Optional[int],
        post_types: Sequence[str],
        statuses: Sequence[str],
    ) -> int:
        data = await self._request(
            "/posts/count",
            {
                "blog_id": blog_id,
                "post_type": ",".join(post_types),
                "post_status": ",".join(statuses),
            },
        )
        return int(data.get("total", 0))

    async def list_content(
        self,
        blog_id: Optional[int],
        page: int,
        per_page: int,
        post_types: Sequence[str],
        statuses: Sequence[str],
    ) -> List[Post]:
        data = await self._request(
            "/posts",
            {
                "blog_id": blog_id,
                "page": page,
                "per_page": per_page,
                "post_type": ",".join(post_types),
                "post_status": ",".join(statuses),
                "orderby": "id",
                "order": "asc",
            },
        )
        return [Post.model_validate(p) for p in data.get("items", [])]

    async def get_post(self, post_id: int, blog_id: Optional[int] = None) -> Optional[Post]:
        try:
            data = await self._request(f"/posts/{post_id}", {"blog_id": blog_id})
        except ContentNotFound:
            return None
        return Post.model_validate(data)

    async def list_terms(
        self,
        taxonomies: Sequence[str],
        blog_id: Optional[int] = None,
    ) -> List[Term]:
        if not taxonomies:
            return []

        data = await self._request(
            "/terms",
            {"taxonomy": ",".join(taxonomies), "blog_id": blog_id, "hide_empty": "false"},
        )
        return [Term.model_validate(t) for t in data]
