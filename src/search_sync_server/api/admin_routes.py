"""
Admin Routes: Index Administration & Bulk Indexing

This module defines the administrative API routes the content host calls to
manage the search indexes.

Current Responsibilities:
- (Re)create every target index with its content-kind mapping
- Perform one bulk-indexing step per call and report progress
- Index taxonomy terms
- Clear every target index

Security Model:
- Scope-based access control via the `index_admin` scope
- The caller paces bulk indexing; each call does one page of work
"""

from fastapi import APIRouter, Depends, status

from .dependencies import get_indexer
from .models import ActionResult, IndexPostsRequest
from ..auth.security import IndexAdmin
from ..indexing.indexer import Indexer

# ---------------------------------------------------------------------
# Router Configuration
# ---------------------------------------------------------------------

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
)


# ---------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------

@router.post(
    "/mappings",
    response_model=ActionResult,
    status_code=status.HTTP_200_OK,
    summary="Create index mappings",
)
async def create_mappings(
    caller: IndexAdmin,
    indexer: Indexer = Depends(get_indexer),
) -> ActionResult:
    """
    Delete and recreate every target index with its rendered schema.

    Individual index failures do not abort the action; they are returned in
    `errors` and flip `status` to "error".
    """
    result = await indexer.create_mappings()
    errors = result["errors"]

    return ActionResult(
        message=(
            f"Created {len(result['created'])} index mapping(s)"
            if not errors
            else f"Failed to create {len(errors)} index mapping(s)"
        ),
        status="error" if errors else "success",
        count=len(result["created"]),
        errors=errors,
    )


@router.post(
    "/index/posts",
    response_model=ActionResult,
    status_code=status.HTTP_200_OK,
    summary="Run one bulk-indexing step",
)
async def index_posts(
    caller: IndexAdmin,
    req: IndexPostsRequest = IndexPostsRequest(),
    indexer: Indexer = Depends(get_indexer),
) -> ActionResult:
    progress = await indexer.index_posts(fresh=req.fresh)
    return ActionResult(
        message="Indexed one page of posts",
        progress=progress,
    )


@router.post(
    "/index/taxonomies",
    response_model=ActionResult,
    status_code=status.HTTP_200_OK,
    summary="Index all taxonomy terms",
)
async def index_taxonomies(
    caller: IndexAdmin,
    indexer: Indexer = Depends(get_indexer),
) -> ActionResult:
    count = await indexer.index_taxonomies()
    return ActionResult(
        message=f"Indexed {count} term(s)",
        count=count,
    )


@router.post(
    "/index/clear",
    response_model=ActionResult,
    status_code=status.HTTP_200_OK,
    summary="Delete every target index",
)
async def clear_index(
    caller: IndexAdmin,
    indexer: Indexer = Depends(get_indexer),
) -> ActionResult:
    result = await indexer.clear_index()
    errors = result["errors"]

    return ActionResult(
        message=f"Cleared {len(result['cleared'])} index(es)",
        status="error" if errors else "success",
        count=len(result["cleared"]),
        errors=errors,
    )


@router.get(
    "/index/status",
    response_model=ActionResult,
    status_code=status.HTTP_200_OK,
    summary="Current bulk-indexing progress",
)
async def index_status(
    caller: IndexAdmin,
    indexer: Indexer = Depends(get_indexer),
) -> ActionResult:
    progress = await indexer.status()
    return ActionResult(
        message="No indexing in progress" if progress is None else "Indexing progress",
        progress=progress,
    )
