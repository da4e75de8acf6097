"""
Content Routes

This module exposes the endpoints the content host's lifecycle hooks call
to keep the indexes in sync with individual edits:

- a post or term was saved
- a post changed status
- a post or term was deleted

Each endpoint fans the change out to every affected index and reports the
per-target outcome. A failing target never fails the request; it is listed
in `details.errors` and the status becomes "partial".
"""

from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, status

from .dependencies import get_content_client, get_lifecycle
from .models import (
    ContentDeletedRequest,
    ContentRef,
    ContentSavedRequest,
    OperationResult,
    StatusChangeRequest,
)
from ..auth.security import IndexWriter
from ..content.api_client import ContentClient
from ..content.models import Post, Term
from ..indexing.fanout import FanOutReport
from ..indexing.lifecycle import LifecycleHandler

router = APIRouter(prefix="/content", tags=["content"])


# ---------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------

async def _resolve_item(
    ref: ContentRef,
    content: ContentClient,
) -> Optional[Union[Post, Term]]:
    """
    Return the inline item, or fetch the post by id from the content host.
    """
    if ref.item is not None:
        return ref.item
    return await content.get_post(ref.post_id, ref.blog_id)


def _result(report: FanOutReport, done: str) -> OperationResult:
    if report.skipped:
        result_status = "skipped"
    elif report.errors:
        result_status = "partial"
    else:
        result_status = done

    return OperationResult(
        status=result_status,
        count=len(report.attempted),
        details=report.as_dict(),
    )


# ---------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------

@router.post(
    "/saved",
    response_model=OperationResult,
    status_code=status.HTTP_200_OK,
)
async def content_saved(
    req: ContentSavedRequest,
    caller: IndexWriter,
    lifecycle: LifecycleHandler = Depends(get_lifecycle),
    content: ContentClient = Depends(get_content_client),
) -> OperationResult:
    """
    A post or term was created or updated.

    Posts whose status is not publishable are removed from the indexes
    instead.
    """
    item = await _resolve_item(req, content)

    if isinstance(item, Term):
        if req.created:
            report = await lifecycle.term_created(item)
        else:
            report = await lifecycle.term_edited(item)
    else:
        report = await lifecycle.post_saved(item, created=req.created)

    return _result(report, "deleted" if report.operation == "delete" else "updated")


@router.post(
    "/status",
    response_model=OperationResult,
    status_code=status.HTTP_200_OK,
)
async def content_status_changed(
    req: StatusChangeRequest,
    caller: IndexWriter,
    lifecycle: LifecycleHandler = Depends(get_lifecycle),
    content: ContentClient = Depends(get_content_client),
) -> OperationResult:
    item = await _resolve_item(req, content)

    if isinstance(item, Term):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Status changes apply to posts only.",
        )

    report = await lifecycle.post_status_changed(item, req.old_status, req.new_status)
    return _result(report, "deleted" if report.operation == "delete" else "updated")


@router.post(
    "/deleted",
    response_model=OperationResult,
    status_code=status.HTTP_200_OK,
)
async def content_deleted(
    req: ContentDeletedRequest,
    caller: IndexWriter,
    lifecycle: LifecycleHandler = Depends(get_lifecycle),
    content: ContentClient = Depends(get_content_client),
) -> OperationResult:
    """
    Remove a post or term from every index it may live in. Deleting an
    item that is already absent is not an error.
    """
    item = await _resolve_item(req, content)

    if isinstance(item, Term):
        report = await lifecycle.term_deleted(item)
    else:
        report = await lifecycle.post_deleted(item)

    return _result(report, "deleted")
