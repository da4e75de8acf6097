"""
Global Error Handling

This module defines application-wide exception handlers for the sync server.

Design Goals
------------
- Never leak internal exception details to clients
- Always return deterministic, machine-readable error responses
- Log full stack traces internally for debugging
- Map domain failures to stable HTTP statuses
"""

from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..content.api_client import ContentClientError
from ..indexing.errors import IndexCreationFailed, UnsupportedContentKind
from ..search.client import SearchEngineError

logger = logging.getLogger("sync.errors")


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    This handler should be registered with FastAPI as the final safety net
    for any exception not otherwise handled by route-level or framework-level
    handlers.

    Behavior
    --------
    - Logs the full exception stack trace for internal diagnostics.
    - Returns a generic 500 error to the client with no internal details.
    - Ensures consistent error response format across the entire API.
    """

    # Log full traceback internally (never returned to client)
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )


async def unsupported_kind_handler(
    request: Request,
    exc: UnsupportedContentKind,
) -> JSONResponse:
    logger.warning("Unsupported content kind on %s: %s", request.url.path, exc.kind)
    return JSONResponse(
        status_code=422,
        content={
            "error": "unsupported_content_kind",
            "detail": f"No document builder for content kind '{exc.kind}'",
        },
    )


async def index_creation_failed_handler(
    request: Request,
    exc: IndexCreationFailed,
) -> JSONResponse:
    """
    Index creation failures carry the search engine's structured error
    list, which is safe to return to administrators.
    """
    logger.error("Index creation failed for '%s': %s", exc.index, exc.errors)
    return JSONResponse(
        status_code=502,
        content={
            "error": "index_creation_failed",
            "detail": f"Could not create index '{exc.index}'",
            "errors": exc.errors,
        },
    )


async def upstream_error_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Search engine or content host unavailable or misbehaving."""
    logger.error(
        "Upstream failure during request %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )
    return JSONResponse(
        status_code=502,
        content={
            "error": "upstream_error",
            "detail": "Upstream service error",
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UnsupportedContentKind, unsupported_kind_handler)
    app.add_exception_handler(IndexCreationFailed, index_creation_failed_handler)
    app.add_exception_handler(SearchEngineError, upstream_error_handler)
    app.add_exception_handler(ContentClientError, upstream_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
