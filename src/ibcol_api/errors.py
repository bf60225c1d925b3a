"""Exception handlers mapping the portal's error taxonomy onto HTTP responses."""

import logging

import pydantic
from fastapi import Request, status
from fastapi.responses import JSONResponse

from ibcol_api.exceptions import (
    InvalidReference,
    NotFound,
    StorageError,
    StorageUnavailable,
    UploadRejected,
)

logger = logging.getLogger(__name__)


async def handle_invalid_reference(request: Request, exc: InvalidReference) -> JSONResponse:
    """Bad or tampered tokens are client input errors."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


async def handle_not_found(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


async def handle_upload_rejected(request: Request, exc: UploadRejected) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc)},
    )


async def handle_storage_errors(request: Request, exc: StorageError) -> JSONResponse:
    """Transient backend failures are retryable (503); refusals are not (502)."""
    logger.error(f"Storage backend failure on {request.method} {request.url.path}: {exc}")
    if isinstance(exc, StorageUnavailable):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Storage is temporarily unavailable, please retry"},
            headers={"Retry-After": str(exc.retry_after)},
        )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Storage backend rejected the request"},
    )


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": [
                {
                    "msg": error["msg"],
                    "loc": list(error["loc"]),
                }
                for error in errors
            ]
        },
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that propagates past the route handlers."""
    try:
        return await call_next(request)
    except Exception as err:
        logger.exception(err)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
