"""Exception handlers translating Reviews failures into HTTP responses.

Protean's own handlers cover ``ValidationError`` (400) and
``ObjectNotFoundError`` (404); the handlers here add the Reviews failure
taxonomy and report request-schema errors as 400 instead of FastAPI's 422.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from reviews.errors import (
    AlreadyReviewed,
    DuplicateReview,
    Forbidden,
    NotFound,
    ReviewsError,
    Unauthenticated,
    UpstreamUnavailable,
)

logger = structlog.get_logger(__name__)

STATUS_CODES = {
    Unauthenticated: 401,
    Forbidden: 403,
    NotFound: 404,
    AlreadyReviewed: 409,
    DuplicateReview: 409,
    UpstreamUnavailable: 503,
}


async def reviews_error_handler(request: Request, exc: ReviewsError) -> JSONResponse:
    status_code = next(
        (code for cls, code in STATUS_CODES.items() if isinstance(exc, cls)),
        500,
    )
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body") or "body"
        errors.setdefault(field, []).append(error["msg"])
    return JSONResponse(status_code=400, content={"error": errors})


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's handlers plus the Reviews-specific ones on ``app``."""
    register_exception_handlers(app)
    app.add_exception_handler(ReviewsError, reviews_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
