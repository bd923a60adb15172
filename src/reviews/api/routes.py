"""FastAPI routes for the Reviews & Ratings bounded context.

Each route resolves the caller through the app's identity provider and
translates between Pydantic schemas (external contract) and
ModerationWorkflow calls (internal domain operations).
"""

from fastapi import APIRouter, Depends, Request

from reviews.api.schemas import (
    MessageResponse,
    ProductRatingResponse,
    RegisterProductRequest,
    ReportReviewRequest,
    ReviewListResponse,
    ReviewResponse,
    SubmitReviewRequest,
    UpdateReviewRequest,
)
from reviews.identity import Identity
from reviews.settings import get_setting
from reviews.workflow import ModerationWorkflow

review_router = APIRouter(prefix="/reviews", tags=["reviews"])
product_router = APIRouter(prefix="/products", tags=["products"])


def get_identity(request: Request) -> Identity:
    return request.app.state.identity_provider.identify(request.headers)


def get_workflow(request: Request) -> ModerationWorkflow:
    return request.app.state.workflow


def _review_list(result: dict) -> ReviewListResponse:
    return ReviewListResponse(
        reviews=[ReviewResponse.from_review(review) for review in result["reviews"]],
        pagination=result["pagination"],
    )


# --- Review endpoints ---


@review_router.post("", status_code=201, response_model=ReviewResponse)
async def submit_review(
    body: SubmitReviewRequest,
    identity: Identity = Depends(get_identity),
    workflow: ModerationWorkflow = Depends(get_workflow),
) -> ReviewResponse:
    """Submit a new product review."""
    review = workflow.submit(
        identity,
        product_id=body.product_id,
        rating=body.rating,
        comment=body.comment,
        title=body.title,
        images=[img.model_dump() for img in body.images] if body.images else None,
    )
    return ReviewResponse.from_review(review)


@review_router.get("", response_model=ReviewListResponse)
async def list_reviews(
    product_id: str | None = None,
    author_id: str | None = None,
    status: str | None = None,
    reported: bool | None = None,
    page: int = 1,
    limit: int | None = None,
    sort: str | None = None,
    identity: Identity = Depends(get_identity),
    workflow: ModerationWorkflow = Depends(get_workflow),
) -> ReviewListResponse:
    """List reviews with filtering, sorting and pagination."""
    result = workflow.list_reviews(
        identity,
        filters={
            "product_id": product_id,
            "author_id": author_id,
            "status": status,
            "reported": reported,
        },
        page=page,
        page_size=limit,
        sort=sort,
    )
    return _review_list(result)


@review_router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(
    review_id: str,
    identity: Identity = Depends(get_identity),
    workflow: ModerationWorkflow = Depends(get_workflow),
) -> ReviewResponse:
    return ReviewResponse.from_review(workflow.get_review(identity, review_id))


@review_router.patch("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: str,
    body: UpdateReviewRequest,
    identity: Identity = Depends(get_identity),
    workflow: ModerationWorkflow = Depends(get_workflow),
) -> ReviewResponse:
    """Moderate a review, or apply the author's own edit."""
    changes = body.model_dump(exclude_unset=True)
    review = workflow.moderate(identity, review_id, changes)
    return ReviewResponse.from_review(review)


@review_router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(
    review_id: str,
    identity: Identity = Depends(get_identity),
    workflow: ModerationWorkflow = Depends(get_workflow),
) -> MessageResponse:
    workflow.delete(identity, review_id)
    return MessageResponse(message="Review deleted successfully")


@review_router.post("/{review_id}/report", response_model=ReviewResponse)
async def report_review(
    review_id: str,
    body: ReportReviewRequest | None = None,
    identity: Identity = Depends(get_identity),
    workflow: ModerationWorkflow = Depends(get_workflow),
) -> ReviewResponse:
    """Report a review for moderation."""
    review = workflow.report(identity, review_id, reason=body.reason if body else None)
    return ReviewResponse.from_review(review)


@review_router.post("/{review_id}/helpful", response_model=ReviewResponse)
async def mark_helpful(
    review_id: str,
    identity: Identity = Depends(get_identity),
    workflow: ModerationWorkflow = Depends(get_workflow),
) -> ReviewResponse:
    """Mark a review as helpful."""
    return ReviewResponse.from_review(workflow.mark_helpful(identity, review_id))


# --- Product endpoints ---


@product_router.get("/{product_id}/reviews", response_model=ReviewListResponse)
async def list_product_reviews(
    product_id: str,
    page: int = 1,
    limit: int | None = None,
    identity: Identity = Depends(get_identity),
    workflow: ModerationWorkflow = Depends(get_workflow),
) -> ReviewListResponse:
    """Approved reviews for a product page, newest first."""
    result = workflow.list_reviews(
        identity,
        filters={"product_id": product_id, "status": "approved"},
        page=page,
        page_size=get_setting("LOAD_MORE_PAGE_SIZE") if limit is None else limit,
    )
    return _review_list(result)


@product_router.get("/{product_id}/rating", response_model=ProductRatingResponse)
async def product_rating(
    product_id: str,
    workflow: ModerationWorkflow = Depends(get_workflow),
) -> ProductRatingResponse:
    return ProductRatingResponse(**workflow.product_rating(product_id))


@product_router.put("/{product_id}", response_model=ProductRatingResponse)
async def register_product(
    product_id: str,
    body: RegisterProductRequest,
    identity: Identity = Depends(get_identity),
    workflow: ModerationWorkflow = Depends(get_workflow),
) -> ProductRatingResponse:
    """Register or refresh a catalogue product in the Reviews service."""
    workflow.register_product(identity, product_id, name=body.name, slug=body.slug)
    return ProductRatingResponse(**workflow.product_rating(product_id))
