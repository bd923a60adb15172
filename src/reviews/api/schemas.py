"""Pydantic request/response schemas for the Reviews API.

These are separate from the domain model (anti-corruption pattern).
The API layer is the external contract; aggregates and commands are
internal domain concepts.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class ReviewImageSchema(BaseModel):
    url: str = Field(max_length=500)
    alt_text: str | None = Field(default=None, max_length=255)


class SubmitReviewRequest(BaseModel):
    product_id: str
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=1)
    title: str | None = Field(default=None, max_length=200)
    images: list[ReviewImageSchema] | None = Field(default=None, max_length=5)


class UpdateReviewRequest(BaseModel):
    """Partial update; only the fields present in the body are applied."""

    status: str | None = None
    response: str | None = None
    title: str | None = Field(default=None, max_length=200)
    comment: str | None = Field(default=None, min_length=1)
    rating: int | None = Field(default=None, ge=1, le=5)
    images: list[ReviewImageSchema] | None = Field(default=None, max_length=5)
    verified_purchase: bool | None = None
    reported: bool | None = None


class ReportReviewRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class RegisterProductRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ModeratorResponseSchema(BaseModel):
    comment: str
    responder_id: str
    responded_at: datetime


class ReviewResponse(BaseModel):
    id: str
    product_id: str
    author_id: str
    author_name: str | None = None
    rating: int
    title: str | None = None
    comment: str
    images: list[ReviewImageSchema] = []
    verified_purchase: bool = False
    status: str
    reported: bool = False
    helpful_count: int = 0
    response: ModeratorResponseSchema | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_review(cls, review) -> ReviewResponse:
        images = sorted(review.images, key=lambda image: image.display_order or 0)
        response = None
        if review.response is not None:
            response = ModeratorResponseSchema(
                comment=review.response.comment,
                responder_id=str(review.response.responder_id),
                responded_at=review.response.responded_at,
            )
        return cls(
            id=str(review.id),
            product_id=str(review.product_id),
            author_id=str(review.author_id),
            author_name=review.author_name,
            rating=review.rating.score,
            title=review.title,
            comment=review.comment,
            images=[ReviewImageSchema(url=image.url, alt_text=image.alt_text or None) for image in images],
            verified_purchase=bool(review.verified_purchase),
            status=review.status,
            reported=bool(review.reported),
            helpful_count=review.helpful_count or 0,
            response=response,
            created_at=review.created_at,
            updated_at=review.updated_at,
        )


class PaginationSchema(BaseModel):
    total: int
    page: int
    pages: int


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
    pagination: PaginationSchema


class ProductRatingResponse(BaseModel):
    product_id: str
    rating: float
    num_reviews: int
    breakdown: dict[str, int]


class MessageResponse(BaseModel):
    message: str
