"""Review aggregate (CQRS) — the core of the Reviews & Ratings domain.

The Review aggregate manages the lifecycle of a customer's product review:
submission, moderation, reporting, helpful votes, and content edits.
Deletion is a hard delete performed through the ReviewStore.

State Machine (3 states):
    PENDING → APPROVED | REJECTED
    APPROVED → REJECTED
    REJECTED → APPROVED

``reported`` is an orthogonal flag: it can be raised at any status and
never changes ``status`` by itself.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from reviews.domain import reviews
from reviews.review.events import (
    HelpfulVoteRecorded,
    ModeratorResponded,
    ReviewApproved,
    ReviewEdited,
    ReviewRejected,
    ReviewReportCleared,
    ReviewReported,
    ReviewSubmitted,
)

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()

MAX_IMAGES = 5

# Fields a review's own author may change; moderators may change any field.
AUTHOR_EDITABLE_FIELDS = frozenset({"comment", "rating", "images"})
CONTENT_FIELDS = frozenset({"title", "comment", "rating", "images", "verified_purchase"})


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReviewStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    ReviewStatus.PENDING: {ReviewStatus.APPROVED, ReviewStatus.REJECTED},
    ReviewStatus.APPROVED: {ReviewStatus.REJECTED},
    ReviewStatus.REJECTED: {ReviewStatus.APPROVED},
}


def author_product_key(author_id, product_id) -> str:
    """Storage key backing the one-review-per-author-per-product constraint."""
    return f"{author_id}:{product_id}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@reviews.value_object(part_of="Review")
class Rating:
    """A star rating from 1 to 5."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None and (self.score < 1 or self.score > 5):
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})


@reviews.value_object(part_of="Review")
class ModeratorResponse:
    """A moderator's note attached to a review."""

    comment = Text(required=True)
    responder_id = Identifier(required=True)
    responded_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@reviews.entity(part_of="Review")
class ReviewImage:
    """A photo attached to a review."""

    url = String(required=True, max_length=500)
    alt_text = String(max_length=255)
    display_order = Integer(default=0)


@reviews.entity(part_of="Review")
class HelpfulVote:
    """A single "helpful" vote cast on a review."""

    voter_id = Identifier(required=True)
    voted_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@reviews.aggregate
class Review:
    """A customer's review of a product.

    Only reviews in APPROVED status count towards the product's displayed
    rating; see ``reviews.product.rating.RatingAggregator``.
    """

    # Core identifiers
    product_id = Identifier(required=True)
    author_id = Identifier(required=True)
    author_name = String(max_length=100)
    author_email = String(max_length=254)
    author_product_key = String(max_length=255, unique=True)

    # Content
    rating = ValueObject(Rating, required=True)
    title = String(max_length=200)
    comment = Text(required=True)

    # Media
    images = HasMany(ReviewImage)

    # Verification
    verified_purchase = Boolean(default=False)

    # Moderation
    status = String(choices=ReviewStatus, default=ReviewStatus.PENDING.value)
    response = ValueObject(ModeratorResponse)
    reported = Boolean(default=False)

    # Voting
    votes = HasMany(HelpfulVote)
    helpful_count = Integer(default=0)

    # Timestamps
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def images_cannot_exceed_maximum(self):
        if len(self.images) > MAX_IMAGES:
            raise ValidationError({"images": [f"Cannot attach more than {MAX_IMAGES} images to a review"]})

    @invariant.post
    def comment_must_not_be_blank(self):
        if self.comment is not None and len(self.comment.strip()) == 0:
            raise ValidationError({"comment": ["Review comment cannot be empty"]})

    @invariant.post
    def helpful_count_cannot_be_negative(self):
        if self.helpful_count is not None and self.helpful_count < 0:
            raise ValidationError({"helpful_count": ["Helpful count cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        product_id,
        author_id,
        rating,
        comment,
        title=None,
        images=None,
        author_name=None,
        author_email=None,
    ):
        """Submit a new review in PENDING status."""
        now = datetime.now(UTC)

        review = cls(
            product_id=product_id,
            author_id=author_id,
            author_name=author_name,
            author_email=author_email,
            author_product_key=author_product_key(author_id, product_id),
            rating=Rating(score=rating),
            title=title,
            comment=comment,
            verified_purchase=False,
            status=ReviewStatus.PENDING.value,
            reported=False,
            helpful_count=0,
            created_at=now,
            updated_at=now,
        )

        if images:
            review._attach_images(images)

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                author_id=str(author_id),
                rating=rating,
                title=title,
                comment=comment,
                image_count=len(images) if images else 0,
                submitted_at=now,
            )
        )

        return review

    def _attach_images(self, images):
        for i, img in enumerate(images):
            self.add_images(
                ReviewImage(
                    url=img["url"],
                    alt_text=img.get("alt_text") or "",
                    display_order=i,
                )
            )

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate state machine transition."""
        current = ReviewStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    @property
    def is_approved(self) -> bool:
        return ReviewStatus(self.status) == ReviewStatus.APPROVED

    # -------------------------------------------------------------------
    # Content edits
    # -------------------------------------------------------------------
    def revise(
        self,
        edited_by,
        title=_UNSET,
        comment=_UNSET,
        rating=_UNSET,
        images=_UNSET,
        verified_purchase=_UNSET,
    ):
        """Change review content. Returns False when nothing was supplied."""
        supplied = {
            name: value
            for name, value in (
                ("title", title),
                ("comment", comment),
                ("rating", rating),
                ("images", images),
                ("verified_purchase", verified_purchase),
            )
            if value is not _UNSET
        }
        if not supplied:
            return False

        now = datetime.now(UTC)

        with atomic_change(self):
            if title is not _UNSET:
                self.title = title
            if comment is not _UNSET:
                self.comment = comment
            if rating is not _UNSET:
                self.rating = Rating(score=rating)
            if images is not _UNSET:
                for image in list(self.images):
                    self.remove_images(image)
                self._attach_images(images or [])
            if verified_purchase is not _UNSET:
                self.verified_purchase = bool(verified_purchase)
            self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                edited_by=str(edited_by),
                changed_fields=",".join(sorted(supplied)),
                rating=self.rating.score,
                edited_at=now,
            )
        )
        return True

    def revise_by_author(self, author_id, **changes):
        """Apply the author's limited self-edit to a pending review."""
        if ReviewStatus(self.status) != ReviewStatus.PENDING:
            raise ValidationError({"status": ["Reviews can only be edited by their author while pending"]})

        return self.revise(edited_by=author_id, **changes)

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def _record_response(self, moderator_id, comment, now):
        self.response = ModeratorResponse(
            comment=comment,
            responder_id=moderator_id,
            responded_at=now,
        )

    def approve(self, moderator_id, response=None):
        """Approve the review for display."""
        self._assert_can_transition(ReviewStatus.APPROVED)

        now = datetime.now(UTC)
        self.status = ReviewStatus.APPROVED.value
        if response:
            self._record_response(moderator_id, response, now)
        self.updated_at = now

        self.raise_(
            ReviewApproved(
                review_id=str(self.id),
                product_id=str(self.product_id),
                author_id=str(self.author_id),
                rating=self.rating.score,
                moderator_id=str(moderator_id),
                approved_at=now,
            )
        )

    def reject(self, moderator_id, response=None):
        """Reject the review, optionally with a note for the author."""
        self._assert_can_transition(ReviewStatus.REJECTED)

        now = datetime.now(UTC)
        self.status = ReviewStatus.REJECTED.value
        if response:
            self._record_response(moderator_id, response, now)
        self.updated_at = now

        self.raise_(
            ReviewRejected(
                review_id=str(self.id),
                product_id=str(self.product_id),
                author_id=str(self.author_id),
                moderator_id=str(moderator_id),
                response=response,
                rejected_at=now,
            )
        )

    def respond(self, moderator_id, comment):
        """Attach or replace the moderator response without changing status."""
        if not comment or not comment.strip():
            raise ValidationError({"response": ["Response cannot be empty"]})

        now = datetime.now(UTC)
        self._record_response(moderator_id, comment, now)
        self.updated_at = now

        self.raise_(
            ModeratorResponded(
                review_id=str(self.id),
                moderator_id=str(moderator_id),
                comment=comment,
                responded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------
    def report(self, reporter_id, reason=None):
        """Flag the review for moderator attention.

        Returns True only when the flag actually flipped; reporting an
        already reported review is a no-op.
        """
        if self.reported:
            return False

        now = datetime.now(UTC)
        self.reported = True
        self.updated_at = now

        self.raise_(
            ReviewReported(
                review_id=str(self.id),
                product_id=str(self.product_id),
                reporter_id=str(reporter_id),
                reason=reason,
                reported_at=now,
            )
        )
        return True

    def clear_report(self, moderator_id):
        """Dismiss an outstanding report."""
        if not self.reported:
            return False

        now = datetime.now(UTC)
        self.reported = False
        self.updated_at = now

        self.raise_(
            ReviewReportCleared(
                review_id=str(self.id),
                moderator_id=str(moderator_id),
                cleared_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Voting
    # -------------------------------------------------------------------
    def mark_helpful(self, voter_id, unique_voter=False):
        """Record a helpful vote.

        Every call counts unless ``unique_voter`` is set, in which case a
        second vote from the same voter is rejected. Only the first vote of
        each voter is kept as a ``HelpfulVote``; repeats just bump the count.
        """
        already_voted = any(str(v.voter_id) == str(voter_id) for v in self.votes)
        if unique_voter and already_voted:
            raise ValidationError({"helpful": ["You have already marked this review as helpful"]})

        now = datetime.now(UTC)
        if not already_voted:
            self.add_votes(HelpfulVote(voter_id=voter_id, voted_at=now))

        with atomic_change(self):
            self.helpful_count = self.helpful_count + 1
            self.updated_at = now

        self.raise_(
            HelpfulVoteRecorded(
                review_id=str(self.id),
                voter_id=str(voter_id),
                helpful_count=self.helpful_count,
                voted_at=now,
            )
        )
