"""ModerationWorkflow — orchestrates the review lifecycle.

The workflow authorizes the caller, dispatches the matching command through
the domain, and then runs the two best-effort follow-ups: recomputing the
product's displayed rating and notifying the author or the operations
mailbox. Neither follow-up can fail the operation that triggered it; a stale
rating heals on the next mutation or via ``manage.py recompute-ratings``.
"""

import json
import math

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from reviews.errors import Forbidden, NotFound, ReviewsError, Unauthenticated, UpstreamUnavailable
from reviews.notification.port import Notifier
from reviews.product.product import Product
from reviews.product.rating import RatingAggregator
from reviews.product.registration import RegisterProduct
from reviews.review.editing import EditReview
from reviews.review.moderation import ModerateReview
from reviews.review.removal import DeleteReview
from reviews.review.reporting import ReportReview
from reviews.review.review import AUTHOR_EDITABLE_FIELDS, CONTENT_FIELDS, Review, ReviewStatus
from reviews.review.submission import SubmitReview
from reviews.review.voting import MarkHelpful
from reviews.settings import get_setting

logger = structlog.get_logger(__name__)

MODERATABLE_FIELDS = CONTENT_FIELDS | {"status", "response", "reported"}


def _images_json(images):
    if images is None:
        return None
    return json.dumps([{"url": img["url"], "alt_text": img.get("alt_text")} for img in images])


class ModerationWorkflow:
    def __init__(
        self,
        notifier: Notifier,
        aggregator: RatingAggregator | None = None,
        deduplicate_helpful_votes: bool = False,
        operations_mailbox: str | None = None,
    ) -> None:
        self.notifier = notifier
        self.aggregator = aggregator or RatingAggregator()
        self.deduplicate_helpful_votes = deduplicate_helpful_votes
        self.operations_mailbox = operations_mailbox

    @classmethod
    def from_settings(cls, notifier: Notifier, domain=None) -> "ModerationWorkflow":
        """Build a workflow with policy switches taken from the domain config."""
        return cls(
            notifier=notifier,
            deduplicate_helpful_votes=bool(get_setting("DEDUPLICATE_HELPFUL_VOTES", domain)),
            operations_mailbox=get_setting("OPERATIONS_MAILBOX", domain),
        )

    # -------------------------------------------------------------------
    # Lifecycle operations
    # -------------------------------------------------------------------
    def submit(self, identity, product_id, rating, comment, title=None, images=None) -> Review:
        """Create a pending review by the caller."""
        self._require_authenticated(identity)

        review_id = self._process(
            SubmitReview(
                product_id=product_id,
                author_id=identity.user_id,
                rating=rating,
                comment=comment,
                title=title,
                images=_images_json(images),
                author_name=identity.display_name,
                author_email=identity.email,
            )
        )
        review = self._store().get_review(review_id)

        self._notify(
            "review_submitted",
            self._author_address(review),
            self._template_variables(review),
        )
        return review

    def moderate(self, identity, review_id, changes: dict) -> Review:
        """Apply a moderator's edit or the author's self-edit.

        Authors may only send ``comment``, ``rating`` and ``images``. Any other
        field in an author's ``changes`` raises ``Forbidden`` rather than
        being dropped.
        """
        self._require_authenticated(identity)

        unknown = set(changes) - MODERATABLE_FIELDS
        if unknown:
            raise ValidationError({"changes": [f"Unsupported field(s): {', '.join(sorted(unknown))}"]})

        review = self._store().get_review(review_id)
        was_approved = review.is_approved
        previous_status = review.status

        if identity.is_moderator:
            self._process(
                ModerateReview(
                    review_id=review_id,
                    moderator_id=identity.user_id,
                    moderator_role=identity.role,
                    status=changes.get("status"),
                    response=changes.get("response"),
                    title=changes.get("title"),
                    comment=changes.get("comment"),
                    rating=changes.get("rating"),
                    images=_images_json(changes.get("images")),
                    verified_purchase=changes.get("verified_purchase"),
                    reported=changes.get("reported"),
                )
            )
        elif str(review.author_id) == str(identity.user_id):
            if set(changes) - AUTHOR_EDITABLE_FIELDS:
                raise Forbidden(
                    "Authors may only change the comment, rating and images of their review",
                    review_id=str(review_id),
                )
            self._process(
                EditReview(
                    review_id=review_id,
                    author_id=identity.user_id,
                    comment=changes.get("comment"),
                    rating=changes.get("rating"),
                    images=_images_json(changes.get("images")),
                )
            )
        else:
            raise Forbidden("Only moderators or the review author can change this review", review_id=str(review_id))

        review = self._store().get_review(review_id)
        if was_approved or review.is_approved:
            self._refresh_rating(review.product_id)

        if review.status != previous_status:
            template = {
                ReviewStatus.APPROVED.value: "review_approved",
                ReviewStatus.REJECTED.value: "review_rejected",
            }[review.status]
            self._notify(
                template,
                self._author_address(review),
                self._template_variables(review, moderator_response=changes.get("response")),
            )

        return review

    def report(self, identity, review_id, reason=None) -> Review:
        """Flag a review; only the first report reaches the operations mailbox."""
        self._require_authenticated(identity)

        newly_reported = self._process(
            ReportReview(review_id=review_id, reporter_id=identity.user_id, reason=reason)
        )
        review = self._store().get_review(review_id)

        if newly_reported and self.operations_mailbox:
            self._notify(
                "review_reported",
                self.operations_mailbox,
                self._template_variables(review, report_reason=reason),
            )
        return review

    def delete(self, identity, review_id) -> str:
        """Remove a review and refresh its product's rating. Returns the product id."""
        self._require_authenticated(identity)

        product_id = self._process(
            DeleteReview(review_id=review_id, caller_id=identity.user_id, caller_role=identity.role)
        )
        self._refresh_rating(product_id)
        return product_id

    def mark_helpful(self, identity, review_id) -> Review:
        self._require_authenticated(identity)

        self._process(
            MarkHelpful(
                review_id=review_id,
                voter_id=identity.user_id,
                unique_voter=self.deduplicate_helpful_votes,
            )
        )
        return self._store().get_review(review_id)

    def register_product(self, identity, product_id, name, slug=None) -> Product:
        """Mirror a catalogue product so it can be reviewed. Moderators only."""
        self._require_authenticated(identity)
        if not identity.is_moderator:
            raise Forbidden("Moderator capability required", product_id=str(product_id))

        self._process(RegisterProduct(product_id=product_id, name=name, slug=slug))
        return self._product(product_id)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def list_reviews(self, identity, filters=None, page=1, page_size=None, sort=None) -> dict:
        """One page of reviews the caller is allowed to see.

        Returns ``{"reviews": [...], "pagination": {"total", "page", "pages"}}``.
        """
        if page_size is None:
            page_size = get_setting("REVIEWS_PAGE_SIZE")
        max_page_size = get_setting("MAX_PAGE_SIZE")
        if page < 1:
            raise ValidationError({"page": ["Page must be 1 or greater"]})
        if not 1 <= page_size <= max_page_size:
            raise ValidationError({"limit": [f"Page size must be between 1 and {max_page_size}"]})

        filters = {key: value for key, value in (filters or {}).items() if value is not None}
        own_reviews = identity.authenticated and filters.get("author_id") == identity.user_id
        if not (identity.is_moderator or own_reviews):
            requested = filters.get("status", ReviewStatus.APPROVED.value)
            if requested != ReviewStatus.APPROVED.value:
                raise Forbidden("Only moderators can list unapproved reviews of other authors")
            filters["status"] = ReviewStatus.APPROVED.value

        items, total = self._store().list_reviews(filters=filters, page=page, page_size=page_size, sort=sort)
        return {
            "reviews": items,
            "pagination": {
                "total": total,
                "page": page,
                "pages": math.ceil(total / page_size),
            },
        }

    def get_review(self, identity, review_id) -> Review:
        review = self._store().get_review(review_id)
        if review.is_approved or identity.is_moderator:
            return review
        if identity.authenticated and str(review.author_id) == str(identity.user_id):
            return review
        raise NotFound(f"Review {review_id} not found", review_id=str(review_id))

    def product_rating(self, product_id) -> dict:
        """The displayed aggregate plus the per-star breakdown."""
        product = self._product(product_id)
        if product is None:
            raise NotFound(f"Product {product_id} not found", product_id=str(product_id))

        return {
            "product_id": str(product.product_id),
            "rating": product.rating,
            "num_reviews": product.num_reviews,
            "breakdown": self._store().rating_breakdown(product_id),
        }

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @staticmethod
    def _store():
        return current_domain.repository_for(Review)

    @staticmethod
    def _product(product_id):
        try:
            return current_domain.repository_for(Product).get(product_id)
        except ObjectNotFoundError:
            return None

    @staticmethod
    def _require_authenticated(identity):
        if identity is None or not identity.authenticated:
            raise Unauthenticated("Authentication required")

    def _process(self, command):
        try:
            return current_domain.process(command, asynchronous=False)
        except (ReviewsError, ValidationError):
            raise
        except Exception as exc:
            logger.exception("Command processing failed", command=type(command).__name__)
            raise UpstreamUnavailable(
                "Review storage is unavailable",
                command=type(command).__name__,
            ) from exc

    def _refresh_rating(self, product_id) -> None:
        try:
            self.aggregator.recompute(product_id)
        except Exception:
            logger.exception("Rating recompute failed", product_id=str(product_id))

    def _notify(self, template_name, recipient, variables) -> None:
        if not recipient:
            logger.warning("No recipient for notification", template=template_name)
            return
        try:
            self.notifier.send(template_name, recipient, variables)
        except Exception:
            logger.exception("Notification failed", template=template_name, recipient=recipient)

    @staticmethod
    def _author_address(review):
        return review.author_email or str(review.author_id)

    def _template_variables(self, review, **extra) -> dict:
        product = self._product(review.product_id)
        variables = {
            "review_id": str(review.id),
            "user_name": review.author_name or str(review.author_id),
            "product_name": product.name if product else str(review.product_id),
            "review_content": review.comment,
        }
        variables.update({key: value for key, value in extra.items() if value is not None})
        return variables
