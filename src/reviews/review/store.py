"""ReviewStore: repository for the Review aggregate.

Wraps the base repository with the review-specific lookups the workflow
needs. Each mutation touches a single review; nothing here spans reviews.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from reviews.domain import reviews
from reviews.errors import DuplicateReview, NotFound
from reviews.review.review import Review, ReviewStatus

logger = structlog.get_logger(__name__)

SORTABLE_FIELDS = ("created_at", "updated_at", "helpful_count")
DEFAULT_SORT = "-created_at"
FILTERABLE_FIELDS = ("product_id", "author_id", "status", "reported")

# Page size used when the store has to walk every matching review
_SCAN_BATCH = 200


def normalize_sort(sort: str | None) -> str:
    """Validate a ``field`` / ``-field`` sort expression."""
    if not sort:
        return DEFAULT_SORT
    if sort.lstrip("-") not in SORTABLE_FIELDS:
        raise ValidationError({"sort": [f"Cannot sort by '{sort}'. Allowed: {', '.join(SORTABLE_FIELDS)}"]})
    return sort


@reviews.repository(part_of=Review)
class ReviewStore:
    def find_review(self, author_id, product_id) -> Review | None:
        """Return the author's review of a product, if any."""
        result = self._dao.query.filter(
            author_id=str(author_id),
            product_id=str(product_id),
        ).all()
        return result.items[0] if result.items else None

    def get_review(self, review_id) -> Review:
        try:
            return self.get(review_id)
        except ObjectNotFoundError as exc:
            raise NotFound(f"Review {review_id} not found", review_id=str(review_id)) from exc

    def create_review(self, review: Review) -> Review:
        """Persist a new review, enforcing one review per (author, product)."""
        if self.find_review(review.author_id, review.product_id) is not None:
            raise DuplicateReview(
                "A review for this product by this author already exists",
                author_id=str(review.author_id),
                product_id=str(review.product_id),
            )

        try:
            self.add(review)
        except ValidationError as exc:
            # Unique author_product_key rejected a concurrent insert
            if "author_product_key" in exc.messages:
                raise DuplicateReview(
                    "A review for this product by this author already exists",
                    author_id=str(review.author_id),
                    product_id=str(review.product_id),
                ) from exc
            raise

        logger.info(
            "Review created",
            review_id=str(review.id),
            product_id=str(review.product_id),
            author_id=str(review.author_id),
        )
        return review

    def update_review(self, review_id, patch: dict, edited_by=None) -> Review:
        """Apply a content patch (title, comment, rating, images, verified_purchase)."""
        review = self.get_review(review_id)
        if review.revise(edited_by=edited_by or review.author_id, **patch):
            self.add(review)
        return review

    def delete_review(self, review_id) -> Review:
        review = self.get_review(review_id)
        self._dao.delete(review)

        logger.info(
            "Review deleted",
            review_id=str(review_id),
            product_id=str(review.product_id),
            status=review.status,
        )
        return review

    def list_reviews(self, filters=None, page=1, page_size=10, sort=DEFAULT_SORT):
        """Return ``(reviews, total)`` for one page of matching reviews."""
        criteria = {key: value for key, value in (filters or {}).items() if value is not None}
        unknown = set(criteria) - set(FILTERABLE_FIELDS)
        if unknown:
            raise ValidationError({"filters": [f"Unsupported filter(s): {', '.join(sorted(unknown))}"]})
        if "status" in criteria:
            try:
                criteria["status"] = ReviewStatus(criteria["status"]).value
            except ValueError:
                raise ValidationError({"status": [f"Unknown review status '{criteria['status']}'"]}) from None

        query = self._dao.query.filter(**criteria) if criteria else self._dao.query
        result = query.order_by(normalize_sort(sort)).offset((page - 1) * page_size).limit(page_size).all()
        return result.items, result.total

    def _approved_reviews(self, product_id):
        offset = 0
        while True:
            result = (
                self._dao.query.filter(
                    product_id=str(product_id),
                    status=ReviewStatus.APPROVED.value,
                )
                .order_by("created_at")
                .offset(offset)
                .limit(_SCAN_BATCH)
                .all()
            )
            yield from result.items
            offset += len(result.items)
            if not result.items or offset >= result.total:
                return

    def approved_ratings(self, product_id) -> list[int]:
        """Star scores of every approved review for a product."""
        return [review.rating.score for review in self._approved_reviews(product_id)]

    def rating_breakdown(self, product_id) -> dict[str, int]:
        """Count of approved reviews per star value, "5" down to "1"."""
        breakdown = {str(score): 0 for score in range(5, 0, -1)}
        for score in self.approved_ratings(product_id):
            breakdown[str(score)] += 1
        return breakdown

    def reviewed_product_ids(self) -> set[str]:
        """Every product that currently has at least one review."""
        product_ids = set()
        offset = 0
        while True:
            result = self._dao.query.order_by("created_at").offset(offset).limit(_SCAN_BATCH).all()
            product_ids.update(str(review.product_id) for review in result.items)
            offset += len(result.items)
            if not result.items or offset >= result.total:
                return product_ids
