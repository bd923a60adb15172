"""Product aggregate — the rating-relevant slice of a catalogue product.

The catalogue owns products; this service mirrors the identifier, name and
slug it needs for review pages and notifications, and owns the displayed
``rating`` / ``num_reviews`` pair. Those two fields are written only by the
RatingAggregator.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from reviews.domain import reviews


@reviews.aggregate
class Product:
    product_id = Identifier(identifier=True, required=True)
    name = String(required=True, max_length=255)
    slug = String(max_length=255)
    rating = Float(default=0.0)
    num_reviews = Integer(default=0)
    rating_updated_at = DateTime()

    @invariant.post
    def rating_must_be_in_range(self):
        if self.rating is not None and not (0 <= self.rating <= 5):
            raise ValidationError({"rating": ["Product rating must be between 0 and 5"]})

    @invariant.post
    def review_count_cannot_be_negative(self):
        if self.num_reviews is not None and self.num_reviews < 0:
            raise ValidationError({"num_reviews": ["Review count cannot be negative"]})

    @classmethod
    def register(cls, product_id, name, slug=None):
        return cls(product_id=product_id, name=name, slug=slug, rating=0.0, num_reviews=0)

    def rename(self, name, slug=None):
        self.name = name
        if slug is not None:
            self.slug = slug

    def record_rating(self, rating: float, num_reviews: int) -> None:
        """Store a freshly computed aggregate."""
        self.rating = rating
        self.num_reviews = num_reviews
        self.rating_updated_at = datetime.now(UTC)
