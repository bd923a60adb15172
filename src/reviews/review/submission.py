"""SubmitReview — submit a new product review.

Enforces one-review-per-author-per-product through the ReviewStore, which
backs the check with a unique column. The reviewed product must be known
to this service.
"""

import json

from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.errors import AlreadyReviewed, DuplicateReview, NotFound
from reviews.product.product import Product
from reviews.review.review import Review


@reviews.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    author_id = Identifier(required=True)
    rating = Integer(required=True)
    comment = Text(required=True)
    title = String(max_length=200)
    images = Text()  # JSON array of {url, alt_text}
    author_name = String(max_length=100)
    author_email = String(max_length=254)


@reviews.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        try:
            current_domain.repository_for(Product).get(command.product_id)
        except ObjectNotFoundError as exc:
            raise NotFound(
                f"Product {command.product_id} not found",
                product_id=str(command.product_id),
            ) from exc

        images_data = json.loads(command.images) if command.images else None

        review = Review.submit(
            product_id=command.product_id,
            author_id=command.author_id,
            rating=command.rating,
            comment=command.comment,
            title=command.title,
            images=images_data,
            author_name=command.author_name,
            author_email=command.author_email,
        )

        store = current_domain.repository_for(Review)
        try:
            store.create_review(review)
        except DuplicateReview as exc:
            raise AlreadyReviewed("You have already reviewed this product", **exc.context) from exc

        return str(review.id)
