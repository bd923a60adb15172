"""EditReview — the author's limited self-edit of a review.

Only the original author can edit, only while the review is PENDING, and
only the comment, rating and images.
"""

import json

from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.errors import Forbidden
from reviews.review.review import Review


@reviews.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    author_id = Identifier(required=True)  # Must match original author
    comment = Text()
    rating = Integer()
    images = Text()  # JSON array of {url, alt_text}


@reviews.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        store = current_domain.repository_for(Review)
        review = store.get_review(command.review_id)

        if str(review.author_id) != str(command.author_id):
            raise Forbidden("Only the review author can edit this review", review_id=str(review.id))

        changes = {}
        if command.comment is not None:
            changes["comment"] = command.comment
        if command.rating is not None:
            changes["rating"] = command.rating
        if command.images is not None:
            changes["images"] = json.loads(command.images)

        if review.revise_by_author(command.author_id, **changes):
            store.add(review)
