"""DeleteReview — permanently remove a review.

The review's author or a moderator may delete it. Rating recomputation for
the affected product is the workflow's job, not the handler's.
"""

from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.errors import Forbidden
from reviews.identity import is_moderator_role
from reviews.review.review import Review


@reviews.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String()


@reviews.command_handler(part_of=Review)
class DeleteReviewHandler:
    @handle(DeleteReview)
    def delete_review(self, command):
        store = current_domain.repository_for(Review)
        review = store.get_review(command.review_id)

        is_author = str(review.author_id) == str(command.caller_id)
        if not (is_author or is_moderator_role(command.caller_role)):
            raise Forbidden("Only the author or a moderator can delete this review", review_id=str(review.id))

        store.delete_review(review.id)
        return str(review.product_id)
