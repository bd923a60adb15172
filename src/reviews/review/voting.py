"""MarkHelpful — record a "helpful" vote on a review.

Every call counts by default. With ``unique_voter`` set, a voter who has
already marked the review is rejected instead.
"""

from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.review import Review


@reviews.command(part_of="Review")
class MarkHelpful:
    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)
    unique_voter = Boolean(default=False)


@reviews.command_handler(part_of=Review)
class MarkHelpfulHandler:
    @handle(MarkHelpful)
    def mark_helpful(self, command):
        store = current_domain.repository_for(Review)
        review = store.get_review(command.review_id)

        review.mark_helpful(
            voter_id=command.voter_id,
            unique_voter=bool(command.unique_voter),
        )

        store.add(review)
        return review.helpful_count
