"""ReportReview — flag a review for moderator attention.

Any authenticated user may report a review at any status. Reporting is
idempotent; the handler tells the caller whether the flag actually flipped.
"""

from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.review import Review


@reviews.command(part_of="Review")
class ReportReview:
    review_id = Identifier(required=True)
    reporter_id = Identifier(required=True)
    reason = String(max_length=500)


@reviews.command_handler(part_of=Review)
class ReportReviewHandler:
    @handle(ReportReview)
    def report_review(self, command):
        store = current_domain.repository_for(Review)
        review = store.get_review(command.review_id)

        newly_reported = review.report(
            reporter_id=command.reporter_id,
            reason=command.reason,
        )
        if newly_reported:
            store.add(review)

        return newly_reported
