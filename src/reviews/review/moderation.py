"""ModerateReview — a moderator's edit of a review.

Moderators can approve or reject a review (optionally with a response for
the author), attach a response on its own, change any content field, and
raise or dismiss the reported flag.
"""

import json

from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.errors import Forbidden
from reviews.identity import is_moderator_role
from reviews.review.review import Review, ReviewStatus


@reviews.command(part_of="Review")
class ModerateReview:
    review_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    moderator_role = String(required=True)
    status = String()  # "approved" or "rejected"
    response = Text()
    title = String(max_length=200)
    comment = Text()
    rating = Integer()
    images = Text()  # JSON array of {url, alt_text}
    verified_purchase = Boolean()
    reported = Boolean()


def _target_status(value):
    try:
        target = ReviewStatus(value)
    except ValueError:
        raise ValidationError({"status": [f"Unknown review status '{value}'"]}) from None
    if target == ReviewStatus.PENDING:
        raise ValidationError({"status": ["A moderated review cannot be returned to pending"]})
    return target


@reviews.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ModerateReview)
    def moderate_review(self, command):
        if not is_moderator_role(command.moderator_role):
            raise Forbidden("Moderator capability required", review_id=str(command.review_id))

        target = _target_status(command.status) if command.status is not None else None

        changes = {}
        if command.title is not None:
            changes["title"] = command.title
        if command.comment is not None:
            changes["comment"] = command.comment
        if command.rating is not None:
            changes["rating"] = command.rating
        if command.images is not None:
            changes["images"] = json.loads(command.images)
        if command.verified_purchase is not None:
            changes["verified_purchase"] = command.verified_purchase

        store = current_domain.repository_for(Review)
        review = store.update_review(command.review_id, changes, edited_by=command.moderator_id)

        if target == ReviewStatus.APPROVED:
            review.approve(moderator_id=command.moderator_id, response=command.response)
        elif target == ReviewStatus.REJECTED:
            review.reject(moderator_id=command.moderator_id, response=command.response)
        elif command.response:
            review.respond(moderator_id=command.moderator_id, comment=command.response)

        if command.reported is True:
            review.report(reporter_id=command.moderator_id)
        elif command.reported is False:
            review.clear_report(moderator_id=command.moderator_id)

        store.add(review)
