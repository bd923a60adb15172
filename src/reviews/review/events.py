"""Domain events for the Review aggregate.

All events are versioned, immutable facts representing state changes.
They are written to the event store alongside each review change and
give downstream consumers (search indexing, analytics) a stable feed.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from reviews.domain import reviews


@reviews.event(part_of="Review")
class ReviewSubmitted:
    """A customer submitted a new product review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    author_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String()
    comment = Text(required=True)
    image_count = Integer(default=0)
    submitted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewEdited:
    """Review content was changed by its author or a moderator."""

    __version__ = 1

    review_id = Identifier(required=True)
    edited_by = Identifier(required=True)
    changed_fields = String(required=True)  # comma-separated field names
    rating = Integer()
    edited_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewApproved:
    """A moderator approved the review for display."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    author_id = Identifier(required=True)
    rating = Integer(required=True)
    moderator_id = Identifier(required=True)
    approved_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewRejected:
    """A moderator rejected the review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    author_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    response = Text()
    rejected_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ModeratorResponded:
    """A moderator attached a response without changing the status."""

    __version__ = 1

    review_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    comment = Text(required=True)
    responded_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewReported:
    """A review was flagged for moderator attention."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    reporter_id = Identifier(required=True)
    reason = String()
    reported_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewReportCleared:
    """A moderator dismissed an outstanding report."""

    __version__ = 1

    review_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    cleared_at = DateTime(required=True)


@reviews.event(part_of="Review")
class HelpfulVoteRecorded:
    """A customer marked a review as helpful."""

    __version__ = 1

    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)
    helpful_count = Integer(required=True)
    voted_at = DateTime(required=True)
