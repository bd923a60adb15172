"""Failure taxonomy for the Reviews domain.

Field, range and state-machine violations are raised as
``protean.exceptions.ValidationError``; the classes below cover the
remaining outcomes a caller has to distinguish.
"""


class ReviewsError(Exception):
    """Base class for review workflow failures."""

    def __init__(self, message: str, **context) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"error": self.message, **self.context}


class Unauthenticated(ReviewsError):
    """The caller has no authenticated session."""


class Forbidden(ReviewsError):
    """The caller lacks the capability required for the operation."""


class NotFound(ReviewsError):
    """A review or product reference is stale."""


class DuplicateReview(ReviewsError):
    """The store already holds a review for this (author, product) pair."""


class AlreadyReviewed(ReviewsError):
    """The author has already reviewed this product."""


class UpstreamUnavailable(ReviewsError):
    """Persistence or notification infrastructure failed."""
