"""Reviews & Ratings bounded context — Product Reviews, Moderation, and Rating Aggregation.

Handles the review lifecycle (submission, moderation, reporting, helpful
votes, deletion) and keeps each product's displayed rating consistent with
its approved reviews. Notifications to authors and the operations mailbox
are best-effort.
"""

import structlog
from protean.domain import Domain

reviews = Domain(name="reviews")

logger = structlog.get_logger(__name__)
