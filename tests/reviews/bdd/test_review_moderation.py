"""BDD tests for review moderation."""

from pytest_bdd import parsers, scenarios, when

scenarios("features/review_moderation.feature")


@when(parsers.cfparse('the moderator rejects the review by "{customer_id}" with response "{response}"'))
def reject_review(workflow, moderator, review_by, customer_id, response):
    workflow.moderate(moderator, review_by(customer_id).id, {"status": "rejected", "response": response})


@when(parsers.cfparse('the moderator sets the review by "{customer_id}" to "{status}"'))
def set_status(workflow, moderator, review_by, attempt, error, customer_id, status):
    attempt(error, lambda: workflow.moderate(moderator, review_by(customer_id).id, {"status": status}))
