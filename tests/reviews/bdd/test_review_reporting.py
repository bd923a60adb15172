"""BDD tests for reporting and helpful votes."""

from pytest_bdd import parsers, scenarios, then, when

scenarios("features/review_reporting.feature")

OPS_MAILBOX = "reviews-ops@storefront.example"


@when(parsers.cfparse('customer "{reporter_id}" reports the review by "{customer_id}"'))
def report_review(workflow, as_customer, review_by, reporter_id, customer_id):
    workflow.report(as_customer(reporter_id), review_by(customer_id).id, reason="spam")


@when(parsers.cfparse('customer "{voter_id}" marks the review by "{customer_id}" as helpful'))
def mark_helpful(workflow, as_customer, review_by, voter_id, customer_id):
    workflow.mark_helpful(as_customer(voter_id), review_by(customer_id).id)


@then(parsers.cfparse('the review by "{customer_id}" is reported'))
def review_is_reported(review_by, customer_id):
    assert review_by(customer_id).reported is True


@then(parsers.cfparse("the operations mailbox received {count:d} email"))
def operations_mailbox_count(fake_email, count):
    assert len(fake_email.sent_to(OPS_MAILBOX)) == count


@then(parsers.cfparse('the review by "{customer_id}" has {count:d} helpful votes'))
def helpful_votes(review_by, customer_id, count):
    assert review_by(customer_id).helpful_count == count
