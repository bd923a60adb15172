"""Shared BDD fixtures and step definitions for the Reviews domain."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when
from reviews.errors import ReviewsError
from reviews.identity import Identity
from reviews.product.product import Product
from reviews.product.registration import RegisterProduct
from reviews.review.review import Review


MODERATOR = Identity(authenticated=True, user_id="mod-bdd", display_name="Moderator", role="moderator")


def _customer(customer_id):
    return Identity(
        authenticated=True,
        user_id=customer_id,
        display_name=customer_id,
        email=f"{customer_id}@example.com",
        role="customer",
    )


def _review_by(customer_id):
    reviews, _ = current_domain.repository_for(Review).list_reviews(filters={"author_id": customer_id})
    assert reviews, f"No review by {customer_id}"
    return reviews[0]


def _attempt(error, action):
    try:
        action()
    except (ReviewsError, ValidationError) as exc:
        error["exc"] = exc


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


@pytest.fixture()
def review_by():
    """Look up the single review a customer wrote."""
    return _review_by


@pytest.fixture()
def attempt():
    """Run a workflow call, capturing the domain error it raises."""
    return _attempt


@pytest.fixture()
def as_customer():
    return _customer


@pytest.fixture()
def moderator():
    return MODERATOR


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a registered product "{product_id}" named "{name}"'))
def registered_product(product_id, name):
    current_domain.process(RegisterProduct(product_id=product_id, name=name), asynchronous=False)


@given(parsers.cfparse('customer "{customer_id}" submitted a {rating:d} star review of "{product_id}"'))
def submitted_review(workflow, customer_id, rating, product_id):
    workflow.submit(_customer(customer_id), product_id=product_id, rating=rating, comment="A considered opinion.")


@given(parsers.cfparse('the moderator approves the review by "{customer_id}"'))
@when(parsers.cfparse('the moderator approves the review by "{customer_id}"'))
def approve_review(workflow, customer_id):
    workflow.moderate(MODERATOR, _review_by(customer_id).id, {"status": "approved"})


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('customer "{customer_id}" submits a {rating:d} star review of "{product_id}"'))
def submit_review(workflow, error, customer_id, rating, product_id):
    _attempt(
        error,
        lambda: workflow.submit(
            _customer(customer_id),
            product_id=product_id,
            rating=rating,
            comment="A considered opinion.",
        ),
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the review by "{customer_id}" is "{status}"'))
def review_status_is(customer_id, status):
    assert _review_by(customer_id).status == status


@then(parsers.cfparse('the product "{product_id}" is rated {rating:f} from {count:d} review'))
@then(parsers.cfparse('the product "{product_id}" is rated {rating:f} from {count:d} reviews'))
def product_rating_is(product_id, rating, count):
    product = current_domain.repository_for(Product).get(product_id)
    assert product.rating == rating
    assert product.num_reviews == count


@then(parsers.cfparse('customer "{customer_id}" received an email containing "{text}"'))
def customer_received_email(fake_email, customer_id, text):
    emails = fake_email.sent_to(f"{customer_id}@example.com")
    assert any(text in email["body"] for email in emails), [email["body"] for email in emails]


@then(parsers.cfparse('the action fails with "{error_type}"'))
def action_fails(error, error_type):
    assert error["exc"] is not None, f"Expected {error_type} but nothing was raised"
    assert type(error["exc"]).__name__ == error_type
