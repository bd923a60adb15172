import pytest
from fastapi.testclient import TestClient
from protean import current_domain
from protean.integrations.pytest import DomainFixture
from reviews.identity import Identity
from reviews.notification.email_notifier import EmailNotifier
from reviews.notification.fake_email import FakeEmailAdapter
from reviews.product.registration import RegisterProduct
from reviews.workflow import ModerationWorkflow

OPS_MAILBOX = "reviews-ops@storefront.example"


@pytest.fixture(scope="session")
def reviews_bed():
    from reviews.domain import reviews

    bed = DomainFixture(reviews)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(reviews_bed):
    with reviews_bed.domain_context():
        yield

        # Clear all databases and drain the event store
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


def _register_product(product_id="prod-001", name="Trail Runner 2", slug="trail-runner-2"):
    current_domain.process(
        RegisterProduct(product_id=product_id, name=name, slug=slug),
        asynchronous=False,
    )
    return product_id


def _customer(user_id="cust-001", name="Ada Lovelace", email=None):
    return Identity(
        authenticated=True,
        user_id=user_id,
        display_name=name,
        email=email or f"{user_id}@example.com",
        role="customer",
    )


def _moderator(user_id="mod-001"):
    return Identity(
        authenticated=True,
        user_id=user_id,
        display_name="Grace Hopper",
        email=f"{user_id}@storefront.example",
        role="moderator",
    )


@pytest.fixture()
def product():
    return _register_product()


@pytest.fixture()
def fake_email():
    return FakeEmailAdapter()


@pytest.fixture()
def workflow(fake_email):
    return ModerationWorkflow(
        notifier=EmailNotifier(fake_email),
        operations_mailbox=OPS_MAILBOX,
    )


@pytest.fixture()
def client(reviews_bed, workflow):
    from reviews.api import create_app
    from reviews.domain import reviews

    return TestClient(create_app(reviews, workflow=workflow))


def _headers_for(identity):
    return {
        "X-User-Id": identity.user_id,
        "X-User-Name": identity.display_name or "",
        "X-User-Email": identity.email or "",
        "X-User-Role": identity.role or "",
    }


@pytest.fixture()
def register_product():
    """Factory registering a catalogue product; returns its id."""
    return _register_product


@pytest.fixture()
def make_customer():
    return _customer


@pytest.fixture()
def author():
    return _customer()


@pytest.fixture()
def other_customer():
    return _customer(user_id="cust-002", name="Alan Turing")


@pytest.fixture()
def mod():
    return _moderator()


@pytest.fixture()
def headers_for():
    return _headers_for
