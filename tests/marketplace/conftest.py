import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from marketplace.delivery import reset_estimator
from marketplace.product.product import Product


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _reset_estimator():
    reset_estimator()
    yield
    reset_estimator()


@pytest.fixture()
def make_product():
    """Persist a product directly and return it."""

    def _make(name="Widget", price=10.0, stock=10, store_id="store-001"):
        product = Product.create(name=name, price=price, stock=stock, store_id=store_id)
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture()
def register_account():
    """Register an account through its command and return the account id."""
    from marketplace.account.registration import RegisterAccount

    counter = iter(range(1, 10_000))

    def _register(name="Ada", role="customer", address="1 Main St, Springfield"):
        email = f"user{next(counter)}@example.com"
        command = RegisterAccount(name=name, email=email, role=role, address=address)
        return current_domain.process(command, asynchronous=False)

    return _register
