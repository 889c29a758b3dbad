import os
import sys

import pytest

from .consts import BACKEND_DIR, TEST_ENV

for name, value in TEST_ENV.items():
    os.environ.setdefault(name, value)

# Ensure backend/ is importable
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from .fakes import (  # noqa: E402
    FakeCatalog,
    FakeInstallmentStore,
    FakeOrderStore,
    make_address,
    make_backend,
    make_user,
    make_variant,
)


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def orders():
    return FakeOrderStore()


@pytest.fixture
def installment_store():
    return FakeInstallmentStore()


@pytest.fixture
def backend(catalog, orders, installment_store):
    return make_backend(catalog, orders, installment_store)


@pytest.fixture
def user():
    return make_user()


@pytest.fixture
def ship_address():
    return make_address()


@pytest.fixture
def variants(catalog):
    first = make_variant("variant-1", price="19.99")
    second = make_variant("variant-2", price="19.99")
    catalog.add_variant(first, count_on_hand=10)
    catalog.add_variant(second, count_on_hand=10)
    return [first, second]
