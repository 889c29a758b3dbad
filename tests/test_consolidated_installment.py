from datetime import date
from decimal import Decimal

import pytest

from config import settings
from schemas import CreditCard, Order, RootOrder
from services.installment_processing import (
    CheckoutTransitionError,
    ConsolidatedInstallment,
    UnsubscribableError,
    UserMismatchError,
)
from services.installment_processing.checkout import CheckoutResult

from .fakes import ItemTotalPromotion, make_address, make_backend, make_installment, make_user, make_variant


@pytest.fixture
def installments(user, variants):
    return [
        make_installment("installment-1", user, [variants[0].id]),
        make_installment("installment-2", user, [variants[1].id]),
    ]


@pytest.fixture
def consolidated(installments, backend):
    return ConsolidatedInstallment(installments, backend=backend)


def _expected_date() -> date:
    return date.today() + settings.reprocessing_interval


def test_installments_from_different_users_raise(variants, backend):
    installments = [
        make_installment("installment-1", make_user("user-1"), [variants[0].id]),
        make_installment("installment-2", make_user("user-2"), [variants[1].id]),
    ]

    with pytest.raises(UserMismatchError, match="must have the same user"):
        ConsolidatedInstallment(installments, backend=backend)


def test_completed_checkout(consolidated, installments, variants, installment_store):
    order = consolidated.process()

    assert isinstance(order, Order)
    assert order.is_complete
    assert len(order.line_items) == len(installments)
    first = order.line_items[0]
    assert first.variant_id == variants[0].id
    assert first.quantity == installments[0].subscription.line_items[0].quantity
    assert order.shipments
    assert order.valid_payments
    assert order.total == Decimal("49.98")
    assert order.shipment_total == Decimal("10.00")
    assert len(installment_store.outcomes) == len(installments)
    for installment in installments:
        assert len(installment.details) == 1
        assert installment.details[-1].success
        assert installment.details[-1].order_id == order.id


def test_out_of_stock_installment_is_removed(consolidated, installments, variants, catalog):
    catalog.set_stock(variants[0].id, 0)

    order = consolidated.process()

    assert consolidated.installments == [installments[1]]
    detail = installments[0].details[-1]
    assert not detail.success
    assert detail.message == "out of stock"
    assert order.is_complete
    assert len(order.line_items) == 1
    assert order.line_items[0].variant_id == variants[1].id
    assert order.total == Decimal("29.99")
    assert installments[1].details[-1].success


def test_all_out_of_stock_creates_no_order(consolidated, installments, variants, catalog, orders):
    for variant in variants:
        catalog.set_stock(variant.id, 0)

    assert consolidated.process() is None
    assert orders.orders == []
    for installment in installments:
        assert len(installment.details) == 1
        assert not installment.details[-1].success
        assert installment.details[-1].message == "out of stock"


def test_payment_failure_reschedules_every_installment(consolidated, installments, user, installment_store):
    user.credit_cards.append(CreditCard(id="card-declined", user_id=user.id, default=True))

    assert consolidated.process() is None

    assert consolidated.installments == []
    for installment in installments:
        detail = installment.details[-1]
        assert not detail.success
        assert detail.message == "payment failed"
        assert installment.actionable_date == _expected_date()
    # the failure sweep does not process them a second time
    assert len(installment_store.outcomes) == len(installments)
    assert consolidated.order.failed_payments


def test_cart_promotions_reduce_total(installments, catalog, orders, installment_store):
    backend = make_backend(catalog, orders, installment_store, promotions=ItemTotalPromotion())

    order = ConsolidatedInstallment(installments, backend=backend).process()

    assert order.is_complete
    assert order.adjustments
    assert order.total == Decimal("39.98")
    assert order.payments[0].amount == Decimal("39.98")


def test_arbitrary_failure_still_reschedules(consolidated, installments, monkeypatch):
    def explode():
        raise RuntimeError("arbitrary runtime error")

    monkeypatch.setattr(consolidated, "_populate", explode)

    with pytest.raises(RuntimeError, match="arbitrary runtime error"):
        consolidated.process()

    for installment in installments:
        assert installment.actionable_date == _expected_date()
        assert installment.details[-1].message == "failed"


def test_unsubscribable_variant_propagates_after_rescheduling(user, catalog, backend):
    catalog.add_variant(make_variant("variant-x", subscribable=False))
    installment = make_installment("installment-x", user, ["variant-x"])

    with pytest.raises(UnsubscribableError, match="cannot be subscribed to"):
        ConsolidatedInstallment([installment], backend=backend).process()

    assert installment.actionable_date == _expected_date()
    assert not installment.details[-1].success


def test_checkout_rejection_propagates_after_rescheduling(variants, backend):
    user = make_user(with_address=False)
    installment = make_installment("installment-1", user, [variants[0].id])
    consolidated = ConsolidatedInstallment([installment], backend=backend)

    with pytest.raises(CheckoutTransitionError, match="ship address is missing"):
        consolidated.process()

    assert installment.actionable_date == _expected_date()
    assert installment.details[-1].order_id == consolidated.order.id


def test_root_order_address_and_card_are_fallbacks(variants, backend):
    user = make_user(card_profile=None, with_address=False)
    root_address = make_address(address1="1 Root Order Road")
    root_order = RootOrder(
        id="root-1",
        store_id="store-1",
        ship_address=root_address,
        credit_cards=[CreditCard(id="root-card", gateway_customer_profile_id="BGS-456")],
    )
    installment = make_installment("installment-1", user, [variants[0].id], root_order=root_order)

    order = ConsolidatedInstallment([installment], backend=backend).process()

    assert order.is_complete
    assert order.ship_address == root_address
    assert order.payments[0].source.id == "root-card"


def test_order_has_the_batch_attributes(consolidated, user):
    order = consolidated.order

    assert order.user_id == user.id
    assert order.email == user.email
    assert order.store_id == "store-1"
    assert order.subscription_order


def test_order_falls_back_to_default_store(user, variants, backend):
    installment = make_installment("installment-1", user, [variants[0].id], root_order=RootOrder(id="root-1"))

    assert ConsolidatedInstallment([installment], backend=backend).order.store_id == "default-store"


def test_order_is_memoized(consolidated, orders):
    first = consolidated.order

    assert consolidated.order is first
    assert len(orders.orders) == 1


def test_same_variant_across_installments_is_merged(user, variants, backend):
    installments = [
        make_installment("installment-1", user, [variants[0].id], quantity=2),
        make_installment("installment-2", user, [variants[0].id], quantity=1),
    ]

    order = ConsolidatedInstallment(installments, backend=backend).process()

    assert len(order.line_items) == 1
    assert order.line_items[0].quantity == 3


def test_other_unsuccessful_completion_goes_to_failure_sweep(consolidated, installments, monkeypatch):
    monkeypatch.setattr(
        consolidated.checkout_pipeline,
        "complete_quietly",
        lambda order: CheckoutResult(False, "store closed"),
    )

    assert consolidated.process() is None

    for installment in installments:
        assert installment.details[-1].message == "failed"
        assert installment.actionable_date == _expected_date()


def test_merged_quantity_cannot_exceed_stock(user, variants, catalog, backend):
    catalog.set_stock(variants[0].id, 5)
    installments = [
        make_installment("installment-1", user, [variants[0].id], quantity=3),
        make_installment("installment-2", user, [variants[0].id], quantity=3),
    ]
    consolidated = ConsolidatedInstallment(installments, backend=backend)

    order = consolidated.process()

    assert consolidated.installments == [installments[0]]
    assert len(order.line_items) == 1
    assert order.line_items[0].quantity == 3
    assert installments[0].details[-1].success
    assert installments[1].details[-1].message == "out of stock"


def test_partially_buildable_installment_is_checked_out(user, variants, catalog, backend):
    catalog.set_stock(variants[1].id, 0)
    installment = make_installment("installment-1", user, [variants[0].id, variants[1].id])
    consolidated = ConsolidatedInstallment([installment], backend=backend)

    order = consolidated.process()

    assert consolidated.installments == [installment]
    assert [item.variant_id for item in order.line_items] == [variants[0].id]
    assert order.total == Decimal("29.99")
    assert len(installment.details) == 1
    assert installment.details[-1].success
    assert installment.details[-1].message == "success"
