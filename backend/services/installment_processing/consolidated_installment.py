"""
Groups one user's due installments into a single order and checks it out.

The batch shrinks as it goes: out-of-stock installments are taken out before
checkout, and a failed payment clears it. Whatever is still unfulfilled when
``process`` exits, by return or by exception, is handed to the failure
dispatcher so it gets rescheduled.
"""

import logging
from typing import Dict, List, Optional, Sequence, Type

from config import settings
from constants import LOGGER_NAME
from schemas import Address, CreditCard, Installment, LineItem, Order, RootOrder, User

from .backend import ProcessingBackend, default_backend, load_class
from .checkout import CheckoutPipeline, CheckoutResult
from .errors import UserMismatchError
from .line_item_builder import LineItemBuilder
from .order_builder import OrderBuilder

logger = logging.getLogger(LOGGER_NAME)


class ConsolidatedInstallment:
    def __init__(
        self,
        installments: Sequence[Installment],
        backend: Optional[ProcessingBackend] = None,
    ) -> None:
        self.installments: List[Installment] = list(installments)
        if self._different_owners():
            raise UserMismatchError(self.installments)
        self.backend = backend or default_backend()
        self.checkout_pipeline = CheckoutPipeline(self.backend.orders, self.backend.gateway)
        self._subscription = self.installments[0].subscription if self.installments else None
        self._order: Optional[Order] = None
        self._order_builder: Optional[OrderBuilder] = None

    @property
    def user(self) -> User:
        return self._subscription.user

    @property
    def root_order(self) -> Optional[RootOrder]:
        return self._subscription.root_order

    @property
    def order(self) -> Order:
        if self._order is None:
            store_id = self._subscription.store_id or self.backend.orders.default_store_id()
            self._order = self.backend.orders.create_order(self.user, self.user.email, store_id)
            logger.info("Created order=%s user=%s store=%s", self._order.number, self.user.id, store_id)
        return self._order

    def process(self) -> Optional[Order]:
        try:
            self._populate()

            # Out-of-stock installments were removed above; nothing left to buy
            if not self.installments:
                return None

            if self._checkout():
                self._dispatch(settings.success_dispatcher_class, self.installments, self.order)
                return self.order

            if self._payment_failed():
                self._dispatch(settings.payment_failed_dispatcher_class, self.installments, self.order)
                self.installments.clear()
            return None
        finally:
            unfulfilled = [installment for installment in self.installments if installment.unfulfilled]
            if unfulfilled:
                self._dispatch(settings.failure_dispatcher_class, unfulfilled, self._order)

    def _populate(self) -> None:
        line_items: List[LineItem] = []
        out_of_stock: List[Installment] = []
        # Units per variant already taken by earlier installments in this order
        allocated: Dict[str, int] = {}
        for installment in self.installments:
            built = LineItemBuilder(
                installment.subscription.line_items, self.backend.catalog, allocated
            ).line_items()
            if not built:
                out_of_stock.append(installment)
                continue
            line_items.extend(built)

        if out_of_stock:
            self.installments = [
                installment
                for installment in self.installments
                if all(installment is not missing for missing in out_of_stock)
            ]
            self._dispatch(settings.out_of_stock_dispatcher_class, out_of_stock)

        if not self.installments:
            return
        self._builder().add_line_items(line_items)

    def _checkout(self) -> CheckoutResult:
        order = self.order
        order.update_totals()
        self._apply_promotions()

        self.checkout_pipeline.advance(order)  # cart => address

        order.ship_address = self._ship_address()
        self.checkout_pipeline.advance(order)  # address => delivery
        self.checkout_pipeline.advance(order)  # delivery => payment

        self.checkout_pipeline.create_payment(
            order,
            self._active_card(),
            order.total,
            settings.default_gateway,
        )
        self.checkout_pipeline.advance(order)  # payment => confirm

        return self.checkout_pipeline.complete_quietly(order)

    def _payment_failed(self) -> bool:
        if self._order is None:
            return False
        # One order per batch, one payment per order
        assert len(self._order.payments) == 1, "consolidated order must carry exactly one payment"
        return bool(self._order.failed_payments)

    def _apply_promotions(self) -> None:
        self.backend.promotions.activate(self.order)
        self.order.update_totals()

    def _builder(self) -> OrderBuilder:
        if self._order_builder is None:
            self._order_builder = OrderBuilder(self.order)
        return self._order_builder

    def _ship_address(self) -> Optional[Address]:
        if self.user.ship_address:
            return self.user.ship_address
        return self.root_order.ship_address if self.root_order else None

    def _active_card(self) -> Optional[CreditCard]:
        card = self.user.default_credit_card
        if card is None and self.root_order and self.root_order.credit_cards:
            card = self.root_order.credit_cards[-1]
        return card

    def _dispatch(
        self,
        dispatcher_path: str,
        installments: Sequence[Installment],
        order: Optional[Order] = None,
    ) -> None:
        dispatcher_class: Type = load_class(dispatcher_path)
        dispatcher_class(installments, order, repository=self.backend.installments).dispatch()

    def _different_owners(self) -> bool:
        return len({installment.subscription.user.id for installment in self.installments}) > 1
