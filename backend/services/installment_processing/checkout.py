import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from config import settings
from constants import LOGGER_NAME, ORDER_STATES
from schemas import CreditCard, Order, Payment, Shipment

from .backend import OrderStore
from .errors import CheckoutTransitionError
from .gateways import PaymentGateway

logger = logging.getLogger(LOGGER_NAME)


@dataclass
class CheckoutResult:
    """Outcome of the final checkout step. Falsy when the order did not complete."""

    success: bool
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success


class CheckoutPipeline:
    """Moves an order through cart -> address -> delivery -> payment -> confirm -> complete.

    ``advance`` raises ``CheckoutTransitionError`` when the order is not ready
    to leave its current state. ``complete_quietly`` is the last step in a
    non-raising form: a declined payment yields a falsy ``CheckoutResult``.
    """

    def __init__(
        self,
        orders: OrderStore,
        gateway: PaymentGateway,
        shipping_rate: Optional[Decimal] = None,
    ) -> None:
        self.orders = orders
        self.gateway = gateway
        self.shipping_rate = settings.shipping_flat_rate if shipping_rate is None else shipping_rate

    def advance(self, order: Order) -> Order:
        if order.state == "confirm":
            result = self.complete_quietly(order)
            if not result:
                raise CheckoutTransitionError(order, result.message or "payment failed")
            return order
        if order.state not in ORDER_STATES or order.is_complete:
            raise CheckoutTransitionError(order, "no further transitions")

        getattr(self, f"_leave_{order.state}")(order)
        previous = order.state
        order.state = ORDER_STATES[ORDER_STATES.index(previous) + 1]
        order.update_totals()
        self.orders.save_order(order)
        logger.info("order=%s %s -> %s", order.number, previous, order.state)
        return order

    def create_payment(
        self,
        order: Order,
        source: Optional[CreditCard],
        amount: Decimal,
        payment_method: str,
    ) -> Payment:
        payment = Payment(source=source, amount=amount, payment_method=payment_method)
        order.payments.append(payment)
        self.orders.save_order(order)
        return payment

    def complete_quietly(self, order: Order) -> CheckoutResult:
        if order.state != "confirm":
            return CheckoutResult(False, f"order is in {order.state}, not confirm")

        for payment in order.payments:
            if payment.state != "checkout":
                continue
            response = self.gateway.purchase(payment.amount, payment.source, order_number=order.number or "")
            payment.response_message = response.message
            if not response.success:
                payment.state = "failed"
                self.orders.save_order(order)
                logger.warning("Payment declined order=%s message=%s", order.number, response.message)
                return CheckoutResult(False, response.message)
            payment.state = "completed"

        order.state = "complete"
        order.completed_at = datetime.now(timezone.utc)
        for shipment in order.shipments:
            shipment.state = "ready"
        self.orders.save_order(order)
        logger.info("order=%s completed total=%s", order.number, order.total)
        return CheckoutResult(True)

    def _leave_cart(self, order: Order) -> None:
        if not order.line_items:
            raise CheckoutTransitionError(order, "cart is empty")

    def _leave_address(self, order: Order) -> None:
        if order.ship_address is None:
            raise CheckoutTransitionError(order, "ship address is missing")
        order.shipments = [Shipment(address=order.ship_address, cost=self.shipping_rate)]

    def _leave_delivery(self, order: Order) -> None:
        if not order.shipments:
            raise CheckoutTransitionError(order, "no shipments")

    def _leave_payment(self, order: Order) -> None:
        order.update_totals()
        covered = sum((payment.amount for payment in order.valid_payments), Decimal("0"))
        if covered < order.total:
            raise CheckoutTransitionError(order, f"payments cover {covered} of {order.total}")
