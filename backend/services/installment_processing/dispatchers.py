"""
Outcome channels for processed installments.

Each dispatcher records the outcome on every installment it receives and
persists it through the installment store. Swap any of them through the
``*_DISPATCHER_CLASS`` settings.
"""

import logging
from typing import Iterable, Optional

from constants import LOGGER_NAME
from schemas import Installment, InstallmentDetail, Order

from .backend import InstallmentStore

logger = logging.getLogger(LOGGER_NAME)


class Dispatcher:
    """Base channel. Subclasses must override ``mark``; ``notify`` is optional."""

    def __init__(
        self,
        installments: Iterable[Installment],
        order: Optional[Order] = None,
        *,
        repository: InstallmentStore,
    ) -> None:
        self.installments = list(installments)
        self.order = order
        self.repository = repository

    def dispatch(self) -> None:
        for installment in self.installments:
            detail = self.mark(installment)
            self.repository.save_outcome(installment, detail)
        self.notify()

    def mark(self, installment: Installment) -> InstallmentDetail:
        raise NotImplementedError

    def notify(self) -> None:
        pass

    @property
    def _installment_ids(self) -> str:
        return ",".join(installment.id for installment in self.installments)

    @property
    def _order_number(self) -> str:
        return (self.order.number or self.order.id or "") if self.order else "-"


class SuccessDispatcher(Dispatcher):
    def mark(self, installment: Installment) -> InstallmentDetail:
        return installment.success(self.order)

    def notify(self) -> None:
        logger.info("Installments processed installments=%s order=%s", self._installment_ids, self._order_number)


class FailureDispatcher(Dispatcher):
    def mark(self, installment: Installment) -> InstallmentDetail:
        return installment.failed(self.order)

    def notify(self) -> None:
        logger.warning(
            "Installments failed and were rescheduled installments=%s order=%s",
            self._installment_ids,
            self._order_number,
        )


class PaymentFailedDispatcher(Dispatcher):
    def mark(self, installment: Installment) -> InstallmentDetail:
        return installment.payment_failed(self.order)

    def notify(self) -> None:
        logger.warning(
            "Payment failed for installments=%s order=%s", self._installment_ids, self._order_number
        )


class OutOfStockDispatcher(Dispatcher):
    def mark(self, installment: Installment) -> InstallmentDetail:
        return installment.out_of_stock()

    def notify(self) -> None:
        logger.warning("Installments out of stock installments=%s", self._installment_ids)
