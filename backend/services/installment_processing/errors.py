"""Errors raised while consolidating and checking out installments."""

from typing import Any, Iterable


class InstallmentProcessingError(Exception):
    """Base class for installment processing failures."""


class UserMismatchError(InstallmentProcessingError):
    """The installments of one consolidated batch belong to different users."""

    def __init__(self, installments: Iterable[Any]):
        self.installments = list(installments)
        ids = ", ".join(str(installment.id) for installment in self.installments)
        super().__init__(
            f"Installments must have the same user to be processed as a consolidated installment: {ids}"
        )


class UnsubscribableError(InstallmentProcessingError):
    """A subscription line item points at a variant that cannot be subscribed to."""

    def __init__(self, variant: Any):
        self.variant = variant
        super().__init__(
            f"Variant {variant.id} ({variant.sku}) cannot be subscribed to. "
            "Set subscribable on the variant before creating subscriptions for it."
        )


class OutOfStockError(InstallmentProcessingError):
    def __init__(self, variant: Any, quantity: int):
        self.variant = variant
        self.quantity = quantity
        super().__init__(f"Variant {variant.id} cannot supply {quantity} units")


class CheckoutTransitionError(InstallmentProcessingError):
    def __init__(self, order: Any, message: str):
        self.order = order
        super().__init__(f"Cannot transition order {order.number or order.id} from {order.state}: {message}")
