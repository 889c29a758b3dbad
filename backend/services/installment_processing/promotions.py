from typing import Protocol

from schemas import Order


class PromotionHandler(Protocol):
    """Applies whatever cart promotions match ``order`` as adjustments on it."""

    def activate(self, order: Order) -> None:
        ...


class NullPromotionHandler:
    def activate(self, order: Order) -> None:
        return None
