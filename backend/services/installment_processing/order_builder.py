from typing import Iterable

from schemas import LineItem, Order


class OrderBuilder:
    def __init__(self, order: Order) -> None:
        self.order = order

    def add_line_items(self, line_items: Iterable[LineItem]) -> Order:
        for line_item in line_items:
            existing = next(
                (item for item in self.order.line_items if item.variant_id == line_item.variant_id),
                None,
            )
            if existing:
                existing.quantity += line_item.quantity
            else:
                self.order.line_items.append(line_item)
        return self.order
