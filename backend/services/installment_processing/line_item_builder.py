import logging
from typing import Dict, List, Optional, Sequence

from constants import LOGGER_NAME
from schemas import LineItem, SubscriptionLineItem, Variant

from .backend import Catalog
from .errors import OutOfStockError, UnsubscribableError

logger = logging.getLogger(LOGGER_NAME)


class LineItemBuilder:
    """Turns subscription line items into order line items.

    Requests whose variant cannot currently supply the quantity are dropped,
    so callers compare input and output lengths to detect a shortfall. A
    variant that is not subscribable is a data error and is raised.

    ``allocated`` maps variant ids to units already placed on the same order;
    stock is checked against that running total, which is updated for every
    line item built.
    """

    def __init__(
        self,
        subscription_line_items: Sequence[SubscriptionLineItem],
        catalog: Catalog,
        allocated: Optional[Dict[str, int]] = None,
    ) -> None:
        self.subscription_line_items = list(subscription_line_items)
        self.catalog = catalog
        self.allocated = {} if allocated is None else allocated

    def line_items(self) -> List[LineItem]:
        built: List[LineItem] = []
        for subscription_line_item in self.subscription_line_items:
            try:
                built.append(self._build(subscription_line_item))
            except OutOfStockError as exc:
                logger.warning("Dropping line item: %s", exc)
        return built

    def _build(self, subscription_line_item: SubscriptionLineItem) -> LineItem:
        variant: Variant = self.catalog.find_variant(subscription_line_item.subscribable_id)
        if not variant.subscribable:
            raise UnsubscribableError(variant)
        needed = self.allocated.get(variant.id, 0) + subscription_line_item.quantity
        if not self.catalog.can_supply(variant, needed):
            raise OutOfStockError(variant, needed)
        self.allocated[variant.id] = needed
        return LineItem(
            variant_id=variant.id,
            quantity=subscription_line_item.quantity,
            price=variant.price,
        )
