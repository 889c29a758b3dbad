from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from config import settings
from constants import DETAIL_MESSAGES

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS)


class Address(BaseModel):
    id: Optional[str] = None
    firstname: str
    lastname: str
    address1: str
    address2: Optional[str] = None
    city: str
    zipcode: str
    country: str
    phone: Optional[str] = None


class CreditCard(BaseModel):
    id: str
    user_id: Optional[str] = None
    name: Optional[str] = None
    last_digits: Optional[str] = None
    gateway_customer_profile_id: Optional[str] = None
    default: bool = False


class User(BaseModel):
    id: str
    email: str
    ship_address: Optional[Address] = None
    credit_cards: List[CreditCard] = []

    @property
    def default_credit_card(self) -> Optional[CreditCard]:
        defaults = [card for card in self.credit_cards if card.default]
        return defaults[-1] if defaults else None


class RootOrder(BaseModel):
    """The order a subscription was originally purchased through."""

    id: str
    store_id: Optional[str] = None
    ship_address: Optional[Address] = None
    credit_cards: List[CreditCard] = []


class Variant(BaseModel):
    id: str
    sku: str
    name: str = ""
    price: Decimal
    subscribable: bool = False


class SubscriptionLineItem(BaseModel):
    id: Optional[str] = None
    subscribable_id: str
    quantity: int = Field(default=1, gt=0)


class Subscription(BaseModel):
    id: str
    user: User
    root_order: Optional[RootOrder] = None
    line_items: List[SubscriptionLineItem] = []

    @property
    def store_id(self) -> Optional[str]:
        return self.root_order.store_id if self.root_order else None


class InstallmentDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    installment_id: str
    success: bool
    message: str
    order_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Installment(BaseModel):
    id: str
    subscription: Subscription
    actionable_date: Optional[date] = None
    details: List[InstallmentDetail] = []

    @property
    def user(self) -> User:
        return self.subscription.user

    @property
    def fulfilled(self) -> bool:
        return bool(self.details) and self.details[-1].success

    @property
    def unfulfilled(self) -> bool:
        return not self.fulfilled

    def advance_actionable_date(self, interval: Optional[timedelta] = None) -> date:
        if interval is None:
            interval = settings.reprocessing_interval
        self.actionable_date = date.today() + interval
        return self.actionable_date

    def success(self, order: "Order") -> InstallmentDetail:
        return self._add_detail(True, DETAIL_MESSAGES["success"], order)

    def failed(self, order: Optional["Order"] = None) -> InstallmentDetail:
        self.advance_actionable_date()
        return self._add_detail(False, DETAIL_MESSAGES["failed"], order)

    def payment_failed(self, order: Optional["Order"] = None) -> InstallmentDetail:
        self.advance_actionable_date()
        return self._add_detail(False, DETAIL_MESSAGES["payment_failed"], order)

    def out_of_stock(self) -> InstallmentDetail:
        return self._add_detail(False, DETAIL_MESSAGES["out_of_stock"], None)

    def _add_detail(self, success: bool, message: str, order: Optional["Order"]) -> InstallmentDetail:
        detail = InstallmentDetail(
            installment_id=self.id,
            success=success,
            message=message,
            order_id=order.id if order else None,
        )
        self.details.append(detail)
        return detail


class LineItem(BaseModel):
    id: Optional[str] = None
    variant_id: str
    quantity: int = Field(gt=0)
    price: Decimal

    @property
    def amount(self) -> Decimal:
        return _money(self.price * self.quantity)


class Shipment(BaseModel):
    id: Optional[str] = None
    address: Address
    cost: Decimal = ZERO
    state: str = "pending"


class Payment(BaseModel):
    id: Optional[str] = None
    source: Optional[CreditCard] = None
    payment_method: str
    amount: Decimal
    state: Literal["checkout", "completed", "failed"] = "checkout"
    response_message: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.state == "failed"


class Adjustment(BaseModel):
    label: str
    amount: Decimal
    source_id: Optional[str] = None


class Order(BaseModel):
    id: Optional[str] = None
    number: Optional[str] = None
    user_id: str
    email: str
    store_id: Optional[str] = None
    state: str = "cart"
    subscription_order: bool = True
    line_items: List[LineItem] = []
    ship_address: Optional[Address] = None
    shipments: List[Shipment] = []
    payments: List[Payment] = []
    adjustments: List[Adjustment] = []
    item_total: Decimal = ZERO
    shipment_total: Decimal = ZERO
    adjustment_total: Decimal = ZERO
    total: Decimal = ZERO
    completed_at: Optional[datetime] = None

    @property
    def is_complete(self) -> bool:
        return self.state == "complete"

    @property
    def failed_payments(self) -> List[Payment]:
        return [payment for payment in self.payments if payment.failed]

    @property
    def valid_payments(self) -> List[Payment]:
        return [payment for payment in self.payments if not payment.failed]

    def update_totals(self) -> Decimal:
        self.item_total = _money(sum((item.amount for item in self.line_items), ZERO))
        self.shipment_total = _money(sum((shipment.cost for shipment in self.shipments), ZERO))
        self.adjustment_total = _money(sum((adj.amount for adj in self.adjustments), ZERO))
        self.total = max(_money(self.item_total + self.shipment_total + self.adjustment_total), ZERO)
        return self.total


class ProcessInstallmentsRequest(BaseModel):
    installment_ids: List[str] = Field(..., min_length=1, description="Installments due for processing")


class BatchOutcome(BaseModel):
    user_id: str
    status: Literal["completed", "failed", "error"]
    installment_ids: List[str]
    order_id: Optional[str] = None
    order_number: Optional[str] = None
    order_total: Optional[Decimal] = None
    error: Optional[str] = None


class ProcessInstallmentsResponse(BaseModel):
    results: List[BatchOutcome]
