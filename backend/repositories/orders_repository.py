import secrets
from typing import Any, Dict, Optional

from config import settings
from schemas import Order, User
from supabase_client import get_supabase

ORDERS_TABLE = "orders"
STORES_TABLE = "stores"

# Columns written back on every checkout transition
ORDER_UPDATE_FIELDS = {
    "state",
    "line_items",
    "ship_address",
    "shipments",
    "payments",
    "adjustments",
    "item_total",
    "shipment_total",
    "adjustment_total",
    "total",
    "completed_at",
}


def _order_number() -> str:
    return f"R{secrets.randbelow(10**9):09d}"


class OrderRepository:
    def create_order(self, user: User, email: str, store_id: Optional[str]) -> Order:
        record = {
            "number": _order_number(),
            "user_id": user.id,
            "email": email,
            "store_id": store_id,
            "state": "cart",
            "subscription_order": True,
        }
        response = get_supabase().table(ORDERS_TABLE).insert(record).execute()
        if not response.data:
            raise RuntimeError("Failed to create order")
        return Order(**response.data[0])

    def save_order(self, order: Order) -> Order:
        payload: Dict[str, Any] = order.model_dump(mode="json", include=ORDER_UPDATE_FIELDS)
        get_supabase().table(ORDERS_TABLE).update(payload).eq("id", order.id).execute()
        return order

    def default_store_id(self) -> Optional[str]:
        if settings.default_store_id:
            return settings.default_store_id
        response = (
            get_supabase()
            .table(STORES_TABLE)
            .select("id")
            .eq("default", True)
            .limit(1)
            .execute()
        )
        items = response.data or []
        return items[0]["id"] if items else None
