from typing import Any, Dict, List

from schemas import Variant
from supabase_client import get_supabase

VARIANTS_TABLE = "variants"
STOCK_ITEMS_TABLE = "stock_items"


class CatalogRepository:
    def find_variant(self, variant_id: str) -> Variant:
        response = (
            get_supabase()
            .table(VARIANTS_TABLE)
            .select("*")
            .eq("id", variant_id)
            .limit(1)
            .execute()
        )
        items = response.data or []
        if not items:
            raise LookupError(f"Variant {variant_id} not found")
        return Variant(**items[0])

    def can_supply(self, variant: Variant, quantity: int) -> bool:
        rows = self._stock_items(variant.id)
        if any(row.get("backorderable") for row in rows):
            return True
        on_hand = sum(int(row.get("count_on_hand") or 0) for row in rows)
        return on_hand >= quantity

    def _stock_items(self, variant_id: str) -> List[Dict[str, Any]]:
        response = (
            get_supabase()
            .table(STOCK_ITEMS_TABLE)
            .select("count_on_hand, backorderable")
            .eq("variant_id", variant_id)
            .execute()
        )
        return response.data or []
