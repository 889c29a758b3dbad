from typing import Any, Dict, List, Sequence

from schemas import Installment, InstallmentDetail
from supabase_client import get_supabase

INSTALLMENTS_TABLE = "installments"
DETAILS_TABLE = "installment_details"

INSTALLMENT_SELECT = (
    "*, details:installment_details(*), "
    "subscription:subscriptions(*, "
    "line_items:subscription_line_items(*), "
    "root_order:orders(id, store_id, ship_address, credit_cards), "
    "user:users(id, email, ship_address:addresses(*), credit_cards(*)))"
)


def _build_installment(row: Dict[str, Any]) -> Installment:
    row = dict(row)
    row["details"] = sorted(row.get("details") or [], key=lambda detail: detail.get("created_at") or "")
    return Installment.model_validate(row)


class InstallmentRepository:
    def fetch_installments(self, installment_ids: Sequence[str]) -> List[Installment]:
        if not installment_ids:
            return []
        response = (
            get_supabase()
            .table(INSTALLMENTS_TABLE)
            .select(INSTALLMENT_SELECT)
            .in_("id", list(installment_ids))
            .execute()
        )
        return [_build_installment(row) for row in response.data or []]

    def save_outcome(self, installment: Installment, detail: InstallmentDetail) -> None:
        client = get_supabase()
        client.table(DETAILS_TABLE).insert(detail.model_dump(mode="json")).execute()
        if installment.actionable_date is not None:
            client.table(INSTALLMENTS_TABLE).update(
                {"actionable_date": installment.actionable_date.isoformat()}
            ).eq("id", installment.id).execute()
