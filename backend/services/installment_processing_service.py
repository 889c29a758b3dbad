import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from constants import LOGGER_NAME
from schemas import BatchOutcome, Installment

from services.installment_processing import ConsolidatedInstallment
from services.installment_processing.backend import ProcessingBackend, default_backend

logger = logging.getLogger(LOGGER_NAME)


def group_by_user(installments: Sequence[Installment]) -> Dict[str, List[Installment]]:
    groups: Dict[str, List[Installment]] = {}
    for installment in installments:
        groups.setdefault(installment.user.id, []).append(installment)
    return groups


def _process_group(
    user_id: str,
    installments: List[Installment],
    backend: ProcessingBackend,
) -> BatchOutcome:
    installment_ids = [installment.id for installment in installments]
    consolidated = ConsolidatedInstallment(installments, backend=backend)
    try:
        order = consolidated.process()
    except Exception as exc:
        logger.exception("Installment batch failed user=%s: %s", user_id, exc)
        return BatchOutcome(
            user_id=user_id,
            status="error",
            installment_ids=installment_ids,
            error=str(exc),
        )
    if order is None:
        return BatchOutcome(user_id=user_id, status="failed", installment_ids=installment_ids)
    return BatchOutcome(
        user_id=user_id,
        status="completed",
        installment_ids=installment_ids,
        order_id=order.id,
        order_number=order.number,
        order_total=order.total,
    )


def process_installments(
    installments: Sequence[Installment],
    backend: Optional[ProcessingBackend] = None,
) -> List[BatchOutcome]:
    backend = backend or default_backend()
    results = []
    for user_id, group in group_by_user(installments).items():
        outcome = _process_group(user_id, group, backend)
        logger.info("user=%s status=%s installments=%s", user_id, outcome.status, outcome.installment_ids)
        results.append(outcome)
    return results


def process_installments_by_ids(
    installment_ids: Sequence[str],
    backend: Optional[ProcessingBackend] = None,
) -> List[BatchOutcome]:
    backend = backend or default_backend()
    installments = backend.installments.fetch_installments(installment_ids)
    missing = set(installment_ids) - {installment.id for installment in installments}
    if missing:
        logger.warning("Installments not found: %s", ", ".join(sorted(missing)))
    return process_installments(installments, backend)


async def process_installments_async(
    installment_ids: Sequence[str],
    backend: Optional[ProcessingBackend] = None,
) -> List[BatchOutcome]:
    return await asyncio.to_thread(process_installments_by_ids, installment_ids, backend)
