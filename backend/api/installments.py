from fastapi import APIRouter, Depends

from auth import require_scheduler_token
from schemas import ProcessInstallmentsRequest, ProcessInstallmentsResponse
from services.installment_processing.backend import ProcessingBackend, default_backend
from services.installment_processing_service import process_installments_async

router = APIRouter(
    prefix="/api/installments",
    tags=["installments"],
    dependencies=[Depends(require_scheduler_token)],
)


def get_processing_backend() -> ProcessingBackend:
    return default_backend()


@router.post("/process", response_model=ProcessInstallmentsResponse)
async def process_due_installments(
    payload: ProcessInstallmentsRequest,
    backend: ProcessingBackend = Depends(get_processing_backend),
) -> ProcessInstallmentsResponse:
    results = await process_installments_async(payload.installment_ids, backend)
    return ProcessInstallmentsResponse(results=results)
