from .installments import router as installments_router

__all__ = [
    "installments_router",
]
