"""
Consolidated installment checkout split by responsibility.
External callers should import from services.installment_processing_service.
"""

from .consolidated_installment import ConsolidatedInstallment
from .errors import (
    CheckoutTransitionError,
    InstallmentProcessingError,
    OutOfStockError,
    UnsubscribableError,
    UserMismatchError,
)

__all__ = [
    "ConsolidatedInstallment",
    "CheckoutTransitionError",
    "InstallmentProcessingError",
    "OutOfStockError",
    "UnsubscribableError",
    "UserMismatchError",
]
