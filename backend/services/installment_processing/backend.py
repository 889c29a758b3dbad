"""
Collaborators the installment orchestrator talks to.

Production wiring uses the Supabase repositories; tests hand in their own
stores through the same ``ProcessingBackend``.
"""

from dataclasses import dataclass
from importlib import import_module
from typing import Any, List, Optional, Protocol, Sequence

from config import settings
from repositories.catalog_repository import CatalogRepository
from repositories.installments_repository import InstallmentRepository
from repositories.orders_repository import OrderRepository
from schemas import Installment, InstallmentDetail, Order, User, Variant

from .gateways import PaymentGateway, load_gateway
from .promotions import PromotionHandler


class Catalog(Protocol):
    def find_variant(self, variant_id: str) -> Variant:
        ...

    def can_supply(self, variant: Variant, quantity: int) -> bool:
        ...


class OrderStore(Protocol):
    def create_order(self, user: User, email: str, store_id: Optional[str]) -> Order:
        ...

    def save_order(self, order: Order) -> Order:
        ...

    def default_store_id(self) -> Optional[str]:
        ...


class InstallmentStore(Protocol):
    def fetch_installments(self, installment_ids: Sequence[str]) -> List[Installment]:
        ...

    def save_outcome(self, installment: Installment, detail: InstallmentDetail) -> None:
        ...


@dataclass
class ProcessingBackend:
    catalog: Catalog
    orders: OrderStore
    installments: InstallmentStore
    gateway: PaymentGateway
    promotions: PromotionHandler


def load_class(path: str) -> Any:
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ValueError(f"Expected a dotted path, got {path!r}")
    return getattr(import_module(module_name), attr)


def default_backend() -> ProcessingBackend:
    return ProcessingBackend(
        catalog=CatalogRepository(),
        orders=OrderRepository(),
        installments=InstallmentRepository(),
        gateway=load_gateway(settings.default_gateway),
        promotions=load_class(settings.promotion_handler_class)(),
    )
