import os
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env")

DISPATCHERS_MODULE = "services.installment_processing.dispatchers"


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


@dataclass(frozen=True)
class Settings:
    supabase_url: str = _require_env("SUPABASE_URL")
    supabase_service_role_key: str = _require_env("SUPABASE_SERVICE_ROLE_KEY")
    scheduler_api_token: str = _require_env("SCHEDULER_API_TOKEN")
    default_gateway: str = os.getenv("DEFAULT_GATEWAY", "bogus")
    default_store_id: Optional[str] = os.getenv("DEFAULT_STORE_ID")
    reprocessing_interval_days: int = int(os.getenv("REPROCESSING_INTERVAL_DAYS", "1"))
    shipping_flat_rate: Decimal = Decimal(os.getenv("SHIPPING_FLAT_RATE", "10.00"))
    success_dispatcher_class: str = os.getenv(
        "SUCCESS_DISPATCHER_CLASS", f"{DISPATCHERS_MODULE}.SuccessDispatcher"
    )
    failure_dispatcher_class: str = os.getenv(
        "FAILURE_DISPATCHER_CLASS", f"{DISPATCHERS_MODULE}.FailureDispatcher"
    )
    payment_failed_dispatcher_class: str = os.getenv(
        "PAYMENT_FAILED_DISPATCHER_CLASS", f"{DISPATCHERS_MODULE}.PaymentFailedDispatcher"
    )
    out_of_stock_dispatcher_class: str = os.getenv(
        "OUT_OF_STOCK_DISPATCHER_CLASS", f"{DISPATCHERS_MODULE}.OutOfStockDispatcher"
    )
    promotion_handler_class: str = os.getenv(
        "PROMOTION_HANDLER_CLASS",
        "services.installment_processing.promotions.NullPromotionHandler",
    )

    @property
    def reprocessing_interval(self) -> timedelta:
        return timedelta(days=self.reprocessing_interval_days)


settings = Settings()
