import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Protocol, Type
from uuid import uuid4

from constants import LOGGER_NAME
from schemas import CreditCard

logger = logging.getLogger(LOGGER_NAME)

BOGUS_PROFILE_PREFIX = "BGS-"


@dataclass
class GatewayResponse:
    success: bool
    message: str
    authorization: Optional[str] = None


class PaymentGateway(Protocol):
    identifier: str

    def purchase(self, amount: Decimal, source: Optional[CreditCard], *, order_number: str) -> GatewayResponse:
        ...


class BogusGateway:
    """Test gateway: cards whose customer profile starts with ``BGS-`` are charged, anything else is declined."""

    identifier = "bogus"

    def purchase(self, amount: Decimal, source: Optional[CreditCard], *, order_number: str) -> GatewayResponse:
        profile = (source.gateway_customer_profile_id if source else None) or ""
        if profile.startswith(BOGUS_PROFILE_PREFIX):
            return GatewayResponse(True, "Bogus Gateway: Forced success", authorization=uuid4().hex[:12])
        logger.info("bogus gateway declined order=%s amount=%s", order_number, amount)
        return GatewayResponse(False, "Bogus Gateway: Forced failure")


GATEWAYS: Dict[str, Type] = {
    BogusGateway.identifier: BogusGateway,
}


def register_gateway(identifier: str, gateway_class: Type) -> None:
    GATEWAYS[identifier] = gateway_class


def load_gateway(identifier: str) -> PaymentGateway:
    try:
        gateway_class = GATEWAYS[identifier]
    except KeyError as exc:
        raise ValueError(f"Unknown payment gateway: {identifier}") from exc
    return gateway_class()
