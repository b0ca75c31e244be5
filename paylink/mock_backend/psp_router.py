"""
Simulated PSP routing for the pay endpoint

Tokens issued by the simulator resolve to a fixed outcome. When the
issuing PSP throws, the router falls back to the other PSP, which cannot
charge a foreign token, so routing fails as a whole.
"""

import logging
from enum import Enum

from .errors import BackendError, INVALID_INPUT, PSP_ROUTING_FAILED
from ..models.payment_link import PaymentStatus
from ..psp.models import PspName

logger = logging.getLogger(__name__)


class TokenOutcome(str, Enum):
    CAPTURE = "capture"
    DECLINE = "decline"
    PSP_EXCEPTION = "psp_exception"


SIMULATED_TOKENS = {
    "sim_stripe_ok": (PspName.STRIPE, TokenOutcome.CAPTURE),
    "sim_stripe_failed": (PspName.STRIPE, TokenOutcome.DECLINE),
    "sim_stripe_exception": (PspName.STRIPE, TokenOutcome.PSP_EXCEPTION),
    "sim_adyen_ok": (PspName.ADYEN, TokenOutcome.CAPTURE),
    "sim_adyen_failed": (PspName.ADYEN, TokenOutcome.DECLINE),
    "sim_adyen_exception": (PspName.ADYEN, TokenOutcome.PSP_EXCEPTION),
}


def fallback_for(psp: PspName) -> PspName:
    return PspName.ADYEN if psp == PspName.STRIPE else PspName.STRIPE


def route_payment(psp_token: str) -> tuple[PspName, str]:
    """
    Charge a simulated token.

    Returns:
        The PSP that handled the charge and the resulting payment status

    Raises:
        BackendError: Unknown token, or every PSP failed
    """
    if psp_token not in SIMULATED_TOKENS:
        raise BackendError(400, "Unknown PSP token", INVALID_INPUT)

    psp, outcome = SIMULATED_TOKENS[psp_token]

    if outcome == TokenOutcome.CAPTURE:
        return psp, PaymentStatus.CAPTURED.value
    if outcome == TokenOutcome.DECLINE:
        return psp, PaymentStatus.FAILED.value

    fallback = fallback_for(psp)
    logger.warning(f"{psp.value} raised for {psp_token}, falling back to {fallback.value}")
    logger.warning(f"{fallback.value} rejected foreign token {psp_token}")
    raise BackendError(502, "Payment failed on every available provider", PSP_ROUTING_FAILED)
