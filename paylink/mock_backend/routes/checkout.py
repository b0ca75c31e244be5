"""Card tokenization route for the mock backend"""

import os
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ..database.payment_links import payment_link_db
from ..errors import (
    BackendError,
    INVALID_CARD_NUMBER,
    INVALID_INPUT,
    PAYMENT_LINK_NOT_PAYABLE,
    PSP_SDK_ERROR,
    link_not_found,
)
from ...checkout.services.card_validator import luhn_check
from ...models.payment_link import TokenizeCheckoutPayload, TokenizeCheckoutResponse
from ...psp.models import CardData, PspName
from ...psp.simulator import CardValidationError, PspSdkError, TokenizationSimulator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["Checkout"])

CARD_BRANDS = {
    "4": "VISA",
    "5": "MASTERCARD",
    "3": "AMEX",
}


def get_simulator() -> TokenizationSimulator:
    """Simulator with the configured PSP latency"""
    latency = float(os.getenv("MOCK_BACKEND_LATENCY_SECONDS", "0.8"))
    return TokenizationSimulator(latency_seconds=latency)


def _card_from_payload(payload: TokenizeCheckoutPayload) -> CardData:
    year = payload.exp_year
    return CardData(
        number=payload.card_number,
        exp_month=str(payload.exp_month),
        exp_year=f"{year:02d}" if 0 <= year < 100 else str(year),
        cvc=payload.cvc,
    )


@router.post("/{slug}/tokenize", response_model=TokenizeCheckoutResponse, response_model_exclude_none=True)
async def tokenize_card(
    slug: str,
    payload: TokenizeCheckoutPayload,
    simulator: TokenizationSimulator = Depends(get_simulator),
):
    """Re-validate card data and exchange it for a PSP token"""
    link = payment_link_db.get_link(slug)
    if not link:
        raise link_not_found(slug)
    if not link.is_payable:
        raise BackendError(409, f"Payment link is {link.status}", PAYMENT_LINK_NOT_PAYABLE)

    card = _card_from_payload(payload)
    if not luhn_check(card.normalized_number):
        raise BackendError(400, "Invalid card number", INVALID_CARD_NUMBER)

    preferred_psp = PspName(link.preferred_psp or PspName.STRIPE.value)
    try:
        result = await simulator.tokenize(card, preferred_psp)
    except CardValidationError as exc:
        code = INVALID_CARD_NUMBER if exc.field == "number" else INVALID_INPUT
        raise BackendError(400, str(exc), code)
    except PspSdkError as exc:
        logger.warning(f"PSP SDK failure tokenizing card ending {card.last4} for {slug}")
        raise BackendError(502, str(exc), PSP_SDK_ERROR)

    logger.info(f"Tokenized card ending {card.last4} for {slug} via {result.psp_hint.value}")
    return TokenizeCheckoutResponse(
        psp_token=result.psp_token,
        psp_code=result.psp_hint.value,
        last4=card.last4,
        brand=CARD_BRANDS.get(card.normalized_number[:1], "UNKNOWN"),
        created_at=datetime.now(timezone.utc),
    )
