"""Fee preview for payment links"""

from ..models.payment_link import FeeBreakdown
from ..psp.models import PspName

PROCESSING_RATES = {
    PspName.STRIPE: 0.029,
    PspName.ADYEN: 0.025,
}
FX_RATE = 0.015
ADYEN_INCENTIVE_RATE = 0.005
HOME_CURRENCY = "USD"


def fee_preview(amount: float, currency: str, preferred_psp: PspName = PspName.STRIPE) -> FeeBreakdown:
    """Fees the payer will see for a link routed to `preferred_psp`"""
    processing_fee = round(amount * PROCESSING_RATES[preferred_psp], 2)
    fx_fee = round(amount * FX_RATE, 2) if currency.upper() != HOME_CURRENCY else 0.0
    incentive_discount = round(amount * ADYEN_INCENTIVE_RATE, 2) if preferred_psp == PspName.ADYEN else 0.0
    total_fees = round(processing_fee + fx_fee - incentive_discount, 2)

    return FeeBreakdown(
        base_amount=amount,
        processing_fee=processing_fee,
        fx_fee=fx_fee,
        incentive_discount=incentive_discount,
        total_fees=total_fees,
        final_amount=round(amount + total_fees, 2),
        currency=currency.upper(),
    )
