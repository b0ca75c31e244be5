"""Payment link wire models shared by the backend client and the mock backend"""

from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, model_validator
from pydantic.alias_generators import to_camel

from ..psp.models import PspName

FEE_FIELD = "feeBreakdown"
FEE_FALLBACK_FIELD = "feePreview"


class PaymentLinkStatus(str, Enum):
    CREATED = "CREATED"
    PAID = "PAID"
    EXPIRED = "EXPIRED"


class PaymentStatus(str, Enum):
    CAPTURED = "CAPTURED"
    FAILED = "FAILED"


class WireModel(BaseModel):
    """Base for camelCase JSON payloads"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class FeeBreakdown(WireModel):
    """Itemized charges reconciling base amount to final payable amount"""
    base_amount: float
    processing_fee: float
    fx_fee: float
    incentive_discount: float
    total_fees: float
    final_amount: float
    currency: str

    def display_rows(self) -> list[tuple[str, float]]:
        """Label/value rows for the fee card; the discount is shown negated"""
        return [
            ("Base amount", self.base_amount),
            ("PSP fee", self.processing_fee),
            ("FX", self.fx_fee),
            ("Incentive discount", -self.incentive_discount),
            ("Total fees", self.total_fees),
            ("Total to pay", self.final_amount),
        ]


def normalize_fee_breakdown(payload: Optional[Mapping[str, Any]]) -> Optional[FeeBreakdown]:
    """
    Pick the fee object from a backend response.

    The backend has shipped the same object as `feeBreakdown` and as
    `feePreview`. The first name wins; if neither is present there is no
    fee data and None is returned.
    """
    if not payload:
        return None

    fee = payload.get(FEE_FIELD)
    if fee is None:
        fee = payload.get(FEE_FALLBACK_FIELD)
    if fee is None:
        return None

    if isinstance(fee, FeeBreakdown):
        return fee
    return FeeBreakdown.model_validate(fee)


class FeeCarrier(WireModel):
    """Response carrying a fee object under either of its two names"""
    fee_breakdown: Optional[FeeBreakdown] = None

    @model_validator(mode="before")
    @classmethod
    def _fold_fee_preview(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and FEE_FALLBACK_FIELD in data:
            data = dict(data)
            fee = normalize_fee_breakdown(data)
            data.pop(FEE_FALLBACK_FIELD, None)
            data[FEE_FIELD] = fee
        return data


class PaymentLinkView(FeeCarrier):
    """Payment link as returned by the backend"""
    id: int
    merchant_id: int
    recipient_id: Optional[int] = None
    amount: float
    currency: str
    description: Optional[str] = None
    status: str
    preferred_psp: Optional[str] = None
    expires_at: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    slug: str
    checkout_url: str

    @property
    def is_payable(self) -> bool:
        return self.status == PaymentLinkStatus.CREATED.value


class CreatePaymentLinkPayload(WireModel):
    merchant_id: int
    recipient_id: Optional[int] = None
    amount: float
    currency: str
    description: Optional[str] = None
    expires_at: Optional[date] = None
    preferred_psp: Optional[PspName] = None


class UpdatePaymentLinkPayload(WireModel):
    merchant_id: int
    recipient_id: Optional[int] = None
    amount: float
    currency: str
    description: Optional[str] = None
    expires_at: Optional[date] = None


class TokenizeCheckoutPayload(WireModel):
    card_number: str
    exp_month: int
    exp_year: int
    cvc: str


class TokenizeCheckoutResponse(WireModel):
    psp_token: str
    psp_code: Optional[str] = None
    last4: Optional[str] = None
    brand: Optional[str] = None
    created_at: Optional[datetime] = None


class ProcessPaymentPayload(WireModel):
    psp_token: str
    psp_hint: Optional[str] = None


class ProcessPaymentResponse(FeeCarrier):
    payment_id: int
    payment_status: str
    psp_used: Optional[str] = None
    amount: float
    currency: str
    created_at: Optional[datetime] = None

    @property
    def is_captured(self) -> bool:
        return self.payment_status == PaymentStatus.CAPTURED.value


class ApiErrorBody(WireModel):
    """Structured error body returned on non-2xx responses"""
    message: str
    code: Optional[str] = None
