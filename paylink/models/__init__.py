# Wire models

from .payment_link import (
    ApiErrorBody,
    CreatePaymentLinkPayload,
    FeeBreakdown,
    PaymentLinkStatus,
    PaymentLinkView,
    PaymentStatus,
    ProcessPaymentPayload,
    ProcessPaymentResponse,
    TokenizeCheckoutPayload,
    TokenizeCheckoutResponse,
    UpdatePaymentLinkPayload,
    normalize_fee_breakdown,
)

__all__ = [
    "ApiErrorBody",
    "CreatePaymentLinkPayload",
    "FeeBreakdown",
    "PaymentLinkStatus",
    "PaymentLinkView",
    "PaymentStatus",
    "ProcessPaymentPayload",
    "ProcessPaymentResponse",
    "TokenizeCheckoutPayload",
    "TokenizeCheckoutResponse",
    "UpdatePaymentLinkPayload",
    "normalize_fee_breakdown",
]
