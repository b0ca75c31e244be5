"""Payment link API routes for the mock backend"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Response
from fastapi.responses import JSONResponse

from ..database.payment_links import MAX_EXPIRY_DAYS, payment_link_db
from ..errors import (
    BackendError,
    INVALID_INPUT,
    MERCHANT_NOT_FOUND,
    PAYMENT_LINK_NOT_EDITABLE,
    PAYMENT_LINK_NOT_PAYABLE,
    link_not_found,
)
from ..psp_router import route_payment
from ...models.payment_link import (
    CreatePaymentLinkPayload,
    PaymentLinkView,
    ProcessPaymentPayload,
    ProcessPaymentResponse,
    UpdatePaymentLinkPayload,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payment-links", tags=["Payment Links"])


def _legacy_fee_body(link: PaymentLinkView) -> dict:
    """Create/update still answer with the fee under `feePreview`"""
    body = link.to_wire()
    if "feeBreakdown" in body:
        body["feePreview"] = body.pop("feeBreakdown")
    return body


def _check_link_input(merchant_id: int, amount: float, currency: str, expires_at) -> None:
    if not payment_link_db.has_merchant(merchant_id):
        raise BackendError(404, f"Merchant {merchant_id} not found", MERCHANT_NOT_FOUND)
    if amount <= 0:
        raise BackendError(400, "Amount must be greater than zero", INVALID_INPUT)
    if len(currency) != 3 or not currency.isalpha():
        raise BackendError(400, "Currency must be a 3-letter ISO code", INVALID_INPUT)
    if expires_at is not None and not payment_link_db.expiry_in_window(expires_at):
        raise BackendError(
            400,
            f"Expiry date must be between today and {MAX_EXPIRY_DAYS} days ahead",
            INVALID_INPUT,
        )


def _owned_link(slug: str, merchant_id: int) -> PaymentLinkView:
    link = payment_link_db.get_link(slug)
    if not link or link.merchant_id != merchant_id:
        raise link_not_found(slug)
    return link


@router.post("", status_code=201)
async def create_payment_link(payload: CreatePaymentLinkPayload):
    """Create a payment link"""
    _check_link_input(payload.merchant_id, payload.amount, payload.currency, payload.expires_at)
    link = payment_link_db.create_link(payload)
    logger.info(f"Payment link {link.slug} created: {link.amount} {link.currency}")
    return JSONResponse(status_code=201, content=_legacy_fee_body(link))


@router.get("", response_model=list[PaymentLinkView], response_model_exclude_none=True)
async def list_payment_links(merchant_id: Optional[int] = Query(None, alias="merchantId")):
    """List payment links, optionally for one merchant"""
    return payment_link_db.list_links(merchant_id)


@router.get("/{slug}", response_model=PaymentLinkView, response_model_exclude_none=True)
async def get_payment_link(slug: str):
    """Get payment link by slug"""
    link = payment_link_db.get_link(slug)
    if not link:
        raise link_not_found(slug)
    return link


@router.put("/{slug}")
async def update_payment_link(slug: str, payload: UpdatePaymentLinkPayload):
    """Update a payment link that has not been paid yet"""
    link = _owned_link(slug, payload.merchant_id)
    if not link.is_payable:
        raise BackendError(409, f"Payment link is {link.status} and can no longer be edited", PAYMENT_LINK_NOT_EDITABLE)

    _check_link_input(payload.merchant_id, payload.amount, payload.currency, payload.expires_at)
    updated = payment_link_db.update_link(slug, payload)
    logger.info(f"Payment link {slug} updated")
    return _legacy_fee_body(updated)


@router.delete("/{slug}", status_code=204)
async def delete_payment_link(slug: str, merchant_id: int = Query(..., alias="merchantId")):
    """Delete a payment link"""
    _owned_link(slug, merchant_id)
    payment_link_db.delete_link(slug)
    logger.info(f"Payment link {slug} deleted")
    return Response(status_code=204)


@router.post("/{slug}/pay", response_model=ProcessPaymentResponse, response_model_exclude_none=True)
async def pay_payment_link(slug: str, payload: ProcessPaymentPayload):
    """Charge a PSP token against a payment link"""
    link = payment_link_db.get_link(slug)
    if not link:
        raise link_not_found(slug)
    if not link.is_payable:
        raise BackendError(409, f"Payment link is {link.status}", PAYMENT_LINK_NOT_PAYABLE)

    psp_used, payment_status = route_payment(payload.psp_token)
    payment = payment_link_db.record_payment(link, payment_status, psp_used)
    logger.info(f"Payment {payment.payment_id} for {slug}: {payment_status} via {psp_used.value}")
    return payment
