"""Payment link storage for the mock backend"""

import secrets
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from ..pricing import fee_preview
from ...models.payment_link import (
    CreatePaymentLinkPayload,
    PaymentLinkStatus,
    PaymentLinkView,
    ProcessPaymentResponse,
    UpdatePaymentLinkPayload,
)
from ...psp.models import PspName

MAX_EXPIRY_DAYS = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentLinkDatabase:
    """In-memory payment link and payment storage"""

    def __init__(
        self,
        merchant_ids: Iterable[int] = (1,),
        today: Callable[[], date] = date.today,
    ):
        self.merchant_ids = set(merchant_ids)
        self.links: dict[str, PaymentLinkView] = {}
        self.payments: dict[int, ProcessPaymentResponse] = {}
        self._today = today
        self._next_link_id = 1
        self._next_payment_id = 1

    def clear(self) -> None:
        """Drop all links and payments"""
        self.links.clear()
        self.payments.clear()
        self._next_link_id = 1
        self._next_payment_id = 1

    def has_merchant(self, merchant_id: int) -> bool:
        return merchant_id in self.merchant_ids

    def default_expiry(self) -> date:
        return self._today() + timedelta(days=1)

    def expiry_in_window(self, expires_at: date) -> bool:
        """Links expire no earlier than today and at most MAX_EXPIRY_DAYS ahead"""
        today = self._today()
        return today <= expires_at <= today + timedelta(days=MAX_EXPIRY_DAYS)

    def create_link(self, payload: CreatePaymentLinkPayload) -> PaymentLinkView:
        """Create a payment link"""
        now = _utcnow()
        slug = secrets.token_urlsafe(8)
        preferred_psp = PspName(payload.preferred_psp or PspName.STRIPE.value)

        link = PaymentLinkView(
            id=self._next_link_id,
            merchant_id=payload.merchant_id,
            recipient_id=payload.recipient_id,
            amount=payload.amount,
            currency=payload.currency.upper(),
            description=payload.description,
            status=PaymentLinkStatus.CREATED.value,
            preferred_psp=preferred_psp.value,
            expires_at=(payload.expires_at or self.default_expiry()).isoformat(),
            created_at=now,
            updated_at=now,
            slug=slug,
            checkout_url=f"/checkout/{slug}",
            fee_breakdown=fee_preview(payload.amount, payload.currency, preferred_psp),
        )
        self._next_link_id += 1
        self.links[slug] = link
        return link

    def get_link(self, slug: str) -> Optional[PaymentLinkView]:
        """Get a link by slug, expiring it if its date has passed"""
        link = self.links.get(slug)
        if link is None:
            return None

        if link.status == PaymentLinkStatus.CREATED.value and link.expires_at:
            if date.fromisoformat(link.expires_at) < self._today():
                link = self._save(link, status=PaymentLinkStatus.EXPIRED.value)
        return link

    def list_links(self, merchant_id: Optional[int] = None) -> list[PaymentLinkView]:
        """List links, newest first"""
        links = [self.get_link(slug) for slug in list(self.links)]
        if merchant_id is not None:
            links = [link for link in links if link.merchant_id == merchant_id]
        links.sort(key=lambda link: link.id, reverse=True)
        return links

    def update_link(self, slug: str, payload: UpdatePaymentLinkPayload) -> PaymentLinkView:
        """Update amount, currency, description and expiry of a link"""
        link = self.links[slug]
        preferred_psp = PspName(link.preferred_psp or PspName.STRIPE.value)
        return self._save(
            link,
            recipient_id=payload.recipient_id,
            amount=payload.amount,
            currency=payload.currency.upper(),
            description=payload.description,
            expires_at=(payload.expires_at or self.default_expiry()).isoformat(),
            fee_breakdown=fee_preview(payload.amount, payload.currency, preferred_psp),
        )

    def delete_link(self, slug: str) -> bool:
        """Delete a link"""
        return self.links.pop(slug, None) is not None

    def record_payment(
        self,
        link: PaymentLinkView,
        payment_status: str,
        psp_used: PspName,
    ) -> ProcessPaymentResponse:
        """Record a payment attempt; a captured payment marks the link PAID"""
        payment = ProcessPaymentResponse(
            payment_id=self._next_payment_id,
            payment_status=payment_status,
            psp_used=psp_used.value,
            amount=link.amount,
            currency=link.currency,
            created_at=_utcnow(),
            fee_breakdown=link.fee_breakdown,
        )
        self._next_payment_id += 1
        self.payments[payment.payment_id] = payment

        if payment.is_captured:
            self._save(link, status=PaymentLinkStatus.PAID.value)
        return payment

    def _save(self, link: PaymentLinkView, **changes) -> PaymentLinkView:
        updated = link.model_copy(update={**changes, "updated_at": _utcnow()})
        self.links[link.slug] = updated
        return updated


# Singleton instance
payment_link_db = PaymentLinkDatabase()
