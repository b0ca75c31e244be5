# Database modules

from .payment_links import payment_link_db, PaymentLinkDatabase, MAX_EXPIRY_DAYS

__all__ = [
    "payment_link_db",
    "PaymentLinkDatabase",
    "MAX_EXPIRY_DAYS",
]
