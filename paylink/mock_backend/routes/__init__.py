# API routes

from .payment_links import router as payment_links_router
from .checkout import router as checkout_router

__all__ = ["payment_links_router", "checkout_router"]
