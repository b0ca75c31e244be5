"""
Backend API Client

HTTP client for the payment-link backend. Every failure is converted to
BackendTransportError (no response) or BackendApiError (structured
`{message, code}` error); httpx and parsing errors never escape.
"""

import logging
from typing import Any, Optional, TypeVar
from urllib.parse import urljoin

import httpx
from pydantic import BaseModel, ValidationError

from ...models.payment_link import (
    CreatePaymentLinkPayload,
    PaymentLinkView,
    ProcessPaymentPayload,
    ProcessPaymentResponse,
    TokenizeCheckoutPayload,
    TokenizeCheckoutResponse,
    UpdatePaymentLinkPayload,
)

logger = logging.getLogger(__name__)

NO_CONNECTION_MESSAGE = "No connection to the server"

ModelT = TypeVar("ModelT", bound=BaseModel)


class BackendClientError(Exception):
    """Base exception for backend client errors"""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class BackendTransportError(BackendClientError):
    """No response could be obtained from the backend"""

    def __init__(self, message: str = NO_CONNECTION_MESSAGE):
        super().__init__(message)


class BackendApiError(BackendClientError):
    """Backend answered with a non-2xx status or an unusable body"""
    pass


def resolve_checkout_url(checkout_url: str, public_base_url: Optional[str] = None) -> str:
    """Resolve a link's (possibly relative) checkout URL against the public base URL"""
    if not public_base_url:
        return checkout_url
    return urljoin(public_base_url, checkout_url)


class BackendClient:
    """
    Client for the payment-link backend.

    The base URL is passed in at construction; nothing is read from
    module-level state.

    Usage:
        client = BackendClient(base_url=settings.api_base_url)
        link = await client.get_payment_link("abc123")
        token = await client.tokenize(link.slug, payload)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize backend client.

        Args:
            base_url: Base URL of the backend API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests, ASGI apps)
        """
        self.base_url = base_url.rstrip("/")
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        default_error: str,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Make an HTTP request and return the decoded JSON body (or None)"""
        url = f"{self.base_url}{path}"

        try:
            response = await self._http_client.request(
                method=method,
                url=url,
                json=body,
                params=params,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            logger.error(f"Request failed: {method} {url} - {exc!r}")
            raise BackendTransportError() from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400:
            logger.error(f"Request failed: {method} {url} - {response.status_code}")
            message, code = default_error, None
            if isinstance(data, dict):
                message = data.get("message") or default_error
                code = data.get("code")
            raise BackendApiError(message, code=code, status_code=response.status_code)

        return data

    @staticmethod
    def _parse(model: type[ModelT], data: Any, default_error: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error(f"Unexpected {model.__name__} body: {exc}")
            raise BackendApiError(default_error) from exc

    # ==================== Checkout APIs ====================

    async def tokenize(self, slug: str, payload: TokenizeCheckoutPayload) -> TokenizeCheckoutResponse:
        """Exchange raw card data for a PSP token"""
        error = "Could not tokenize the card"
        data = await self._request("POST", f"/checkout/{slug}/tokenize", error, body=payload.to_wire())
        return self._parse(TokenizeCheckoutResponse, data, error)

    async def get_payment_link(self, slug: str) -> PaymentLinkView:
        """Get payment link by slug"""
        error = "Payment link not found"
        data = await self._request("GET", f"/payment-links/{slug}", error)
        return self._parse(PaymentLinkView, data, error)

    async def process_payment(self, slug: str, payload: ProcessPaymentPayload) -> ProcessPaymentResponse:
        """Pay a payment link with a PSP token"""
        error = "Error processing the payment"
        data = await self._request("POST", f"/payment-links/{slug}/pay", error, body=payload.to_wire())
        return self._parse(ProcessPaymentResponse, data, error)

    # ==================== Merchant APIs ====================

    async def create_payment_link(self, payload: CreatePaymentLinkPayload) -> PaymentLinkView:
        """Create a payment link"""
        error = "Could not create the payment link"
        data = await self._request("POST", "/payment-links", error, body=payload.to_wire())
        return self._parse(PaymentLinkView, data, error)

    async def list_payment_links(self, merchant_id: Optional[int] = None) -> list[PaymentLinkView]:
        """List all payment links, or those of one merchant"""
        error = "Could not load the payment links"
        params = {"merchantId": merchant_id} if merchant_id is not None else None
        data = await self._request("GET", "/payment-links", error, params=params)
        return [self._parse(PaymentLinkView, item, error) for item in (data or [])]

    async def update_payment_link(self, slug: str, payload: UpdatePaymentLinkPayload) -> PaymentLinkView:
        """Update a payment link"""
        error = "Could not update the payment link"
        data = await self._request("PUT", f"/payment-links/{slug}", error, body=payload.to_wire())
        return self._parse(PaymentLinkView, data, error)

    async def delete_payment_link(self, slug: str, merchant_id: int) -> None:
        """Delete a payment link"""
        error = "Could not delete the payment link"
        await self._request("DELETE", f"/payment-links/{slug}", error, params={"merchantId": merchant_id})
