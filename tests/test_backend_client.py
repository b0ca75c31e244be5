import json

import httpx
import pytest

from paylink.checkout.services.backend_client import (
    NO_CONNECTION_MESSAGE,
    BackendApiError,
    BackendClient,
    BackendTransportError,
    resolve_checkout_url,
)
from paylink.models.payment_link import (
    ProcessPaymentPayload,
    TokenizeCheckoutPayload,
    UpdatePaymentLinkPayload,
)


def _client(handler):
    return BackendClient(base_url="http://backend.test/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_tokenize_sends_camel_case_payload():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"pspToken": "tok_1", "pspCode": "ADYEN", "last4": "4242"})

    client = _client(handler)
    payload = TokenizeCheckoutPayload(card_number="4242424242424242", exp_month=12, exp_year=28, cvc="123")
    result = await client.tokenize("abc", payload)
    await client.close()

    assert seen["url"] == "http://backend.test/checkout/abc/tokenize"
    assert seen["body"] == {"cardNumber": "4242424242424242", "expMonth": 12, "expYear": 28, "cvc": "123"}
    assert result.psp_token == "tok_1"
    assert result.psp_code == "ADYEN"


@pytest.mark.asyncio
async def test_connection_failure_becomes_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(BackendTransportError) as exc_info:
        await client.get_payment_link("abc")
    await client.close()

    assert exc_info.value.message == NO_CONNECTION_MESSAGE


@pytest.mark.asyncio
async def test_structured_error_keeps_message_and_code():
    def handler(request):
        return httpx.Response(502, json={"message": "all PSPs failed", "code": "PSP_ROUTING_FAILED"})

    client = _client(handler)
    with pytest.raises(BackendApiError) as exc_info:
        await client.process_payment("abc", ProcessPaymentPayload(psp_token="sim_stripe_exception"))
    await client.close()

    assert exc_info.value.message == "all PSPs failed"
    assert exc_info.value.code == "PSP_ROUTING_FAILED"
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_unparseable_error_body_uses_default_message():
    def handler(request):
        return httpx.Response(500, text="<html>oops</html>")

    client = _client(handler)
    with pytest.raises(BackendApiError) as exc_info:
        await client.process_payment("abc", ProcessPaymentPayload(psp_token="t"))
    await client.close()

    assert exc_info.value.message == "Error processing the payment"
    assert exc_info.value.code is None


@pytest.mark.asyncio
async def test_malformed_success_body_is_an_api_error():
    def handler(request):
        return httpx.Response(200, json={"unexpected": True})

    client = _client(handler)
    with pytest.raises(BackendApiError):
        await client.get_payment_link("abc")
    await client.close()


@pytest.mark.asyncio
async def test_list_by_merchant_passes_query_and_normalizes_fees():
    seen = {}
    fee = {
        "baseAmount": 10, "processingFee": 1, "fxFee": 0, "incentiveDiscount": 0,
        "totalFees": 1, "finalAmount": 11, "currency": "USD",
    }

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[{
            "id": 1, "merchantId": 3, "amount": 10, "currency": "USD", "status": "PAID",
            "slug": "s1", "checkoutUrl": "/checkout/s1", "feePreview": fee,
        }])

    client = _client(handler)
    links = await client.list_payment_links(merchant_id=3)
    await client.close()

    assert seen["params"] == {"merchantId": "3"}
    assert links[0].fee_breakdown.final_amount == 11
    assert not links[0].is_payable


@pytest.mark.asyncio
async def test_update_and_delete_surface_codes():
    def handler(request):
        return httpx.Response(404, json={"message": "Merchant 9 not found", "code": "MERCHANT_NOT_FOUND"})

    client = _client(handler)
    with pytest.raises(BackendApiError) as exc_info:
        await client.update_payment_link("s1", UpdatePaymentLinkPayload(merchant_id=9, amount=1, currency="USD"))
    assert exc_info.value.code == "MERCHANT_NOT_FOUND"

    with pytest.raises(BackendApiError):
        await client.delete_payment_link("s1", merchant_id=9)
    await client.close()


@pytest.mark.asyncio
async def test_delete_with_empty_body():
    def handler(request):
        assert request.method == "DELETE"
        assert request.url.params["merchantId"] == "1"
        return httpx.Response(204)

    client = _client(handler)
    assert await client.delete_payment_link("s1", merchant_id=1) is None
    await client.close()


def test_resolve_checkout_url():
    assert resolve_checkout_url("/checkout/abc", "https://pay.example.com") == "https://pay.example.com/checkout/abc"
    assert resolve_checkout_url("https://other.example.com/checkout/abc", "https://pay.example.com") == (
        "https://other.example.com/checkout/abc"
    )
    assert resolve_checkout_url("/checkout/abc", None) == "/checkout/abc"
