import httpx
import pytest
import pytest_asyncio

from paylink.checkout.core.session import session_manager
from paylink.checkout.main import app as checkout_app
from paylink.checkout.routes.checkout import get_backend_client, get_tokenizer
from paylink.checkout.services.orchestrator import DECLINED_MESSAGE, LOAD_ERROR_MESSAGE, ROUTING_FAILED_MESSAGE
from paylink.checkout.services.tokenizers import SimulatedTokenizer
from paylink.models.payment_link import CreatePaymentLinkPayload

from conftest import (
    CARD_BAD_LUHN,
    CARD_OK,
    CARD_SDK_FAILURE,
    CARD_STRIPE_EXCEPTION,
    CARD_STRIPE_FAILED,
)


@pytest_asyncio.fixture
async def api(backend_client):
    session_manager.sessions.clear()
    checkout_app.dependency_overrides[get_backend_client] = lambda: backend_client
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=checkout_app),
        base_url="http://checkout.test",
    ) as client:
        yield client
    checkout_app.dependency_overrides.clear()
    session_manager.sessions.clear()


@pytest_asyncio.fixture
async def slug(backend_client):
    link = await backend_client.create_payment_link(
        CreatePaymentLinkPayload(merchant_id=1, amount=1000.0, currency="USD", description="Order 42")
    )
    return link.slug


def _card(number=CARD_OK, **overrides):
    body = {"number": number, "exp_month": "12", "exp_year": "28", "cvc": "123"}
    body.update(overrides)
    return body


async def _open(api, slug):
    response = await api.post(f"/api/checkout/{slug}/sessions")
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_open_session_loads_link_and_fees(api, slug):
    view = await _open(api, slug)

    assert view["status"] == "idle"
    assert view["link"]["slug"] == slug
    assert view["checkout_url"] == f"/checkout/{slug}"
    assert view["fee_currency"] == "USD"
    assert view["fee_rows"][-1] == {"label": "Total to pay", "amount": 1029.0}
    assert view["can_retry"] is False


@pytest.mark.asyncio
async def test_successful_checkout(api, slug, backend_client):
    view = await _open(api, slug)

    response = await api.post(f"/api/checkout/sessions/{view['session_id']}/submit", json=_card())
    result = response.json()

    assert result["status"] == "success"
    assert result["payment"]["paymentStatus"] == "CAPTURED"
    assert result["banner"] is None
    assert (await backend_client.get_payment_link(slug)).status == "PAID"


@pytest.mark.asyncio
async def test_decline_then_retry(api, slug):
    session_id = (await _open(api, slug))["session_id"]

    result = (await api.post(f"/api/checkout/sessions/{session_id}/submit", json=_card(CARD_STRIPE_FAILED))).json()
    assert result["status"] == "error"
    assert result["banner"] == DECLINED_MESSAGE
    assert result["field_errors"] == {}
    assert result["can_retry"] is True

    retried = (await api.post(f"/api/checkout/sessions/{session_id}/retry")).json()
    assert retried["status"] == "error"
    assert retried["banner"] == DECLINED_MESSAGE


@pytest.mark.asyncio
async def test_routing_failure(api, slug):
    session_id = (await _open(api, slug))["session_id"]

    result = (await api.post(f"/api/checkout/sessions/{session_id}/submit", json=_card(CARD_STRIPE_EXCEPTION))).json()

    assert result["status"] == "error"
    assert result["banner"] == ROUTING_FAILED_MESSAGE


@pytest.mark.asyncio
async def test_remote_sdk_failure_uses_server_message(api, slug):
    session_id = (await _open(api, slug))["session_id"]

    result = (await api.post(f"/api/checkout/sessions/{session_id}/submit", json=_card(CARD_SDK_FAILURE))).json()

    assert result["status"] == "error"
    assert result["banner"] == "Network error in the PSP SDK"
    assert result["field_errors"] == {}


@pytest.mark.asyncio
async def test_simulated_sdk_failure(api, slug, simulator):
    checkout_app.dependency_overrides[get_tokenizer] = lambda: SimulatedTokenizer(simulator)
    session_id = (await _open(api, slug))["session_id"]

    result = (await api.post(f"/api/checkout/sessions/{session_id}/submit", json=_card(CARD_SDK_FAILURE))).json()

    assert result["status"] == "error"
    assert result["banner"].startswith(DECLINED_MESSAGE)
    assert result["field_errors"] == {}


@pytest.mark.asyncio
async def test_form_error_and_field_edit(api, slug):
    session_id = (await _open(api, slug))["session_id"]

    result = (await api.post(f"/api/checkout/sessions/{session_id}/submit", json=_card(CARD_BAD_LUHN))).json()
    assert result["status"] == "idle"
    assert set(result["field_errors"]) == {"number"}

    edited = (await api.post(f"/api/checkout/sessions/{session_id}/fields/number/edit")).json()
    assert edited["field_errors"] == {}

    bad_field = await api.post(f"/api/checkout/sessions/{session_id}/fields/zip/edit")
    assert bad_field.status_code == 400


@pytest.mark.asyncio
async def test_unknown_link(api):
    view = await _open(api, "missing")

    assert view["link"] is None
    assert view["load_error"] == LOAD_ERROR_MESSAGE

    result = (await api.post(f"/api/checkout/sessions/{view['session_id']}/submit", json=_card())).json()
    assert result["status"] == "idle"


@pytest.mark.asyncio
async def test_paid_link_is_closed(api, slug):
    first = (await _open(api, slug))["session_id"]
    await api.post(f"/api/checkout/sessions/{first}/submit", json=_card())

    view = await _open(api, slug)
    assert view["link_closed"] is True


@pytest.mark.asyncio
async def test_close_session(api, slug):
    session_id = (await _open(api, slug))["session_id"]

    assert (await api.delete(f"/api/checkout/sessions/{session_id}")).json() == {"deleted": True}
    assert (await api.get(f"/api/checkout/sessions/{session_id}")).status_code == 404
