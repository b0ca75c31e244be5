from datetime import date

import httpx
import pytest
import pytest_asyncio

from paylink.checkout.services.backend_client import BackendClient
from paylink.mock_backend.database import payment_link_db
from paylink.mock_backend.main import app as backend_app
from paylink.mock_backend.routes.checkout import get_simulator
from paylink.psp.models import CardData
from paylink.psp.simulator import TokenizationSimulator

TODAY = date(2026, 10, 19)

# 16-digit, Luhn-valid cards for every simulator branch
CARD_OK = "4242424242424242"
CARD_STRIPE_EXCEPTION = "4142424242420001"
CARD_STRIPE_FAILED = "4042424242420002"
CARD_ADYEN_EXCEPTION = "4041424242420003"
CARD_ADYEN_FAILED = "4040424242420004"
CARD_SDK_FAILURE = "4040404242429999"
CARD_BAD_LUHN = "4242424242424241"


def make_card(number=CARD_OK, exp_month="12", exp_year="28", cvc="123"):
    return CardData(number=number, exp_month=exp_month, exp_year=exp_year, cvc=cvc)


@pytest.fixture
def simulator():
    return TokenizationSimulator(latency_seconds=0, today=lambda: TODAY)


@pytest.fixture
def mock_backend(simulator):
    payment_link_db.clear()
    backend_app.dependency_overrides[get_simulator] = lambda: simulator
    yield backend_app
    backend_app.dependency_overrides.clear()
    payment_link_db.clear()


@pytest_asyncio.fixture
async def backend_client(mock_backend):
    client = BackendClient(
        base_url="http://backend.test",
        transport=httpx.ASGITransport(app=mock_backend),
    )
    yield client
    await client.close()
