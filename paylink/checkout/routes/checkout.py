"""Checkout API routes"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..core.config import get_settings
from ..core.session import CheckoutSession, session_manager
from ..core.state import Succeeded
from ..services.backend_client import BackendClient, resolve_checkout_url
from ..services.card_validator import CardValidator
from ..services.orchestrator import CheckoutOrchestrator
from ..services.tokenizers import RemoteTokenizer, SimulatedTokenizer, Tokenizer
from ...models.payment_link import PaymentLinkView, ProcessPaymentResponse
from ...psp.models import CardData
from ...psp.simulator import TokenizationSimulator

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])

# Initialize services (would be dependency injected in production)
backend_client: Optional[BackendClient] = None


def get_backend_client() -> BackendClient:
    """Get or create backend client"""
    global backend_client
    if backend_client is None:
        settings = get_settings()
        backend_client = BackendClient(
            base_url=settings.api_base_url,
            timeout=settings.request_timeout,
        )
    return backend_client


def get_tokenizer(client: BackendClient = Depends(get_backend_client)) -> Tokenizer:
    """Remote tokenizer in production, simulator in local/dev mode"""
    settings = get_settings()
    if settings.uses_simulator:
        return SimulatedTokenizer(
            TokenizationSimulator(latency_seconds=settings.simulated_latency_seconds),
            preferred_psp=settings.preferred_psp,
        )
    return RemoteTokenizer(client)


def get_card_validator() -> CardValidator:
    return CardValidator(enforce_luhn=get_settings().enforce_luhn)


class CardInputRequest(BaseModel):
    """Card form submission"""
    number: str
    exp_month: str
    exp_year: str
    cvc: str

    def to_card(self) -> CardData:
        return CardData(
            number=self.number,
            exp_month=self.exp_month,
            exp_year=self.exp_year,
            cvc=self.cvc,
        )


class FeeRow(BaseModel):
    label: str
    amount: float


class CheckoutView(BaseModel):
    """Everything the checkout screen renders"""
    session_id: str
    slug: str
    link: Optional[PaymentLinkView] = None
    checkout_url: Optional[str] = None
    load_error: Optional[str] = None
    link_closed: bool = False
    status: str
    banner: Optional[str] = None
    field_errors: dict[str, str] = {}
    can_retry: bool = False
    fee_currency: Optional[str] = None
    fee_rows: list[FeeRow] = []
    payment: Optional[ProcessPaymentResponse] = None


def build_view(session: CheckoutSession) -> CheckoutView:
    orchestrator = session.orchestrator
    fee = orchestrator.fee
    link = orchestrator.link
    state = orchestrator.state

    return CheckoutView(
        session_id=session.session_id,
        slug=session.slug,
        link=link,
        checkout_url=resolve_checkout_url(link.checkout_url, get_settings().public_base_url) if link else None,
        load_error=orchestrator.load_error,
        link_closed=orchestrator.is_link_closed,
        status=orchestrator.status.value,
        banner=orchestrator.banner,
        field_errors=orchestrator.field_errors.as_dict(),
        can_retry=orchestrator.can_retry,
        fee_currency=fee.currency if fee else None,
        fee_rows=[FeeRow(label=label, amount=amount) for label, amount in fee.display_rows()] if fee else [],
        payment=state.payment if isinstance(state, Succeeded) else None,
    )


def _get_session(session_id: str) -> CheckoutSession:
    session = session_manager.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Checkout session not found")
    session.touch()
    return session


@router.post("/{slug}/sessions", response_model=CheckoutView, status_code=201)
async def open_checkout(
    slug: str,
    client: BackendClient = Depends(get_backend_client),
    tokenizer: Tokenizer = Depends(get_tokenizer),
    validator: CardValidator = Depends(get_card_validator),
):
    """Open a checkout session for a payment link and load the link"""
    orchestrator = CheckoutOrchestrator(slug, client, tokenizer, validator)
    await orchestrator.load_link()
    session = session_manager.create_session(orchestrator)
    return build_view(session)


@router.get("/sessions/{session_id}", response_model=CheckoutView)
async def get_checkout(session_id: str):
    """Current checkout view"""
    return build_view(_get_session(session_id))


@router.post("/sessions/{session_id}/submit", response_model=CheckoutView)
async def submit_card(session_id: str, request: CardInputRequest):
    """Submit card data; ignored while an attempt is in flight"""
    session = _get_session(session_id)
    await session.orchestrator.submit(request.to_card())
    return build_view(session)


@router.post("/sessions/{session_id}/retry", response_model=CheckoutView)
async def retry_checkout(session_id: str):
    """Replay the last submitted card"""
    session = _get_session(session_id)
    await session.orchestrator.retry()
    return build_view(session)


@router.post("/sessions/{session_id}/fields/{field}/edit", response_model=CheckoutView)
async def edit_field(session_id: str, field: str):
    """Payer edited a card field"""
    session = _get_session(session_id)
    try:
        session.orchestrator.edit_field(field)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return build_view(session)


@router.delete("/sessions/{session_id}")
async def close_checkout(session_id: str):
    """Navigate away: drop the session and its retained card attempt"""
    if not session_manager.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Checkout session not found")
    return {"deleted": True}
