"""Tokenizers used by the checkout orchestrator"""

import logging
from typing import Optional, Protocol

from .backend_client import BackendClient
from ...models.payment_link import TokenizeCheckoutPayload
from ...psp.models import CardData, PspName, TokenizeResult
from ...psp.simulator import TokenizationSimulator

logger = logging.getLogger(__name__)


class Tokenizer(Protocol):
    async def tokenize(
        self, slug: str, card: CardData, preferred_psp: Optional[PspName] = None
    ) -> TokenizeResult:
        ...


def psp_from_code(code: Optional[str]) -> Optional[PspName]:
    try:
        return PspName(code) if code else None
    except ValueError:
        return None


class RemoteTokenizer:
    """Production tokenizer: card data goes to the backend's tokenize endpoint"""

    def __init__(self, client: BackendClient):
        self.client = client

    async def tokenize(
        self, slug: str, card: CardData, preferred_psp: Optional[PspName] = None
    ) -> TokenizeResult:
        # the backend routes by the link it stores, preferred_psp is not sent
        payload = TokenizeCheckoutPayload(
            card_number=card.normalized_number,
            exp_month=int(card.exp_month),
            exp_year=int(card.exp_year),
            cvc=card.cvc,
        )
        response = await self.client.tokenize(slug, payload)
        return TokenizeResult(response.psp_token, psp_from_code(response.psp_code))


class SimulatedTokenizer:
    """Local/dev tokenizer backed by the PSP simulator"""

    def __init__(
        self,
        simulator: Optional[TokenizationSimulator] = None,
        preferred_psp: PspName = PspName.STRIPE,
    ):
        self.simulator = simulator or TokenizationSimulator()
        self.preferred_psp = preferred_psp

    async def tokenize(
        self, slug: str, card: CardData, preferred_psp: Optional[PspName] = None
    ) -> TokenizeResult:
        """Issue a token for the link's PSP, or the configured default"""
        psp = preferred_psp or self.preferred_psp
        logger.debug(f"Simulating tokenization for link {slug} with {psp.value}")
        return await self.simulator.tokenize(card, psp)
