"""
Checkout Orchestrator

Drives one checkout view for a payment link:

    idle/error --submit/retry--> processing --> success | error

Inside `processing` the flow is strictly sequential: tokenize, then a
single payment call with the token. Any failure is classified into a
CheckoutFailure that carries either a banner message or field errors.
"""

import logging
from typing import Optional

from ..core.state import (
    GENERAL,
    NUMBER,
    CheckoutFailure,
    CheckoutState,
    CheckoutStatus,
    Failed,
    FailureKind,
    FieldErrorSet,
    Idle,
    Processing,
    Succeeded,
)
from .backend_client import (
    BackendClient,
    BackendClientError,
    BackendTransportError,
    NO_CONNECTION_MESSAGE,
)
from .card_validator import CardValidator
from .tokenizers import Tokenizer, psp_from_code
from ...models.payment_link import FeeBreakdown, PaymentLinkView, ProcessPaymentPayload
from ...psp.models import CardData, PspName
from ...psp.simulator import TokenizationError

logger = logging.getLogger(__name__)

PSP_ROUTING_FAILED = "PSP_ROUTING_FAILED"
INVALID_CARD_NUMBER = "INVALID_CARD_NUMBER"
INVALID_INPUT = "INVALID_INPUT"

ROUTING_FAILED_MESSAGE = (
    "We could not process your payment after trying multiple providers. "
    "Please try again in a few minutes."
)
GENERIC_FAILURE_MESSAGE = "Payment could not be processed. Please try again in a few minutes."
DECLINED_MESSAGE = "Payment could not be processed."
INVALID_CARD_MESSAGE = "Invalid card number"
INVALID_INPUT_MESSAGE = "Check the card details you entered"
LOAD_ERROR_MESSAGE = "Could not load the payment link (it may be expired or not exist)."


def classify_backend_error(exc: BackendClientError) -> CheckoutFailure:
    """Map a backend client error to banner or field placement"""
    if isinstance(exc, BackendTransportError):
        return CheckoutFailure.banner(FailureKind.TRANSPORT, NO_CONNECTION_MESSAGE)

    code = exc.code
    if code == PSP_ROUTING_FAILED:
        return CheckoutFailure.banner(FailureKind.BACKEND, ROUTING_FAILED_MESSAGE, code=code)
    if code == INVALID_CARD_NUMBER:
        return CheckoutFailure.fields(
            FailureKind.BACKEND, {NUMBER: exc.message or INVALID_CARD_MESSAGE}, code=code
        )
    if code == INVALID_INPUT:
        return CheckoutFailure.fields(
            FailureKind.BACKEND, {GENERAL: exc.message or INVALID_INPUT_MESSAGE}, code=code
        )
    return CheckoutFailure.banner(FailureKind.BACKEND, exc.message or GENERIC_FAILURE_MESSAGE, code=code)


class CheckoutOrchestrator:
    """
    Checkout state machine for a single payment link view.

    At most one attempt is in flight: submissions and retries while
    processing are ignored. The last submitted card is kept so a retry
    replays it unchanged.
    """

    def __init__(
        self,
        slug: str,
        client: BackendClient,
        tokenizer: Tokenizer,
        validator: Optional[CardValidator] = None,
    ):
        self.slug = slug
        self.client = client
        self.tokenizer = tokenizer
        self.validator = validator or CardValidator()
        self.link: Optional[PaymentLinkView] = None
        self.load_error: Optional[str] = None
        self.field_errors = FieldErrorSet()
        self._state: CheckoutState = Idle()

    # ==================== View state ====================

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def status(self) -> CheckoutStatus:
        return self._state.status

    @property
    def fee(self) -> Optional[FeeBreakdown]:
        return self.link.fee_breakdown if self.link else None

    @property
    def banner(self) -> Optional[str]:
        if isinstance(self._state, Failed):
            return self._state.failure.message
        return None

    @property
    def last_attempt(self) -> Optional[CardData]:
        return self._state.last_attempt

    @property
    def preferred_psp(self) -> Optional[PspName]:
        return psp_from_code(self.link.preferred_psp) if self.link else None

    @property
    def is_payable(self) -> bool:
        return self.link is not None and self.link.is_payable

    @property
    def is_link_closed(self) -> bool:
        return self.link is not None and not self.link.is_payable

    @property
    def can_retry(self) -> bool:
        return (
            self.status == CheckoutStatus.ERROR
            and self.last_attempt is not None
            and self.is_payable
        )

    # ==================== Actions ====================

    async def load_link(self) -> Optional[PaymentLinkView]:
        """Load the payment link this checkout pays"""
        try:
            self.link = await self.client.get_payment_link(self.slug)
        except BackendClientError as exc:
            logger.warning(f"Could not load payment link {self.slug}: {exc.message}")
            self.link = None
            self.load_error = LOAD_ERROR_MESSAGE
            return None

        self.load_error = None
        if self.link.fee_breakdown is None:
            logger.info(f"Payment link {self.slug} has no fee data")
        return self.link

    def edit_field(self, name: str) -> None:
        """Payer edited a card field: clear its error and the general one"""
        self.field_errors.clear_field(name)

    async def submit(self, card: CardData) -> CheckoutState:
        """Validate card input and, if valid, run a checkout attempt"""
        if not self._accepts_attempt():
            return self._state

        self.field_errors.clear()
        result = self.validator.validate(card)
        if not result.is_valid:
            logger.info(f"Card form rejected for {self.slug}: {result.field}")
            for name, message in result.errors.items():
                self.field_errors.set(name, message)
            return self._state

        return await self._run(card)

    async def retry(self) -> CheckoutState:
        """Replay the last submitted card after a failure"""
        if not self.can_retry:
            logger.debug(f"Retry ignored for {self.slug} in state {self.status.value}")
            return self._state

        return await self._run(self.last_attempt)

    # ==================== Internals ====================

    def _accepts_attempt(self) -> bool:
        if self.status == CheckoutStatus.PROCESSING:
            logger.warning(f"Checkout for {self.slug} already processing, submission ignored")
            return False
        if self.status == CheckoutStatus.SUCCESS:
            return False
        if not self.is_payable:
            logger.warning(f"Payment link {self.slug} is not payable, submission ignored")
            return False
        return True

    async def _run(self, card: CardData) -> CheckoutState:
        self.field_errors.clear()
        self._state = Processing(attempt=card)
        logger.info(f"Checkout started for {self.slug} with card ending {card.last4}")

        try:
            token = await self.tokenizer.tokenize(self.slug, card, self.preferred_psp)
            payment = await self.client.process_payment(
                self.slug,
                ProcessPaymentPayload(
                    psp_token=token.psp_token,
                    psp_hint=token.psp_hint.value if token.psp_hint else None,
                ),
            )
        except TokenizationError as exc:
            failure = CheckoutFailure.banner(FailureKind.SDK, f"{DECLINED_MESSAGE} {exc}")
        except BackendClientError as exc:
            failure = classify_backend_error(exc)
        else:
            if payment.is_captured:
                self._state = Succeeded(attempt=card, payment=payment)
                logger.info(f"Payment {payment.payment_id} captured for {self.slug} via {payment.psp_used}")
                return self._state
            failure = CheckoutFailure.banner(FailureKind.DECLINED, DECLINED_MESSAGE)
            logger.info(f"Payment {payment.payment_id} for {self.slug} ended {payment.payment_status}")

        return self._fail(card, failure)

    def _fail(self, card: CardData, failure: CheckoutFailure) -> CheckoutState:
        if failure.field_errors:
            self.field_errors = FieldErrorSet(failure.field_errors)
        self._state = Failed(attempt=card, failure=failure)
        logger.warning(
            f"Checkout failed for {self.slug}: kind={failure.kind.value}, code={failure.code}"
        )
        return self._state
