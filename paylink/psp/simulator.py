"""
PSP Tokenization Simulator

Deterministic stand-in for a PSP client SDK. Given card data it either
raises a simulated SDK failure or returns a token plus the PSP that issued
it. The last four digits of the card number select an injected failure mode,
so demos and integration tests can exercise every PSP branch without a real
sandbox.

Suffix table (first match wins):
    9999 -> PspSdkError (network fault inside the PSP client)
    0001 -> sim_stripe_exception / STRIPE
    0002 -> sim_stripe_failed    / STRIPE
    0003 -> sim_adyen_exception  / ADYEN
    0004 -> sim_adyen_failed     / ADYEN
    else -> sim_stripe_ok or sim_adyen_ok, matching the preferred PSP
"""

import re
import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from .models import CardData, PspName, TokenizeResult

logger = logging.getLogger(__name__)

DEFAULT_LATENCY_SECONDS = 0.8

DIGITS_PATTERN = re.compile(r"[0-9]+")
CARD_NUMBER_PATTERN = re.compile(r"[0-9]{12,19}")
CVC_PATTERN = re.compile(r"[0-9]{3,4}")


class TokenizationError(Exception):
    """Base exception for simulated tokenizer failures"""
    pass


class CardValidationError(TokenizationError):
    """Card data rejected by the tokenizer before any token exists"""

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class PspSdkError(TokenizationError):
    """Transport-level failure inside the PSP client SDK"""
    pass


@dataclass(frozen=True)
class SuffixRule:
    """Outcome injected for card numbers ending in `suffix`"""
    suffix: str
    description: str
    result: Optional[TokenizeResult] = None
    error: Optional[str] = None

    def matches(self, number: str) -> bool:
        return number.endswith(self.suffix)

    def apply(self) -> TokenizeResult:
        if self.result is None:
            raise PspSdkError(self.error or "PSP SDK failure")
        return self.result


SUFFIX_RULES: tuple[SuffixRule, ...] = (
    SuffixRule(
        suffix="9999",
        description="Network fault inside the PSP SDK",
        error="Network error in the PSP SDK",
    ),
    SuffixRule(
        suffix="0001",
        description="Stripe SDK throws after issuing the token",
        result=TokenizeResult("sim_stripe_exception", PspName.STRIPE),
    ),
    SuffixRule(
        suffix="0002",
        description="Stripe clean decline",
        result=TokenizeResult("sim_stripe_failed", PspName.STRIPE),
    ),
    SuffixRule(
        suffix="0003",
        description="Adyen SDK throws after issuing the token",
        result=TokenizeResult("sim_adyen_exception", PspName.ADYEN),
    ),
    SuffixRule(
        suffix="0004",
        description="Adyen clean decline",
        result=TokenizeResult("sim_adyen_failed", PspName.ADYEN),
    ),
)

SUCCESS_TOKENS = {
    PspName.STRIPE: "sim_stripe_ok",
    PspName.ADYEN: "sim_adyen_ok",
}


def parse_digits(value: str) -> int:
    """Integer value of an ASCII digit string, 0 for anything else"""
    value = value.strip()
    return int(value) if DIGITS_PATTERN.fullmatch(value) else 0


def expand_year(exp_year: str) -> int:
    """Expand a 2-digit year to 2000+YY. Unparseable years become 0."""
    exp_year = exp_year.strip()
    raw = f"20{exp_year}" if len(exp_year) == 2 else exp_year
    return parse_digits(raw)


class TokenizationSimulator:
    """
    Simulated PSP tokenizer.

    Re-validates card data the way a server-side tokenizer would (these
    rules differ from the checkout form's on purpose), waits a fixed
    latency, then resolves the outcome from the suffix rule table.

    Usage:
        simulator = TokenizationSimulator()
        result = await simulator.tokenize(card, PspName.ADYEN)
    """

    def __init__(
        self,
        latency_seconds: float = DEFAULT_LATENCY_SECONDS,
        rules: tuple[SuffixRule, ...] = SUFFIX_RULES,
        today: Callable[[], date] = date.today,
    ):
        """
        Args:
            latency_seconds: Simulated PSP round-trip delay
            rules: Ordered suffix rules, first match wins
            today: Clock used for the expiry check
        """
        self.latency_seconds = latency_seconds
        self.rules = rules
        self._today = today

    def validate(self, card: CardData) -> None:
        """Raise CardValidationError if the tokenizer would reject the card"""
        if not CARD_NUMBER_PATTERN.fullmatch(card.normalized_number):
            raise CardValidationError("Invalid card", field="number")

        month = parse_digits(card.exp_month)
        if month < 1 or month > 12:
            raise CardValidationError("Invalid expiry month", field="month")

        year = expand_year(card.exp_year)
        today = self._today()
        if year < today.year or (year == today.year and month < today.month):
            raise CardValidationError("Expired card", field="year")

        if not CVC_PATTERN.fullmatch(card.cvc):
            raise CardValidationError("Invalid CVC", field="cvc")

    def resolve(self, card: CardData, preferred_psp: PspName = PspName.STRIPE) -> TokenizeResult:
        """Resolve the outcome for already-validated card data, without latency"""
        number = card.normalized_number
        for rule in self.rules:
            if rule.matches(number):
                logger.info(f"Simulated PSP rule {rule.suffix} hit: {rule.description}")
                return rule.apply()

        return TokenizeResult(SUCCESS_TOKENS[PspName(preferred_psp)], PspName(preferred_psp))

    async def tokenize(
        self,
        card: CardData,
        preferred_psp: PspName = PspName.STRIPE,
    ) -> TokenizeResult:
        """
        Tokenize card data.

        Args:
            card: Raw card data
            preferred_psp: PSP to issue the token when no failure rule applies

        Returns:
            Token and the PSP that issued it

        Raises:
            CardValidationError: Card rejected before tokenization
            PspSdkError: Simulated SDK transport failure
        """
        await asyncio.sleep(self.latency_seconds)

        self.validate(card)
        result = self.resolve(card, preferred_psp)
        logger.debug(f"Tokenized card ending {card.last4}: {result.psp_token} ({result.psp_hint.value})")
        return result
