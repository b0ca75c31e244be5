"""
Card form validation

Form-level checks run before any network call. The first failing rule
wins. The tokenizer re-validates with its own, slightly different rules
(12-19 digit numbers, 3-4 digit CVC, expiry date), so both layers exist
on purpose.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from ..core.state import CVC, MONTH, NUMBER, YEAR
from ...psp.models import CardData

DIGITS_PATTERN = re.compile(r"[0-9]+")
NUMBER_PATTERN = re.compile(r"[0-9]{16}")
YEAR_PATTERN = re.compile(r"[0-9]{1,2}")
CVC_PATTERN = re.compile(r"[0-9]{3}")

NUMBER_LENGTH_MESSAGE = "Card number must contain exactly 16 digits"
NUMBER_LUHN_MESSAGE = "Invalid card number"
MONTH_MESSAGE = "Month must be between 1 and 12"
YEAR_MESSAGE = "Year must have up to 2 numeric digits"
CVC_MESSAGE = "CVC must have 3 digits"


def luhn_check(number: str) -> bool:
    """Luhn checksum over a string of decimal digits"""
    if not DIGITS_PATTERN.fullmatch(number):
        return False

    total = 0
    for position, char in enumerate(reversed(number)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


@dataclass
class ValidationResult:
    """Result of card form validation"""
    is_valid: bool
    card: Optional[CardData] = None
    field: Optional[str] = None
    message: Optional[str] = None

    @property
    def errors(self) -> dict[str, str]:
        if self.is_valid or self.field is None:
            return {}
        return {self.field: self.message or ""}


@dataclass
class CardValidator:
    """Short-circuit validation of raw card fields"""
    enforce_luhn: bool = True
    _rules: list = field(init=False, repr=False)

    def __post_init__(self):
        self._rules = [
            self._check_number,
            self._check_luhn,
            self._check_month,
            self._check_year,
            self._check_cvc,
        ]

    def validate(self, card: CardData) -> ValidationResult:
        for rule in self._rules:
            failure = rule(card)
            if failure is not None:
                name, message = failure
                return ValidationResult(is_valid=False, field=name, message=message)
        return ValidationResult(is_valid=True, card=card)

    def _check_number(self, card: CardData):
        if not NUMBER_PATTERN.fullmatch(card.normalized_number):
            return NUMBER, NUMBER_LENGTH_MESSAGE
        return None

    def _check_luhn(self, card: CardData):
        if self.enforce_luhn and not luhn_check(card.normalized_number):
            return NUMBER, NUMBER_LUHN_MESSAGE
        return None

    def _check_month(self, card: CardData):
        value = card.exp_month.strip()
        if not DIGITS_PATTERN.fullmatch(value) or not 1 <= int(value) <= 12:
            return MONTH, MONTH_MESSAGE
        return None

    def _check_year(self, card: CardData):
        if not YEAR_PATTERN.fullmatch(card.exp_year):
            return YEAR, YEAR_MESSAGE
        return None

    def _check_cvc(self, card: CardData):
        if not CVC_PATTERN.fullmatch(card.cvc):
            return CVC, CVC_MESSAGE
        return None
