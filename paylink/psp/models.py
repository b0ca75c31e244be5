"""PSP Data Models"""

from dataclasses import dataclass
from typing import Optional
from enum import Enum


class PspName(str, Enum):
    """Payment service providers a token can be issued by"""
    STRIPE = "STRIPE"
    ADYEN = "ADYEN"


@dataclass(frozen=True)
class CardData:
    """Raw card fields as typed by the payer"""
    number: str
    exp_month: str
    exp_year: str  # 2-digit year as typed
    cvc: str

    @property
    def normalized_number(self) -> str:
        """Card number with all whitespace removed"""
        return "".join(self.number.split())

    @property
    def last4(self) -> str:
        return self.normalized_number[-4:]


@dataclass(frozen=True)
class TokenizeResult:
    """Opaque token plus the PSP that issued it"""
    psp_token: str
    psp_hint: Optional[PspName] = None  # None when the backend did not name the PSP
