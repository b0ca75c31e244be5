"""Checkout state machine types"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Union

from ...models.payment_link import ProcessPaymentResponse
from ...psp.models import CardData


class CheckoutStatus(str, Enum):
    """Client-visible checkout status"""
    IDLE = "idle"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


NUMBER = "number"
MONTH = "month"
YEAR = "year"
CVC = "cvc"
GENERAL = "general"

FIELD_NAMES = (NUMBER, MONTH, YEAR, CVC, GENERAL)

# Card form input names
FIELD_ALIASES = {
    "expMonth": MONTH,
    "exp_month": MONTH,
    "expYear": YEAR,
    "exp_year": YEAR,
}


def canonical_field(name: str) -> str:
    """Map a form input name to its error field name"""
    canonical = FIELD_ALIASES.get(name, name)
    if canonical not in FIELD_NAMES:
        raise ValueError(f"Unknown card field: {name!r}")
    return canonical


class FieldErrorSet:
    """
    User-facing messages keyed by card field.

    Editing a field clears that field's message and the general one;
    a fresh submission clears everything.
    """

    def __init__(self, errors: Optional[Mapping[str, str]] = None):
        self._errors: dict[str, str] = {}
        for name, message in (errors or {}).items():
            self.set(name, message)

    def set(self, name: str, message: str) -> None:
        self._errors[canonical_field(name)] = message

    def get(self, name: str) -> Optional[str]:
        return self._errors.get(canonical_field(name))

    def clear_field(self, name: str) -> None:
        """Clear the edited field and the general message, nothing else"""
        self._errors.pop(canonical_field(name), None)
        self._errors.pop(GENERAL, None)

    def clear(self) -> None:
        self._errors.clear()

    def as_dict(self) -> dict[str, str]:
        return dict(self._errors)

    def __contains__(self, name: str) -> bool:
        return canonical_field(name) in self._errors

    def __len__(self) -> int:
        return len(self._errors)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FieldErrorSet):
            return self._errors == other._errors
        if isinstance(other, Mapping):
            return self._errors == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"FieldErrorSet({self._errors!r})"


class FailureKind(str, Enum):
    """Where a checkout failure came from"""
    TRANSPORT = "transport"
    SDK = "sdk"
    BACKEND = "backend"
    DECLINED = "declined"


@dataclass(frozen=True)
class CheckoutFailure:
    """
    Classified checkout failure.

    Carries either a banner message or field errors, never both.
    """
    kind: FailureKind
    message: Optional[str] = None
    field_errors: dict[str, str] = field(default_factory=dict)
    code: Optional[str] = None

    def __post_init__(self):
        if bool(self.message) == bool(self.field_errors):
            raise ValueError("A checkout failure needs exactly one of message or field_errors")

    @classmethod
    def banner(cls, kind: FailureKind, message: str, code: Optional[str] = None) -> "CheckoutFailure":
        return cls(kind=kind, message=message, code=code)

    @classmethod
    def fields(cls, kind: FailureKind, errors: Mapping[str, str], code: Optional[str] = None) -> "CheckoutFailure":
        return cls(kind=kind, field_errors=FieldErrorSet(errors).as_dict(), code=code)

    @property
    def is_banner(self) -> bool:
        return self.message is not None


class _StateBase:
    status: ClassVar[CheckoutStatus]

    @property
    def last_attempt(self) -> Optional[CardData]:
        return getattr(self, "attempt", None)


@dataclass(frozen=True)
class Idle(_StateBase):
    status: ClassVar[CheckoutStatus] = CheckoutStatus.IDLE


@dataclass(frozen=True)
class Processing(_StateBase):
    attempt: CardData
    status: ClassVar[CheckoutStatus] = CheckoutStatus.PROCESSING


@dataclass(frozen=True)
class Succeeded(_StateBase):
    attempt: CardData
    payment: ProcessPaymentResponse
    status: ClassVar[CheckoutStatus] = CheckoutStatus.SUCCESS


@dataclass(frozen=True)
class Failed(_StateBase):
    attempt: CardData
    failure: CheckoutFailure
    status: ClassVar[CheckoutStatus] = CheckoutStatus.ERROR


CheckoutState = Union[Idle, Processing, Succeeded, Failed]
