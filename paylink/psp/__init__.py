# PSP tokenization simulator

from .models import CardData, PspName, TokenizeResult
from .simulator import (
    TokenizationSimulator,
    TokenizationError,
    CardValidationError,
    PspSdkError,
    SuffixRule,
    SUFFIX_RULES,
)

__all__ = [
    "CardData",
    "PspName",
    "TokenizeResult",
    "TokenizationSimulator",
    "TokenizationError",
    "CardValidationError",
    "PspSdkError",
    "SuffixRule",
    "SUFFIX_RULES",
]
