# Checkout services

from .backend_client import (
    BackendClient,
    BackendClientError,
    BackendApiError,
    BackendTransportError,
    resolve_checkout_url,
)
from .card_validator import CardValidator, ValidationResult, luhn_check
from .orchestrator import CheckoutOrchestrator, classify_backend_error
from .tokenizers import RemoteTokenizer, SimulatedTokenizer

__all__ = [
    "BackendClient",
    "BackendClientError",
    "BackendApiError",
    "BackendTransportError",
    "resolve_checkout_url",
    "CardValidator",
    "ValidationResult",
    "luhn_check",
    "CheckoutOrchestrator",
    "classify_backend_error",
    "RemoteTokenizer",
    "SimulatedTokenizer",
]
