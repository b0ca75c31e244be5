"""Payment-link checkout: card validation, PSP tokenization simulation and checkout orchestration."""

__version__ = "1.0.0"
