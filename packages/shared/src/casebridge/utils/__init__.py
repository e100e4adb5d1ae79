from .errors import (
    CaseBridgeError,
    PermanentError,
    RetryableError,
    NotFound,
    CaseNotFound,
    QuoteNotFound,
    PaymentNotFound,
    FileNotFound,
    Forbidden,
    InvalidState,
    Conflict,
    InvalidSignature,
    PaymentProcessorError,
    PaymentProviderUnavailable,
)
from .logging import setup_logging, JSONFormatter

__all__ = [
    "CaseBridgeError",
    "PermanentError",
    "RetryableError",
    "NotFound",
    "CaseNotFound",
    "QuoteNotFound",
    "PaymentNotFound",
    "FileNotFound",
    "Forbidden",
    "InvalidState",
    "Conflict",
    "InvalidSignature",
    "PaymentProcessorError",
    "PaymentProviderUnavailable",
    "setup_logging",
    "JSONFormatter",
]
