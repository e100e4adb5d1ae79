"""CaseBridge core - models, engagement lifecycle services and utilities."""

from .config import Settings, settings
from .models import (
    Base,
    User,
    UserRole,
    Case,
    CaseStatus,
    Quote,
    QuoteStatus,
    Payment,
    PaymentStatus,
    CaseFile,
)
from .utils import (
    setup_logging,
    CaseBridgeError,
    PermanentError,
    RetryableError,
    NotFound,
    Forbidden,
    InvalidState,
    Conflict,
    InvalidSignature,
    PaymentProviderUnavailable,
)

__version__ = "0.1.0"
__all__ = [
    "Settings",
    "settings",
    "Base",
    "User",
    "UserRole",
    "Case",
    "CaseStatus",
    "Quote",
    "QuoteStatus",
    "Payment",
    "PaymentStatus",
    "CaseFile",
    "setup_logging",
    "CaseBridgeError",
    "PermanentError",
    "RetryableError",
    "NotFound",
    "Forbidden",
    "InvalidState",
    "Conflict",
    "InvalidSignature",
    "PaymentProviderUnavailable",
]
