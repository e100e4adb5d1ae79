from .base import Base, TimestampMixin, utcnow
from .user import User, UserRole
from .case import Case, CaseStatus
from .quote import Quote, QuoteStatus
from .payment import Payment, PaymentStatus
from .case_file import CaseFile

__all__ = [
    "Base",
    "TimestampMixin",
    "utcnow",
    "User",
    "UserRole",
    "Case",
    "CaseStatus",
    "Quote",
    "QuoteStatus",
    "Payment",
    "PaymentStatus",
    "CaseFile",
]
