from .case import (
    AcceptQuoteRequest,
    CaseCreate,
    CaseFileResponse,
    CaseListResponse,
    CaseResponse,
    CaseSummary,
    CaseUpdate,
    ClientResponse,
    EngagementResponse,
)
from .file import SecureUrlResponse
from .payment import PaymentIntentResponse, PaymentResponse, WebhookAck
from .quote import QuoteCreate, QuoteListResponse, QuoteResponse, QuoteUpdate
from .user import UserCreate, UserResponse

__all__ = [
    "AcceptQuoteRequest",
    "CaseCreate",
    "CaseFileResponse",
    "CaseListResponse",
    "CaseResponse",
    "CaseSummary",
    "CaseUpdate",
    "ClientResponse",
    "EngagementResponse",
    "SecureUrlResponse",
    "PaymentIntentResponse",
    "PaymentResponse",
    "WebhookAck",
    "QuoteCreate",
    "QuoteListResponse",
    "QuoteResponse",
    "QuoteUpdate",
    "UserCreate",
    "UserResponse",
]
