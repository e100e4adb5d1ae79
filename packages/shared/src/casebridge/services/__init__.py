"""Engagement lifecycle services."""

from .engagement import Engagement, accept_quote
from .file_tokens import FileToken, FileTokenSigner
from .payments import IntentHandle, PaymentService
from .stripe_processor import PaymentIntent, PaymentProcessor, StripeProcessor, WebhookEvent
from .users import register_user, seed_users

__all__ = [
    "Engagement",
    "accept_quote",
    "FileToken",
    "FileTokenSigner",
    "IntentHandle",
    "PaymentService",
    "PaymentIntent",
    "PaymentProcessor",
    "StripeProcessor",
    "WebhookEvent",
    "register_user",
    "seed_users",
]
