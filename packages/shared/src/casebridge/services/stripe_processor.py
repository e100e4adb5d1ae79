"""Stripe integration behind a small processor interface."""

import asyncio
from typing import Dict, NamedTuple, Optional, Protocol, Union

import stripe

from casebridge.utils import (
    InvalidSignature,
    PaymentProcessorError,
    PaymentProviderUnavailable,
    setup_logging,
)

logger = setup_logging(__name__)

INTENT_SUCCEEDED = "succeeded"
EVENT_INTENT_SUCCEEDED = "payment_intent.succeeded"


class PaymentIntent(NamedTuple):
    id: str
    client_secret: str
    status: str


class WebhookEvent(NamedTuple):
    type: str
    object_id: Optional[str]


class PaymentProcessor(Protocol):
    """What the payment service needs from a processor."""

    async def create_intent(
        self, amount_minor: int, metadata: Dict[str, str], idempotency_key: str
    ) -> PaymentIntent:
        """Create an intent; repeating ``idempotency_key`` returns the same one."""
        ...

    async def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        ...

    def parse_event(self, payload: Union[bytes, str], signature: str) -> WebhookEvent:
        ...


class StripeProcessor:
    """PaymentProcessor backed by Stripe PaymentIntents.

    Each call runs in a worker thread and is bounded by ``timeout_seconds``.
    Stripe's own network retries are disabled; timeouts and transient
    failures surface as ``PaymentProviderUnavailable``.
    """

    def __init__(
        self,
        api_key: str,
        webhook_secret: Optional[str],
        currency: str = "usd",
        timeout_seconds: float = 10.0,
    ):
        if not api_key:
            raise ValueError("STRIPE_SECRET_KEY not configured")
        self.currency = currency
        self.timeout_seconds = timeout_seconds
        self._webhook_secret = webhook_secret
        self._client = stripe.StripeClient(
            api_key,
            http_client=stripe.RequestsClient(timeout=timeout_seconds),
            max_network_retries=0,
        )

    async def _call(self, func, *args, **kwargs):
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args, **kwargs),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"Stripe call timed out after {self.timeout_seconds}s")
            raise PaymentProviderUnavailable("Payment processor timed out") from e
        except (stripe.APIConnectionError, stripe.RateLimitError) as e:
            logger.warning(f"Stripe unavailable: {e}")
            raise PaymentProviderUnavailable("Payment processor unavailable") from e
        except stripe.APIError as e:
            logger.warning(f"Stripe server error: {e}")
            raise PaymentProviderUnavailable("Payment processor unavailable") from e
        except stripe.StripeError as e:
            logger.error(f"Stripe rejected request: {e}")
            raise PaymentProcessorError(str(e)) from e

    @staticmethod
    def _to_intent(intent) -> PaymentIntent:
        return PaymentIntent(
            id=intent.id,
            client_secret=getattr(intent, "client_secret", None) or "",
            status=intent.status,
        )

    async def create_intent(
        self, amount_minor: int, metadata: Dict[str, str], idempotency_key: str
    ) -> PaymentIntent:
        intent = await self._call(
            self._client.payment_intents.create,
            params={
                "amount": amount_minor,
                "currency": self.currency,
                "metadata": metadata,
            },
            options={"idempotency_key": idempotency_key},
        )
        return self._to_intent(intent)

    async def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        intent = await self._call(self._client.payment_intents.retrieve, intent_id)
        return self._to_intent(intent)

    def parse_event(self, payload: Union[bytes, str], signature: str) -> WebhookEvent:
        """Verify the signature over the raw body and decode the event."""
        if not self._webhook_secret:
            raise InvalidSignature("Webhook secret not configured")
        try:
            event = stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise InvalidSignature(f"Webhook signature verification failed: {e}") from e

        return WebhookEvent(type=event.type, object_id=getattr(event.data.object, "id", None))


__all__ = [
    "INTENT_SUCCEEDED",
    "EVENT_INTENT_SUCCEEDED",
    "PaymentIntent",
    "WebhookEvent",
    "PaymentProcessor",
    "StripeProcessor",
]
