"""Payment intents for quotes and their reconciliation with case state."""

from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple, Optional, Union
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from casebridge.database import transaction
from casebridge.models import (
    Case,
    CaseStatus,
    Payment,
    PaymentStatus,
    Quote,
    QuoteStatus,
    User,
)
from casebridge.services.access_policy import can_view_payment
from casebridge.services.engagement import engage, lock_case
from casebridge.services.stripe_processor import (
    EVENT_INTENT_SUCCEEDED,
    INTENT_SUCCEEDED,
    PaymentProcessor,
)
from casebridge.utils import (
    Conflict,
    Forbidden,
    InvalidState,
    PaymentNotFound,
    QuoteNotFound,
    setup_logging,
)

logger = setup_logging(__name__)


class IntentHandle(NamedTuple):
    client_secret: str
    payment_id: str


def to_minor_units(amount: Decimal) -> int:
    """Convert a decimal amount to the smallest currency unit (cents)."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentService:
    """Payment lifecycle: PENDING -> COMPLETED | FAILED.

    Args:
        processor: External payment processor (Stripe in production)
        require_accepted_quote: Refuse intents for quotes that were not
            accepted yet. Off by default, which lets a client pay a
            proposed quote and have confirmation accept it.
    """

    def __init__(self, processor: PaymentProcessor, require_accepted_quote: bool = False):
        self.processor = processor
        self.require_accepted_quote = require_accepted_quote

    async def create_intent(self, session: AsyncSession, quote_id: str, client: User) -> IntentHandle:
        """Create, or reuse, the payment intent for a quote.

        Idempotent per quote while the payment is pending: retries return
        the same payment id and the processor's current client secret.
        Intents are requested with an idempotency key derived from the
        payment id, so simultaneous requests share a single intent.

        Raises:
            QuoteNotFound: If the quote does not exist
            InvalidState: If the client does not own the quote's case, or
                the quote cannot be paid
            Conflict: If the quote was already paid
        """
        quote = await session.get(Quote, quote_id)
        if quote is None:
            raise QuoteNotFound(quote_id)

        case = await session.get(Case, quote.case_id)
        if case is None or case.client_id != client.id:
            raise InvalidState("Access denied")

        if quote.status is QuoteStatus.REJECTED:
            raise InvalidState("Quote was rejected")
        if self.require_accepted_quote and quote.status is not QuoteStatus.ACCEPTED:
            raise InvalidState("Quote is not accepted")

        payment = await self._payment_for_quote(session, quote_id)

        if payment is not None and payment.status is PaymentStatus.COMPLETED:
            raise Conflict("Payment already completed")

        if payment is not None and payment.status is PaymentStatus.FAILED:
            # One row per quote: a failed attempt makes way for a new one
            logger.info(f"Replacing failed payment {payment.id}", extra={"quote_id": quote_id})
            await session.delete(payment)
            await session.flush()
            payment = None

        if payment is None:
            payment = Payment(
                id=str(uuid4()),
                amount=quote.amount,
                client_id=client.id,
                lawyer_id=quote.lawyer_id,
                case_id=quote.case_id,
                quote_id=quote.id,
                status=PaymentStatus.PENDING,
            )
            session.add(payment)
            try:
                await session.commit()
            except IntegrityError:
                # Concurrent request for the same quote won the insert
                await session.rollback()
                payment = await self._payment_for_quote(session, quote_id)
                if payment is None:
                    raise
                if payment.status is PaymentStatus.COMPLETED:
                    raise Conflict("Payment already completed")

        if payment.external_reference:
            intent = await self.processor.retrieve_intent(payment.external_reference)
            logger.info(f"Reusing payment intent for payment {payment.id}")
            return IntentHandle(client_secret=intent.client_secret, payment_id=payment.id)

        # Keyed by payment row: concurrent or retried calls get one intent
        intent = await self.processor.create_intent(
            to_minor_units(payment.amount),
            metadata={
                "paymentId": payment.id,
                "quoteId": payment.quote_id,
                "caseId": payment.case_id,
                "clientId": payment.client_id,
                "lawyerId": payment.lawyer_id,
            },
            idempotency_key=f"payment-{payment.id}",
        )
        payment.external_reference = intent.id
        await session.commit()

        logger.info(
            f"Created payment intent for payment {payment.id}",
            extra={"quote_id": payment.quote_id, "amount": str(payment.amount)},
        )
        return IntentHandle(client_secret=intent.client_secret, payment_id=payment.id)

    async def confirm(self, session: AsyncSession, external_reference: str) -> Payment:
        """Reconcile a payment with the processor's view of its intent.

        Re-entrant: the webhook and manual confirmation converge on the
        same state, and a completed or failed payment is returned as is.

        Raises:
            PaymentNotFound: If no payment carries ``external_reference``
            InvalidState: If the case was engaged through another quote
        """
        payment = await self._payment_by_reference(session, external_reference)
        if payment.status is not PaymentStatus.PENDING:
            return payment

        intent = await self.processor.retrieve_intent(external_reference)

        async with transaction(session):
            stmt = (
                select(Payment)
                .where(Payment.id == payment.id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            payment = (await session.execute(stmt)).scalar_one()
            if payment.status is not PaymentStatus.PENDING:
                return payment

            if intent.status != INTENT_SUCCEEDED:
                payment.status = PaymentStatus.FAILED
                logger.warning(
                    f"Payment {payment.id} failed",
                    extra={"intent_status": intent.status},
                )
                return payment

            await self._sync_engagement(session, payment)
            payment.status = PaymentStatus.COMPLETED

        logger.info(f"Payment {payment.id} completed", extra={"quote_id": payment.quote_id})
        return payment

    async def get_status(self, session: AsyncSession, payment_id: str, actor: User) -> Payment:
        payment = await session.get(Payment, payment_id)
        if payment is None:
            raise PaymentNotFound(payment_id)
        if not can_view_payment(payment, actor):
            raise Forbidden()
        return payment

    async def handle_webhook(
        self,
        session: AsyncSession,
        signature: str,
        payload: Union[bytes, str],
    ) -> Optional[Payment]:
        """Verify a processor webhook and confirm succeeded intents.

        Unknown event types are accepted and ignored.
        """
        event = self.processor.parse_event(payload, signature)

        if event.type == EVENT_INTENT_SUCCEEDED and event.object_id:
            return await self.confirm(session, event.object_id)

        logger.debug(f"Ignoring webhook event {event.type}")
        return None

    async def _sync_engagement(self, session: AsyncSession, payment: Payment) -> None:
        """Make quote and case agree with a completed payment."""
        case = await lock_case(session, payment.case_id)
        stmt = (
            select(Quote)
            .where(Quote.id == payment.quote_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        quote = (await session.execute(stmt)).scalar_one()

        if quote.status is QuoteStatus.ACCEPTED:
            if case.status is not CaseStatus.ENGAGED:
                case.status = CaseStatus.ENGAGED
            return

        if case.status is CaseStatus.OPEN and quote.status is QuoteStatus.PROPOSED:
            logger.info(f"Accepting quote {quote.id} on payment {payment.id}")
            await engage(session, case, quote)
            return

        logger.error(
            f"Payment {payment.id} succeeded for quote {quote.id} "
            f"but case {case.id} is engaged elsewhere"
        )
        raise InvalidState("Quote can no longer be accepted for this case")

    async def _payment_for_quote(self, session: AsyncSession, quote_id: str) -> Optional[Payment]:
        result = await session.execute(select(Payment).where(Payment.quote_id == quote_id))
        return result.scalar_one_or_none()

    async def _payment_by_reference(self, session: AsyncSession, external_reference: str) -> Payment:
        stmt = select(Payment).where(Payment.external_reference == external_reference)
        result = await session.execute(stmt)
        payment = result.scalar_one_or_none()
        if payment is None:
            raise PaymentNotFound(external_reference)
        return payment


__all__ = ["IntentHandle", "PaymentService", "to_minor_units"]
