from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from casebridge.models import User
from casebridge.services import PaymentService
from casebridge.utils import InvalidSignature
from casebridge_api.api.deps import get_current_user, get_payment_service
from casebridge_api.database import get_db
from casebridge_api.schemas import PaymentIntentResponse, PaymentResponse, WebhookAck
from typing import Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "/create-intent/{quote_id}",
    response_model=PaymentIntentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_payment_intent(
    quote_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    payments: PaymentService = Depends(get_payment_service),
):
    """Create, or reuse, the payment intent for a quote"""
    handle = await payments.create_intent(db, quote_id, user)
    logger.info(f"[payments] Intent ready for payment {handle.payment_id}")
    return PaymentIntentResponse(client_secret=handle.client_secret, payment_id=handle.payment_id)


@router.post("/confirm/{intent_id}", response_model=PaymentResponse)
async def confirm_payment(
    intent_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    payments: PaymentService = Depends(get_payment_service),
):
    """Reconcile a payment with the processor"""
    payment = await payments.confirm(db, intent_id)
    logger.info(f"[payments] Payment {payment.id} is {payment.status.value}")
    return payment


@router.get("/{payment_id}/status", response_model=PaymentResponse)
async def get_payment_status(
    payment_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    payments: PaymentService = Depends(get_payment_service),
):
    """Get payment status"""
    return await payments.get_status(db, payment_id, user)


@router.post("/webhook", response_model=WebhookAck)
async def handle_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
    db: AsyncSession = Depends(get_db),
    payments: PaymentService = Depends(get_payment_service),
):
    """Processor webhook; the signature covers the exact raw body"""
    if not stripe_signature:
        logger.warning("[payments] Webhook without signature header")
        raise InvalidSignature("Missing webhook signature")

    payload = await request.body()
    await payments.handle_webhook(db, stripe_signature, payload)
    return WebhookAck()
