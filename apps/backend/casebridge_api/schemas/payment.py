from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional
from casebridge.models import PaymentStatus


class PaymentIntentResponse(BaseModel):
    client_secret: str = Field(alias="clientSecret")
    payment_id: str = Field(alias="paymentId")

    class Config:
        populate_by_name = True


class PaymentResponse(BaseModel):
    id: str
    amount: Decimal
    status: PaymentStatus
    external_reference: Optional[str] = None
    quote_id: str
    case_id: str
    client_id: str
    lawyer_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WebhookAck(BaseModel):
    received: bool = True
