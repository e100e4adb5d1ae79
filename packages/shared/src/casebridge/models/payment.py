from sqlalchemy import Column, String, Numeric, Enum, ForeignKey
from .base import Base, TimestampMixin
import enum

class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

class Payment(Base, TimestampMixin):
    __tablename__ = "payments"

    id = Column(String, primary_key=True)
    amount = Column(Numeric(10, 2), nullable=False)
    external_reference = Column(String, unique=True, index=True)  # Stripe PaymentIntent id
    status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False, index=True)
    client_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    lawyer_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    case_id = Column(String, ForeignKey("cases.id"), nullable=False, index=True)
    quote_id = Column(String, ForeignKey("quotes.id"), unique=True, nullable=False)
