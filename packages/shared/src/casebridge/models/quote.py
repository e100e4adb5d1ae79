from sqlalchemy import Column, String, Text, Integer, Numeric, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin
import enum

class QuoteStatus(str, enum.Enum):
    PROPOSED = "proposed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

class Quote(Base, TimestampMixin):
    __tablename__ = "quotes"
    __table_args__ = (
        UniqueConstraint("case_id", "lawyer_id", name="uq_quotes_case_lawyer"),
    )

    id = Column(String, primary_key=True)
    case_id = Column(String, ForeignKey("cases.id"), nullable=False, index=True)
    lawyer_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    expected_days = Column(Integer, nullable=False)
    note = Column(Text)
    status = Column(Enum(QuoteStatus), default=QuoteStatus.PROPOSED, nullable=False, index=True)

    # Relationships
    case = relationship("Case", back_populates="quotes", lazy="raise")
    lawyer = relationship("User", lazy="raise")
