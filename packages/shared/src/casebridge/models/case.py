from sqlalchemy import Column, String, Text, Enum, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin
import enum

class CaseStatus(str, enum.Enum):
    OPEN = "open"
    ENGAGED = "engaged"

class Case(Base, TimestampMixin):
    __tablename__ = "cases"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)
    status = Column(Enum(CaseStatus), default=CaseStatus.OPEN, nullable=False, index=True)
    client_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships (always loaded explicitly with selectinload)
    client = relationship("User", lazy="raise")
    quotes = relationship("Quote", back_populates="case", lazy="raise", order_by="Quote.created_at")
    files = relationship("CaseFile", back_populates="case", lazy="raise", cascade="all, delete-orphan")
