from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base, utcnow

class CaseFile(Base):
    __tablename__ = "case_files"

    id = Column(String, primary_key=True)
    case_id = Column(String, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)
    original_name = Column(String, nullable=False)
    filename = Column(String)  # Stored name under the upload directory
    path = Column(String)  # Absolute path when stored elsewhere
    mimetype = Column(String, nullable=False)
    size = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False)

    # Relationships
    case = relationship("Case", back_populates="files", lazy="raise")
