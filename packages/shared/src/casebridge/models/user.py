from sqlalchemy import Column, String, Enum
from .base import Base, TimestampMixin
import enum

class UserRole(str, enum.Enum):
    CLIENT = "client"
    LAWYER = "lawyer"

class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)
    name = Column(String)
    role = Column(Enum(UserRole), nullable=False)

    # Lawyer profile
    jurisdiction = Column(String)
    bar_number = Column(String)
