from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from casebridge.models import UserRole
from casebridge.schemas import SignUp


class UserCreate(SignUp):
    pass


class UserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    role: UserRole
    jurisdiction: Optional[str] = None
    bar_number: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
