"""Validated account details for registration."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from casebridge.models import UserRole


class SignUp(BaseModel):
    """A new client or lawyer account."""
    email: EmailStr
    password: str = Field(min_length=8)
    name: Optional[str] = None
    role: UserRole
    jurisdiction: Optional[str] = None
    bar_number: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "email": "user@casebridge.io",
                "password": "Passw0rd!",
                "name": "John Doe",
                "role": "client",
            }
        }
