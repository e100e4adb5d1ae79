from pydantic import BaseModel, Field


class SecureUrlResponse(BaseModel):
    url: str
    token: str
    expires_at: int = Field(alias="expiresAt")

    class Config:
        populate_by_name = True
