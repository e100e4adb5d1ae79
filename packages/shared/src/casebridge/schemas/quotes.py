"""Validated quote values used by the quote service."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from casebridge.models import Quote


class QuoteTerms(BaseModel):
    """Complete, validated pricing terms of a quote."""
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    expected_days: int = Field(ge=1, le=365)
    note: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "1500.00",
                "expected_days": 30,
                "note": "I have extensive experience in this area...",
            }
        }


class QuotePatch(BaseModel):
    """Partial update; only fields that were explicitly set are applied."""
    amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    expected_days: Optional[int] = Field(default=None, ge=1, le=365)
    note: Optional[str] = None


class QuotePage(BaseModel):
    """One page of a lawyer's quotes."""
    quotes: List[Quote]
    total: int
    page: int
    limit: int

    class Config:
        arbitrary_types_allowed = True
