from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from casebridge.models import QuoteStatus
from casebridge.schemas import QuotePatch, QuoteTerms


class QuoteCreate(QuoteTerms):
    pass


class QuoteUpdate(QuotePatch):
    pass


class QuoteResponse(BaseModel):
    id: str
    case_id: str
    lawyer_id: str
    amount: Decimal
    expected_days: int
    note: Optional[str] = None
    status: QuoteStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class QuoteListResponse(BaseModel):
    quotes: List[QuoteResponse]
    total: int
    page: int
    limit: int
