from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from casebridge.models import CaseStatus
from casebridge.schemas import CaseDetails, CasePatch
from casebridge.services.cases import CaseView
from casebridge_api.schemas.quote import QuoteResponse


class CaseCreate(CaseDetails):
    pass


class CaseUpdate(CasePatch):
    pass


class ClientResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: str


class CaseFileResponse(BaseModel):
    id: str
    case_id: str
    original_name: str
    mimetype: Optional[str] = None
    size: int
    created_at: datetime

    class Config:
        from_attributes = True


class CaseSummary(BaseModel):
    id: str
    title: str
    category: str
    description: str
    status: CaseStatus
    client_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CaseResponse(CaseSummary):
    client: ClientResponse
    quotes: List[QuoteResponse] = []
    files: List[CaseFileResponse] = []

    @classmethod
    def from_view(cls, view: CaseView) -> "CaseResponse":
        summary = CaseSummary.model_validate(view.case)
        return cls(
            **summary.model_dump(),
            client=ClientResponse(**view.client._asdict()),
            quotes=[QuoteResponse.model_validate(quote) for quote in view.quotes],
            files=[CaseFileResponse.model_validate(case_file) for case_file in view.files],
        )


class CaseListResponse(BaseModel):
    cases: List[CaseResponse]
    total: int
    page: int
    limit: int


class AcceptQuoteRequest(BaseModel):
    quote_id: str = Field(alias="quoteId")

    class Config:
        populate_by_name = True


class EngagementResponse(BaseModel):
    case: CaseSummary
    quote: QuoteResponse
