from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from casebridge.models import QuoteStatus, User
from casebridge.services import quotes as quote_service
from casebridge_api.api.deps import get_current_user, require_client, require_lawyer
from casebridge_api.database import get_db
from casebridge_api.schemas import QuoteCreate, QuoteListResponse, QuoteResponse, QuoteUpdate
from enum import Enum
from typing import List
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


class QuoteStatusFilter(str, Enum):
    ALL = "all"
    PROPOSED = QuoteStatus.PROPOSED.value
    ACCEPTED = QuoteStatus.ACCEPTED.value
    REJECTED = QuoteStatus.REJECTED.value


@router.post("/cases/{case_id}", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED)
async def submit_quote(
    case_id: str,
    quote_create: QuoteCreate,
    user: User = Depends(require_lawyer),
    db: AsyncSession = Depends(get_db),
):
    """Submit or update a quote for a case"""
    quote = await quote_service.submit_quote(
        db,
        case_id,
        user,
        quote_create.amount,
        quote_create.expected_days,
        quote_create.note,
    )
    logger.info(f"[quotes] Submitted quote {quote.id} for case {case_id}")
    return quote


@router.get("", response_model=QuoteListResponse)
async def list_my_quotes(
    status_filter: QuoteStatusFilter = Query(QuoteStatusFilter.ALL, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(require_lawyer),
    db: AsyncSession = Depends(get_db),
):
    """List the lawyer's own quotes"""
    quote_status = None if status_filter is QuoteStatusFilter.ALL else QuoteStatus(status_filter.value)
    result = await quote_service.list_quotes_for_lawyer(db, user, status=quote_status, page=page, limit=limit)
    return QuoteListResponse(
        quotes=[QuoteResponse.model_validate(quote) for quote in result.quotes],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@router.get("/cases/{case_id}", response_model=List[QuoteResponse])
async def list_case_quotes(
    case_id: str,
    user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db),
):
    """Get quotes for one of the client's cases"""
    return await quote_service.list_quotes_for_case(db, case_id, user)


@router.get("/{quote_id}", response_model=QuoteResponse)
async def get_quote(
    quote_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get quote details"""
    return await quote_service.get_quote(db, quote_id)


@router.patch("/{quote_id}", response_model=QuoteResponse)
async def update_quote(
    quote_id: str,
    quote_update: QuoteUpdate,
    user: User = Depends(require_lawyer),
    db: AsyncSession = Depends(get_db),
):
    """Update quote details"""
    quote = await quote_service.update_quote(db, quote_id, user, quote_update)
    logger.info(f"[quotes] Updated quote: {quote_id}")
    return quote


@router.delete("/{quote_id}")
async def delete_quote(
    quote_id: str,
    user: User = Depends(require_lawyer),
    db: AsyncSession = Depends(get_db),
):
    """Delete a proposed quote"""
    await quote_service.remove_quote(db, quote_id, user)
    logger.info(f"[quotes] Deleted quote: {quote_id}")
    return {"message": "Quote deleted successfully"}
