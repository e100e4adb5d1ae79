"""Quote submission and maintenance for lawyers."""

from decimal import Decimal
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from casebridge.models import Case, CaseStatus, Quote, QuoteStatus, User
from casebridge.schemas.quotes import QuotePage, QuotePatch, QuoteTerms
from casebridge.services.access_policy import can_mutate_quote
from casebridge.utils import (
    CaseNotFound,
    Forbidden,
    InvalidState,
    QuoteNotFound,
    setup_logging,
)

logger = setup_logging(__name__)


async def submit_quote(
    session: AsyncSession,
    case_id: str,
    lawyer: User,
    amount: Decimal,
    expected_days: int,
    note: Optional[str] = None,
) -> Quote:
    """Create the lawyer's quote for a case, or replace its terms.

    A lawyer holds at most one quote per case. Resubmitting overwrites
    amount, duration and note of the existing proposed quote. When a
    simultaneous first submission wins the insert, this one is applied
    to that quote as a resubmission.

    Raises:
        CaseNotFound: If the case does not exist
        InvalidState: If the case is not open, or the existing quote
            was already accepted or rejected
    """
    terms = QuoteTerms(amount=amount, expected_days=expected_days, note=note)
    lawyer_id = lawyer.id

    case = await session.get(Case, case_id)
    if case is None:
        raise CaseNotFound(case_id)

    if case.status is not CaseStatus.OPEN:
        raise InvalidState("Case is not open for quotes")

    quote = await _quote_by_lawyer(session, case_id, lawyer_id)

    if quote is None:
        quote = Quote(
            id=str(uuid4()),
            case_id=case_id,
            lawyer_id=lawyer_id,
            status=QuoteStatus.PROPOSED,
        )
        _apply_terms(quote, terms)
        session.add(quote)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            quote = await _quote_by_lawyer(session, case_id, lawyer_id)
            if quote is None:
                raise
            logger.info(f"Quote {quote.id} was submitted concurrently", extra={"case_id": case_id})
        else:
            logger.info(f"Submitted quote {quote.id}", extra={"case_id": case_id})
            return quote

    if quote.status is not QuoteStatus.PROPOSED:
        raise InvalidState("Cannot resubmit accepted or rejected quotes")
    _apply_terms(quote, terms)
    await session.commit()

    logger.info(f"Resubmitted quote {quote.id}", extra={"case_id": case_id})
    return quote


async def _quote_by_lawyer(session: AsyncSession, case_id: str, lawyer_id: str) -> Optional[Quote]:
    stmt = (
        select(Quote)
        .where(Quote.case_id == case_id, Quote.lawyer_id == lawyer_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_quote(session: AsyncSession, quote_id: str) -> Quote:
    quote = await session.get(Quote, quote_id)
    if quote is None:
        raise QuoteNotFound(quote_id)
    return quote


async def _get_mutable_quote(session: AsyncSession, quote_id: str, lawyer: User, action: str) -> Quote:
    quote = await get_quote(session, quote_id)
    if not can_mutate_quote(quote, lawyer):
        raise Forbidden()
    if quote.status is not QuoteStatus.PROPOSED:
        raise InvalidState(f"Cannot {action} accepted or rejected quotes")
    return quote


async def update_quote(
    session: AsyncSession,
    quote_id: str,
    lawyer: User,
    patch: QuotePatch,
) -> Quote:
    """Apply the explicitly set fields of ``patch`` to a proposed quote."""
    quote = await _get_mutable_quote(session, quote_id, lawyer, "update")

    current = QuoteTerms(amount=quote.amount, expected_days=quote.expected_days, note=quote.note)
    changes = patch.model_dump(exclude_unset=True)
    # Validates the merged terms before anything is written
    terms = QuoteTerms(**{**current.model_dump(), **changes})

    _apply_terms(quote, terms)
    await session.commit()

    logger.info(f"Updated quote {quote.id}", extra={"fields": sorted(changes)})
    return quote


async def remove_quote(session: AsyncSession, quote_id: str, lawyer: User) -> None:
    quote = await _get_mutable_quote(session, quote_id, lawyer, "delete")
    await session.delete(quote)
    await session.commit()
    logger.info(f"Deleted quote {quote_id}")


async def list_quotes_for_lawyer(
    session: AsyncSession,
    lawyer: User,
    status: Optional[QuoteStatus] = None,
    page: int = 1,
    limit: int = 10,
) -> QuotePage:
    """Lawyer's own quotes, newest first."""
    conditions = [Quote.lawyer_id == lawyer.id]
    if status is not None:
        conditions.append(Quote.status == status)

    total = await session.scalar(select(func.count()).select_from(Quote).where(*conditions))

    stmt = (
        select(Quote)
        .where(*conditions)
        .order_by(Quote.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await session.execute(stmt)

    return QuotePage(quotes=list(result.scalars().all()), total=total or 0, page=page, limit=limit)


async def list_quotes_for_case(session: AsyncSession, case_id: str, client: User) -> List[Quote]:
    """Quotes on one of the client's cases, oldest first."""
    stmt = select(Case).where(Case.id == case_id, Case.client_id == client.id)
    result = await session.execute(stmt)
    if result.scalar_one_or_none() is None:
        raise CaseNotFound(case_id)

    stmt = select(Quote).where(Quote.case_id == case_id).order_by(Quote.created_at.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


def _apply_terms(quote: Quote, terms: QuoteTerms) -> None:
    quote.amount = terms.amount
    quote.expected_days = terms.expected_days
    quote.note = terms.note


__all__ = [
    "submit_quote",
    "get_quote",
    "update_quote",
    "remove_quote",
    "list_quotes_for_lawyer",
    "list_quotes_for_case",
]
