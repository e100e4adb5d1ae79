"""Quote acceptance: the transition from an open case to an engagement."""

from typing import NamedTuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from casebridge.database import transaction
from casebridge.models import Case, CaseStatus, Quote, QuoteStatus, User
from casebridge.services.access_policy import can_accept_quote
from casebridge.utils import (
    CaseNotFound,
    Forbidden,
    InvalidState,
    QuoteNotFound,
    setup_logging,
)

logger = setup_logging(__name__)


class Engagement(NamedTuple):
    case: Case
    quote: Quote


async def lock_case(session: AsyncSession, case_id: str) -> Case:
    """Load a case with a row lock held until the transaction ends."""
    stmt = (
        select(Case)
        .where(Case.id == case_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    case = result.scalar_one_or_none()
    if case is None:
        raise CaseNotFound(case_id)
    return case


async def engage(session: AsyncSession, case: Case, quote: Quote) -> Engagement:
    """Accept ``quote``, reject its proposed siblings and engage ``case``.

    Must run inside a transaction that already holds the lock on
    ``case``. Nothing is committed here.
    """
    if case.status is not CaseStatus.OPEN:
        raise InvalidState("Case is not open for quotes")
    if quote.status is not QuoteStatus.PROPOSED:
        raise InvalidState("Quote is no longer open for acceptance")

    quote.status = QuoteStatus.ACCEPTED
    await session.flush()

    stmt = (
        select(Quote)
        .where(
            Quote.case_id == case.id,
            Quote.id != quote.id,
            Quote.status == QuoteStatus.PROPOSED,
        )
        .with_for_update()
    )
    result = await session.execute(stmt)
    siblings = result.scalars().all()
    for sibling in siblings:
        sibling.status = QuoteStatus.REJECTED
    await session.flush()

    case.status = CaseStatus.ENGAGED
    await session.flush()

    logger.info(
        f"Case {case.id} engaged with quote {quote.id}",
        extra={"rejected": len(siblings)},
    )
    return Engagement(case=case, quote=quote)


async def accept_quote(
    session: AsyncSession,
    case_id: str,
    quote_id: str,
    actor: User,
) -> Engagement:
    """Accept one quote for a case as a single unit of work.

    The case row is locked before its status is checked, so of two
    concurrent acceptances on the same case the second one waits and
    then sees the case engaged. Any failure rolls back every write and
    the original error is re-raised.

    Raises:
        CaseNotFound: If the case does not exist
        Forbidden: If ``actor`` is not the client who owns the case
        InvalidState: If the case is no longer open
        QuoteNotFound: If the quote does not belong to the case
    """
    async with transaction(session):
        case = await lock_case(session, case_id)

        if not can_accept_quote(case, actor):
            raise Forbidden()

        if case.status is not CaseStatus.OPEN:
            raise InvalidState("Case is not open for quotes")

        stmt = (
            select(Quote)
            .where(Quote.id == quote_id, Quote.case_id == case_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        quote = result.scalar_one_or_none()
        if quote is None:
            raise QuoteNotFound(quote_id)

        engagement = await engage(session, case, quote)

    return engagement


__all__ = ["Engagement", "accept_quote", "engage", "lock_case"]
