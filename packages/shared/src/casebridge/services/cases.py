"""Case management for clients and the lawyer marketplace."""

from datetime import datetime, timezone
from typing import List, NamedTuple, Optional, Sequence
from uuid import uuid4

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from casebridge.models import Case, CaseFile, CaseStatus, Quote, User, UserRole
from casebridge.schemas.cases import CaseDetails, CasePatch, StoredFile
from casebridge.services.access_policy import (
    ANONYMOUS_CLIENT_EMAIL,
    ANONYMOUS_CLIENT_NAME,
    can_access_file,
    can_mutate_case,
    can_view_case,
    should_anonymize_client,
)
from casebridge.utils import CaseNotFound, FileNotFound, Forbidden, setup_logging

logger = setup_logging(__name__)


class ClientIdentity(NamedTuple):
    id: str
    name: Optional[str]
    email: str


class CaseView(NamedTuple):
    """A case as one actor is allowed to see it."""
    case: Case
    client: ClientIdentity
    quotes: List[Quote]
    files: List[CaseFile]


class CasePage(NamedTuple):
    cases: List[CaseView]
    total: int
    page: int
    limit: int


def present_case(case: Case, actor: User) -> CaseView:
    """Build the actor's view of a fully loaded case.

    The client identity is copied, never edited on the ORM object, so
    masking cannot leak into a later flush.
    """
    quotes = list(case.quotes)
    if should_anonymize_client(case, actor, quotes):
        client = ClientIdentity(id=case.client_id, name=ANONYMOUS_CLIENT_NAME, email=ANONYMOUS_CLIENT_EMAIL)
    else:
        client = ClientIdentity(id=case.client.id, name=case.client.name, email=case.client.email)
    return CaseView(case=case, client=client, quotes=quotes, files=list(case.files))


def _with_details(stmt):
    return stmt.options(
        selectinload(Case.client),
        selectinload(Case.quotes),
        selectinload(Case.files),
    )


async def _load_case(session: AsyncSession, case_id: str) -> Case:
    stmt = _with_details(select(Case).where(Case.id == case_id)).execution_options(populate_existing=True)
    result = await session.execute(stmt)
    case = result.scalar_one_or_none()
    if case is None:
        raise CaseNotFound(case_id)
    return case


async def create_case(session: AsyncSession, client: User, details: CaseDetails) -> Case:
    if client.role is not UserRole.CLIENT:
        raise Forbidden("Only clients can create cases")

    case = Case(
        id=str(uuid4()),
        client_id=client.id,
        status=CaseStatus.OPEN,
        **details.model_dump(),
    )
    session.add(case)
    await session.commit()

    logger.info(f"Created case {case.id}", extra={"client_id": client.id})
    return case


async def list_cases(
    session: AsyncSession,
    actor: User,
    category: Optional[str] = None,
    created_since: Optional[datetime] = None,
    page: int = 1,
    limit: int = 10,
) -> CasePage:
    """Clients see their own cases; lawyers browse open cases."""
    conditions = []
    if actor.role is UserRole.CLIENT:
        conditions.append(Case.client_id == actor.id)
    else:
        conditions.append(Case.status == CaseStatus.OPEN)
    if category:
        conditions.append(Case.category == category)
    if created_since is not None:
        if created_since.tzinfo is not None:
            created_since = created_since.astimezone(timezone.utc).replace(tzinfo=None)
        conditions.append(Case.created_at >= created_since)

    total = await session.scalar(select(func.count()).select_from(Case).where(*conditions))

    stmt = _with_details(
        select(Case)
        .where(*conditions)
        .order_by(Case.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).execution_options(populate_existing=True)
    result = await session.execute(stmt)
    views = [present_case(case, actor) for case in result.scalars().all()]

    return CasePage(cases=views, total=total or 0, page=page, limit=limit)


async def get_case(session: AsyncSession, case_id: str, actor: User) -> CaseView:
    case = await _load_case(session, case_id)
    if not can_view_case(case, actor):
        raise Forbidden()
    return present_case(case, actor)


async def update_case(session: AsyncSession, case_id: str, client: User, patch: CasePatch) -> CaseView:
    case = await _load_case(session, case_id)
    if not can_mutate_case(case, client):
        raise Forbidden()

    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(case, field, value)
    await session.commit()

    logger.info(f"Updated case {case.id}", extra={"fields": sorted(changes)})
    return present_case(case, client)


async def get_owned_case(session: AsyncSession, case_id: str, client: User) -> Case:
    """Case that ``client`` may modify, or raise."""
    case = await session.get(Case, case_id)
    if case is None:
        raise CaseNotFound(case_id)
    if not can_mutate_case(case, client):
        raise Forbidden()
    return case


async def attach_files(
    session: AsyncSession,
    case_id: str,
    client: User,
    stored_files: Sequence[StoredFile],
) -> List[CaseFile]:
    case = await get_owned_case(session, case_id, client)

    case_files = []
    for stored in stored_files:
        case_file = CaseFile(id=str(uuid4()), case_id=case.id, **stored.model_dump())
        session.add(case_file)
        case_files.append(case_file)
    await session.commit()

    logger.info(f"Attached {len(case_files)} files to case {case.id}")
    return case_files


async def get_file(session: AsyncSession, file_id: str) -> CaseFile:
    case_file = await session.get(CaseFile, file_id)
    if case_file is None:
        raise FileNotFound(file_id)
    return case_file


async def authorize_file(session: AsyncSession, file_id: str, actor: User) -> CaseFile:
    """Load a file the actor may download, or raise."""
    case_file = await get_file(session, file_id)

    stmt = (
        select(Case)
        .where(Case.id == case_file.case_id)
        .options(selectinload(Case.quotes))
        .execution_options(populate_existing=True)
    )
    case = (await session.execute(stmt)).scalar_one()

    if not can_access_file(case_file, case, actor, case.quotes):
        raise Forbidden()
    return case_file


__all__ = [
    "ClientIdentity",
    "CaseView",
    "CasePage",
    "present_case",
    "create_case",
    "list_cases",
    "get_case",
    "update_case",
    "get_owned_case",
    "attach_files",
    "get_file",
    "authorize_file",
]
