from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from casebridge.models import User
from casebridge.services import cases as case_service
from casebridge.services.engagement import accept_quote as accept_case_quote
from casebridge_api.api.deps import get_current_user, get_storage, require_client
from casebridge_api.config import settings
from casebridge_api.database import get_db
from casebridge_api.schemas import (
    AcceptQuoteRequest,
    CaseCreate,
    CaseFileResponse,
    CaseListResponse,
    CaseResponse,
    CaseSummary,
    CaseUpdate,
    EngagementResponse,
    QuoteResponse,
)
from casebridge_api.services.storage import StorageService
from datetime import datetime
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/cases", tags=["cases"])


@router.post("", response_model=CaseResponse, status_code=status.HTTP_201_CREATED)
async def create_case(
    case_create: CaseCreate,
    user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db),
):
    """Create a new case"""
    case = await case_service.create_case(db, user, case_create)
    logger.info(f"[cases] Created case: {case.id}")
    view = await case_service.get_case(db, case.id, user)
    return CaseResponse.from_view(view)


@router.get("", response_model=CaseListResponse)
async def list_cases(
    category: Optional[str] = None,
    created_since: Optional[datetime] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List cases: a client's own cases, or the open marketplace for lawyers"""
    result = await case_service.list_cases(
        db,
        user,
        category=category,
        created_since=created_since,
        page=page,
        limit=limit,
    )
    return CaseListResponse(
        cases=[CaseResponse.from_view(view) for view in result.cases],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@router.get("/{case_id}", response_model=CaseResponse)
async def get_case(
    case_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get case details"""
    view = await case_service.get_case(db, case_id, user)
    return CaseResponse.from_view(view)


@router.patch("/{case_id}", response_model=CaseResponse)
async def update_case(
    case_id: str,
    case_update: CaseUpdate,
    user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db),
):
    """Update case details"""
    view = await case_service.update_case(db, case_id, user, case_update)
    logger.info(f"[cases] Updated case: {case_id}")
    return CaseResponse.from_view(view)


@router.post("/{case_id}/files", response_model=List[CaseFileResponse], status_code=status.HTTP_201_CREATED)
async def upload_files(
    case_id: str,
    files: List[UploadFile] = File(...),
    user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """Upload files to a case"""
    if len(files) > settings.MAX_FILES_PER_UPLOAD:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {settings.MAX_FILES_PER_UPLOAD} files per upload",
        )

    await case_service.get_owned_case(db, case_id, user)

    uploads = []
    for upload in files:
        content = await upload.read()
        if not storage.validate_file(upload.filename, upload.content_type, len(content)):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid file: {upload.filename}",
            )
        uploads.append((upload, content))

    stored_files = [
        storage.save_file(upload.filename, upload.content_type.lower(), content)
        for upload, content in uploads
    ]
    try:
        case_files = await case_service.attach_files(db, case_id, user, stored_files)
    except Exception:
        logger.error(f"[cases] Attaching files to case {case_id} failed, removing stored files")
        await db.rollback()
        for stored in stored_files:
            storage.delete_file(stored.path)
        raise

    logger.info(f"[cases] Uploaded {len(case_files)} files to case {case_id}")
    return case_files


@router.post("/{case_id}/accept-quote", response_model=EngagementResponse)
async def accept_quote(
    case_id: str,
    body: AcceptQuoteRequest,
    user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db),
):
    """Accept a quote for a case"""
    engagement = await accept_case_quote(db, case_id, body.quote_id, user)
    logger.info(f"[cases] Accepted quote {body.quote_id} for case {case_id}")
    return EngagementResponse(
        case=CaseSummary.model_validate(engagement.case),
        quote=QuoteResponse.model_validate(engagement.quote),
    )
