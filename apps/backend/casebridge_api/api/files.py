from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from casebridge.models import User
from casebridge.services import FileTokenSigner
from casebridge.services import cases as case_service
from casebridge_api.api.deps import get_current_user, get_file_token_signer, get_storage
from casebridge_api.database import get_db
from casebridge_api.schemas import SecureUrlResponse
from casebridge_api.services.storage import StorageService
from typing import Optional
from urllib.parse import quote
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/files", tags=["files"])


def content_disposition(filename: str) -> str:
    """Attachment header; non-ASCII names also get an RFC 5987 form"""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "'")
    header = f'attachment; filename="{fallback}"'
    if fallback != filename:
        header += f"; filename*=UTF-8''{quote(filename)}"
    return header


@router.get("/{file_id}/secure-url", response_model=SecureUrlResponse)
async def get_secure_url(
    file_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    signer: FileTokenSigner = Depends(get_file_token_signer),
):
    """Issue a short-lived download URL for a case file"""
    case_file = await case_service.authorize_file(db, file_id, user)
    issued = signer.issue(case_file, user)

    url = request.url_for("download_secure_file", file_id=case_file.id).include_query_params(token=issued.token)
    return SecureUrlResponse(url=str(url), token=issued.token, expires_at=issued.expires_at)


@router.get("/secure/{file_id}", name="download_secure_file")
async def download_secure_file(
    file_id: str,
    token: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    signer: FileTokenSigner = Depends(get_file_token_signer),
    storage: StorageService = Depends(get_storage),
):
    """Download a case file; the token is the only credential"""
    user_id = FileTokenSigner.user_id_of(token) if token else None
    if user_id is None or not signer.validate(token, file_id, user_id):
        logger.warning(f"[files] Rejected download token for file {file_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )

    case_file = await case_service.get_file(db, file_id)
    path = storage.resolve_path(case_file)
    if not path.is_file():
        logger.error(f"[files] File {file_id} missing from storage at {path}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found",
        )

    logger.info(f"[files] Streaming file {file_id} to user {user_id}")
    return StreamingResponse(
        storage.stream(path),
        media_type=case_file.mimetype or "application/octet-stream",
        headers={"Content-Disposition": content_disposition(case_file.original_name or case_file.filename)},
    )
