from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from casebridge.services.users import register_user
from casebridge_api.database import get_db
from casebridge_api.schemas import UserCreate, UserResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    user_create: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    """Register a client or lawyer account; bearer tokens are issued elsewhere"""
    user = await register_user(db, user_create)
    logger.info(f"[auth] Registered {user.role.value} {user.id}")
    return user
