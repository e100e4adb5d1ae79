"""Request dependencies: authentication, role guards and service providers."""

from functools import lru_cache
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from casebridge.models import User, UserRole
from casebridge.services import FileTokenSigner, PaymentService, StripeProcessor
from casebridge.utils import PaymentProviderUnavailable
from casebridge_api.config import settings
from casebridge_api.database import get_db
from casebridge_api.services.storage import StorageService, storage_service
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Validate the bearer JWT and return the user it names.
    Tokens are issued elsewhere; only verification happens here.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Accept either "user_id" or the standard "sub" claim
    user_id = payload.get("user_id") or payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await db.get(User, str(user_id))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def require_role(*roles: UserRole):
    """Dependency factory admitting only users with one of ``roles``."""

    async def role_checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return role_checker


require_client = require_role(UserRole.CLIENT)
require_lawyer = require_role(UserRole.LAWYER)


@lru_cache
def get_file_token_signer() -> FileTokenSigner:
    return FileTokenSigner(settings.FILE_TOKEN_SECRET, ttl_seconds=settings.FILE_TOKEN_TTL_SECONDS)


@lru_cache
def get_payment_service() -> PaymentService:
    try:
        processor = StripeProcessor(
            settings.STRIPE_SECRET_KEY,
            settings.STRIPE_WEBHOOK_SECRET,
            currency=settings.STRIPE_CURRENCY,
            timeout_seconds=settings.STRIPE_TIMEOUT_SECONDS,
        )
    except ValueError as e:
        logger.error(f"[payments] Payment processor not configured: {e}")
        raise PaymentProviderUnavailable("Payments are not configured") from e

    return PaymentService(processor, require_accepted_quote=settings.PAYMENTS_REQUIRE_ACCEPTED_QUOTE)


def get_storage() -> StorageService:
    return storage_service
