"""Account registration and demo data."""

from typing import List
from uuid import uuid4

import bcrypt
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from casebridge.models import User, UserRole
from casebridge.schemas.users import SignUp
from casebridge.utils import Conflict, setup_logging

logger = setup_logging(__name__)

DEMO_PASSWORD = "Passw0rd!"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


async def register_user(session: AsyncSession, signup: SignUp) -> User:
    """Create an account with a bcrypt-hashed password.

    Emails are stored lower-cased, so addresses differing only in case
    collide.

    Raises:
        Conflict: If the email is already registered
    """
    email = signup.email.lower()

    existing = await session.scalar(select(User.id).where(User.email == email))
    if existing is not None:
        raise Conflict("Email already exists")

    user = User(
        id=str(uuid4()),
        email=email,
        password=hash_password(signup.password),
        name=signup.name,
        role=signup.role,
        jurisdiction=signup.jurisdiction,
        bar_number=signup.bar_number,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as e:
        # Same email registered concurrently
        await session.rollback()
        raise Conflict("Email already exists") from e

    logger.info(f"Registered {user.role.value} {user.id}")
    return user


async def seed_users(session: AsyncSession) -> List[User]:
    """Create one demo client and one demo lawyer on an empty database.

    Returns the created users, or an empty list when any user exists.
    """
    if await session.scalar(select(func.count()).select_from(User)):
        logger.info("Users already exist, skipping seed")
        return []

    users = [
        User(
            id=str(uuid4()),
            email="client1@example.com",
            password=hash_password(DEMO_PASSWORD),
            name="John Client",
            role=UserRole.CLIENT,
        ),
        User(
            id=str(uuid4()),
            email="lawyer1@example.com",
            password=hash_password(DEMO_PASSWORD),
            name="Jane Lawyer",
            role=UserRole.LAWYER,
            jurisdiction="New York",
            bar_number="12345",
        ),
    ]
    session.add_all(users)
    await session.commit()

    logger.info("Seeded demo users", extra={"emails": [u.email for u in users]})
    return users


__all__ = ["hash_password", "verify_password", "register_user", "seed_users"]
