"""Doctor account registration and credential checks."""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from menta.core.exceptions import ConflictError, EmailNotVerifiedError
from menta.core.logging import get_logger
from menta.core.security import get_password_hash, verify_password
from menta.models.user import User
from menta.services.otp import discard_otp, get_otp_record
from menta.utils.helpers import mask_email

logger = get_logger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def register_doctor(db: AsyncSession, name: str, email: str, password: str) -> User:
    """Create a doctor account for an email that passed OTP verification.

    The OTP record is deleted in the same transaction that creates the user.
    If the record was re-issued after it was read, nothing is created.
    """
    if await get_user_by_email(db, email):
        raise ConflictError("User with this email already exists")

    record = await get_otp_record(db, email)
    if record is None or not record.verified:
        raise EmailNotVerifiedError()

    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(password),
        image="",
    )
    db.add(user)
    if not await discard_otp(db, record):
        # Re-issued between the check above and this delete.
        await db.rollback()
        logger.info("Registration lost its verified OTP", email=mask_email(email))
        raise EmailNotVerifiedError()

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("User with this email already exists")

    await db.refresh(user)
    logger.info("Doctor registered", user_id=user.id, email=mask_email(email))
    return user


async def authenticate_doctor(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """Return the active doctor matching the credentials, or None."""
    user = await get_user_by_email(db, email)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def seed_doctor(db: AsyncSession, name: str, email: str, password: str) -> User:
    """Create a doctor directly, skipping OTP verification. Used for bootstrap data."""
    existing = await get_user_by_email(db, email)
    if existing:
        return existing

    user = User(name=name, email=email, hashed_password=get_password_hash(password), image="")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Doctor seeded", user_id=user.id, email=mask_email(email))
    return user
