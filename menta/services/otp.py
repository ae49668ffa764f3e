"""Email one-time passcodes for doctor registration.

A code is issued per email address and verified against the single live
``OtpVerification`` row for that address. Verification checks, in order:
a record exists, it has not expired, the attempt ceiling has not been reached,
and finally the code itself. A wrong code consumes one attempt; once
``OTP_MAX_ATTEMPTS`` failures are recorded the row is locked until a new code
is issued.

Every write is a single atomic statement against the current row, so two
concurrent requests cannot push ``attempts`` past the ceiling or resurrect a
superseded code.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from menta.core.config import settings
from menta.core.email_utils import EmailManager
from menta.core.exceptions import (
    AttemptsExceededError,
    ConflictError,
    DeliveryError,
    ExpiredError,
    MismatchError,
    NotFoundError,
    ValidationError,
)
from menta.core.logging import get_logger
from menta.core.security import codes_match, generate_email_otp
from menta.models.otp_verification import OtpVerification
from menta.models.user import User
from menta.utils.helpers import as_utc, mask_email, utcnow

logger = get_logger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@dataclass(frozen=True)
class IssuedOtp:
    email: str
    issued_at: datetime
    expires_at: datetime

    @property
    def expires_in(self) -> int:
        return int((self.expires_at - self.issued_at).total_seconds())


async def get_otp_record(db: AsyncSession, email: str) -> Optional[OtpVerification]:
    """Load the live record for ``email``, bypassing any stale identity-map copy."""
    result = await db.execute(
        select(OtpVerification)
        .where(OtpVerification.email == email)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def _upsert_statement(db: AsyncSession, email: str, code: str, expires_at: datetime, now: datetime):
    dialect = db.get_bind().dialect.name
    try:
        insert = _UPSERT_DIALECTS[dialect]
    except KeyError:
        raise RuntimeError(f"OTP issuance is not supported on the '{dialect}' dialect") from None

    stmt = insert(OtpVerification).values(
        email=email,
        code=code,
        expires_at=expires_at,
        attempts=0,
        verified=False,
        created_at=now,
        updated_at=now,
    )
    return stmt.on_conflict_do_update(
        index_elements=["email"],
        set_={
            "code": stmt.excluded.code,
            "expires_at": stmt.excluded.expires_at,
            "attempts": 0,
            "verified": False,
            "updated_at": stmt.excluded.updated_at,
        },
    )


async def request_otp(
    db: AsyncSession,
    email: str,
    mailer: EmailManager,
    now: Optional[datetime] = None,
) -> IssuedOtp:
    """Issue a fresh code for ``email`` and hand it to ``mailer``.

    Any previous code for the address is replaced and its attempt counter
    reset. The code is never returned; it only travels through the mailer.

    Raises:
        ValidationError: ``email`` is blank.
        ConflictError: a doctor account already uses ``email``.
        DeliveryError: the mailer reported failure. The new code stays
            persisted, so the caller may simply request another one.
    """
    if not email or not email.strip():
        raise ValidationError("Email is required")

    now = now or utcnow()

    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        logger.info("OTP refused for registered email", email=mask_email(email))
        raise ConflictError()

    code = generate_email_otp()
    expires_at = now + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)

    await db.execute(_upsert_statement(db, email, code, expires_at, now))
    await db.commit()
    logger.info("OTP issued", email=mask_email(email), expires_at=expires_at.isoformat())

    sent = await mailer.send_otp_email(email, code)
    if not sent:
        logger.error("OTP delivery failed", email=mask_email(email))
        raise DeliveryError()

    return IssuedOtp(email=email, issued_at=now, expires_at=expires_at)


async def verify_otp(
    db: AsyncSession,
    email: str,
    code: str,
    now: Optional[datetime] = None,
) -> OtpVerification:
    """Check ``code`` against the live record for ``email``.

    Returns the verified record. Re-submitting the correct code for a record
    that is already verified (and still unexpired) succeeds again without
    writing anything.

    Raises:
        ValidationError: ``email`` or ``code`` is blank.
        NotFoundError: no code was ever requested for ``email``.
        ExpiredError: ``now`` is at or past the record's expiry.
        AttemptsExceededError: the attempt ceiling has been reached.
        MismatchError: wrong code; one attempt was consumed.
    """
    if not email or not code:
        raise ValidationError()

    now = now or utcnow()
    max_attempts = settings.OTP_MAX_ATTEMPTS

    record = await get_otp_record(db, email)
    if record is None:
        raise NotFoundError()

    # Values of the instance being checked; a re-issuance replaces both.
    checked_code, checked_expiry = record.code, record.expires_at

    if now >= as_utc(checked_expiry):
        raise ExpiredError()

    if record.attempts >= max_attempts:
        raise AttemptsExceededError()

    if not codes_match(checked_code, code):
        if record.verified:
            raise MismatchError()

        result = await db.execute(
            update(OtpVerification)
            .where(
                *_same_instance(email, checked_code, checked_expiry),
                OtpVerification.attempts < max_attempts,
            )
            .values(attempts=OtpVerification.attempts + 1, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        if result.rowcount == 0:
            await _raise_lost_update(db, email, checked_code, checked_expiry)

        logger.info("OTP mismatch", email=mask_email(email), attempts=record.attempts + 1)
        raise MismatchError()

    if record.verified:
        return record

    result = await db.execute(
        update(OtpVerification)
        .where(
            *_same_instance(email, checked_code, checked_expiry),
            OtpVerification.attempts < max_attempts,
        )
        .values(verified=True, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    if result.rowcount == 0:
        await _raise_lost_update(db, email, checked_code, checked_expiry)

    await db.refresh(record)
    logger.info("OTP verified", email=mask_email(email))
    return record


def _same_instance(email: str, code: str, expires_at: datetime):
    """Row filter matching only the issuance that was read, not a later one."""
    return (
        OtpVerification.email == email,
        OtpVerification.code == code,
        OtpVerification.expires_at == expires_at,
    )


async def _raise_lost_update(db: AsyncSession, email: str, code: str, expires_at: datetime):
    """Explain why a guarded update matched no row."""
    current = await get_otp_record(db, email)
    if current is None:
        raise NotFoundError()
    if current.code != code or current.expires_at != expires_at:
        # Superseded by a re-issuance; the submitted guess targeted a dead code.
        logger.info("OTP superseded during verification", email=mask_email(email))
        raise MismatchError()
    # A concurrent request consumed the last attempt first.
    raise AttemptsExceededError()


async def discard_otp(db: AsyncSession, record: OtpVerification) -> bool:
    """Delete ``record`` if it is still the verified issuance that was read.

    Returns False when the row was re-issued or removed in the meantime.
    The caller owns the commit.
    """
    result = await db.execute(
        delete(OtpVerification)
        .where(
            *_same_instance(record.email, record.code, record.expires_at),
            OtpVerification.verified.is_(True),
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0
