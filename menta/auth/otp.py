from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from menta.core.email_utils import EmailManager, get_email_manager
from menta.db.database import get_async_session
from menta.schemas.auth import ErrorResponse, OTPRequest, OTPResponse, OTPVerify, OTPVerifyResponse
from menta.services.otp import request_otp, verify_otp

router = APIRouter()


@router.post(
    "/request-otp",
    response_model=OTPResponse,
    responses={409: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def request_verification_code(
    data: OTPRequest,
    db: AsyncSession = Depends(get_async_session),
    mailer: EmailManager = Depends(get_email_manager)
):
    """Email a 6-digit verification code to an unregistered address."""
    issued = await request_otp(db, data.email, mailer)
    return {
        "message": "Verification code sent successfully",
        "expires_at": issued.expires_at,
        "expires_in": issued.expires_in,
    }


@router.post(
    "/verify-otp",
    response_model=OTPVerifyResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
async def verify_verification_code(
    data: OTPVerify,
    db: AsyncSession = Depends(get_async_session)
):
    """Verify the emailed code so the address can be registered."""
    record = await verify_otp(db, data.email, data.code)
    return {
        "message": "Email verified successfully",
        "email": record.email,
        "verified": record.verified,
    }
