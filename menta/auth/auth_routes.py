from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from menta.auth.deps import get_current_doctor
from menta.core.logging import get_logger
from menta.core.security import create_access_token
from menta.db.database import get_async_session
from menta.models.user import User
from menta.schemas.auth import AccessToken, ErrorResponse, RegisterResponse, UserCreate, UserLogin, UserResponse
from menta.services.accounts import authenticate_doctor, register_doctor
from menta.utils.helpers import mask_email

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_async_session)
):
    """Register a doctor whose email has been verified by OTP."""
    user = await register_doctor(db, user_data.name, user_data.email, user_data.password)
    return {"message": "User registered successfully", "user": user}


@router.post("/login", response_model=AccessToken)
async def login(
    user_credentials: UserLogin,
    db: AsyncSession = Depends(get_async_session)
):
    """Authenticate a doctor and return a bearer token."""
    user = await authenticate_doctor(db, user_credentials.email, user_credentials.password)
    if not user:
        logger.info("Login failed", email=mask_email(user_credentials.email))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    access_token = create_access_token(data={"sub": str(user.id), "email": user.email})
    logger.info("Login successful", user_id=user.id)
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=UserResponse)
async def get_current_user(current_doctor: User = Depends(get_current_doctor)):
    """Get current doctor information."""
    return current_doctor
