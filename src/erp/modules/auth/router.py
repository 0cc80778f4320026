"""Authentication router."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.database import get_db
from erp.core.rate_limit import RateLimiter, get_rate_limiter
from erp.core.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
)
from erp.modules.audit import record_audit
from erp.modules.auth.schemas import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from erp.modules.students import repository as students_repository
from erp.modules.users.models import User, UserRole
from erp.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter()

LOGIN_ATTEMPT_LIMIT = 10
LOGIN_WINDOW_SECONDS = 15 * 60


async def _issue_tokens(db: AsyncSession, user: User) -> LoginResponse:
    has_completed_onboarding = False
    if user.role == UserRole.STUDENT:
        student = await students_repository.get_by_user_id(db, user.id)
        has_completed_onboarding = bool(student and student.has_completed_onboarding)

    additional_claims = {
        "email": user.email,
        "role": user.role.value,
    }
    access_token = create_access_token(
        subject=str(user.id),
        additional_claims=additional_claims,
    )
    refresh_token = create_refresh_token(subject=str(user.id))

    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        user=UserResponse(
            id=str(user.id),
            email=user.email,
            role=user.role.value,
            is_active=user.is_active,
            has_completed_onboarding=has_completed_onboarding,
            created_at=user.created_at.isoformat(),
        ),
    )


def _email_taken() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "error": "EMAIL_ALREADY_REGISTERED",
            "message": "An account with this email already exists.",
        },
    )


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    Register a student account and return JWT tokens.

    Raises:
        HTTPException 409: Email already registered
    """
    if await UserRepository.email_exists(db, body.email):
        logger.warning("Registration attempt for an existing email")
        raise _email_taken()

    try:
        user = await UserRepository.create(
            db,
            email=body.email,
            password_hash=hash_password(body.password),
            role=UserRole.STUDENT,
        )
    except IntegrityError as e:
        await db.rollback()
        raise _email_taken() from e

    logger.info(f"Student account registered: {user.id}")
    return await _issue_tokens(db, user)


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
) -> LoginResponse:
    """
    Authenticate user and return JWT tokens.

    Args:
        credentials: Email and password
        request: Incoming request (client IP for the audit log)
        db: Database session
        rate_limiter: Limits attempts per email

    Returns:
        Access token, refresh token, and user info

    Raises:
        HTTPException 401: Invalid credentials
        HTTPException 403: Account inactive
        HTTPException 429: Too many attempts
    """
    await rate_limiter.enforce(
        f"login:{credentials.email.lower()}",
        limit=LOGIN_ATTEMPT_LIMIT,
        window_seconds=LOGIN_WINDOW_SECONDS,
    )

    user = await UserRepository.get_by_email(db, credentials.email)

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "INVALID_CREDENTIALS",
                "message": "Invalid email or password.",
            },
        )

    if not user.is_active:
        logger.warning(f"Login attempt for inactive account: {user.id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "ACCOUNT_INACTIVE",
                "message": "Your account has been deactivated.",
            },
        )

    response = await _issue_tokens(db, user)

    await record_audit(
        db,
        user_id=user.id,
        action="LOGIN",
        entity="User",
        entity_id=user.id,
        ip_address=request.client.host if request.client else None,
    )
    logger.info(f"User logged in: {user.id} (role: {user.role.value})")

    return response
