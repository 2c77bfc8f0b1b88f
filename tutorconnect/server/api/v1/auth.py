"""
Authentication API Endpoints.

Registration, login and password management. Access tokens are stateless
JWTs, so logout is only an acknowledgement and the client drops the token.

Password reset follows a two step flow: ``/forgot-password`` stores the sha256
of a random token and logs the reset link, ``/reset-password`` redeems it once
before it expires.
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, HTTPException, status
from sqlmodel import select

from tutorconnect.core.database.base import utc_now
from tutorconnect.core.database.entities.password_resets import PasswordResetToken
from tutorconnect.core.database.entities.users import StudentProfile, TutorProfile, User, UserRole
from tutorconnect.core.database.repositories import UserRepository
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.common import MessageResponse
from tutorconnect.core.models.io.users import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    PasswordChangeRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UserProfileRead,
    UserRead,
    VerifyResponse,
)
from tutorconnect.core.security import (
    create_access_token,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from tutorconnect.server.core.config import settings
from tutorconnect.server.services.accounts import build_user_profile
from tutorconnect.server.services.deps import CurrentUser, SessionDep
from tutorconnect.server.services.mailer import send_password_reset_email

logger = get_logger(__name__)
router = APIRouter()

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent"


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a student or tutor account and return an access token.",
    responses={
        201: {"description": "Account created"},
        409: {"description": "Email already registered"},
        422: {"description": "Invalid registration data or weak password"},
    },
)
async def register(data: RegisterRequest, session: SessionDep) -> AuthResponse:
    """
    Register a new account.

    Tutors start with an empty teaching profile (rate 0, no rating); students
    start with an empty learning profile.
    """
    repo = UserRepository(session)
    email = data.email.strip().lower()
    if await repo.get_by_email(email) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists with this email")

    user = User(
        email=email,
        password_hash=hash_password(data.password),
        role=data.role,
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        date_of_birth=data.date_of_birth,
        address=data.address,
        pincode=data.pincode,
    )
    session.add(user)
    if user.role == UserRole.TUTOR.value:
        session.add(TutorProfile(user_id=user.id))
    else:
        session.add(StudentProfile(user_id=user.id))
    await session.commit()
    await session.refresh(user)

    logger.info(f"Registered {user.role} account: {user.id}")
    return AuthResponse(
        message="User registered successfully",
        token=create_access_token(user.id, user.role),
        user=await build_user_profile(session, user),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login",
    description="Exchange email and password for an access token.",
    responses={401: {"description": "Invalid credentials or inactive account"}},
)
async def login(data: LoginRequest, session: SessionDep) -> AuthResponse:
    user = await UserRepository(session).get_by_email(data.email)
    if user is None or not verify_password(data.password, user.password_hash):
        logger.info(f"Failed login attempt for {data.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is not active")

    logger.info(f"User logged in: {user.id}")
    return AuthResponse(
        message="Login successful",
        token=create_access_token(user.id, user.role),
        user=await build_user_profile(session, user),
    )


@router.get(
    "/me",
    response_model=UserProfileRead,
    summary="Current User",
    description="Return the authenticated user with their role profile.",
)
async def get_me(user: CurrentUser, session: SessionDep) -> UserProfileRead:
    return await build_user_profile(session, user)


@router.get(
    "/profile",
    response_model=UserProfileRead,
    summary="Current User Profile",
    description="Alias of /me kept for older clients.",
)
async def get_profile(user: CurrentUser, session: SessionDep) -> UserProfileRead:
    return await build_user_profile(session, user)


@router.put(
    "/password",
    response_model=MessageResponse,
    summary="Change Password",
    description="Change the password of the authenticated user.",
    responses={400: {"description": "Current password is incorrect"}},
)
async def change_password(data: PasswordChangeRequest, user: CurrentUser, session: SessionDep) -> MessageResponse:
    if not verify_password(data.current_password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
    user.password_hash = hash_password(data.new_password)
    await UserRepository(session).update(user)
    logger.info(f"Password changed for user: {user.id}")
    return MessageResponse(message="Password updated successfully")


@router.get(
    "/verify",
    response_model=VerifyResponse,
    summary="Verify Token",
    description="Check that the bearer token is valid and belongs to an active user.",
)
async def verify_token(user: CurrentUser) -> VerifyResponse:
    return VerifyResponse(valid=True, user=UserRead.model_validate(user))


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request Password Reset",
    description="Send a password reset link. The response never reveals whether the email is registered.",
)
async def forgot_password(data: ForgotPasswordRequest, session: SessionDep) -> MessageResponse:
    user = await UserRepository(session).get_by_email(data.email)
    if user is None or not user.is_active:
        logger.info("Password reset requested for unknown or inactive email")
        return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)

    token = generate_reset_token()
    expires_at = utc_now() + timedelta(minutes=settings.auth.password_reset_expire_minutes)
    result = await session.execute(select(PasswordResetToken).where(PasswordResetToken.user_id == user.id))
    record = result.scalars().first()
    if record is None:
        record = PasswordResetToken(user_id=user.id, token_hash=hash_reset_token(token), expires_at=expires_at)
    else:
        record.token_hash = hash_reset_token(token)
        record.expires_at = expires_at
        record.used_at = None
        record.created_at = utc_now()
    session.add(record)
    await session.commit()

    await send_password_reset_email(user.email, user.first_name, token)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset Password",
    description="Set a new password using a reset token.",
    responses={400: {"description": "Invalid or expired reset token"}},
)
async def reset_password(data: ResetPasswordRequest, session: SessionDep) -> MessageResponse:
    result = await session.execute(
        select(PasswordResetToken).where(PasswordResetToken.token_hash == hash_reset_token(data.token.lower()))
    )
    record = result.scalars().first()
    if record is None or record.used_at is not None or record.expires_at <= utc_now():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")

    user = await UserRepository(session).get_active_by_id(record.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")

    user.password_hash = hash_password(data.new_password)
    user.updated_at = utc_now()
    record.used_at = utc_now()
    session.add(user)
    session.add(record)
    await session.commit()

    logger.info(f"Password reset completed for user: {user.id}")
    return MessageResponse(message="Password has been reset successfully")


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Acknowledge logout. Tokens are stateless; the client discards its copy.",
)
async def logout(user: CurrentUser) -> MessageResponse:
    logger.info(f"User logged out: {user.id}")
    return MessageResponse(message="Logged out successfully")
