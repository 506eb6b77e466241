"""
Authentication routes

Rate limited to slow down credential stuffing. Sign-out revokes the token's
JTI until the token would have expired anyway.
"""
from datetime import datetime, timezone
from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException, status, Request

from storefront.api.deps import get_current_user, get_token_payload
from storefront.core.config import settings
from storefront.core.exceptions import GatewayError
from storefront.core.rate_limit import limiter
from storefront.core.security import create_access_token
from storefront.core.token_blacklist import token_blacklist
from storefront.schemas.user import (
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    Token,
    UserCreate,
    UserLogin,
    UserResponse,
)
from storefront.services.gateway import DataGateway, get_gateway
from storefront.services.user_service import UserService

router = APIRouter()

RESET_REQUESTED = "If an account with that email exists, a reset link has been sent"


def issue_token(user: Dict[str, Any]) -> Token:
    return Token(
        access_token=create_access_token({"sub": user["id"]}),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post("/signup", response_model=Token, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def signup(
    request: Request,
    user_data: UserCreate,
    gateway: DataGateway = Depends(get_gateway)
):
    """Register a new user and return an access token"""
    try:
        user = await UserService(gateway).sign_up(user_data.email, user_data.password, user_data.full_name)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to create account"
        )
    return issue_token(user)


@router.post("/login", response_model=Token)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def login(
    request: Request,
    credentials: UserLogin,
    gateway: DataGateway = Depends(get_gateway)
):
    """Login and get access token"""
    try:
        user = await UserService(gateway).authenticate(credentials.email, credentials.password)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to sign in"
        )
    return issue_token(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(payload: Dict[str, Any] = Depends(get_token_payload)):
    """Revoke the caller's token"""
    expiry = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    token_blacklist.revoke_token(payload["jti"], expiry)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: Dict[str, Any] = Depends(get_current_user)):
    """Get current authenticated user"""
    return current_user


@router.post("/password-reset", response_model=MessageResponse)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def request_password_reset(
    request: Request,
    data: PasswordResetRequest,
    gateway: DataGateway = Depends(get_gateway)
):
    """
    Request a password reset token.

    Always returns the same message to prevent email enumeration.
    """
    try:
        await UserService(gateway).create_password_reset_token(data.email)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to request password reset"
        )
    return {"message": RESET_REQUESTED}


@router.post("/password-reset/confirm", response_model=MessageResponse)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def confirm_password_reset(
    request: Request,
    data: PasswordResetConfirm,
    gateway: DataGateway = Depends(get_gateway)
):
    """Complete password reset with token"""
    try:
        await UserService(gateway).reset_password_with_token(data.token, data.new_password)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to reset password"
        )
    return {"message": "Password has been reset successfully"}
