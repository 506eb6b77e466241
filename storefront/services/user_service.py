"""
User Service

Account lifecycle over the gateway: sign-up (user plus empty profile),
credential checks and the password reset token flow.
"""
import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from storefront.core.config import settings
from storefront.core.exceptions import AuthError, ValidationError
from storefront.core.security import (
    generate_reset_token,
    get_password_hash,
    hash_reset_token,
    verify_password,
)
from storefront.core.utils import utcnow
from storefront.services.gateway import DataGateway

logger = logging.getLogger(__name__)


class UserService:
    """
    Service for account operations.

    Features:
    - Sign-up with an empty profile row
    - Email/password authentication
    - Single-use, hashed, expiring password reset tokens
    """

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway

    # ============================================================
    # Lookup
    # ============================================================

    async def get_user_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        return await self.gateway.select_one("users", filters={"id": user_id})

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self.gateway.select_one("users", filters={"email": email.strip().lower()})

    # ============================================================
    # Sign-up / sign-in
    # ============================================================

    async def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Create a user and its profile.

        Raises:
            ValidationError: email already registered
        """
        email = email.strip().lower()
        if await self.get_user_by_email(email):
            raise ValidationError("Email already registered", details={"field": "email"})

        async with self.gateway.transaction():
            user = await self.gateway.insert("users", {
                "email": email,
                "hashed_password": get_password_hash(password),
            })
            await self.gateway.insert("profiles", {"id": user["id"], "full_name": full_name})

        logger.info(f"User {user['id']} signed up")
        return user

    async def authenticate(self, email: str, password: str) -> Dict[str, Any]:
        """
        Raises:
            AuthError: unknown email, wrong password or disabled account
        """
        user = await self.get_user_by_email(email)
        if not user or not verify_password(password, user["hashed_password"]):
            logger.info("Failed sign-in attempt")
            raise AuthError("Invalid email or password")
        if not user.get("is_active", True):
            raise AuthError("Account is disabled")
        return user

    # ============================================================
    # Password Reset
    # ============================================================

    async def create_password_reset_token(self, email: str) -> Optional[str]:
        """
        Create a password reset token.

        Returns:
            Raw token or None if user not found
        """
        user = await self.get_user_by_email(email)
        if not user:
            return None

        raw_token = generate_reset_token()
        await self.gateway.insert("password_reset_tokens", {
            "user_id": user["id"],
            "token_hash": hash_reset_token(raw_token),
            "expires_at": utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
        })

        if settings.ENVIRONMENT != "production":
            logger.debug(f"Password reset token for user {user['id']}: {raw_token}")
        logger.info(f"Password reset requested for user {user['id']}")
        return raw_token

    async def reset_password_with_token(self, token: str, new_password: str) -> None:
        """
        Reset password using a token.

        Raises:
            ValidationError: token unknown, already used or expired
        """
        reset_token = await self.gateway.select_one(
            "password_reset_tokens",
            filters={"token_hash": hash_reset_token(token), "used_at": None},
        )
        if not reset_token or reset_token["expires_at"] <= utcnow():
            raise ValidationError("Invalid or expired reset token")

        async with self.gateway.transaction():
            await self.gateway.update(
                "users",
                {"hashed_password": get_password_hash(new_password)},
                {"id": reset_token["user_id"]},
            )
            await self.gateway.update(
                "password_reset_tokens",
                {"used_at": utcnow()},
                {"id": reset_token["id"]},
            )

        logger.info(f"Password reset completed for user {reset_token['user_id']}")
