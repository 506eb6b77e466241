"""
Tests for sign-up, authentication and password reset.
"""
from datetime import timedelta

import pytest

from storefront.core.exceptions import AuthError, ValidationError
from storefront.core.security import hash_reset_token, verify_password
from storefront.core.utils import utcnow
from storefront.services.user_service import UserService


@pytest.mark.anyio
class TestSignUp:

    async def test_creates_user_and_profile(self, gateway):
        user = await UserService(gateway).sign_up("New@Example.com", "long-enough", "Pat Doe")

        assert user["email"] == "new@example.com"
        assert verify_password("long-enough", user["hashed_password"])
        profiles = gateway.tables["profiles"]
        assert [(p["id"], p["full_name"]) for p in profiles] == [(user["id"], "Pat Doe")]

    async def test_duplicate_email_rejected(self, gateway, user):
        with pytest.raises(ValidationError):
            await UserService(gateway).sign_up(user["email"], "another-pass")


@pytest.mark.anyio
class TestAuthenticate:

    async def test_correct_password(self, gateway, user):
        found = await UserService(gateway).authenticate("Shopper@example.com", "s3cret-pass")
        assert found["id"] == user["id"]

    @pytest.mark.parametrize("email,password", [
        ("shopper@example.com", "wrong"),
        ("nobody@example.com", "s3cret-pass"),
    ])
    async def test_bad_credentials(self, gateway, user, email, password):
        with pytest.raises(AuthError, match="Invalid email or password"):
            await UserService(gateway).authenticate(email, password)

    async def test_disabled_account(self, gateway, user_factory):
        user_factory("off@example.com", is_active=False)
        with pytest.raises(AuthError, match="disabled"):
            await UserService(gateway).authenticate("off@example.com", "s3cret-pass")


@pytest.mark.anyio
class TestPasswordReset:

    async def test_unknown_email_gets_no_token(self, gateway):
        assert await UserService(gateway).create_password_reset_token("ghost@example.com") is None
        assert gateway.tables["password_reset_tokens"] == []

    async def test_token_is_stored_hashed(self, gateway, user):
        token = await UserService(gateway).create_password_reset_token(user["email"])
        stored = gateway.tables["password_reset_tokens"][0]
        assert stored["token_hash"] == hash_reset_token(token)
        assert token not in stored.values()

    async def test_reset_changes_password_once(self, gateway, user):
        service = UserService(gateway)
        token = await service.create_password_reset_token(user["email"])

        await service.reset_password_with_token(token, "brand-new-pass")
        await service.authenticate(user["email"], "brand-new-pass")

        with pytest.raises(ValidationError):
            await service.reset_password_with_token(token, "third-pass-here")

    async def test_expired_token_rejected(self, gateway, user):
        service = UserService(gateway)
        token = await service.create_password_reset_token(user["email"])
        gateway.tables["password_reset_tokens"][0]["expires_at"] = utcnow() - timedelta(minutes=1)

        with pytest.raises(ValidationError):
            await service.reset_password_with_token(token, "brand-new-pass")

    async def test_unknown_token_rejected(self, gateway, user):
        with pytest.raises(ValidationError):
            await UserService(gateway).reset_password_with_token("made-up", "brand-new-pass")
