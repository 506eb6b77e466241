"""
API dependencies

Bearer-token authentication with revocation checks. Unauthenticated access
to a protected route answers 401 with a Location header pointing at the
login page, so browser clients can redirect.
"""
from typing import Any, Dict, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from storefront.core.config import settings
from storefront.core.security import decode_token
from storefront.core.token_blacklist import token_blacklist
from storefront.services.gateway import DataGateway, get_gateway
from storefront.services.user_service import UserService

# Optional bearer - doesn't fail if no Authorization header
security = HTTPBearer(auto_error=False)


def login_required(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer", "Location": settings.LOGIN_PATH},
    )


async def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """Validated access-token claims of the caller."""
    if not credentials or not credentials.credentials:
        raise login_required("Not authenticated")

    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type") != "access":
        raise login_required("Invalid or expired token")

    if token_blacklist.is_token_revoked(payload.get("jti")):
        raise login_required("Token has been revoked")

    return payload


async def get_current_user(
    payload: Dict[str, Any] = Depends(get_token_payload),
    gateway: DataGateway = Depends(get_gateway),
) -> Dict[str, Any]:
    """Get current authenticated user"""
    user = await UserService(gateway).get_user_by_id(int(payload["sub"]))

    if not user:
        raise login_required("User not found")

    if not user.get("is_active", True):
        raise login_required("Account is disabled")

    return user


async def get_current_admin(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """Require admin user"""
    if not user.get("is_admin"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user

