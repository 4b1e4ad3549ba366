"""API key and role capability checks for the storage endpoints."""
import hmac
from typing import Callable, Optional

from fastapi import Depends, Header

from config import settings
from core.exceptions import AuthError, PermissionDeniedError
from services.permissions import has_permission


def verify_api_key(x_api_key: Optional[str] = Header(default=None)) -> None:
    """Required on every write endpoint."""
    if not settings.REQUIRE_API_KEY:
        return
    if not x_api_key or not hmac.compare_digest(
        x_api_key.encode("utf-8"), settings.API_KEY.encode("utf-8")
    ):
        raise AuthError("Missing or invalid API key")


def get_user_role(x_user_role: Optional[str] = Header(default=None)) -> str:
    return (x_user_role or settings.DEFAULT_USER_ROLE).strip().lower()


def require_permission(permission: str) -> Callable[..., str]:
    """Dependency factory: reject roles lacking the capability."""
    def dependency(role: str = Depends(get_user_role)) -> str:
        if settings.ENFORCE_ROLE_PERMISSIONS and not has_permission(role, permission):
            raise PermissionDeniedError(f"Role '{role}' lacks permission '{permission}'")
        return role
    return dependency
