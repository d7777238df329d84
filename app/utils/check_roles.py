from fastapi import Depends, status

from app.constants.error_codes import ErrorCode
from app.constants.permissions import Permission, has_permission
from app.core.exceptions import AppException
from app.models.users.user_models import Profile
from app.utils.get_user import get_current_user


def require_role(roles: list[str]):
    async def role_checker(user: Profile = Depends(get_current_user)):
        if user.role not in roles:
            raise AppException(
                status.HTTP_403_FORBIDDEN,
                "Permission denied",
                ErrorCode.PERMISSION_DENIED,
            )
        return user
    return role_checker


def require_permission(*permissions: Permission):
    """Passes when the caller's role grants any of the given permissions."""
    async def permission_checker(user: Profile = Depends(get_current_user)):
        if not any(has_permission(user.role, p) for p in permissions):
            raise AppException(
                status.HTTP_403_FORBIDDEN,
                "Permission denied",
                ErrorCode.PERMISSION_DENIED,
                details={"required": [p.value for p in permissions]},
            )
        return user
    return permission_checker
