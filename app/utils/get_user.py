from fastapi import Depends, Header, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.error_codes import ErrorCode
from app.core.db import get_db
from app.core.exceptions import AppException
from app.core.security import decode_access_token
from app.models.users.user_models import Profile
from app.utils.logger import get_logger

logger = get_logger("auth.guard")


async def get_current_user(
    request: Request,
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    if not authorization or not authorization.startswith("Bearer "):
        logger.warning("Missing bearer token")
        raise AppException(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid authorization header",
            ErrorCode.UNAUTHORIZED,
        )

    token = authorization.split("Bearer ", 1)[1].strip()
    payload = decode_access_token(token)

    profile_id = payload["sub"]
    profile = await db.get(Profile, profile_id)

    if not profile:
        logger.warning("Token profile not found", extra={"profile_id": profile_id})
        raise AppException(
            status.HTTP_401_UNAUTHORIZED,
            "Profile not found",
            ErrorCode.PROFILE_NOT_FOUND,
        )

    if not profile.is_active:
        logger.warning("Inactive profile access blocked", extra={"profile_id": profile.id})
        raise AppException(
            status.HTTP_403_FORBIDDEN,
            "User account is inactive",
            ErrorCode.PROFILE_INACTIVE,
        )

    request.state.user = profile
    return profile
