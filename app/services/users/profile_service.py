# app/services/users/profile_service.py

from sqlalchemy import select, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.activity_codes import ActivityCode
from app.constants.error_codes import ErrorCode
from app.constants.permissions import ROLE_PERMISSIONS
from app.core.exceptions import AppException, ensure_version
from app.models.enums.user_role import UserRole, ROLE_DISPLAY_NAMES
from app.models.users.user_models import Profile
from app.schemas.users.user_schemas import (
    ProfileSelfUpdate,
    ProfileAdminUpdate,
    ProfileListFilters,
    ProfileOut,
)
from app.utils.activity_helpers import emit_user_activity
from app.utils.logger import get_logger
from app.utils.pagination import paginate

logger = get_logger(__name__)


def map_profile(profile: Profile) -> ProfileOut:
    role = UserRole(profile.role)
    return ProfileOut(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        role=role,
        role_display=ROLE_DISPLAY_NAMES[role],
        phone=profile.phone,
        is_active=profile.is_active,
        version=profile.version,
        permissions=sorted(p.value for p in ROLE_PERMISSIONS[role]),
        created_at=profile.created_at,
    )


async def _get_profile(db: AsyncSession, profile_id: str) -> Profile:
    profile = (
        await db.execute(select(Profile).where(Profile.id == profile_id).with_for_update())
    ).scalar_one_or_none()
    if not profile:
        raise AppException(404, "Profile not found", ErrorCode.PROFILE_NOT_FOUND)
    return profile


# =========================
# SELF
# =========================
async def update_own_profile(db: AsyncSession, payload: ProfileSelfUpdate, user) -> ProfileOut:
    profile = await _get_profile(db, user.id)
    ensure_version(profile, payload.version, "Profile", ErrorCode.PROFILE_VERSION_CONFLICT)

    changes: list[str] = []
    for field, value in payload.model_dump(exclude_unset=True, exclude={"version"}).items():
        if getattr(profile, field) != value:
            setattr(profile, field, value)
            changes.append(field)

    if not changes:
        raise AppException(400, "No changes detected", ErrorCode.VALIDATION_ERROR)

    profile.version += 1
    await emit_user_activity(db, user, ActivityCode.UPDATE_PROFILE, target_id=profile.id, changes=", ".join(changes))

    await db.commit()
    await db.refresh(profile)
    return map_profile(profile)


# =========================
# ADMIN
# =========================
async def list_profiles(
    db: AsyncSession,
    filters: ProfileListFilters,
    *,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    query = select(Profile)

    if filters.search:
        term = f"%{filters.search}%"
        query = query.where(or_(Profile.email.ilike(term), Profile.full_name.ilike(term)))
    if filters.role:
        query = query.where(Profile.role == filters.role)
    if filters.is_active is not None:
        query = query.where(Profile.is_active == filters.is_active)

    query = query.order_by(desc(Profile.created_at), Profile.email)
    data = await paginate(db, query, page=page, page_size=page_size)
    data["items"] = [map_profile(p) for p in data["items"]]
    return data


async def admin_update_profile(
    db: AsyncSession,
    profile_id: str,
    payload: ProfileAdminUpdate,
    admin,
) -> ProfileOut:
    profile = await _get_profile(db, profile_id)
    ensure_version(profile, payload.version, "Profile", ErrorCode.PROFILE_VERSION_CONFLICT)

    if profile.id == admin.id:
        raise AppException(400, "Admins cannot change their own role or status", ErrorCode.VALIDATION_ERROR)

    changed = False

    if payload.role is not None and payload.role != profile.role:
        profile.role = payload.role
        changed = True
        await emit_user_activity(
            db,
            admin,
            ActivityCode.UPDATE_USER_ROLE,
            target_id=profile.id,
            target_email=profile.email,
            target_role=ROLE_DISPLAY_NAMES[payload.role],
        )

    if payload.is_active is not None and payload.is_active != profile.is_active:
        profile.is_active = payload.is_active
        changed = True
        await emit_user_activity(
            db,
            admin,
            ActivityCode.REACTIVATE_USER if payload.is_active else ActivityCode.DEACTIVATE_USER,
            target_id=profile.id,
            target_email=profile.email,
        )

    if not changed:
        raise AppException(400, "No changes detected", ErrorCode.VALIDATION_ERROR)

    profile.version += 1
    await db.commit()
    await db.refresh(profile)

    logger.info(
        "Profile updated by admin",
        extra={"profile_id": profile.id, "role": profile.role.value, "is_active": profile.is_active},
    )
    return map_profile(profile)
