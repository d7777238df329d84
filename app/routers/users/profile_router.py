# app/routers/users/profile_router.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.models.enums.user_role import UserRole
from app.schemas.users.user_schemas import (
    ProfileSelfUpdate,
    ProfileAdminUpdate,
    ProfileListFilters,
    ProfileOut,
    ProfileListData,
)
from app.services.users.profile_service import (
    map_profile,
    update_own_profile,
    list_profiles,
    admin_update_profile,
)
from app.utils.check_roles import require_role
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse
from app.utils.logger import get_logger

router = APIRouter(prefix="/users", tags=["Users"])
logger = get_logger(__name__)

super_admin_only = require_role([UserRole.super_admin.value])


@router.get("/me", response_model=APIResponse[ProfileOut])
async def get_me_api(user=Depends(get_current_user)):
    return success_response("Profile retrieved successfully", map_profile(user))


@router.patch("/me", response_model=APIResponse[ProfileOut])
async def update_me_api(
    payload: ProfileSelfUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    profile = await update_own_profile(db, payload, user)
    return success_response("Profile updated successfully", profile)


@router.get("", response_model=APIResponse[ProfileListData])
async def list_profiles_api(
    filters: ProfileListFilters = Depends(),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    admin=Depends(super_admin_only),
):
    logger.info("List profiles request", extra=filters.model_dump(exclude_none=True))
    data = await list_profiles(db, filters, page=page, page_size=page_size)
    return success_response("Profiles fetched", data)


@router.patch("/{profile_id}", response_model=APIResponse[ProfileOut])
async def admin_update_profile_api(
    profile_id: str,
    payload: ProfileAdminUpdate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(super_admin_only),
):
    logger.info("Admin profile update", extra={"profile_id": profile_id})
    profile = await admin_update_profile(db, profile_id, payload, admin)
    return success_response("Profile updated successfully", profile)
