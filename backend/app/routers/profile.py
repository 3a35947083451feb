"""Profile router: nested profile view and create-or-update."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.dependencies import get_profile_service
from app.models.user import ProfileRead, ProfileSaved, ProfileUpdate, UserRead
from app.services.profile import ProfileService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=ProfileRead)
async def get_profile(
    service: ProfileService = Depends(get_profile_service),
) -> ProfileRead:
    """Saved profile, or the placeholder profile when none exists yet."""
    return service.get_profile()


@router.put("", response_model=ProfileSaved)
async def save_profile(
    body: ProfileUpdate,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileSaved:
    """Create or update the profile.

    Flat fields are written in full (absent ones become empty); each
    achievement category present in the body replaces the stored set in the
    same transaction.
    """
    result = service.save_profile(body)
    return ProfileSaved(message=result.message, user=UserRead.model_validate(result.user))


@router.post("", response_model=ProfileSaved, status_code=201)
async def create_profile(
    body: ProfileUpdate,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileSaved:
    user = service.create_profile(body)
    logger.info("Profile created (user %s)", user.id)
    return ProfileSaved(message="User created successfully", user=UserRead.model_validate(user))


@router.get("/{user_id}", response_model=ProfileRead)
async def get_user_profile(
    user_id: int,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileRead:
    return service.get_profile_for(user_id)


@router.put("/{user_id}", response_model=ProfileSaved)
async def patch_user_profile(
    user_id: int,
    body: ProfileUpdate,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileSaved:
    """Partial update of one user; absent fields keep their stored value."""
    user = service.patch_profile(user_id, body)
    return ProfileSaved(message="Profile updated successfully", user=UserRead.model_validate(user))
