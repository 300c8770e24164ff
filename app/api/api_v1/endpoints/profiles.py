from fastapi import APIRouter, Depends, HTTPException, Response, status
from typing import Any, Dict

from app.core.auth import get_current_user, ensure_profile_owner
from app.schemas.profile import ProfileCreate, ProfileResponse
from app.services.profile_service import create_profile, get_profile_by_id, delete_profile

router = APIRouter()

@router.post("/", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_new_profile(
    profile_in: ProfileCreate,
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    """
    Create a profile owned by the current user.
    Availability starts closed with no working hours.
    """
    return await create_profile(str(current_user["_id"]), profile_in)

@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(profile_id: str):
    """
    Get a profile by ID
    """
    profile = await get_profile_by_id(profile_id)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )
    return profile

@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_profile(
    profile_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    """
    Delete a profile and its availability configuration
    """
    profile = await get_profile_by_id(profile_id)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )
    ensure_profile_owner(profile, current_user)

    success = await delete_profile(profile_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete profile"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
