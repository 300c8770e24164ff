from typing import Any, Dict, Optional
from datetime import datetime
from bson import ObjectId
import logging

from app.db.profiles import find_profile, insert_profile, delete_profile_document
from app.schemas.availability import AvailabilityConfig
from app.schemas.profile import ProfileCreate

logger = logging.getLogger(__name__)

async def create_profile(owner_id: str, profile_in: ProfileCreate) -> Dict[str, Any]:
    """
    Create a new profile with the default availability configuration
    (closed, no working hours)
    """
    profile_data = profile_in.model_dump()
    profile_data["ownerId"] = owner_id
    profile_data["availability"] = AvailabilityConfig().model_dump(mode="json")
    profile_data["availabilityVersion"] = 0
    profile_data["createdAt"] = datetime.utcnow()

    # Generate an ObjectId and keep its string form as id
    profile_id = ObjectId()
    profile_data["_id"] = profile_id
    profile_data["id"] = str(profile_id)

    created = await insert_profile(profile_data)
    logger.info(f"Created profile {created['id']} for owner {owner_id}")
    return created

async def get_profile_by_id(profile_id: str) -> Optional[Dict[str, Any]]:
    """
    Get a profile by ID
    """
    return await find_profile(profile_id)

async def delete_profile(profile_id: str) -> bool:
    """
    Delete a profile together with its availability configuration
    """
    deleted = await delete_profile_document(profile_id)
    if deleted:
        logger.info(f"Deleted profile {profile_id}")
    return deleted
