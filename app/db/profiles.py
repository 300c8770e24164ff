from typing import Any, Dict, Optional
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument

from app.db.mongodb import db

# Profile collection helpers

def _to_object_id(profile_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(profile_id)
    except (InvalidId, TypeError):
        return None

def _with_string_id(profile: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if profile is not None:
        profile["id"] = str(profile["_id"])
    return profile

async def find_profile(profile_id: str) -> Optional[Dict[str, Any]]:
    """
    Get a profile document by its ID, or None if the ID is malformed or unknown
    """
    object_id = _to_object_id(profile_id)
    if object_id is None:
        return None
    profile = await db.db.profiles.find_one({"_id": object_id})
    return _with_string_id(profile)

async def insert_profile(profile_data: Dict[str, Any]) -> Dict[str, Any]:
    result = await db.db.profiles.insert_one(profile_data)
    created = await db.db.profiles.find_one({"_id": result.inserted_id})
    return _with_string_id(created)

async def delete_profile_document(profile_id: str) -> bool:
    object_id = _to_object_id(profile_id)
    if object_id is None:
        return False
    result = await db.db.profiles.delete_one({"_id": object_id})
    return result.deleted_count > 0

async def replace_availability(
    profile_id: str,
    availability: Dict[str, Any],
    expected_version: int
) -> Optional[Dict[str, Any]]:
    """
    Compare-and-swap the availability sub-document.

    Only writes when the stored availabilityVersion still equals
    expected_version; returns the updated profile, or None when the version
    moved on (or the profile is gone).
    """
    object_id = _to_object_id(profile_id)
    if object_id is None:
        return None

    version_filter: Dict[str, Any] = {"availabilityVersion": expected_version}
    if expected_version == 0:
        # Documents written before versioning have no counter yet
        version_filter = {"$or": [{"availabilityVersion": 0}, {"availabilityVersion": {"$exists": False}}]}

    updated = await db.db.profiles.find_one_and_update(
        {"_id": object_id, **version_filter},
        {
            "$set": {"availability": availability, "updatedAt": datetime.utcnow()},
            "$inc": {"availabilityVersion": 1},
        },
        return_document=ReturnDocument.AFTER,
    )
    return _with_string_id(updated)
