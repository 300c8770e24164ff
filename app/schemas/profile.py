from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.schemas.availability import AvailabilityConfig

class ProfileCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None

class ProfileResponse(BaseModel):
    id: str
    ownerId: str
    name: str
    description: Optional[str] = None
    availability: AvailabilityConfig = Field(default_factory=AvailabilityConfig)
    availabilityVersion: int = 0
    createdAt: datetime
    updatedAt: Optional[datetime] = None

    class Config:
        populate_by_name = True
        json_encoders = {
            datetime: lambda dt: dt.isoformat()
        }
