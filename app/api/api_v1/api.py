from fastapi import APIRouter
from app.api.api_v1.endpoints import profiles, availability

router = APIRouter()

# Include all routers
router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
router.include_router(availability.router, prefix="/profiles", tags=["Availability"])
