import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from app.main import app
from app.db.mongodb import db
from app.core.auth import create_access_token

OWNER_ID = "owner-1"

# Monday 09:00-12:00, one-hour slots, no buffer
MONDAY_AVAILABILITY = {
    "isAvailable": True,
    "defaultDuration": 60,
    "bufferTime": 0,
    "workingHours": {
        "1": {"start": "09:00", "end": "12:00", "isWorking": True},
    },
}

@pytest.fixture
def mongo():
    client = AsyncMongoMockClient()
    db.client = client
    db.db = client["profile_availability_test"]
    yield db.db
    db.client = None
    db.db = None

@pytest_asyncio.fixture
async def client(mongo):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

def auth_headers(subject: str = OWNER_ID, role: str = None):
    claims = {"sub": subject}
    if role:
        claims["role"] = role
    return {"Authorization": f"Bearer {create_access_token(claims)}"}

@pytest.fixture
def owner_headers():
    return auth_headers()

@pytest_asyncio.fixture
async def profile_id(client, owner_headers):
    response = await client.post("/api/v1/profiles/", json={"name": "Dr. Test"}, headers=owner_headers)
    assert response.status_code == 201
    return response.json()["id"]
