import pytest

from app.api.api_v1.endpoints import availability as availability_endpoints

from conftest import MONDAY_AVAILABILITY, auth_headers

@pytest.mark.asyncio
async def test_new_profile_starts_closed(client, profile_id):
    response = await client.get(f"/api/v1/profiles/{profile_id}/availability")
    assert response.status_code == 200
    availability = response.json()
    assert availability["isAvailable"] is False
    assert availability["workingHours"] == {}
    assert availability["defaultDuration"] == 60
    assert availability["bufferTime"] == 15
    assert availability["bookingWindow"] == {"minNotice": 60, "maxAdvance": 30}

    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/slots", params={"date": "2025-01-06"})
    assert response.status_code == 200
    assert response.json()["slots"] == []

@pytest.mark.asyncio
async def test_set_availability_then_list_slots(client, profile_id, owner_headers):
    response = await client.put(
        f"/api/v1/profiles/{profile_id}/availability",
        json=MONDAY_AVAILABILITY,
        headers=owner_headers
    )
    assert response.status_code == 200
    assert response.json()["workingHours"]["1"]["start"] == "09:00"

    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/slots", params={"date": "2025-01-06"})
    assert response.status_code == 200
    body = response.json()
    assert body["date"] == "2025-01-06"
    assert body["slots"] == [
        {"start": "2025-01-06T09:00:00", "end": "2025-01-06T10:00:00"},
        {"start": "2025-01-06T10:00:00", "end": "2025-01-06T11:00:00"},
        {"start": "2025-01-06T11:00:00", "end": "2025-01-06T12:00:00"},
    ]

@pytest.mark.asyncio
async def test_round_trip_returns_validated_configuration(client, profile_id, owner_headers):
    payload = {
        **MONDAY_AVAILABILITY,
        "breakTime": [{"start": "10:30", "end": "11:00", "days": ["Monday"]}],
        "exceptions": [{"date": "2025-01-13", "isAvailable": False}],
    }
    put_response = await client.put(f"/api/v1/profiles/{profile_id}/availability", json=payload, headers=owner_headers)
    get_response = await client.get(f"/api/v1/profiles/{profile_id}/availability")
    assert put_response.json() == get_response.json()
    assert get_response.json()["breakTime"][0]["days"] == [1]

@pytest.mark.asyncio
async def test_invalid_availability_is_rejected_with_field(client, profile_id, owner_headers):
    await client.put(f"/api/v1/profiles/{profile_id}/availability", json=MONDAY_AVAILABILITY, headers=owner_headers)

    bad = {**MONDAY_AVAILABILITY, "workingHours": {"1": {"start": "12:00", "end": "09:00"}}}
    response = await client.put(f"/api/v1/profiles/{profile_id}/availability", json=bad, headers=owner_headers)
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "workingHours.1"

    # Nothing was written
    response = await client.get(f"/api/v1/profiles/{profile_id}/availability")
    assert response.json()["workingHours"]["1"]["start"] == "09:00"

@pytest.mark.asyncio
async def test_patch_merges_and_revalidates(client, profile_id, owner_headers):
    await client.put(f"/api/v1/profiles/{profile_id}/availability", json=MONDAY_AVAILABILITY, headers=owner_headers)

    response = await client.patch(
        f"/api/v1/profiles/{profile_id}/availability",
        json={"bufferTime": 15, "workingHours": {"2": {"start": "13:00", "end": "15:00"}}},
        headers=owner_headers
    )
    assert response.status_code == 200
    body = response.json()
    assert body["bufferTime"] == 15
    assert set(body["workingHours"]) == {"1", "2"}

    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/slots", params={"date": "2025-01-06"})
    assert [s["start"][11:16] for s in response.json()["slots"]] == ["09:00", "10:15"]

@pytest.mark.asyncio
async def test_failed_patch_leaves_configuration_untouched(client, profile_id, owner_headers):
    await client.put(f"/api/v1/profiles/{profile_id}/availability", json=MONDAY_AVAILABILITY, headers=owner_headers)
    before = (await client.get(f"/api/v1/profiles/{profile_id}/availability")).json()

    response = await client.patch(
        f"/api/v1/profiles/{profile_id}/availability",
        json={"bufferTime": 30, "defaultDuration": 0},
        headers=owner_headers
    )
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "defaultDuration"

    after = (await client.get(f"/api/v1/profiles/{profile_id}/availability")).json()
    assert after == before

@pytest.mark.asyncio
async def test_exception_upsert_and_remove(client, profile_id, owner_headers):
    await client.put(f"/api/v1/profiles/{profile_id}/availability", json=MONDAY_AVAILABILITY, headers=owner_headers)

    response = await client.put(
        f"/api/v1/profiles/{profile_id}/availability/exceptions",
        json={"date": "2025-01-06", "isAvailable": True, "slots": [{"start": "13:00", "end": "14:00"}]},
        headers=owner_headers
    )
    assert response.status_code == 200
    assert len(response.json()["exceptions"]) == 1

    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/slots", params={"date": "2025-01-06"})
    assert response.json()["slots"] == [{"start": "2025-01-06T13:00:00", "end": "2025-01-06T14:00:00"}]

    # Replacing the same date keeps a single exception
    response = await client.put(
        f"/api/v1/profiles/{profile_id}/availability/exceptions",
        json={"date": "2025-01-06", "isAvailable": False},
        headers=owner_headers
    )
    assert len(response.json()["exceptions"]) == 1
    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/slots", params={"date": "2025-01-06"})
    assert response.json()["slots"] == []

    response = await client.delete(f"/api/v1/profiles/{profile_id}/availability/exceptions/2025-01-06", headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["exceptions"] == []

    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/slots", params={"date": "2025-01-06"})
    assert len(response.json()["slots"]) == 3

@pytest.mark.asyncio
async def test_invalid_exception_is_rejected(client, profile_id, owner_headers):
    response = await client.put(
        f"/api/v1/profiles/{profile_id}/availability/exceptions",
        json={"date": "not-a-date"},
        headers=owner_headers
    )
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "exception.date"

@pytest.mark.asyncio
async def test_slots_require_valid_date(client, profile_id):
    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/slots")
    assert response.status_code == 400
    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/slots", params={"date": "06/01/2025"})
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_slots_with_booking_window(client, profile_id, owner_headers):
    await client.put(f"/api/v1/profiles/{profile_id}/availability", json=MONDAY_AVAILABILITY, headers=owner_headers)

    params = {"date": "2025-01-06", "applyBookingWindow": "true", "now": "2025-01-06T09:30:00"}
    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/slots", params=params)
    assert [s["start"][11:16] for s in response.json()["slots"]] == ["11:00"]

    # Advisory only: ignored unless requested
    params = {"date": "2025-01-06", "now": "2025-01-06T09:30:00"}
    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/slots", params=params)
    assert len(response.json()["slots"]) == 3

@pytest.mark.asyncio
async def test_check_interval(client, profile_id, owner_headers):
    await client.put(f"/api/v1/profiles/{profile_id}/availability", json=MONDAY_AVAILABILITY, headers=owner_headers)
    url = f"/api/v1/profiles/{profile_id}/availability/check"

    response = await client.get(url, params={"start": "2025-01-06T09:30:00", "end": "2025-01-06T10:00:00"})
    assert response.status_code == 200
    assert response.json()["available"] is True

    response = await client.get(url, params={"start": "2025-01-06T11:45:00", "end": "2025-01-06T12:15:00"})
    assert response.json()["available"] is False

    params = {
        "start": "2025-01-06T09:30:00",
        "end": "2025-01-06T10:00:00",
        "applyBookingWindow": "true",
        "now": "2025-01-06T09:00:00",
    }
    response = await client.get(url, params=params)
    assert response.json()["available"] is False

@pytest.mark.asyncio
async def test_check_rejects_malformed_interval(client, profile_id):
    url = f"/api/v1/profiles/{profile_id}/availability/check"
    response = await client.get(url, params={"start": "2025-01-06T10:00:00", "end": "2025-01-06T10:00:00"})
    assert response.status_code == 400
    response = await client.get(url, params={"start": "yesterday", "end": "2025-01-06T10:00:00"})
    assert response.status_code == 400
    response = await client.get(url, params={"start": "2025-01-06T10:00:00"})
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_available_dates_for_month(client, profile_id, owner_headers):
    await client.put(f"/api/v1/profiles/{profile_id}/availability", json=MONDAY_AVAILABILITY, headers=owner_headers)
    await client.put(
        f"/api/v1/profiles/{profile_id}/availability/exceptions",
        json={"date": "2025-01-13", "isAvailable": False},
        headers=owner_headers
    )

    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/dates", params={"year": 2025, "month": 1})
    assert response.status_code == 200
    assert response.json() == [6, 20, 27]

    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/dates", params={"year": 2025, "month": 13})
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_only_owner_or_admin_can_change_availability(client, profile_id):
    url = f"/api/v1/profiles/{profile_id}/availability"

    response = await client.put(url, json=MONDAY_AVAILABILITY)
    assert response.status_code == 401

    response = await client.put(url, json=MONDAY_AVAILABILITY, headers=auth_headers("someone-else"))
    assert response.status_code == 403

    response = await client.put(url, json=MONDAY_AVAILABILITY, headers=auth_headers("someone-else", role="admin"))
    assert response.status_code == 200

@pytest.mark.asyncio
async def test_unknown_profile_is_not_found(client, owner_headers):
    missing = "65a000000000000000000000"
    assert (await client.get(f"/api/v1/profiles/{missing}/availability")).status_code == 404
    assert (await client.get(f"/api/v1/profiles/{missing}/availability/slots", params={"date": "2025-01-06"})).status_code == 404
    response = await client.put(f"/api/v1/profiles/{missing}/availability", json=MONDAY_AVAILABILITY, headers=owner_headers)
    assert response.status_code == 404
    assert (await client.get("/api/v1/profiles/not-an-id/availability")).status_code == 404

@pytest.mark.asyncio
async def test_patch_null_day_removes_weekday(client, profile_id, owner_headers):
    url = f"/api/v1/profiles/{profile_id}/availability"
    await client.put(url, json=MONDAY_AVAILABILITY, headers=owner_headers)

    response = await client.patch(url, json={"workingHours": {"1": None}}, headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["workingHours"] == {}

    response = await client.get(f"{url}/slots", params={"date": "2025-01-06"})
    assert response.json()["slots"] == []

@pytest.mark.asyncio
async def test_overlapping_exception_slots_are_rejected(client, profile_id, owner_headers):
    response = await client.put(
        f"/api/v1/profiles/{profile_id}/availability/exceptions",
        json={"date": "2025-01-06", "slots": [{"start": "13:00", "end": "14:00"}, {"start": "13:30", "end": "14:30"}]},
        headers=owner_headers
    )
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "exception.slots"

@pytest.mark.asyncio
async def test_booking_window_beyond_limits_is_rejected(client, profile_id, owner_headers):
    payload = {**MONDAY_AVAILABILITY, "bookingWindow": {"minNotice": 0, "maxAdvance": 10**7}}
    response = await client.put(f"/api/v1/profiles/{profile_id}/availability", json=payload, headers=owner_headers)
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "bookingWindow.maxAdvance"

@pytest.mark.asyncio
async def test_huge_buffer_lists_single_slot(client, profile_id, owner_headers):
    payload = {**MONDAY_AVAILABILITY, "bufferTime": 10**10}
    await client.put(f"/api/v1/profiles/{profile_id}/availability", json=payload, headers=owner_headers)

    response = await client.get(f"/api/v1/profiles/{profile_id}/availability/slots", params={"date": "2025-01-06"})
    assert response.status_code == 200
    assert len(response.json()["slots"]) == 1

@pytest.mark.asyncio
async def test_check_reports_unexpected_errors_as_server_error(client, profile_id, monkeypatch):
    async def broken_check(*args, **kwargs):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(availability_endpoints, "check_availability", broken_check)
    response = await client.get(
        f"/api/v1/profiles/{profile_id}/availability/check",
        params={"start": "2025-01-06T09:00:00", "end": "2025-01-06T10:00:00"}
    )
    assert response.status_code == 500
