import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError
from supabase_auth.errors import AuthRetryableError

from app.core.security import AdminPolicy, get_admin_policy
from app.main import app
from app.services.db_service import db_service

client = TestClient(app)

DAY = "2025-03-10"
ALICE = {"Authorization": "Bearer token-alice"}
BOB = {"Authorization": "Bearer token-bob"}
BOSS = {"Authorization": "Bearer token-boss"}


@pytest.fixture
def users(fake_db):
    fake_db.add_user("token-alice", "user-a", email="a@example.com", metadata={"phone_number": "+15550001"})
    fake_db.add_user("token-bob", "user-b", email="b@example.com")
    fake_db.add_user("token-boss", "user-boss", email="boss@example.com")
    app.dependency_overrides[get_admin_policy] = lambda: AdminPolicy(["boss@example.com"], db_service.get_profile_role)
    yield fake_db
    app.dependency_overrides.pop(get_admin_policy, None)


def booking_payload(start="10:00", end="1h", **extra):
    return {"facility_id": "1", "facility_name": "Box Cricket Arena", "date": DAY,
            "start_time": start, "end_time": end, **extra}


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_facility_catalog():
    response = client.get("/facilities")
    assert response.status_code == 200
    slugs = [f["slug"] for f in response.json()]
    assert "box-cricket-arena" in slugs

    response = client.get("/facilities/spinlab-studio")
    assert response.status_code == 200
    assert response.json()["hourly_rate"] == 20

    response = client.get("/facilities/curling-rink")
    assert response.status_code == 404
    assert response.json()["code"] == "NotFoundError"


def test_availability_endpoint(fake_db):
    fake_db.seed_booking(start_time="10:00", end_time="11:00", status="confirmed")
    response = client.get("/facilities/1/availability", params={"date": DAY})
    assert response.status_code == 200
    slots = {s["time"]: s["available"] for s in response.json()}
    assert slots["09:00"] is True
    assert slots["10:00"] is False
    assert slots["11:00"] is True
    assert len(slots) == 12


def test_availability_uses_facility_hours(fake_db):
    response = client.get("/facilities/6/availability", params={"date": DAY})
    assert [s["time"] for s in response.json()][0] == "09:00"


def test_availability_rejects_bad_date(fake_db):
    response = client.get("/facilities/1/availability", params={"date": "10/03/2025"})
    assert response.status_code == 422


def test_selectable_starts_endpoint(fake_db):
    fake_db.seed_booking(start_time="11:00", end_time="12:00")
    response = client.get("/facilities/1/availability/starts", params={"date": DAY, "duration": "2h"})
    assert response.status_code == 200
    starts = {s["time"]: s["available"] for s in response.json()}
    assert starts["09:00"] is True
    assert starts["10:00"] is False
    assert starts["11:00"] is False
    assert starts["12:00"] is True
    assert starts["19:00"] is False

    response = client.get("/facilities/1/availability/starts", params={"date": DAY, "duration": "10:00"})
    assert response.status_code == 400
    assert response.json()["code"] == "InvalidTimeError"


def test_booking_requires_sign_in(users):
    assert client.post("/bookings", json=booking_payload()).status_code == 401
    response = client.post("/bookings", json=booking_payload(), headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_create_booking_ignores_client_status(users):
    response = client.post("/bookings", json=booking_payload("10:00", "1.5h", status="confirmed"), headers=ALICE)
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["end_time"] == "11:30"
    assert body["user_phone"] == "+15550001"
    assert users.tables["bookings"][0]["status"] == "pending"


def test_conflicts_are_distinguishable(users):
    assert client.post("/bookings", json=booking_payload("14:00", "15:00"), headers=ALICE).status_code == 201

    response = client.post("/bookings", json=booking_payload("14:30", "15:30"), headers=BOB)
    assert response.status_code == 409
    assert response.json()["code"] == "SlotTakenError"

    response = client.post("/bookings", json=booking_payload("14:30", "15:30"), headers=ALICE)
    assert response.status_code == 409
    assert response.json()["code"] == "DuplicateOwnBookingError"

    response = client.post("/bookings", json=booking_payload("15:00", "16:00"), headers=BOB)
    assert response.status_code == 201


def test_invalid_selection(users):
    response = client.post("/bookings", json=booking_payload("later", "1h"), headers=ALICE)
    assert response.status_code == 400
    assert response.json()["code"] == "InvalidTimeSelectionError"


def test_backend_failure_is_503(users):
    users.errors[("bookings", "select")] = APIError({"message": "upstream timeout", "code": "57014"})
    response = client.post("/bookings", json=booking_payload(), headers=ALICE)
    assert response.status_code == 503
    assert response.json()["code"] == "BackendUnavailableError"


def test_auth_provider_outage_is_503(users):
    users.auth.error = AuthRetryableError("Service Unavailable", 503)
    response = client.post("/bookings", json=booking_payload(), headers=ALICE)
    assert response.status_code == 503
    assert response.json()["code"] == "BackendUnavailableError"
    assert users.tables.get("bookings", []) == []


def test_my_bookings(users):
    client.post("/bookings", json=booking_payload("10:00", "1h"), headers=ALICE)
    client.post("/bookings", json=booking_payload("12:00", "1h"), headers=BOB)
    response = client.get("/bookings/mine", headers=ALICE)
    assert response.status_code == 200
    assert [b["start_time"] for b in response.json()] == ["10:00"]


def test_admin_routes_require_admin(users):
    assert client.get("/admin/bookings").status_code == 401
    response = client.get("/admin/bookings", headers=ALICE)
    assert response.status_code == 403
    assert response.json()["code"] == "ForbiddenError"


def test_admin_via_profile_role(users):
    users.seed("profiles", id="user-b", role="admin")
    assert client.get("/admin/bookings", headers=BOB).status_code == 200


def test_admin_approve_and_reject(users):
    first = client.post("/bookings", json=booking_payload("10:00", "1h"), headers=ALICE).json()
    second = client.post("/bookings", json=booking_payload("12:00", "1h"), headers=BOB).json()

    response = client.post(f"/admin/bookings/{first['id']}/approve", headers=BOSS)
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"

    response = client.post(f"/admin/bookings/{second['id']}/reject", headers=BOSS)
    assert response.json()["status"] == "cancelled"

    response = client.post(f"/admin/bookings/{first['id']}/reject", headers=BOSS)
    assert response.status_code == 409

    response = client.get(f"/admin/bookings/{first['id']}", headers=BOSS)
    assert response.json()["status"] == "confirmed"

    # The rejected slot is free again
    slots = client.get("/facilities/1/availability", params={"date": DAY}).json()
    assert {s["time"]: s["available"] for s in slots}["12:00"] is True


def test_admin_verification_failure(users):
    created = client.post("/bookings", json=booking_payload(), headers=ALICE).json()
    users.update_mode = "ignored"
    response = client.post(f"/admin/bookings/{created['id']}/approve", headers=BOSS)
    assert response.status_code == 502
    assert response.json()["code"] == "VerificationFailedError"


def test_admin_stats(users):
    client.post("/bookings", json=booking_payload(), headers=ALICE)
    response = client.get("/admin/stats", headers=BOSS)
    assert response.status_code == 200
    body = response.json()
    assert body["pending_requests"] == 1
    assert len(body["booking_trends"]) == 7


def test_events_rsvps_and_contacts(users):
    event = {"title": "Night Futsal League", "location": "Futsal Flex Arena",
             "category": "Competition", "date": "2025-04-01", "time": "7:00 PM - 10:00 PM"}
    assert client.post("/events", json=event, headers=ALICE).status_code == 403

    response = client.post("/events", json=event, headers=BOSS)
    assert response.status_code == 201
    event_id = response.json()["id"]
    assert users.tables["events"][0]["created_by"] == "user-boss"

    assert [e["title"] for e in client.get("/events").json()] == ["Night Futsal League"]
    assert client.get(f"/events/{event_id}").json()["time"] == "7:00 PM - 10:00 PM"
    assert client.get("/events/999").status_code == 404

    response = client.post(f"/events/{event_id}/rsvp", json={"name": "Ana", "email": "ana@example.com"})
    assert response.status_code == 201
    assert response.json()["event_id"] == event_id

    response = client.post("/contacts", json={"name": "Raj", "email": "raj@example.com", "message": "Group rates?"})
    assert response.status_code == 201

    assert [r["name"] for r in client.get("/admin/rsvps", headers=BOSS).json()] == ["Ana"]
    assert [m["message"] for m in client.get("/admin/contacts", headers=BOSS).json()] == ["Group rates?"]
