from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from app.core.enums import RoleEnum
from app.core.security import create_access_token
from app.main import app
from app.modules.advising.booking import get_booking_coordinator
from app.modules.advising.lifecycle import get_session_lifecycle_service
from app.modules.advising.queries import get_session_query_service
from app.modules.availability.service import get_availability_service
from app.modules.identity.schemas import Caller
from tests.fakes import Engine, build_engine, make_caller

PREFIX = "/api/v1"


def auth_headers(caller: Caller) -> dict[str, str]:
    token = create_access_token(subject=str(caller.id), role=caller.role.value)
    return {"Authorization": f"Bearer {token}"}


def booking_body(advisor: Caller, start_time: str = "09:00") -> dict[str, str]:
    return {
        "advisor_id": str(advisor.id),
        "date": "2025-04-01",
        "start_time": start_time,
        "location": "Career Center, Room 203",
    }


@pytest.fixture
def api_engine() -> Iterator[Engine]:
    engine = build_engine()
    app.dependency_overrides[get_booking_coordinator] = lambda: engine.coordinator
    app.dependency_overrides[get_session_lifecycle_service] = lambda: engine.lifecycle
    app.dependency_overrides[get_session_query_service] = lambda: engine.queries
    app.dependency_overrides[get_availability_service] = lambda: engine.availability
    yield engine
    app.dependency_overrides.clear()


@pytest.fixture
def client(api_engine: Engine) -> TestClient:
    return TestClient(app)


def test_slot_catalog_lists_start_times_and_locations(client: TestClient) -> None:
    response = client.get(f"{PREFIX}/advising/slots")

    assert response.status_code == 200
    body = response.json()
    assert body["start_times"][0] == "09:00:00"
    assert "12:00:00" not in body["start_times"]
    assert body["session_length_minutes"] == 60
    assert "Online (Zoom)" in body["locations"]


def test_booking_requires_bearer_token(client: TestClient) -> None:
    response = client.post(f"{PREFIX}/advising/sessions", json=booking_body(make_caller(RoleEnum.ADVISOR)))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "http_error"


def test_student_books_then_second_student_gets_slot_taken(client: TestClient, advisor: Caller) -> None:
    first = make_caller(RoleEnum.STUDENT)
    second = make_caller(RoleEnum.STUDENT)

    created = client.post(f"{PREFIX}/advising/sessions", json=booking_body(advisor), headers=auth_headers(first))
    taken = client.post(f"{PREFIX}/advising/sessions", json=booking_body(advisor), headers=auth_headers(second))

    assert created.status_code == 201
    assert created.json()["student_id"] == str(first.id)
    assert created.json()["end_time"] == "10:00:00"
    assert taken.status_code == 409
    assert taken.json()["error"]["code"] == "slot_taken"


def test_lunch_slot_is_invalid(client: TestClient, student: Caller, advisor: Caller) -> None:
    response = client.post(
        f"{PREFIX}/advising/sessions",
        json=booking_body(advisor, start_time="12:00"),
        headers=auth_headers(student),
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "invalid_slot"


def test_closed_global_switch_reports_booking_disabled(
    client: TestClient,
    student: Caller,
    advisor: Caller,
    admin: Caller,
) -> None:
    switched = client.put(f"{PREFIX}/availability/global", json={"enabled": False}, headers=auth_headers(admin))
    response = client.post(f"{PREFIX}/advising/sessions", json=booking_body(advisor), headers=auth_headers(student))

    assert switched.status_code == 200
    assert switched.json()["enabled"] is False
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "booking_disabled"


def test_student_cannot_change_availability(client: TestClient, student: Caller) -> None:
    response = client.put(f"{PREFIX}/availability/global", json={"enabled": False}, headers=auth_headers(student))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "unauthorized"


def test_on_behalf_booking_is_staff_only(client: TestClient, student: Caller, advisor: Caller) -> None:
    body = booking_body(advisor) | {"student_id": str(student.id)}

    denied = client.post(f"{PREFIX}/advising/sessions/on-behalf", json=body, headers=auth_headers(student))
    booked = client.post(f"{PREFIX}/advising/sessions/on-behalf", json=body, headers=auth_headers(advisor))

    assert denied.status_code == 403
    assert booked.status_code == 201
    assert booked.json()["advisor_id"] == str(advisor.id)


def test_cancel_without_reason_then_with_reason(client: TestClient, student: Caller, advisor: Caller) -> None:
    created = client.post(f"{PREFIX}/advising/sessions", json=booking_body(advisor), headers=auth_headers(student))
    session_id = created.json()["id"]

    missing = client.post(
        f"{PREFIX}/advising/sessions/{session_id}/cancel",
        json={"reason": "  "},
        headers=auth_headers(student),
    )
    cancelled = client.post(
        f"{PREFIX}/advising/sessions/{session_id}/cancel",
        json={"reason": "exam"},
        headers=auth_headers(student),
    )
    again = client.post(
        f"{PREFIX}/advising/sessions/{session_id}/complete",
        json={"notes": "late"},
        headers=auth_headers(advisor),
    )

    assert missing.json()["error"]["code"] == "missing_reason"
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "invalid_transition"


def test_my_sessions_are_split(client: TestClient, student: Caller, advisor: Caller) -> None:
    client.post(f"{PREFIX}/advising/sessions", json=booking_body(advisor), headers=auth_headers(student))

    response = client.get(f"{PREFIX}/advising/sessions/my", headers=auth_headers(student))

    assert response.status_code == 200
    assert len(response.json()["upcoming"]) == 1
    assert response.json()["past"] == []


def test_unknown_session_is_not_found(client: TestClient, admin: Caller) -> None:
    response = client.get(
        f"{PREFIX}/advising/sessions/00000000-0000-0000-0000-000000000000",
        headers=auth_headers(admin),
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "not_found"


def test_policy_listing_pages_rows(client: TestClient, admin: Caller, advisor: Caller) -> None:
    client.put(f"{PREFIX}/availability/global", json={"enabled": True}, headers=auth_headers(admin))
    client.put(f"{PREFIX}/availability/advisors/{advisor.id}", json={"enabled": False}, headers=auth_headers(advisor))

    response = client.get(f"{PREFIX}/availability/policies?limit=1", headers=auth_headers(admin))

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert len(body["items"]) == 1
    assert body["has_more"] is True


def test_weekend_booking_is_invalid(client: TestClient, student: Caller, advisor: Caller) -> None:
    body = booking_body(advisor) | {"date": "2025-04-05"}

    response = client.post(f"{PREFIX}/advising/sessions", json=body, headers=auth_headers(student))

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "invalid_slot"
