"""
Tests for booking endpoints: submission, listing, cancellation, invoices.
"""

import re

import pytest
from httpx import AsyncClient

from hall_booking.services.booking_rules import DATE_ALREADY_BOOKED


def _booking(hall_id: int, **overrides) -> dict:
    payload = {
        "hall_id": hall_id,
        "booking_date": "2025-03-12",
        "start_time": "09:00",
        "end_time": "11:30",
        "attendees": 15,
        "purpose": "Printer onboarding workshop",
    }
    payload.update(overrides)
    return payload


async def _book(client: AsyncClient, headers: dict, hall_id: int, **overrides) -> dict:
    response = await client.post("/api/v1/bookings/", json=_booking(hall_id, **overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_book_hall(client: AsyncClient, auth_headers, test_hall):
    """A valid request is priced, pending, and takes the date off the calendar."""
    response = await client.post(
        "/api/v1/bookings/",
        json=_booking(test_hall.id),
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["hall_id"] == test_hall.id
    assert data["hall_name"] == "Innovation Lab"
    assert data["hall_hourly_rate"] == 2000
    assert data["duration"] == 2.5
    assert data["total_cost"] == 5000
    assert data["status"] == "pending"
    assert data["attendees"] == 15
    assert data["user_email"] == "test@example.com"
    assert data["user_name"] == "Test User"
    assert re.fullmatch(r"BK-\d+-[A-Z0-9]{5}", data["reference"])

    hall_response = await client.get(f"/api/v1/halls/{test_hall.id}")
    assert "2025-03-12" in hall_response.json()["booked_dates"]


@pytest.mark.asyncio
async def test_booked_date_refused(client: AsyncClient, auth_headers, test_hall):
    """A date already in the hall's booked dates is refused before anything else is checked."""
    response = await client.post(
        "/api/v1/bookings/",
        json=_booking(test_hall.id, booking_date="2025-03-10", attendees=500, purpose=""),
        headers=auth_headers,
    )
    assert response.status_code == 409
    assert response.json()["detail"] == DATE_ALREADY_BOOKED


@pytest.mark.asyncio
async def test_second_booking_for_same_date_refused(
    client: AsyncClient, auth_headers, other_headers, test_hall
):
    await _book(client, auth_headers, test_hall.id)

    response = await client.post(
        "/api/v1/bookings/",
        json=_booking(test_hall.id, start_time="14:00", end_time="16:00"),
        headers=other_headers,
    )
    assert response.status_code == 409

    hall_response = await client.get(f"/api/v1/halls/{test_hall.id}")
    assert hall_response.json()["booked_dates"].count("2025-03-12") == 1


@pytest.mark.asyncio
async def test_book_unauthenticated(client: AsyncClient, test_hall):
    """Unauthenticated booking returns 401, even for an already booked date."""
    response = await client.post(
        "/api/v1/bookings/",
        json=_booking(test_hall.id, booking_date="2025-03-10"),
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_book_unknown_hall(client: AsyncClient, auth_headers):
    response = await client.post("/api/v1/bookings/", json=_booking(999), headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"booking_date": None},
        {"start_time": None},
        {"end_time": ""},
        {"end_time": "09:00"},
        {"end_time": "08:00"},
        {"start_time": "nine"},
        {"booking_date": "2025-02-28"},
        {"attendees": 21},
        {"attendees": 0},
        {"purpose": "  "},
    ],
)
async def test_invalid_requests_refused(client: AsyncClient, auth_headers, test_hall, overrides):
    """Every refused request is a 400 and writes nothing."""
    response = await client.post(
        "/api/v1/bookings/",
        json=_booking(test_hall.id, **overrides),
        headers=auth_headers,
    )
    assert response.status_code == 400

    hall_response = await client.get(f"/api/v1/halls/{test_hall.id}")
    assert hall_response.json()["booked_dates"] == ["2025-03-10"]
    assert (await client.get("/api/v1/bookings/", headers=auth_headers)).json() == []


@pytest.mark.asyncio
async def test_book_closed_hall(client: AsyncClient, auth_headers, closed_hall):
    response = await client.post(
        "/api/v1/bookings/",
        json=_booking(closed_hall.id, attendees=2),
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "This hall is not accepting bookings"


@pytest.mark.asyncio
async def test_get_booking(client: AsyncClient, auth_headers, other_headers, test_hall):
    booking = await _book(client, auth_headers, test_hall.id)

    response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["reference"] == booking["reference"]

    # Someone else's booking looks the same as a missing one
    response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=other_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_bookings_sorted_with_views(client: AsyncClient, auth_headers, test_hall):
    later = await _book(client, auth_headers, test_hall.id, booking_date="2025-04-02")
    sooner = await _book(client, auth_headers, test_hall.id, booking_date="2025-03-12")
    cancelled = await _book(client, auth_headers, test_hall.id, booking_date="2025-03-20")
    await client.post(
        f"/api/v1/bookings/{cancelled['id']}/cancel",
        json={"reason": "Printer maintenance"},
        headers=auth_headers,
    )

    response = await client.get("/api/v1/bookings/", headers=auth_headers)
    assert response.status_code == 200
    items = response.json()
    assert [item["id"] for item in items] == [sooner["id"], cancelled["id"], later["id"]]
    assert [item["view"] for item in items] == ["upcoming", "cancelled", "upcoming"]
    assert [item["can_cancel"] for item in items] == [True, False, True]

    response = await client.get("/api/v1/bookings/?view=cancelled", headers=auth_headers)
    assert [item["id"] for item in response.json()] == [cancelled["id"]]

    response = await client.get("/api/v1/bookings/?view=past", headers=auth_headers)
    assert response.json() == []


@pytest.mark.asyncio
async def test_list_bookings_requires_auth(client: AsyncClient):
    response = await client.get("/api/v1/bookings/")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_cancel_booking(client: AsyncClient, auth_headers, test_hall):
    """Cancelling frees the date so it can be booked again."""
    booking = await _book(client, auth_headers, test_hall.id)

    response = await client.post(
        f"/api/v1/bookings/{booking['id']}/cancel",
        json={"reason": "Workshop postponed"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    detail = (await client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_headers)).json()
    assert detail["status"] == "cancelled"
    assert detail["cancellation_reason"] == "Workshop postponed"
    assert detail["cancelled_at"] is not None

    hall_response = await client.get(f"/api/v1/halls/{test_hall.id}")
    assert "2025-03-12" not in hall_response.json()["booked_dates"]

    await _book(client, auth_headers, test_hall.id)


@pytest.mark.asyncio
async def test_cancel_twice_refused(client: AsyncClient, auth_headers, test_hall):
    booking = await _book(client, auth_headers, test_hall.id)
    url = f"/api/v1/bookings/{booking['id']}/cancel"

    first = await client.post(url, json={"reason": "Clash"}, headers=auth_headers)
    assert first.status_code == 200

    second = await client.post(url, json={"reason": "Clash"}, headers=auth_headers)
    assert second.status_code == 400
    assert second.json()["detail"] == "A cancelled booking cannot be cancelled"


@pytest.mark.asyncio
async def test_cancel_without_reason_refused(client: AsyncClient, auth_headers, test_hall):
    booking = await _book(client, auth_headers, test_hall.id)

    response = await client.post(
        f"/api/v1/bookings/{booking['id']}/cancel",
        json={"reason": " "},
        headers=auth_headers,
    )
    assert response.status_code == 400

    detail = (await client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_headers)).json()
    assert detail["status"] == "pending"
    assert detail["cancelled_at"] is None


@pytest.mark.asyncio
async def test_cancel_unauthenticated(client: AsyncClient, auth_headers, test_hall):
    booking = await _book(client, auth_headers, test_hall.id)
    response = await client.post(
        f"/api/v1/bookings/{booking['id']}/cancel",
        json={"reason": "Clash"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_cancel_someone_elses_booking(client: AsyncClient, auth_headers, other_headers, test_hall):
    booking = await _book(client, auth_headers, test_hall.id)
    response = await client.post(
        f"/api/v1/bookings/{booking['id']}/cancel",
        json={"reason": "Not mine"},
        headers=other_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_invoice_requires_acceptance(
    client: AsyncClient, auth_headers, admin_headers, test_hall
):
    booking = await _book(client, auth_headers, test_hall.id)
    url = f"/api/v1/bookings/{booking['id']}/invoice"

    pending = await client.get(url, headers=auth_headers)
    assert pending.status_code == 400

    review = await client.post(
        f"/api/v1/admin/bookings/{booking['id']}/review",
        json={"status": "accepted"},
        headers=admin_headers,
    )
    assert review.status_code == 200

    response = await client.get(url, headers=auth_headers)
    assert response.status_code == 200
    invoice = response.json()
    assert invoice["invoice_number"] == f"INV-{booking['reference']}"
    assert invoice["billed_to"] == "Test User"
    assert invoice["issued_on"] == "2025-03-01"
    assert invoice["total"] == 5000
    assert invoice["currency"] == "XAF"
    assert invoice["lines"] == [{
        "description": "Innovation Lab rental, 2025-03-12 09:00-11:30",
        "quantity": 2.5,
        "unit_price": 2000,
        "amount": 5000,
    }]


@pytest.mark.asyncio
async def test_summary(client: AsyncClient, auth_headers, test_hall):
    await _book(client, auth_headers, test_hall.id)
    second = await _book(
        client, auth_headers, test_hall.id,
        booking_date="2025-03-14", start_time="13:00", end_time="14:00",
    )
    await client.post(
        f"/api/v1/bookings/{second['id']}/cancel",
        json={"reason": "Room too big"},
        headers=auth_headers,
    )

    response = await client.get("/api/v1/bookings/summary", headers=auth_headers)
    assert response.status_code == 200
    summary = response.json()
    assert summary["total"] == 2
    assert summary["pending"] == 1
    assert summary["cancelled"] == 1
    assert summary["upcoming"] == 1
    assert summary["total_cost"] == 7000
    assert summary["accepted_cost"] == 0


@pytest.mark.asyncio
async def test_overlong_purpose_is_a_validation_error(client: AsyncClient, auth_headers, test_hall):
    response = await client.post(
        "/api/v1/bookings/",
        json=_booking(test_hall.id, purpose="x" * 2001),
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_overlong_cancel_reason_is_a_validation_error(client: AsyncClient, auth_headers, test_hall):
    booking = await _book(client, auth_headers, test_hall.id)
    response = await client.post(
        f"/api/v1/bookings/{booking['id']}/cancel",
        json={"reason": "x" * 1001},
        headers=auth_headers,
    )
    assert response.status_code == 422
