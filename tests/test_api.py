from decimal import Decimal

import httpx
import pytest

from hotelx.core.database import get_db
from hotelx.core.exceptions import BookingNotFound
from hotelx.core.security import get_active_user, get_password_hash
from hotelx.main import create_app
from hotelx.models.user import User, UserRole
from hotelx.services.payment_service import PaymentService

API = "/api/v1"

STAFF = User(
    id=1,
    username="frontdesk",
    email="frontdesk@example.com",
    hashed_password="-",
    role=UserRole.STAFF,
    is_active=True,
)


@pytest.fixture
def app(session_factory, make_gateway):
    app = create_app(gateway=make_gateway())

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
async def anonymous(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
async def client(app, anonymous):
    app.dependency_overrides[get_active_user] = lambda: STAFF
    yield anonymous


async def seed_room(client, room_number="101", base_price="100.00"):
    category = await client.post(
        f"{API}/room-categories/",
        json={"name": "Standard", "base_price": base_price, "capacity": 2},
    )
    assert category.status_code == 201
    room = await client.post(
        f"{API}/rooms/",
        json={"room_number": room_number, "category_id": category.json()["id"]},
    )
    assert room.status_code == 201
    return room.json()


async def seed_guest(client, email="ayu@example.com"):
    response = await client.post(
        f"{API}/guests/",
        json={"name": "Ayu Lestari", "email": email, "phone": "+62 811 000 111"},
    )
    assert response.status_code == 201
    return response.json()


async def book(client, room_id, guest_id, check_in="2026-11-01", check_out="2026-11-04"):
    return await client.post(
        f"{API}/bookings/",
        json={
            "guest_id": guest_id,
            "room_id": room_id,
            "check_in_date": check_in,
            "check_out_date": check_out,
        },
    )


async def test_happy_path(client):
    room = await seed_room(client)
    guest = await seed_guest(client)

    available = await client.get(
        f"{API}/rooms/available", params={"checkIn": "2026-11-01", "checkOut": "2026-11-04"}
    )
    assert [r["room_number"] for r in available.json()] == ["101"]

    created = await book(client, room["id"], guest["id"])
    assert created.status_code == 201
    booking = created.json()
    assert booking["status"] == "new"
    assert booking["room"]["status"] == "reserved"
    assert Decimal(booking["total_price"]) == Decimal("300")

    available = await client.get(
        f"{API}/rooms/available", params={"checkIn": "2026-11-02", "checkOut": "2026-11-03"}
    )
    assert available.json() == []

    paid = await client.post(
        f"{API}/payments/process",
        json={
            "booking_id": booking["id"],
            "amount": "300.00",
            "payment_method": "visa",
            "card_number": "4000000000001091",
            "card_expiry": "12/29",
            "card_cvv": "123",
            "cardholder_name": "Ayu Lestari",
        },
    )
    assert paid.status_code == 200
    assert paid.json()["success"] is True
    assert paid.json()["payment"]["status"] == "paid"

    by_number = await client.get(f"{API}/bookings/number/{booking['booking_number']}")
    assert by_number.json()["status"] == "confirmed"
    assert by_number.json()["payment"]["card_last_four"] == "1091"

    checked_in = await client.post(f"{API}/bookings/{booking['id']}/checkin")
    assert checked_in.json()["room"]["status"] == "occupied"

    stats = (await client.get(f"{API}/stats/")).json()
    assert stats["total_bookings"] == 1
    assert Decimal(stats["revenue"]) == Decimal("300")
    assert stats["occupancy_rate"] == 100.0
    assert stats["pending_payments"] == 0

    checked_out = await client.post(f"{API}/bookings/{booking['id']}/checkout")
    assert checked_out.json()["status"] == "checked_out"
    assert checked_out.json()["room"]["status"] == "available"


async def test_double_booking_conflict(client):
    room = await seed_room(client)
    guest = await seed_guest(client)
    assert (await book(client, room["id"], guest["id"])).status_code == 201

    conflict = await book(client, room["id"], guest["id"], "2026-11-03", "2026-11-06")

    assert conflict.status_code == 409
    assert conflict.json()["error_type"] == "conflict_error"
    touching = await book(client, room["id"], guest["id"], "2026-11-04", "2026-11-06")
    assert touching.status_code == 201


async def test_cancel_then_rebook(client):
    room = await seed_room(client)
    guest = await seed_guest(client)
    first = (await book(client, room["id"], guest["id"])).json()

    cancelled = await client.post(
        f"{API}/bookings/{first['id']}/cancel", json={"reason": "flight cancelled"}
    )
    assert cancelled.json()["status"] == "cancelled"
    assert cancelled.json()["room"]["status"] == "available"

    again = await book(client, room["id"], guest["id"])
    assert again.status_code == 201


async def test_error_mapping(client):
    room = await seed_room(client)
    guest = await seed_guest(client)
    booking = (await book(client, room["id"], guest["id"])).json()

    missing = await client.get(f"{API}/bookings/9999")
    assert missing.status_code == 404
    assert missing.json()["error_type"] == "entity_not_found"

    bad_dates = await book(client, room["id"], guest["id"], "2026-11-05", "2026-11-05")
    assert bad_dates.status_code == 400

    early_check_in = await client.post(f"{API}/bookings/{booking['id']}/checkin")
    assert early_check_in.status_code == 422
    assert early_check_in.json()["error_type"] == "business_rule_violation"

    bad_range = await client.get(
        f"{API}/rooms/available", params={"checkIn": "2026-11-05", "checkOut": "2026-11-01"}
    )
    assert bad_range.status_code == 400

    unknown_room = await client.get(
        f"{API}/rooms/9999/availability",
        params={"checkIn": "2026-11-01", "checkOut": "2026-11-02"},
    )
    assert unknown_room.status_code == 404

    occupied_by_hand = await client.put(
        f"{API}/rooms/{room['id']}", json={"status": "occupied"}
    )
    assert occupied_by_hand.status_code == 422


async def test_guest_email_dedup(client):
    first = await seed_guest(client)
    second = await seed_guest(client)

    assert first["id"] == second["id"]
    assert len((await client.get(f"{API}/guests/")).json()) == 1


async def test_gateway_failure_is_reported_and_recorded(app, client, make_gateway):
    app.state.payment_gateway = make_gateway(fail_at="create_charge")
    room = await seed_room(client)
    guest = await seed_guest(client)
    booking = (await book(client, room["id"], guest["id"])).json()

    response = await client.post(
        f"{API}/payments/process",
        json={
            "booking_id": booking["id"],
            "amount": "300.00",
            "payment_method": "mastercard",
            "card_number": "5200000000001096",
            "card_expiry": "01/30",
            "card_cvv": "321",
            "cardholder_name": "Ayu Lestari",
        },
    )

    assert response.status_code == 400
    assert response.json()["error_type"] == "payment_failed"
    payments = (await client.get(f"{API}/payments/", params={"status": "failed"})).json()
    assert len(payments) == 1
    assert payments[0]["booking"]["booking_number"] == booking["booking_number"]


async def test_invoice_and_webhook(client):
    room = await seed_room(client)
    guest = await seed_guest(client)
    booking = (await book(client, room["id"], guest["id"])).json()

    invoice = await client.post(
        f"{API}/payments/invoice", json={"booking_id": booking["id"], "amount": "300.00"}
    )
    assert invoice.status_code == 201
    payment = invoice.json()["payment"]
    assert payment["status"] == "processing"
    assert invoice.json()["invoice_url"]

    ack = await client.post(
        f"{API}/webhooks/xendit",
        json={"id": payment["gateway_invoice_id"], "status": "PAID"},
        headers={"x-callback-token": "cb-token"},
    )
    assert ack.status_code == 200
    assert ack.json() == {"received": True, "processed": True}

    settled = await client.get(f"{API}/payments/{payment['id']}")
    assert settled.json()["status"] == "paid"
    assert (await client.get(f"{API}/bookings/{booking['id']}")).json()["status"] == "confirmed"


@pytest.mark.parametrize(
    "body, headers",
    [
        ({"id": "inv_unknown", "status": "PAID"}, {"x-callback-token": "cb-token"}),
        ({"id": "inv_unknown", "status": "PAID"}, {"x-callback-token": "forged"}),
        ({"status": "PAID"}, {"x-callback-token": "cb-token"}),
    ],
)
async def test_webhook_is_always_acknowledged(anonymous, body, headers):
    response = await anonymous.post(f"{API}/webhooks/xendit", json=body, headers=headers)

    assert response.status_code == 200
    assert response.json()["processed"] is False


async def test_webhook_domain_error_is_acknowledged(anonymous, monkeypatch):
    async def booking_gone(self, event):
        raise BookingNotFound(42)

    monkeypatch.setattr(PaymentService, "handle_webhook", booking_gone)

    response = await anonymous.post(
        f"{API}/webhooks/xendit",
        json={"id": "inv_1", "status": "PAID"},
        headers={"x-callback-token": "cb-token"},
    )

    assert response.status_code == 200
    assert response.json() == {"received": True, "processed": False}


async def test_staff_status_does_not_release_booked_room(client):
    room = await seed_room(client)
    guest = await seed_guest(client)
    assert (await book(client, room["id"], guest["id"])).status_code == 201

    for status in ("maintenance", "available"):
        response = await client.put(f"{API}/rooms/{room['id']}", json={"status": status})
        assert response.status_code == 200

    assert response.json()["status"] == "reserved"
    stats = (await client.get(f"{API}/stats/")).json()
    assert stats["rooms_by_status"]["reserved"] == 1


async def test_reads_need_a_user(anonymous):
    response = await anonymous.get(f"{API}/bookings/")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    # Room catalogue is public
    assert (await anonymous.get(f"{API}/rooms/")).status_code == 200


async def test_login_and_me(anonymous, session_factory):
    async with session_factory() as session:
        session.add(
            User(
                username="viewer",
                email="viewer@example.com",
                hashed_password=get_password_hash("correct horse"),
                role=UserRole.VIEWER,
            )
        )
        await session.commit()

    wrong = await anonymous.post(
        f"{API}/auth/login", json={"username": "viewer", "password": "nope"}
    )
    assert wrong.status_code == 401

    login = await anonymous.post(
        f"{API}/auth/login", json={"username": "viewer", "password": "correct horse"}
    )
    token = login.json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    me = await anonymous.get(f"{API}/auth/me", headers=headers)
    assert me.json()["role"] == "viewer"

    # Viewers read but cannot write
    assert (await anonymous.get(f"{API}/stats/", headers=headers)).status_code == 200
    forbidden = await anonymous.post(
        f"{API}/guests/",
        json={"name": "X", "email": "x@example.com", "phone": "1"},
        headers=headers,
    )
    assert forbidden.status_code == 403


async def test_service_info(anonymous):
    assert (await anonymous.get("/health")).json() == {"status": "ok"}
    assert "version" in (await anonymous.get("/")).json()
