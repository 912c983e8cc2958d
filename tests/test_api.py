"""Tests HTTP de bout en bout / End-to-end HTTP tests."""

import json

import pytest

from carrental.rate_limit import limiter

MONDAY = {"day": "monday", "selected": True, "from": "09:00", "to": "17:00"}
TUESDAY = {"day": "tuesday", "selected": True, "from": "10:00", "to": "12:00"}
NEXT_MONDAY = "2026-03-09"


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def listing_form(windows, **overrides) -> dict:
    form = {
        "title": "Dacia Duster 4x4",
        "description": "SUV familial",
        "car_model": "Dacia Duster",
        "city": "Chefchaouen",
        "color": "#336699",
        "price": "420.00",
        "premium": "false",
        "availability": json.dumps(windows),
    }
    form.update(overrides)
    return form


async def register(client, role: str, email: str) -> str:
    response = await client.post("/api/auth/register", json={
        "name": email.split("@")[0],
        "email": email,
        "country": "Morocco",
        "city": "Tanger",
        "job": "Driver",
        "role": role,
        "password": "long-enough",
        "password_confirmation": "long-enough",
    })
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["data"]["token_type"] == "Bearer"
    assert body["data"]["user"]["role"] == role
    return body["data"]["token"]


async def create_listing(client, token, availability=(MONDAY,), files=None, **overrides) -> dict:
    response = await client.post(
        "/api/listings/",
        data=listing_form(list(availability), **overrides),
        files=files,
        headers=auth(token),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_booking_lifecycle_over_http(client):
    partner = await register(client, "partner", "partner@example.com")
    listing = await create_listing(client, partner)
    monday = listing["availability"][0]
    assert monday == {"day": "monday", "selected": True, "from": "09:00", "to": "17:00"}

    catalog = (await client.get("/api/catalog/listings")).json()
    window_id = catalog["data"][0]["availability"][0]["id"]

    customer = await register(client, "client", "client@example.com")
    response = await client.post(
        "/api/bookings/", json={"window_id": window_id, "reservation_date": NEXT_MONDAY}, headers=auth(customer)
    )
    assert response.status_code == 201, response.text
    booking = response.json()["data"]
    assert booking["state"] == "pending"
    assert booking["reservation_day"] == "monday"
    assert booking["time_slot"] == {"from": "09:00", "to": "17:00"}
    assert booking["car_details"]["title"] == "Dacia Duster 4x4"
    assert booking["car_details"]["price"] == 420.0

    mine = (await client.get("/api/bookings/mine", headers=auth(customer))).json()["data"]
    assert [(b["id"], b["state"]) for b in mine] == [(booking["id"], "pending")]

    response = await client.post(f"/api/bookings/{booking['id']}/cancel", headers=auth(customer))
    assert response.status_code == 200
    assert response.json()["data"]["state"] == "cancelled"

    response = await client.post(f"/api/bookings/{booking['id']}/cancel", headers=auth(customer))
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Already cancelled"}


@pytest.mark.asyncio
async def test_schedule_replacement_over_http(client):
    partner = await register(client, "partner", "partner@example.com")
    listing = await create_listing(client, partner)

    response = await client.put(
        f"/api/listings/{listing['id']}", data=listing_form([TUESDAY]), headers=auth(partner)
    )
    assert response.status_code == 200, response.text

    week = (await client.get(f"/api/listings/{listing['id']}/availability")).json()["data"]
    assert [d["day"] for d in week] == [
        "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
    ]
    assert week[0] == {"day": "monday", "selected": False, "from": "", "to": ""}
    assert week[1] == {"day": "tuesday", "selected": True, "from": "10:00", "to": "12:00"}


@pytest.mark.asyncio
async def test_partner_accepts_request(client):
    partner = await register(client, "partner", "partner@example.com")
    await create_listing(client, partner)
    window_id = (await client.get("/api/catalog/listings")).json()["data"][0]["availability"][0]["id"]
    customer = await register(client, "client", "client@example.com")
    booking = (await client.post(
        "/api/bookings/", json={"window_id": window_id, "reservation_date": NEXT_MONDAY}, headers=auth(customer)
    )).json()["data"]

    requests = (await client.get("/api/bookings/requests?state=pending", headers=auth(partner))).json()["data"]
    assert [r["client"]["email"] for r in requests] == ["client@example.com"]

    response = await client.put(
        f"/api/bookings/{booking['id']}/status", json={"action": "accept"}, headers=auth(partner)
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Booking accepted"
    assert response.json()["data"]["state"] == "accepted"

    response = await client.delete(f"/api/listings/{booking['listing_id']}", headers=auth(partner))
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_listing_images_are_served_as_urls(client, store):
    partner = await register(client, "partner", "partner@example.com")
    listing = await create_listing(
        client, partner, files=[("images", ("front.jpg", b"\xff\xd8front", "image/jpeg"))]
    )
    assert len(listing["images"]) == 1
    url = listing["images"][0]
    assert url.startswith("/storage/announcements/announcement_")
    assert (store.root / url.removeprefix("/storage/")).read_bytes() == b"\xff\xd8front"


@pytest.mark.asyncio
async def test_listing_form_errors(client):
    partner = await register(client, "partner", "partner@example.com")

    response = await client.post(
        "/api/listings/",
        data=listing_form([MONDAY], city="Paris", premium="true"),
        headers=auth(partner),
    )
    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert {"city", "premium_duration"} <= set(body["errors"])

    response = await client.post(
        "/api/listings/",
        data=listing_form([{**MONDAY, "to": "08:00"}]),
        headers=auth(partner),
    )
    assert response.status_code == 422
    assert "availability.monday.to" in response.json()["errors"]

    response = await client.post(
        "/api/listings/", data=listing_form([MONDAY], availability="{not json"), headers=auth(partner)
    )
    assert response.status_code == 422
    assert "availability" in response.json()["errors"]


@pytest.mark.asyncio
async def test_login_and_logout(client):
    await register(client, "client", "client@example.com")

    response = await client.post("/api/auth/login", json={"email": "client@example.com", "password": "long-enough"})
    assert response.status_code == 200
    token = response.json()["data"]["token"]
    assert response.json()["data"]["user"]["role_name"] == "Client"

    me = await client.get("/api/auth/me", headers=auth(token))
    assert me.json()["data"]["email"] == "client@example.com"

    assert (await client.post("/api/auth/logout", headers=auth(token))).status_code == 200
    assert (await client.get("/api/auth/me", headers=auth(token))).status_code == 401


@pytest.mark.asyncio
async def test_login_revokes_registration_token(client):
    first = await register(client, "client", "client@example.com")
    await client.post("/api/auth/login", json={"email": "client@example.com", "password": "long-enough"})
    assert (await client.get("/api/auth/me", headers=auth(first))).status_code == 401


@pytest.mark.asyncio
async def test_bad_credentials(client):
    await register(client, "client", "client@example.com")
    response = await client.post("/api/auth/login", json={"email": "client@example.com", "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid email or password"}


@pytest.mark.asyncio
async def test_register_validation_errors(client):
    await register(client, "client", "taken@example.com")
    response = await client.post("/api/auth/register", json={
        "email": "taken@example.com", "role": "client", "password": "short", "password_confirmation": "short",
    })
    assert response.status_code == 422
    errors = response.json()["errors"]
    assert {"name", "country", "city", "job", "password"} <= set(errors)

    response = await client.post("/api/auth/register", json={
        "name": "Dup", "email": "taken@example.com", "country": "Morocco", "city": "Tanger", "job": "x",
        "role": "client", "password": "long-enough", "password_confirmation": "long-enough",
    })
    assert response.status_code == 422
    assert response.json()["errors"] == {"email": ["The email has already been taken."]}


@pytest.mark.asyncio
async def test_auth_and_role_guards(client):
    assert (await client.get("/api/bookings/mine")).status_code == 401
    assert (await client.get("/api/bookings/mine", headers=auth("garbage"))).status_code == 401

    partner = await register(client, "partner", "partner@example.com")
    response = await client.post(
        "/api/bookings/", json={"window_id": 1, "reservation_date": NEXT_MONDAY}, headers=auth(partner)
    )
    assert response.status_code == 403
    assert response.json()["success"] is False

    customer = await register(client, "client", "client@example.com")
    response = await client.post("/api/listings/", data=listing_form([MONDAY]), headers=auth(customer))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_booking_errors_over_http(client):
    customer = await register(client, "client", "client@example.com")

    response = await client.post(
        "/api/bookings/", json={"window_id": 999, "reservation_date": NEXT_MONDAY}, headers=auth(customer)
    )
    assert response.status_code == 404

    response = await client.post(
        "/api/bookings/", json={"window_id": 999, "reservation_date": "2026-01-01"}, headers=auth(customer)
    )
    assert response.status_code == 422
    assert "reservation_date" in response.json()["errors"]


@pytest.mark.asyncio
async def test_cart_over_http(client):
    partner = await register(client, "partner", "partner@example.com")
    listing = await create_listing(client, partner)
    customer = await register(client, "client", "client@example.com")

    response = await client.post("/api/cart/", json={"listing_id": listing["id"]}, headers=auth(customer))
    assert response.status_code == 201
    response = await client.post("/api/cart/", json={"listing_id": listing["id"]}, headers=auth(customer))
    assert response.status_code == 400
    assert response.json()["message"] == "Item already in cart"

    items = (await client.get("/api/cart/", headers=auth(customer))).json()["data"]
    assert [i["listing_id"] for i in items] == [listing["id"]]


@pytest.mark.asyncio
async def test_catalog_envelope(client):
    response = await client.get("/api/catalog/listings")
    assert response.json() == {
        "success": True,
        "data": [],
        "pagination": {"current_page": 1, "last_page": 1, "per_page": 10, "total": 0},
    }
    options = (await client.get("/api/catalog/filter-options")).json()["data"]
    assert options["price_range"] == {"min": 0, "max": 1000}


@pytest.mark.asyncio
async def test_unknown_route(client):
    response = await client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "message": "API endpoint not found",
        "error": "The requested endpoint does not exist",
    }


@pytest.mark.asyncio
async def test_health_and_headers(client):
    response = await client.get("/", headers={"X-Request-ID": "abc-123"})
    assert response.status_code == 200
    assert response.json()["status"] == "running"
    assert response.headers["X-Request-ID"] == "abc-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


@pytest.mark.asyncio
async def test_out_of_range_numbers_rejected(client):
    too_big = 10**20

    response = await client.get("/api/catalog/listings", params={"page": too_big})
    assert response.status_code == 422
    assert "page" in response.json()["errors"]

    response = await client.get(f"/api/listings/{too_big}/availability")
    assert response.status_code == 422
    assert "listing_id" in response.json()["errors"]

    customer = await register(client, "client", "client@example.com")
    response = await client.post(
        "/api/bookings/", json={"window_id": too_big, "reservation_date": NEXT_MONDAY}, headers=auth(customer)
    )
    assert response.status_code == 422
    assert "window_id" in response.json()["errors"]

    response = await client.post(f"/api/bookings/{too_big}/cancel", headers=auth(customer))
    assert response.status_code == 422
    assert "booking_id" in response.json()["errors"]


@pytest.mark.asyncio
async def test_login_rate_limit_envelope(client):
    await register(client, "client", "client@example.com")
    limiter.reset()
    limiter.enabled = True

    credentials = {"email": "client@example.com", "password": "wrong-pass"}
    for _ in range(5):
        assert (await client.post("/api/auth/login", json=credentials)).status_code == 401

    response = await client.post("/api/auth/login", json=credentials)
    assert response.status_code == 429
    body = response.json()
    assert body["success"] is False
    assert body["message"].startswith("Rate limit exceeded")
    limiter.reset()
