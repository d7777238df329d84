"""Bearer-token authentication and role-based permission checks."""

from datetime import datetime, timedelta, timezone

from jose import jwt

from app.core.config import AUTH_JWT_SECRET
from app.models.enums.user_role import UserRole


async def test_missing_token(client):
    resp = await client.get("/vehicles")
    assert resp.status_code == 401
    assert resp.json()["success"] is False


async def test_invalid_token(client):
    resp = await client.get("/vehicles", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["error_code"] == "UNAUTHORIZED"


async def test_expired_token(client, make_profile):
    profile = await make_profile(UserRole.super_admin)
    token = jwt.encode(
        {"sub": profile.id, "aud": "authenticated", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        AUTH_JWT_SECRET,
        algorithm="HS256",
    )
    resp = await client.get("/vehicles", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


async def test_unknown_profile(client, headers_for):
    class Ghost:
        id = "00000000-0000-0000-0000-000000000000"
        email = "ghost@dealer.test"

    resp = await client.get("/vehicles", headers=headers_for(Ghost))
    assert resp.status_code == 401


async def test_inactive_profile(client, make_profile, headers_for):
    profile = await make_profile(UserRole.super_admin, is_active=False)

    resp = await client.get("/vehicles", headers=headers_for(profile))
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "PROFILE_INACTIVE"


async def test_viewer_can_read_but_not_write(client, viewer_headers, vehicle_payload):
    resp = await client.get("/vehicles", headers=viewer_headers)
    assert resp.status_code == 200

    resp = await client.post("/vehicles", json=vehicle_payload(), headers=viewer_headers)
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "PERMISSION_DENIED"

    resp = await client.post(
        "/invoices",
        json={"customer_id": 1, "items": [{"description": "x", "unit_price": "1"}]},
        headers=viewer_headers,
    )
    assert resp.status_code == 403

    resp = await client.get("/payments", headers=viewer_headers)
    assert resp.status_code == 403


async def test_finance_manager_can_invoice_but_not_edit_vehicles(
    client, finance_headers, create_customer, create_vehicle
):
    vehicle = await create_vehicle()
    customer = await create_customer()

    resp = await client.post(
        "/invoices",
        json={"customer_id": customer["id"], "items": [{"description": "Service", "unit_price": "100"}]},
        headers=finance_headers,
    )
    assert resp.status_code == 201

    resp = await client.post(
        f"/vehicles/{vehicle['id']}/status",
        json={"status": "shipped"},
        headers=finance_headers,
    )
    assert resp.status_code == 403


async def test_user_administration_is_super_admin_only(client, finance_headers, admin_headers):
    resp = await client.get("/users", headers=finance_headers)
    assert resp.status_code == 403

    resp = await client.get("/users", headers=admin_headers)
    assert resp.status_code == 200

    resp = await client.get("/activities", headers=finance_headers)
    assert resp.status_code == 403


async def test_public_routes_need_no_token(client):
    resp = await client.get("/public/vehicles")
    assert resp.status_code == 200

    resp = await client.get("/")
    assert resp.status_code == 200


async def test_request_id_is_echoed_or_assigned(client):
    resp = await client.get("/", headers={"X-Request-ID": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"

    resp = await client.get("/")
    assert len(resp.headers["X-Request-ID"]) == 32
