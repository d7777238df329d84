from app.models.enums.user_role import UserRole


async def test_get_and_update_me(client, make_profile, headers_for):
    profile = await make_profile(UserRole.sales_agent)
    headers = headers_for(profile)

    resp = await client.get("/users/me", headers=headers)
    me = resp.json()["data"]
    assert me["role"] == "sales_agent"
    assert me["role_display"] == "Sales Agent"
    assert "manage_inquiries" in me["permissions"]
    assert me["permissions"] == sorted(me["permissions"])

    resp = await client.patch("/users/me", json={"full_name": "Layla", "version": 1}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["full_name"] == "Layla"
    assert resp.json()["data"]["version"] == 2

    resp = await client.patch("/users/me", json={"full_name": "Layla N.", "version": 1}, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "PROFILE_VERSION_CONFLICT"


async def test_admin_changes_role_and_status(client, make_profile, headers_for, admin_headers):
    agent = await make_profile(UserRole.sales_agent)

    resp = await client.patch(
        f"/users/{agent.id}",
        json={"role": "manager", "version": 1},
        headers=admin_headers,
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["role"] == "manager"

    resp = await client.patch(
        f"/users/{agent.id}",
        json={"is_active": False, "version": 2},
        headers=admin_headers,
    )
    assert resp.json()["data"]["is_active"] is False

    resp = await client.get("/users/me", headers=headers_for(agent))
    assert resp.status_code == 403

    resp = await client.get("/users", params={"is_active": "false"}, headers=admin_headers)
    assert [p["id"] for p in resp.json()["data"]["items"]] == [agent.id]

    resp = await client.get("/activities", params={"sort_by": "code", "sort_order": "asc"}, headers=admin_headers)
    codes = [a["code"] for a in resp.json()["data"]["items"]]
    assert codes == ["DEACTIVATE_USER", "UPDATE_USER_ROLE"]


async def test_admin_cannot_change_self(client, make_profile, headers_for):
    admin = await make_profile(UserRole.super_admin)

    resp = await client.patch(
        f"/users/{admin.id}",
        json={"role": "viewer", "version": 1},
        headers=headers_for(admin),
    )
    assert resp.status_code == 400


async def test_admin_update_unknown_profile(client, admin_headers):
    resp = await client.patch("/users/nope", json={"is_active": False, "version": 1}, headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "PROFILE_NOT_FOUND"


async def test_activity_log_records_actions(client, create_customer, admin_headers):
    await create_customer()

    resp = await client.get("/activities", params={"code": "create_customer"}, headers=admin_headers)
    items = resp.json()["data"]["items"]
    assert len(items) == 1
    assert items[0]["message"] == "Super Administrator (super_admin@dealer.test) created customer Sara Ahmed"
    assert items[0]["username_snapshot"] == "super_admin@dealer.test"

    resp = await client.get("/activities", params={"sort_by": "message"}, headers=admin_headers)
    assert resp.status_code == 400


async def test_activity_log_filters_by_target(client, create_customer, admin_headers):
    customer = await create_customer()
    await client.patch(
        f"/customers/{customer['id']}",
        json={"phone": "+971500000002", "version": 1},
        headers=admin_headers,
    )

    resp = await client.get("/activities", params={"target_id": str(customer["id"])}, headers=admin_headers)
    items = resp.json()["data"]["items"]
    assert {a["code"] for a in items} == {"CREATE_CUSTOMER", "UPDATE_CUSTOMER"}
    assert all(a["target_id"] == str(customer["id"]) for a in items)
