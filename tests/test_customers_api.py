from decimal import Decimal


async def test_create_normalises_email_and_rejects_duplicates(client, create_customer, admin_headers):
    customer = await create_customer(email="Sara@Example.COM")
    assert customer["email"] == "sara@example.com"
    assert customer["country"] == "UAE"
    assert customer["version"] == 1

    resp = await client.post(
        "/customers",
        json={"full_name": "Other Sara", "email": "SARA@example.com"},
        headers=admin_headers,
    )
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "CUSTOMER_EMAIL_EXISTS"


async def test_find_or_create(client, create_customer, admin_headers):
    customer = await create_customer()

    resp = await client.post(
        "/customers/find-or-create",
        json={"full_name": "Whoever", "email": "sara@example.com"},
        headers=admin_headers,
    )
    found = resp.json()["data"]
    assert found["created"] is False
    assert found["customer"]["id"] == customer["id"]

    resp = await client.post(
        "/customers/find-or-create",
        json={"full_name": "Omar Khalid", "email": "omar@example.com"},
        headers=admin_headers,
    )
    created = resp.json()["data"]
    assert created["created"] is True
    assert created["customer"]["full_name"] == "Omar Khalid"


async def test_update_with_version_check(client, create_customer, admin_headers):
    customer = await create_customer()

    resp = await client.patch(
        f"/customers/{customer['id']}",
        json={"city": "Dubai", "version": 1},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["city"] == "Dubai"
    assert resp.json()["data"]["version"] == 2

    resp = await client.patch(
        f"/customers/{customer['id']}",
        json={"city": "Sharjah", "version": 1},
        headers=admin_headers,
    )
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "CUSTOMER_VERSION_CONFLICT"

    resp = await client.patch(
        f"/customers/{customer['id']}",
        json={"city": "Dubai", "version": 2},
        headers=admin_headers,
    )
    assert resp.status_code == 400


async def test_deactivate_hides_customer(client, create_customer, admin_headers):
    customer = await create_customer()

    resp = await client.delete(f"/customers/{customer['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["is_active"] is False

    resp = await client.get(f"/customers/{customer['id']}", headers=admin_headers)
    assert resp.status_code == 404

    resp = await client.get("/customers", headers=admin_headers)
    assert resp.json()["data"]["total"] == 0

    resp = await client.get("/customers", params={"is_active": "false"}, headers=admin_headers)
    assert resp.json()["data"]["total"] == 1


async def test_list_rollups(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])
    await client.post(
        f"/payments/invoice/{invoice['id']}/full",
        json={"payment_method": "cash"},
        headers=admin_headers,
    )
    await client.post(
        "/inquiries",
        json={"customer_id": customer["id"], "message": "Any SUVs?"},
        headers=admin_headers,
    )

    resp = await client.get("/customers", headers=admin_headers)
    item = resp.json()["data"]["items"][0]
    assert item["inquiry_count"] == 1
    assert item["last_inquiry_date"] is not None
    assert item["total_purchases"] == 1
    assert Decimal(item["total_spent"]) == Decimal("1050.00")


async def test_detail_and_timeline(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])
    await client.post(
        "/inquiries",
        json={"customer_id": customer["id"], "subject": "Test drive", "message": "Saturday?"},
        headers=admin_headers,
    )
    await client.post(
        "/communications",
        json={"customer_id": customer["id"], "type": "phone", "direction": "outbound", "content": "Called back"},
        headers=admin_headers,
    )

    resp = await client.get(f"/customers/{customer['id']}", headers=admin_headers)
    detail = resp.json()["data"]
    assert [i["subject"] for i in detail["inquiries"]] == ["Test drive"]
    assert [i["invoice_number"] for i in detail["invoices"]] == [invoice["invoice_number"]]

    resp = await client.get(f"/customers/{customer['id']}/timeline", headers=admin_headers)
    entries = resp.json()["data"]
    assert sorted(e["type"] for e in entries) == ["communication", "inquiry", "invoice"]
    titles = {e["type"]: e["title"] for e in entries}
    assert titles["communication"] == "Outbound phone"
    assert titles["invoice"] == invoice["invoice_number"]


async def test_search_and_reports(client, create_customer, admin_headers):
    await create_customer()
    await create_customer(
        full_name="Omar Khalid",
        email="omar@example.com",
        phone="+971500000002",
        country="Oman",
        marketing_consent=True,
    )

    resp = await client.get("/customers/search", params={"q": "omar"}, headers=admin_headers)
    assert [c["full_name"] for c in resp.json()["data"]] == ["Omar Khalid"]

    resp = await client.get("/customers/stats", headers=admin_headers)
    assert resp.json()["data"] == {"total": 2, "recent": 2, "active": 0}

    resp = await client.get("/customers/by-country", headers=admin_headers)
    assert resp.json()["data"] == {"UAE": 1, "Oman": 1}

    resp = await client.get("/customers/marketing-consent", headers=admin_headers)
    assert resp.json()["data"] == {"total": 2, "consented": 1, "declined": 1}
