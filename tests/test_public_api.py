"""Public site: visibility rules, badges and the contact form."""

from sqlalchemy import update

from app.models.inventory.vehicle_models import Vehicle

COST_FIELDS = {"purchase_price", "purchase_currency", "estimated_total_cost", "repair_estimate"}


async def _seed(create_vehicle):
    ready = await create_vehicle(status="ready_for_sale")
    shipped = await create_vehicle(vin="2T1BURHE0JC000001", status="shipped")
    reserved = await create_vehicle(vin="5YJSA1E26HF000003", status="reserved")
    sold = await create_vehicle(vin="3VWFE21C04M000002", status="sold")
    private = await create_vehicle(vin="WDBUF56X48B000004", status="at_yard", is_public=False)
    return ready, shipped, reserved, sold, private


async def test_listing_excludes_hidden_and_private(client, create_vehicle):
    ready, shipped, reserved, sold, private = await _seed(create_vehicle)

    resp = await client.get("/public/vehicles")
    assert resp.status_code == 200
    data = resp.json()["data"]

    ids = {v["id"] for v in data["items"]}
    assert ids == {ready["id"], shipped["id"], reserved["id"]}
    assert data["page_size"] == 12
    for item in data["items"]:
        assert not COST_FIELDS & item.keys()


async def test_listing_cannot_be_widened(client, create_vehicle):
    _, _, _, sold, private = await _seed(create_vehicle)

    resp = await client.get("/public/vehicles", params={"status": "sold", "is_public": "false"})
    assert resp.json()["data"]["total"] == 0


async def test_group_filter_and_badges(client, create_vehicle):
    ready, shipped, *_ = await _seed(create_vehicle)

    resp = await client.get("/public/vehicles", params={"status_group": "arriving_soon"})
    items = resp.json()["data"]["items"]
    assert [v["id"] for v in items] == [shipped["id"]]
    assert items[0]["status_label"] == "Arriving Soon"
    assert items[0]["badge_category"] == "arriving-soon"
    assert items[0]["badge_color"] == "blue"
    assert items[0]["status_group"] == "arriving_soon"

    resp = await client.get("/public/vehicles", params={"status_group": "arrived"})
    items = resp.json()["data"]["items"]
    assert [v["id"] for v in items] == [ready["id"]]
    assert items[0]["badge_classes"].startswith("bg-emerald-100")


async def test_status_counts_and_homepage(client, create_vehicle):
    ready, shipped, *_ = await _seed(create_vehicle)

    resp = await client.get("/public/vehicles/status-counts")
    assert resp.json()["data"] == {"all": 3, "arrived": 1, "arriving_soon": 1}

    resp = await client.get("/public/vehicles/homepage")
    home = resp.json()["data"]
    assert [v["id"] for v in home["arrived"]] == [ready["id"]]
    assert [v["id"] for v in home["arriving_soon"]] == [shipped["id"]]


async def test_detail_hides_sold_and_private(client, create_vehicle):
    ready, _, reserved, sold, private = await _seed(create_vehicle)

    resp = await client.get(f"/public/vehicles/{reserved['id']}")
    assert resp.status_code == 200
    assert resp.json()["data"]["status_label"] == "Reserved"
    assert resp.json()["data"]["badge_color"] == "amber"

    for hidden in (sold, private):
        resp = await client.get(f"/public/vehicles/{hidden['id']}")
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "VEHICLE_NOT_FOUND"


async def test_contact_form_creates_customer_and_inquiry(client, create_vehicle, admin_headers):
    vehicle = await create_vehicle(status="ready_for_sale")

    resp = await client.post(
        "/public/contact",
        json={
            "customer_name": "Omar Khalid",
            "email": "omar@example.com",
            "phone": "+971500000009",
            "subject": "Is the Camry available?",
            "message": "Please call me back.",
            "inquiry_type": "vehicle_specific",
            "vehicle_id": vehicle["id"],
        },
    )
    assert resp.status_code == 201, resp.text
    result = resp.json()["data"]

    resp = await client.get(f"/inquiries/{result['inquiry_id']}", headers=admin_headers)
    inquiry = resp.json()["data"]
    assert inquiry["customer_id"] == result["customer_id"]
    assert inquiry["vehicle_id"] == vehicle["id"]
    assert inquiry["priority"] == "high"
    assert inquiry["source"] == "website"
    assert inquiry["status"] == "new"
    assert inquiry["customer_name"] == "Omar Khalid"


async def test_contact_form_reuses_customer_by_email(client, create_customer):
    customer = await create_customer()

    resp = await client.post(
        "/public/contact",
        json={
            "customer_name": "Sara A.",
            "email": "SARA@example.com",
            "phone": "+971500000001",
            "subject": "Financing",
            "message": "What are the terms?",
            "inquiry_type": "financing",
        },
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["customer_id"] == customer["id"]


async def test_contact_form_validation(client):
    resp = await client.post(
        "/public/contact",
        json={"customer_name": "X", "email": "not-an-email", "phone": "1", "subject": "s", "message": "m"},
    )
    assert resp.status_code == 422


async def test_unrecognised_stored_status_is_served_but_not_listed(client, db, create_vehicle, admin_headers):
    vehicle = await create_vehicle()
    await db.execute(
        update(Vehicle).where(Vehicle.id == vehicle["id"]).values(current_status="in_customs_legacy")
    )
    await db.commit()

    resp = await client.get(f"/vehicles/{vehicle['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["current_status"] == "in_customs_legacy"
    assert resp.json()["data"]["status_label"] == "In Customs Legacy"

    resp = await client.get(f"/public/vehicles/{vehicle['id']}")
    assert resp.status_code == 200
    detail = resp.json()["data"]
    assert detail["status"] == "in_customs_legacy"
    assert detail["status_label"] is None
    assert detail["badge_category"] == "unknown"
    assert detail["badge_color"] == "gray"
    assert detail["status_group"] == "all"

    # the listing only matches known public statuses
    resp = await client.get("/public/vehicles")
    assert resp.json()["data"]["total"] == 0
    resp = await client.get("/public/vehicles/status-counts")
    assert resp.json()["data"] == {"all": 0, "arrived": 0, "arriving_soon": 0}
