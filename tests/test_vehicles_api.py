from decimal import Decimal

VIN = "1HGCM82633A004352"


async def test_create_vehicle_starts_at_auction_won(client, create_vehicle, admin_headers):
    vehicle = await create_vehicle()

    assert vehicle["current_status"] == "auction_won"
    assert vehicle["status_label"] == "Auction Won"
    assert vehicle["version"] == 1

    resp = await client.get(f"/vehicles/{vehicle['id']}/status-history", headers=admin_headers)
    history = resp.json()["data"]
    assert [h["status"] for h in history] == ["auction_won"]
    assert history[0]["notes"] == "Vehicle added to system"


async def test_vin_is_normalised_and_unique(client, create_vehicle, vehicle_payload, admin_headers):
    await create_vehicle(vin=VIN.lower())

    resp = await client.post("/vehicles", json=vehicle_payload(), headers=admin_headers)
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "VEHICLE_VIN_EXISTS"


async def test_create_vehicle_validation(client, vehicle_payload, admin_headers):
    bad = [
        vehicle_payload(vin="SHORT"),
        vehicle_payload(year=1899),
        vehicle_payload(purchase_price="0"),
        vehicle_payload(sale_price="5000", sale_currency=None),
        vehicle_payload(sale_type="local_only", sale_price="5000", sale_currency="USD"),
    ]
    for payload in bad:
        resp = await client.post("/vehicles", json=payload, headers=admin_headers)
        assert resp.status_code == 422, payload
        assert resp.json()["error_code"] == "VALIDATION_ERROR"


async def test_status_update_appends_history(client, create_vehicle, admin_headers):
    vehicle = await create_vehicle()

    resp = await client.post(
        f"/vehicles/{vehicle['id']}/status",
        json={"status": "at_uae_port", "location": "Jebel Ali"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    updated = resp.json()["data"]
    assert updated["current_status"] == "at_uae_port"
    assert updated["current_location"] == "Jebel Ali"

    resp = await client.get(f"/vehicles/{vehicle['id']}/status-history", headers=admin_headers)
    history = resp.json()["data"]
    assert history[0]["status"] == "at_uae_port"
    assert history[0]["notes"] == "Location: Jebel Ali"
    assert len(history) == 2


async def test_update_requires_current_version(client, create_vehicle, admin_headers):
    vehicle = await create_vehicle()

    resp = await client.patch(
        f"/vehicles/{vehicle['id']}",
        json={"mileage": 42000, "version": vehicle["version"]},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["mileage"] == 42000
    assert resp.json()["data"]["version"] == 2

    stale = await client.patch(
        f"/vehicles/{vehicle['id']}",
        json={"mileage": 1, "version": 1},
        headers=admin_headers,
    )
    assert stale.status_code == 409
    assert stale.json()["error_code"] == "VEHICLE_VERSION_CONFLICT"


async def test_list_filters_by_status_group_and_search(client, create_vehicle, admin_headers):
    await create_vehicle(status="ready_for_sale")
    await create_vehicle(vin="2T1BURHE0JC000001", make="Nissan", model="Patrol", status="shipped")
    await create_vehicle(vin="3VWFE21C04M000002", make="Ford", model="Mustang", status="sold")

    resp = await client.get("/vehicles", params={"status_group": "arrived"}, headers=admin_headers)
    data = resp.json()["data"]
    assert data["total"] == 1
    assert data["items"][0]["make"] == "Toyota"

    resp = await client.get("/vehicles", params={"search": "patrol"}, headers=admin_headers)
    assert [v["model"] for v in resp.json()["data"]["items"]] == ["Patrol"]

    resp = await client.get("/vehicles", params=[("status", "sold"), ("status", "shipped")], headers=admin_headers)
    assert resp.json()["data"]["total"] == 2

    resp = await client.get("/vehicles", params={"page_size": 2}, headers=admin_headers)
    data = resp.json()["data"]
    assert data["total"] == 3
    assert data["pages"] == 2
    assert len(data["items"]) == 2


async def test_vin_search_and_stats(client, create_vehicle, admin_headers):
    await create_vehicle(status="at_yard")
    await create_vehicle(vin="2T1BURHE0JC000001", status="delivered")

    resp = await client.get("/vehicles/search", params={"vin": "a0043"}, headers=admin_headers)
    assert [v["vin"] for v in resp.json()["data"]] == [VIN]

    resp = await client.get("/vehicles/stats", headers=admin_headers)
    stats = resp.json()["data"]
    assert stats["total"] == 2
    assert stats["recent_additions"] == 2
    assert stats["by_status"] == {"at_yard": 1, "delivered": 1}
    assert stats["by_group"] == {"all": 1, "arrived": 1, "arriving_soon": 0}


async def test_status_descriptors(client, admin_headers):
    resp = await client.get("/vehicles/statuses", headers=admin_headers)
    descriptors = {d["value"]: d for d in resp.json()["data"]}
    assert len(descriptors) == 17
    assert descriptors["reserved"]["group"] == "all"
    assert descriptors["sold"]["is_publicly_visible"] is False


async def test_profit_summary_converts_to_aed(client, create_vehicle, admin_headers):
    vehicle = await create_vehicle(sale_price="50000", sale_currency="AED")

    resp = await client.post(
        "/expenses",
        json={
            "vehicle_id": vehicle["id"],
            "category": "transportation",
            "description": "Ocean freight",
            "amount": "1000",
            "currency": "USD",
            "date": "2025-01-10",
        },
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text

    resp = await client.get(f"/vehicles/{vehicle['id']}/profit", headers=admin_headers)
    summary = resp.json()["data"]
    assert Decimal(summary["purchase_price_aed"]) == Decimal("36700.00")
    assert Decimal(summary["total_expenses_aed"]) == Decimal("3670.00")
    assert Decimal(summary["total_cost"]) == Decimal("40370.00")
    assert Decimal(summary["profit"]) == Decimal("9630.00")


async def test_delete_vehicle(client, create_vehicle, admin_headers):
    vehicle = await create_vehicle()

    resp = await client.delete(f"/vehicles/{vehicle['id']}", headers=admin_headers)
    assert resp.status_code == 200

    resp = await client.get(f"/vehicles/{vehicle['id']}", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "VEHICLE_NOT_FOUND"
