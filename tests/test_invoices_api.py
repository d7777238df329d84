from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select

from app.services.billing.invoice_service import mark_overdue_invoices
from app.models.billing.invoice_models import Invoice


def _number_prefix() -> str:
    return f"INV-{date.today().year}-"


async def test_create_invoice_numbers_and_vat(client, create_customer, create_invoice):
    customer = await create_customer()

    first = await create_invoice(customer["id"])
    second = await create_invoice(customer["id"], currency="USD")

    assert first["invoice_number"] == f"{_number_prefix()}0001"
    assert second["invoice_number"] == f"{_number_prefix()}0002"

    assert first["status"] == "draft"
    assert Decimal(first["subtotal"]) == Decimal("1000.00")
    assert Decimal(first["vat_rate"]) == Decimal("5")
    assert Decimal(first["vat_amount"]) == Decimal("50.00")
    assert Decimal(first["total_amount"]) == Decimal("1050.00")
    assert Decimal(first["balance_due"]) == Decimal("1050.00")

    # non-AED invoices carry no VAT unless asked
    assert Decimal(second["vat_amount"]) == Decimal("0")
    assert Decimal(second["total_amount"]) == Decimal("1000.00")


async def test_line_totals(client, create_customer, create_invoice):
    customer = await create_customer()

    invoice = await create_invoice(
        customer["id"],
        vat_rate="0",
        items=[
            {"description": "Tyres", "quantity": "4", "unit_price": "312.50"},
            {"description": "Alignment", "unit_price": "150"},
        ],
    )
    assert [Decimal(i["line_total"]) for i in invoice["items"]] == [Decimal("1250.00"), Decimal("150.00")]
    assert Decimal(invoice["total_amount"]) == Decimal("1400.00")


async def test_create_requires_items_and_customer(client, create_customer, admin_headers):
    customer = await create_customer()

    resp = await client.post("/invoices", json={"customer_id": customer["id"], "items": []}, headers=admin_headers)
    assert resp.status_code == 422

    resp = await client.post(
        "/invoices",
        json={"customer_id": 999, "items": [{"description": "x", "unit_price": "1"}]},
        headers=admin_headers,
    )
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "CUSTOMER_NOT_FOUND"


async def test_invoice_from_vehicle_sale(client, create_customer, create_vehicle, admin_headers):
    customer = await create_customer()
    vehicle = await create_vehicle(status="ready_for_sale")

    resp = await client.post(
        "/invoices/from-vehicle-sale",
        json={
            "vehicle_id": vehicle["id"],
            "customer_id": customer["id"],
            "sale_price": "45000",
            "additional_items": [{"description": "Registration", "unit_price": "500"}],
        },
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    invoice = resp.json()["data"]

    assert invoice["vehicle_id"] == vehicle["id"]
    assert invoice["items"][0]["description"] == "2021 Toyota Camry - VIN: 1HGCM82633A004352"
    assert invoice["terms"] == "Net 30 days"
    assert invoice["due_date"] == (date.today() + timedelta(days=30)).isoformat()
    assert Decimal(invoice["subtotal"]) == Decimal("45500.00")
    assert Decimal(invoice["total_amount"]) == Decimal("47775.00")


async def test_update_only_while_draft(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])

    resp = await client.patch(
        f"/invoices/{invoice['id']}",
        json={
            "items": [{"description": "Full detailing", "quantity": "2", "unit_price": "600"}],
            "version": invoice["version"],
        },
        headers=admin_headers,
    )
    assert resp.status_code == 200, resp.text
    updated = resp.json()["data"]
    assert Decimal(updated["total_amount"]) == Decimal("1260.00")
    assert len(updated["items"]) == 1

    resp = await client.patch(
        f"/invoices/{invoice['id']}",
        json={"notes": "late", "version": invoice["version"]},
        headers=admin_headers,
    )
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "INVOICE_VERSION_CONFLICT"

    resp = await client.post(f"/invoices/{invoice['id']}/send", headers=admin_headers)
    assert resp.json()["data"]["status"] == "sent"

    resp = await client.patch(
        f"/invoices/{invoice['id']}",
        json={"notes": "too late", "version": resp.json()["data"]["version"]},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "INVOICE_INVALID_STATE"


async def test_cancel_and_delete(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])

    resp = await client.post(f"/invoices/{invoice['id']}/cancel", headers=admin_headers)
    assert resp.json()["data"]["status"] == "cancelled"

    resp = await client.post(f"/invoices/{invoice['id']}/cancel", headers=admin_headers)
    assert resp.status_code == 400

    resp = await client.delete(f"/invoices/{invoice['id']}", headers=admin_headers)
    assert resp.status_code == 200

    resp = await client.get(f"/invoices/{invoice['id']}", headers=admin_headers)
    assert resp.status_code == 404


async def test_delete_blocked_by_payments(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])

    resp = await client.post(
        "/payments",
        json={"invoice_id": invoice["id"], "amount": "100", "currency": "AED", "payment_method": "cash"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text

    resp = await client.delete(f"/invoices/{invoice['id']}", headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "INVOICE_HAS_PAYMENTS"


async def test_list_search_and_stats(client, create_customer, create_invoice, admin_headers):
    sara = await create_customer()
    omar = await create_customer(full_name="Omar Khalid", email="omar@example.com", phone="+971500000002")
    await create_invoice(sara["id"])
    await create_invoice(omar["id"], currency="USD")

    resp = await client.get("/invoices", params={"search": "omar"}, headers=admin_headers)
    items = resp.json()["data"]["items"]
    assert [i["customer_name"] for i in items] == ["Omar Khalid"]

    resp = await client.get("/invoices", params={"currency": "AED"}, headers=admin_headers)
    assert resp.json()["data"]["total"] == 1

    resp = await client.get("/invoices/stats", headers=admin_headers)
    stats = resp.json()["data"]
    assert stats["total"] == 2
    assert stats["by_status"]["counts"] == {"draft": 2}
    assert {k: Decimal(v) for k, v in stats["total_value"].items()} == {
        "AED": Decimal("1050.00"),
        "USD": Decimal("1000.00"),
    }
    assert stats["overdue"]["count"] == 0


async def test_overdue_listing_and_job(client, db, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    past = (date.today() - timedelta(days=3)).isoformat()
    future = (date.today() + timedelta(days=3)).isoformat()

    late = await create_invoice(customer["id"], due_date=past)
    await client.post(f"/invoices/{late['id']}/send", headers=admin_headers)
    draft_late = await create_invoice(customer["id"], due_date=past)
    on_time = await create_invoice(customer["id"], due_date=future)
    await client.post(f"/invoices/{on_time['id']}/send", headers=admin_headers)

    resp = await client.get("/invoices/overdue", headers=admin_headers)
    assert {i["id"] for i in resp.json()["data"]} == {late["id"], draft_late["id"]}

    assert await mark_overdue_invoices(db) == 1

    rows = (await db.execute(select(Invoice.id, Invoice.status))).all()
    statuses = {invoice_id: status.value for invoice_id, status in rows}
    assert statuses[late["id"]] == "overdue"
    assert statuses[draft_late["id"]] == "draft"
    assert statuses[on_time["id"]] == "sent"

    # idempotent
    assert await mark_overdue_invoices(db) == 0


async def test_invoice_pdf(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])

    resp = await client.get(f"/invoices/{invoice['id']}/pdf", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert invoice["invoice_number"] in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF")
